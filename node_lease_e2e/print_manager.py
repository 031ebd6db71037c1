#!/usr/bin/env python3
"""Print Manager module for the Node Lease lifecycle check.

Every line after the run starts is prefixed with the elapsed time, since most
of what this tool does is wait for the cluster to converge.
"""

import time

# Global debug flag
DEBUG_MODE = False


class PrintManager:
    """Manages all output formatting and printing for the scenario run"""

    def __init__(self):
        self.start_time = None

    def start_clock(self):
        """Start the elapsed-time prefix used by every subsequent line"""
        self.start_time = time.time()

    def _stamp(self):
        if self.start_time is None:
            return ""
        return f"[+{int(time.time() - self.start_time):>4}s] "

    def print_header(self, message):
        """Print a section header with visual separation"""
        print(f"\n{'=' * 60}")
        print(f" {message.upper()}")
        print(f"{'=' * 60}")

    def print_step(self, step_num, total_steps, message):
        """Print numbered scenario step"""
        print(f"{self._stamp()}[{step_num}/{total_steps}] {message}")

    def print_info(self, message):
        print(f"{self._stamp()}    [INFO]  {message}")

    def print_success(self, message):
        print(f"{self._stamp()}    [✓]     {message}")

    def print_warning(self, message):
        print(f"{self._stamp()}    [⚠️]     {message}")

    def print_error(self, message):
        print(f"{self._stamp()}    [✗]     {message}")

    def print_skip(self, message):
        """Print the reason a scenario was skipped (neither pass nor fail)"""
        print(f"{self._stamp()}    [SKIP]  {message}")

    def print_action(self, message):
        """Print action being performed (only in debug mode)"""
        if DEBUG_MODE:
            print(f"{self._stamp()}    [ACTION] {message}")


# Create a global print manager instance for convenience
printer = PrintManager()
