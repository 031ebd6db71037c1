#!/usr/bin/env python3
"""Utilities module for the Node Lease lifecycle check."""

import json
import re
import subprocess
import time
from typing import Optional

# Common API server connectivity issues that warrant retry
RETRYABLE_ERROR_PATTERNS = [
    r"keepalive ping failed",
    r"connection refused",
    r"timeout",
    r"connection reset",
    r"temporary failure in name resolution",
    r"service unavailable",
    r"internal server error",
    r"too many requests",
    r"server is currently unable to handle the request",
    r"dial tcp.*connect: connection refused",
    r"dial tcp.*i/o timeout",
    r"context deadline exceeded",
]

NOT_FOUND_PATTERNS = [
    r"\(notfound\)",
    r"\" not found",
]

OC_COMMAND_TIMEOUT = 60


def _is_retryable_error(stderr_text):
    """Check if the error is worth retrying."""
    if not stderr_text:
        return False
    stderr_lower = stderr_text.lower()
    return any(re.search(pattern, stderr_lower) for pattern in RETRYABLE_ERROR_PATTERNS)


def is_not_found_error(stderr_text, resource=None):
    """
    Check whether an oc error means the requested object does not exist.

    Args:
        stderr_text: stderr captured from a failed oc invocation
        resource: Plural resource name (e.g. "leases"); when given, only a
            NotFound for that resource counts, so a missing namespace does not

    Returns:
        bool: True for NotFound responses, False for anything else
    """
    if not stderr_text:
        return False
    stderr_lower = stderr_text.lower()
    if resource:
        # e.g. leases.coordination.k8s.io "worker-b" not found
        pattern = rf"\(notfound\):\s*{re.escape(resource.lower())}(\.\S+)?\s+\"[^\"]*\" not found"
        return re.search(pattern, stderr_lower) is not None
    return any(re.search(pattern, stderr_lower) for pattern in NOT_FOUND_PATTERNS)


def _log_attempt(printer, attempt, max_retries, exec_command):
    if not printer:
        return
    if attempt == 0:
        printer.print_action(f"Executing oc command: {' '.join(exec_command)}")
    else:
        printer.print_info(f"Retry attempt {attempt}/{max_retries}: {' '.join(exec_command)}")


def run_oc_command(command, printer=None, max_retries=3, retry_delay=2) -> Optional[subprocess.CompletedProcess]:
    """
    Run an OpenShift CLI command, retrying transient API server failures.

    Unlike execute_oc_command, the caller gets the raw result back so that it
    can tell a NotFound answer apart from a broken API server.

    Args:
        command: List of command arguments to execute (excluding 'oc')
        printer: Printer instance for output
        max_retries: Maximum number of retry attempts (default: 3)
        retry_delay: Seconds to wait before the first retry, grows by 1.5x (default: 2)

    Returns:
        subprocess.CompletedProcess of the last attempt, or None if the command
        could not be run at all after every retry
    """
    exec_command = ["oc"] + command
    last_error = None

    for attempt in range(max_retries + 1):  # +1 for the initial attempt
        _log_attempt(printer, attempt, max_retries, exec_command)
        try:
            result = subprocess.run(exec_command, capture_output=True, text=True, timeout=OC_COMMAND_TIMEOUT)
        except subprocess.TimeoutExpired:
            last_error = f"Command timed out after {OC_COMMAND_TIMEOUT} seconds"
        except OSError as e:
            last_error = str(e)
        else:
            if result.returncode == 0:
                if attempt > 0 and printer:
                    printer.print_success(f"Command succeeded on retry attempt {attempt}")
                return result
            if not _is_retryable_error(result.stderr) or attempt >= max_retries:
                return result
            last_error = result.stderr.strip()

        if attempt < max_retries:
            if printer:
                printer.print_warning(f"oc command failed, waiting {retry_delay}s before retry...")
                printer.print_info(f"Error: {last_error}")
            time.sleep(retry_delay)
            retry_delay *= 1.5

    if printer:
        printer.print_error(f"Command failed after {max_retries} retries. Last error: {last_error}")
    return None


def execute_oc_command(command, json_output=False, printer=None, max_retries=3, retry_delay=2):
    """
    Execute an OpenShift CLI command with retry logic for API failures.

    Args:
        command: List of command arguments to execute (excluding 'oc')
        json_output: If True, parse stdout as JSON
        printer: Printer instance for output
        max_retries: Maximum number of retry attempts (default: 3)
        retry_delay: Seconds to wait between retries (default: 2)

    Returns:
        str or dict: Command output as string, or parsed JSON dict if json_output=True.
                    Returns None on command failure after all retries.
    """
    result = run_oc_command(command, printer=printer, max_retries=max_retries, retry_delay=retry_delay)
    if result is None:
        return None

    if result.returncode != 0:
        if printer:
            printer.print_error(f"Command failed: {result.stderr.strip()}")
        return None

    if not json_output:
        return result.stdout.strip()

    try:
        return json.loads(result.stdout)
    except json.JSONDecodeError as e:
        if printer:
            printer.print_error(f"Failed to parse JSON output: {e}")
        return None


def format_runtime(start_time, end_time):
    """
    Format runtime duration in a human-readable way.

    Args:
        start_time (float): Start timestamp from time.time()
        end_time (float): End timestamp from time.time()

    Returns:
        str: Formatted runtime string (e.g., "5m 23s", "1h 15m 30s")
    """
    total_seconds = int(end_time - start_time)

    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    elif minutes > 0:
        return f"{minutes}m {seconds}s"
    else:
        return f"{seconds}s"
