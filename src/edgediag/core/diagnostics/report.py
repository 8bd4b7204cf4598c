"""
Reporter interface for diagnose output

The dispatcher never prints; it hands every line to a reporter. The
base class only logs, which is what library callers and tests get by
default. The CLI swaps in a rich console reporter.
"""

import logging

from .models import CheckResult

logger = logging.getLogger(__name__)


class Reporter:
    """Receives diagnose output as it happens."""

    def step(self, result: CheckResult) -> None:
        """A probe finished."""
        logger.debug(f"[{result.status.value}] {result.name}: {result.message}")

    def line(self, ok: bool, text: str) -> None:
        """A free-form report line."""
        logger.debug(f"[{'ok' if ok else '!!'}] {text}")

    def error(self, message: str) -> None:
        """The run failed with message."""
        logger.debug(f"error: {message}")

    def banner(self, use: str, passed: bool) -> None:
        """Final verdict for the subcommand."""
        logger.debug(f"diagnose {use} {'succeeded' if passed else 'failed'}")
