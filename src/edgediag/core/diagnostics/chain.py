"""
Ordered, short-circuiting probe chain

A chain is a list of named probes. Each probe returns a CheckResult;
the first failure ends the run and later probes are never called.

    chain = ProbeChain('node')
    chain.add('edgecore process', check_process)
    chain.add('edge config', check_config)
    result = chain.run()
"""

import logging
import time
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .models import CheckResult

logger = logging.getLogger(__name__)

Probe = Callable[[], CheckResult]
ResultCallback = Callable[[CheckResult], None]


class ChainState(Enum):
    PENDING = "pending"
    PASSED = "passed"
    FAILED = "failed"


class ProbeChain:
    """
    Runs probes in order and stops at the first failure.

    After run(), ``state`` is PASSED or FAILED and ``step`` is the index
    of the last probe that ran (-1 if none did).
    """

    def __init__(self, name: str, on_result: Optional[ResultCallback] = None):
        self.name = name
        self.on_result = on_result
        self._probes: List[Tuple[str, Probe]] = []
        self.state = ChainState.PENDING
        self.step = -1
        self.results: List[CheckResult] = []

    def add(self, name: str, probe: Probe) -> 'ProbeChain':
        self._probes.append((name, probe))
        return self

    @property
    def probe_names(self) -> List[str]:
        return [name for name, _ in self._probes]

    def run(self) -> CheckResult:
        """
        Run every probe in order until one fails.

        Returns:
            The failing probe's result, or a passing summary result
        """
        self.state = ChainState.PENDING
        self.step = -1
        self.results = []

        for index, (name, probe) in enumerate(self._probes):
            self.step = index
            start = time.monotonic()
            result = probe()
            result.duration_ms = round((time.monotonic() - start) * 1000, 2)
            self.results.append(result)

            if self.on_result is not None:
                self.on_result(result)

            if not result.passed:
                self.state = ChainState.FAILED
                logger.debug(f"{self.name}: step {index} ({name}) failed: {result.message}")
                return result

            logger.debug(f"{self.name}: step {index} ({name}) passed")

        self.state = ChainState.PASSED
        return CheckResult.ok(self.name, f"{self.name} checks passed", steps=len(self._probes))
