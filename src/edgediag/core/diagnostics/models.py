"""
Diagnostic Data Models

Shared by the checkers, the dispatcher and the CLI:
- tagged probe results (CheckResult.ok / CheckResult.fail)
- the error hierarchy raised by pod resolution
- diagnose options
- the pod status view reconstructed from the metadata store
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ...utils.paths import EdgeCorePaths


# === Status Enums ===

class CheckStatus(Enum):
    """Outcome of a single probe."""
    PASS = "pass"
    FAIL = "fail"


class FailureKind(Enum):
    """Why a diagnosis failed."""
    PROCESS_NOT_RUNNING = "ProcessNotRunning"
    CONFIG_MISSING = "ConfigMissing"
    CONFIG_PARSE_ERROR = "ConfigParseError"
    DATA_SOURCE_MISSING = "DataSourceMissing"
    HUB_DISABLED = "HubDisabled"
    NETWORK_UNREACHABLE = "NetworkUnreachable"
    STORE_INIT_ERROR = "StoreInitError"
    STORE_QUERY_ERROR = "StoreQueryError"
    POD_NOT_FOUND = "PodNotFound"
    DECODE_ERROR = "DecodeError"
    POD_NOT_READY = "PodNotReady"
    INSTALL_PROBE_FAILURE = "InstallProbeFailure"
    MISSING_ARGUMENT = "MissingArgument"


class DiagnoseTarget(Enum):
    """What a diagnose run inspects."""
    NODE = "node"
    POD = "pod"
    INSTALL = "install"


# === Core Result Type ===

@dataclass
class CheckResult:
    """
    Result of a single probe, or of a whole diagnose run.

    Attributes:
        name: Probe name (e.g. "edgecore process")
        status: PASS or FAIL
        message: Human-readable outcome
        kind: Failure kind, set only for failures
        details: Additional structured data
        duration_ms: How long the probe took
    """
    name: str
    status: CheckStatus
    message: str
    kind: Optional[FailureKind] = None
    details: Dict[str, Any] = field(default_factory=dict)
    duration_ms: Optional[float] = None

    def __bool__(self) -> bool:
        return self.status == CheckStatus.PASS

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS

    @classmethod
    def ok(cls, name: str, message: str, **details: Any) -> 'CheckResult':
        """Create a passing result."""
        return cls(name=name, status=CheckStatus.PASS, message=message, details=details)

    @classmethod
    def fail(cls, name: str, kind: FailureKind, message: str, **details: Any) -> 'CheckResult':
        """Create a failed result."""
        return cls(name=name, status=CheckStatus.FAIL, message=message, kind=kind, details=details)

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "name": self.name,
            "status": self.status.value,
            "message": self.message,
            "kind": self.kind.value if self.kind else None,
            "details": self.details,
            "duration_ms": self.duration_ms,
        }


# === Errors ===

class DiagnoseError(Exception):
    """A diagnosis step failed; ``kind`` says why."""

    def __init__(self, kind: FailureKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class StoreError(DiagnoseError):
    """The metadata store could not be opened or queried."""


class PodNotFoundError(DiagnoseError):
    """No pod record exists under the requested key."""

    def __init__(self, key: str):
        super().__init__(FailureKind.POD_NOT_FOUND, f"not find {key} in database")
        self.key = key


class PodDecodeError(DiagnoseError):
    """
    A stored record could not be decoded.

    ``partial`` holds the status value the decode produced before failing
    (the zero-value PodStatus). Callers get it alongside the error rather
    than instead of it.
    """

    def __init__(self, key: str, reason: str, partial: 'PodStatus'):
        super().__init__(FailureKind.DECODE_ERROR, f"failed to decode {key}: {reason}")
        self.key = key
        self.partial = partial


# === Options ===

@dataclass
class CheckOptions:
    """Probe parameters for install readiness checks."""
    dns_ip: str = ''
    domain: str = ''
    ip: str = ''
    cloud_hub_server: str = ''
    edgecore_server: str = ''
    config_path: str = ''
    timeout_seconds: int = 3


@dataclass
class DiagnoseOptions:
    """
    Options for one diagnose run.

    data_source_path is filled in by the node check and read by the pod
    check that follows it.
    """
    namespace: str = 'default'
    config_path: str = field(default_factory=EdgeCorePaths.get_config_file)
    data_source_path: str = ''
    check_options: CheckOptions = field(default_factory=CheckOptions)


# === Pod status ===

class PodPhase:
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"


@dataclass
class PodCondition:
    type: str = ''
    status: str = ''
    reason: str = ''
    message: str = ''


@dataclass
class ContainerStateDetail:
    """Reason and message of a waiting or terminated container."""
    reason: str = ''
    message: str = ''


@dataclass
class ContainerState:
    """At most one of the three states is set."""
    waiting: Optional[ContainerStateDetail] = None
    running: bool = False
    terminated: Optional[ContainerStateDetail] = None


@dataclass
class ContainerStatus:
    name: str = ''
    ready: bool = False
    restart_count: int = 0
    state: ContainerState = field(default_factory=ContainerState)


@dataclass
class PodStatus:
    """Runtime status of one pod. The zero value has an empty phase."""
    phase: str = ''
    conditions: List[PodCondition] = field(default_factory=list)
    container_statuses: List[ContainerStatus] = field(default_factory=list)
