"""
Pod status resolution

edgecore caches two independent records for a pod in its metadata
store:

    <namespace>/pod/<name>        the full Pod object, status embedded
    <namespace>/podstatus/<name>  a status report sent by the edge

The podstatus record, when present, is newer and always wins. The Pod
record must exist either way.

Decode quirk: when a record cannot be decoded, PodDecodeError is raised
and carries the zero-value PodStatus in ``partial``. The error is always
surfaced; the partial value is only there for callers that want it.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ...utils.metastore import MetaStore, StoreOpenError, StoreQueryError, meta_key
from .models import (
    ContainerState,
    ContainerStateDetail,
    ContainerStatus,
    FailureKind,
    PodCondition,
    PodDecodeError,
    PodNotFoundError,
    PodPhase,
    PodStatus,
    StoreError,
)

logger = logging.getLogger(__name__)

KIND_POD = 'pod'
KIND_POD_STATUS = 'podstatus'


class PodStatusResolver:
    """
    Rebuilds a pod's runtime status from the metadata store.

    The store handle is owned by the caller; it is opened on first use
    and reused for every lookup.
    """

    def __init__(self, store: MetaStore):
        self.store = store

    def open(self) -> None:
        """
        Open the store if needed.

        Raises:
            StoreError: kind StoreInitError
        """
        try:
            self.store.open()
        except StoreOpenError as e:
            raise StoreError(FailureKind.STORE_INIT_ERROR,
                             f"failed to initialize database: {e}") from e

    def resolve(self, namespace: str, pod_name: str) -> PodStatus:
        """
        Resolve the status of one pod.

        Args:
            namespace: Pod namespace
            pod_name: Pod name

        Returns:
            PodStatus from the podstatus record, else from the Pod object

        Raises:
            StoreError: the store cannot be opened or queried
            PodNotFoundError: no Pod record exists
            PodDecodeError: the chosen record is not valid
        """
        self.open()

        pod_key = meta_key(namespace, KIND_POD, pod_name)
        pod_records = self._query(pod_key)
        if not pod_records:
            raise PodNotFoundError(pod_key)
        logger.debug(f"Pod record {pod_key} found")

        status_key = meta_key(namespace, KIND_POD_STATUS, pod_name)
        status_records = self._query(status_key)
        if not status_records:
            logger.debug(f"No {status_key} record, using status embedded in the Pod")
            return decode_pod_record(pod_key, pod_records[0])

        logger.debug(f"PodStatus record {status_key} found")
        return decode_pod_status_record(status_key, status_records[0])

    def _query(self, key: str) -> List[str]:
        try:
            return self.store.query('key', key)
        except StoreOpenError as e:
            raise StoreError(FailureKind.STORE_INIT_ERROR,
                             f"failed to initialize database: {e}") from e
        except StoreQueryError as e:
            raise StoreError(FailureKind.STORE_QUERY_ERROR, str(e)) from e


# === Decoding ===

def decode_pod_record(key: str, raw: str) -> PodStatus:
    """Decode a serialized Pod object and return its status."""
    return _decode(key, raw, 'status')


def decode_pod_status_record(key: str, raw: str) -> PodStatus:
    """Decode a serialized status request ({"UID", "Name", "Status"})."""
    return _decode(key, raw, 'Status')


def _decode(key: str, raw: Optional[str], status_field: str) -> PodStatus:
    try:
        body = json.loads(raw)
        if not isinstance(body, dict):
            raise TypeError(f"expected a JSON object, got {type(body).__name__}")
        return status_from_dict(_field(body, status_field) or {})
    except (TypeError, ValueError, RecursionError) as e:
        raise PodDecodeError(key, str(e), partial=PodStatus()) from e


def _field(data: Dict[str, Any], name: str) -> Any:
    """Look up a JSON field, falling back to a case-insensitive match."""
    if name in data:
        return data[name]
    lowered = name.lower()
    for k, v in data.items():
        if k.lower() == lowered:
            return v
    return None


def _mapping(value: Any, what: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _items(value: Any, what: str) -> List[Dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TypeError(f"{what} must be an array, got {type(value).__name__}")
    return [_mapping(item, what) for item in value]


def _string(value: Any, what: str) -> str:
    if value is None:
        return ''
    if not isinstance(value, str):
        raise TypeError(f"{what} must be a string, got {type(value).__name__}")
    return value


def _state_detail(value: Any, what: str) -> Optional[ContainerStateDetail]:
    if value is None:
        return None
    data = _mapping(value, what)
    return ContainerStateDetail(
        reason=_string(_field(data, 'reason'), f"{what}.reason"),
        message=_string(_field(data, 'message'), f"{what}.message"),
    )


def status_from_dict(data: Dict[str, Any]) -> PodStatus:
    """
    Build a PodStatus from a Kubernetes PodStatus JSON object.

    Raises:
        TypeError: if a field has the wrong JSON type
    """
    data = _mapping(data, 'status')

    conditions = [
        PodCondition(
            type=_string(_field(c, 'type'), 'condition.type'),
            status=_string(_field(c, 'status'), 'condition.status'),
            reason=_string(_field(c, 'reason'), 'condition.reason'),
            message=_string(_field(c, 'message'), 'condition.message'),
        )
        for c in _items(_field(data, 'conditions'), 'conditions')
    ]

    containers = []
    for c in _items(_field(data, 'containerStatuses'), 'containerStatuses'):
        ready = _field(c, 'ready') or False
        if not isinstance(ready, bool):
            raise TypeError(f"containerStatus.ready must be a boolean, got {ready!r}")
        restarts = _field(c, 'restartCount') or 0
        if isinstance(restarts, bool) or not isinstance(restarts, int):
            raise TypeError(f"containerStatus.restartCount must be an integer, got {restarts!r}")

        state = _mapping(_field(c, 'state'), 'containerStatus.state')
        containers.append(ContainerStatus(
            name=_string(_field(c, 'name'), 'containerStatus.name'),
            ready=ready,
            restart_count=restarts,
            state=ContainerState(
                waiting=_state_detail(_field(state, 'waiting'), 'state.waiting'),
                running=_field(state, 'running') is not None,
                terminated=_state_detail(_field(state, 'terminated'), 'state.terminated'),
            ),
        ))

    return PodStatus(
        phase=_string(_field(data, 'phase'), 'phase'),
        conditions=conditions,
        container_statuses=containers,
    )


# === Readiness ===

CONTAINER_READY = 'Ready'
CONTAINER_WAITING = 'Waiting'
CONTAINER_TERMINATED = 'Terminated'
CONTAINER_NOT_READY = 'NotReady'


@dataclass
class ContainerReport:
    name: str
    state: str
    reason: str = ''
    message: str = ''
    restart_count: int = 0

    @property
    def ready(self) -> bool:
        return self.state == CONTAINER_READY


@dataclass
class PodReadiness:
    """
    Readiness verdict plus everything worth reporting about it.

    ``ready`` depends only on the phase and the Ready condition. Failing
    conditions and containers are listed for visibility but do not
    change the verdict.
    """
    phase: str
    ready: bool
    failing_conditions: List[PodCondition] = field(default_factory=list)
    containers: List[ContainerReport] = field(default_factory=list)

    def lines(self) -> Iterator[Tuple[bool, str]]:
        """Yield (ok, text) report lines in display order."""
        yield self.phase == PodPhase.RUNNING, f"phase is {self.phase or '<unset>'}"
        for c in self.failing_conditions:
            yield False, (f"condition {c.type} is {c.status or 'not True'}, "
                          f"reason: {c.reason}, message: {c.message}")
        for c in self.containers:
            if c.ready:
                yield True, f"container {c.name} is ready"
            elif c.state == CONTAINER_NOT_READY:
                yield False, f"container {c.name} is not ready"
            else:
                yield False, (f"container {c.name} {c.state}, reason: {c.reason}, "
                              f"message: {c.message}, restartCount: {c.restart_count}")


def classify_container(status: ContainerStatus) -> ContainerReport:
    """Classify a container as Ready, Waiting, Terminated or NotReady."""
    if status.ready:
        return ContainerReport(status.name, CONTAINER_READY, restart_count=status.restart_count)
    if status.state.waiting is not None:
        detail, state = status.state.waiting, CONTAINER_WAITING
    elif status.state.terminated is not None:
        detail, state = status.state.terminated, CONTAINER_TERMINATED
    else:
        return ContainerReport(status.name, CONTAINER_NOT_READY, restart_count=status.restart_count)
    return ContainerReport(status.name, state, detail.reason, detail.message, status.restart_count)


def evaluate_readiness(status: PodStatus) -> PodReadiness:
    """
    Decide whether a pod is ready.

    A pod is ready iff its phase is Running and it has a Ready=True
    condition.
    """
    has_ready_condition = any(
        c.type == 'Ready' and c.status == 'True' for c in status.conditions
    )
    return PodReadiness(
        phase=status.phase,
        ready=status.phase == PodPhase.RUNNING and has_ready_condition,
        failing_conditions=[c for c in status.conditions if c.status != 'True'],
        containers=[classify_container(c) for c in status.container_statuses],
    )
