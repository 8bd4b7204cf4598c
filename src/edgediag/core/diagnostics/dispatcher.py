"""
Diagnose dispatcher

Maps a subcommand ("node", "pod", "install") to its checker chain,
runs it and renders a single pass/fail verdict. Failures are never
aggregated: the first one found is the one reported.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ...utils.metastore import MetaStore
from ...utils.paths import EdgeCorePaths
from .install import InstallReadinessChecker
from .models import (
    CheckResult,
    DiagnoseError,
    DiagnoseOptions,
    DiagnoseTarget,
    FailureKind,
    PodDecodeError,
)
from .node import NodeHealthChecker
from .pod import PodStatusResolver, evaluate_readiness
from .report import Reporter

logger = logging.getLogger(__name__)

Handler = Callable[['Dispatcher', DiagnoseOptions, Sequence[str]], CheckResult]


@dataclass(frozen=True)
class TargetEntry:
    """One diagnose subcommand."""
    use: str
    target: DiagnoseTarget
    description: str
    handler: Handler


def _run_node(dispatcher: 'Dispatcher', options: DiagnoseOptions, args: Sequence[str]) -> CheckResult:
    return dispatcher.diagnose_node(options)


def _run_pod(dispatcher: 'Dispatcher', options: DiagnoseOptions, args: Sequence[str]) -> CheckResult:
    return dispatcher.diagnose_pod(options, args)


def _run_install(dispatcher: 'Dispatcher', options: DiagnoseOptions, args: Sequence[str]) -> CheckResult:
    return dispatcher.diagnose_install(options)


def build_target_table() -> Tuple[TargetEntry, ...]:
    """The diagnose subcommands, in help order."""
    return (
        TargetEntry('node', DiagnoseTarget.NODE,
                    'Diagnose whether the edge node is healthy', _run_node),
        TargetEntry('pod', DiagnoseTarget.POD,
                    'Diagnose whether a pod on the edge node is ready', _run_pod),
        TargetEntry('install', DiagnoseTarget.INSTALL,
                    'Diagnose whether the host meets edgecore install requirements', _run_install),
    )


class Dispatcher:
    """
    Runs diagnose subcommands.

    Args:
        targets: Subcommand table (defaults to build_target_table())
        node_checker: Node health checker
        install_checker: Install readiness checker
        store_factory: path -> MetaStore, called once per pod diagnosis
        reporter: Output sink
    """

    def __init__(
        self,
        targets: Optional[Iterable[TargetEntry]] = None,
        node_checker: Optional[NodeHealthChecker] = None,
        install_checker: Optional[InstallReadinessChecker] = None,
        store_factory: Callable[[str], MetaStore] = MetaStore,
        reporter: Optional[Reporter] = None,
    ):
        entries = build_target_table() if targets is None else tuple(targets)
        self.targets: Dict[str, TargetEntry] = {entry.use: entry for entry in entries}
        self.node_checker = node_checker or NodeHealthChecker()
        self.install_checker = install_checker or InstallReadinessChecker()
        self.store_factory = store_factory
        self.reporter = reporter or Reporter()

    def run(self, use: str, options: DiagnoseOptions, args: Sequence[str] = ()) -> CheckResult:
        """Execute a subcommand and render its banner."""
        result = self.execute(use, options, args)
        if not result.passed:
            self.reporter.error(result.message)
        self.reporter.banner(use, result.passed)
        return result

    def execute(self, use: str, options: DiagnoseOptions, args: Sequence[str] = ()) -> CheckResult:
        """
        Execute a subcommand without rendering a banner.

        Raises:
            KeyError: if use is not in the target table
        """
        entry = self.targets.get(use)
        if entry is None:
            raise KeyError(f"unknown diagnose target: {use}")
        logger.debug(f"Diagnosing {entry.target.value}")
        return entry.handler(self, options, list(args))

    def diagnose_node(self, options: DiagnoseOptions) -> CheckResult:
        return self.node_checker.check(options, on_result=self.reporter.step)

    def diagnose_install(self, options: DiagnoseOptions) -> CheckResult:
        return self.install_checker.check(options.check_options, on_result=self.reporter.step)

    def diagnose_pod(self, options: DiagnoseOptions, args: Sequence[str]) -> CheckResult:
        """
        Diagnose a pod: the node first, then the pod's stored status.

        A pod on an unhealthy node is not worth inspecting, so a node
        failure is returned as is.
        """
        if not args:
            return CheckResult.fail('pod', FailureKind.MISSING_ARGUMENT,
                                    "You must specify a pod name")
        pod_name = args[0]

        result = self.diagnose_node(options)
        if not result.passed:
            return result

        if not options.data_source_path:
            options.data_source_path = EdgeCorePaths.get_data_source()

        with self.store_factory(options.data_source_path) as store:
            return self._diagnose_pod_status(PodStatusResolver(store), options, pod_name)

    def _diagnose_pod_status(self, resolver: PodStatusResolver, options: DiagnoseOptions,
                             pod_name: str) -> CheckResult:
        try:
            resolver.open()
            self.reporter.line(True, f"Database {options.data_source_path} exists")
            status = resolver.resolve(options.namespace, pod_name)
        except PodDecodeError as e:
            return CheckResult.fail('pod', e.kind, e.message, key=e.key, partial=e.partial)
        except DiagnoseError as e:
            return CheckResult.fail('pod', e.kind, e.message)

        self.reporter.line(True, f"Pod {pod_name} exists in namespace {options.namespace}")
        readiness = evaluate_readiness(status)
        for ok, text in readiness.lines():
            self.reporter.line(ok, f"pod {pod_name}: {text}")

        not_ready: List[str] = [c.name for c in readiness.containers if not c.ready]
        if not readiness.ready:
            return CheckResult.fail('pod', FailureKind.POD_NOT_READY,
                                    f"pod {pod_name} is not Ready",
                                    phase=readiness.phase, containers_not_ready=not_ready)
        self.reporter.line(True, f"Pod {pod_name} is Ready")
        return CheckResult.ok('pod', f"Pod {pod_name} is Ready",
                              phase=readiness.phase, containers_not_ready=not_ready)
