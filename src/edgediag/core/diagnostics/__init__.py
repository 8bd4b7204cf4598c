"""
Diagnostic core for edgediag

Usage:
    from edgediag.core.diagnostics import Dispatcher, DiagnoseOptions

    dispatcher = Dispatcher()
    result = dispatcher.run('node', DiagnoseOptions(), [])
"""

from .models import (
    CheckOptions,
    CheckResult,
    CheckStatus,
    ContainerState,
    ContainerStateDetail,
    ContainerStatus,
    DiagnoseError,
    DiagnoseOptions,
    DiagnoseTarget,
    FailureKind,
    PodCondition,
    PodDecodeError,
    PodNotFoundError,
    PodPhase,
    PodStatus,
    StoreError,
)
from .chain import ChainState, ProbeChain
from .node import NodeHealthChecker
from .pod import PodReadiness, PodStatusResolver, evaluate_readiness
from .install import InstallProbes, InstallReadinessChecker
from .dispatcher import Dispatcher, TargetEntry, build_target_table
from .report import Reporter

__all__ = [
    'ChainState',
    'CheckOptions',
    'CheckResult',
    'CheckStatus',
    'ContainerState',
    'ContainerStateDetail',
    'ContainerStatus',
    'DiagnoseError',
    'DiagnoseOptions',
    'DiagnoseTarget',
    'Dispatcher',
    'FailureKind',
    'InstallProbes',
    'InstallReadinessChecker',
    'NodeHealthChecker',
    'PodCondition',
    'PodDecodeError',
    'PodNotFoundError',
    'PodPhase',
    'PodReadiness',
    'PodStatus',
    'PodStatusResolver',
    'ProbeChain',
    'Reporter',
    'StoreError',
    'TargetEntry',
    'build_target_table',
    'evaluate_readiness',
]
