"""
Node health checks

Verifies, in order, that the edgecore agent is running, that its
configuration exists and parses, that its metadata database exists,
and that the cloud side is reachable over the EdgeHub websocket
endpoint. The first failing step ends the check.
"""

import logging
import os
from typing import Callable, Optional, Tuple

import psutil

from ...utils.edgecore_config import ConfigError, EdgeCoreConfig, load_edgecore_config
from ...utils.network import check_http, https_url
from ...utils.paths import EdgeCorePaths
from ...utils.system import is_process_running
from .chain import ProbeChain, ResultCallback
from .models import CheckResult, DiagnoseOptions, FailureKind

logger = logging.getLogger(__name__)

DEFAULT_PROBE_TIMEOUT = 3


class NodeHealthChecker:
    """
    Ordered health check of the local edge node.

    Collaborators are injectable so each step can be exercised alone:

    Args:
        process_checker: name -> bool, may raise on process-table errors
        file_exists: path -> bool
        config_loader: path -> EdgeCoreConfig, raises ConfigError
        http_checker: (url, timeout) -> (reachable, detail)
        binary_name: Process name of the agent
        default_data_source: Database path used when the config sets none
        timeout: Reachability probe timeout in seconds
    """

    def __init__(
        self,
        process_checker: Callable[[str], bool] = is_process_running,
        file_exists: Callable[[str], bool] = os.path.isfile,
        config_loader: Callable[[str], EdgeCoreConfig] = load_edgecore_config,
        http_checker: Callable[[str, float], Tuple[bool, str]] = check_http,
        binary_name: Optional[str] = None,
        default_data_source: Optional[str] = None,
        timeout: float = DEFAULT_PROBE_TIMEOUT,
    ):
        self.process_checker = process_checker
        self.file_exists = file_exists
        self.config_loader = config_loader
        self.http_checker = http_checker
        self.binary_name = binary_name or EdgeCorePaths.get_binary_name()
        self.default_data_source = default_data_source or EdgeCorePaths.get_data_source()
        self.timeout = timeout

    def check(self, options: DiagnoseOptions, on_result: Optional[ResultCallback] = None) -> CheckResult:
        """
        Run the node checks.

        Sets options.data_source_path once the config has been parsed.

        Returns:
            The first failing CheckResult, or a passing summary
        """
        state = {}
        chain = ProbeChain('node', on_result=on_result)
        chain.add('edgecore process', self._check_process)
        chain.add('edge config', lambda: self._check_config_exists(options))
        chain.add('config parse', lambda: self._parse_config(options, state))
        chain.add('data source', lambda: self._check_data_source(options, state['config']))
        chain.add('edgehub', lambda: self._check_hub_enabled(state['config']))
        chain.add('cloudcore connection', lambda: self._check_cloud_connection(state['config']))
        return chain.run()

    def _check_process(self) -> CheckResult:
        name = 'edgecore process'
        try:
            running = self.process_checker(self.binary_name)
        except (psutil.Error, OSError) as e:
            logger.debug(f"Process table query failed: {e}")
            return CheckResult.fail(name, FailureKind.PROCESS_NOT_RUNNING,
                                    f"get {self.binary_name} status fail", error=str(e))
        if not running:
            return CheckResult.fail(name, FailureKind.PROCESS_NOT_RUNNING,
                                    f"{self.binary_name} is not running")
        return CheckResult.ok(name, f"{self.binary_name} is running")

    def _check_config_exists(self, options: DiagnoseOptions) -> CheckResult:
        name = 'edge config'
        if not self.file_exists(options.config_path):
            return CheckResult.fail(name, FailureKind.CONFIG_MISSING,
                                    f"edge config does not exist: {options.config_path}",
                                    path=options.config_path)
        return CheckResult.ok(name, f"edge config exists: {options.config_path}",
                              path=options.config_path)

    def _parse_config(self, options: DiagnoseOptions, state: dict) -> CheckResult:
        name = 'config parse'
        try:
            state['config'] = self.config_loader(options.config_path)
        except ConfigError as e:
            return CheckResult.fail(name, FailureKind.CONFIG_PARSE_ERROR,
                                    "parse edgecore config failed", error=str(e))
        return CheckResult.ok(name, "edgecore config parsed")

    def _check_data_source(self, options: DiagnoseOptions, config: EdgeCoreConfig) -> CheckResult:
        name = 'data source'
        data_source = config.data_base.data_source or self.default_data_source
        options.data_source_path = data_source
        if not self.file_exists(data_source):
            return CheckResult.fail(name, FailureKind.DATA_SOURCE_MISSING,
                                    f"dataSource does not exist: {data_source}",
                                    path=data_source)
        return CheckResult.ok(name, f"dataSource exists: {data_source}", path=data_source)

    def _check_hub_enabled(self, config: EdgeCoreConfig) -> CheckResult:
        name = 'edgehub'
        if not config.modules.edge_hub.websocket.enable:
            return CheckResult.fail(name, FailureKind.HUB_DISABLED, "edgehub is not enabled")
        return CheckResult.ok(name, "edgehub websocket is enabled")

    def _check_cloud_connection(self, config: EdgeCoreConfig) -> CheckResult:
        name = 'cloudcore connection'
        url = https_url(config.modules.edge_hub.websocket.server)
        reachable, detail = self.http_checker(url, self.timeout)
        if not reachable:
            return CheckResult.fail(name, FailureKind.NETWORK_UNREACHABLE,
                                    "cloudcore websocket connection failed", url=url, error=detail)
        return CheckResult.ok(name, "cloudcore websocket connection success", url=url)
