"""
Tests for the node health checker.

Run: python3 -m pytest tests/test_node_checker.py -v
"""

from unittest.mock import MagicMock

import psutil
import pytest

from edgediag.core.diagnostics.models import DiagnoseOptions, FailureKind
from edgediag.core.diagnostics.node import NodeHealthChecker
from edgediag.utils.edgecore_config import (
    ConfigError,
    DataBase,
    EdgeCoreConfig,
    EdgeHub,
    Modules,
    WebSocket,
    load_edgecore_config,
)


def make_config(data_source='', enable=True, server='10.0.0.1:10000'):
    return EdgeCoreConfig(
        data_base=DataBase(data_source=data_source),
        modules=Modules(edge_hub=EdgeHub(enable=True, websocket=WebSocket(enable=enable, server=server))),
    )


@pytest.fixture
def collaborators():
    """Healthy-node collaborator stubs."""
    return {
        'process_checker': MagicMock(return_value=True),
        'file_exists': MagicMock(return_value=True),
        'config_loader': MagicMock(return_value=make_config()),
        'http_checker': MagicMock(return_value=(True, 'HTTP 404')),
    }


def make_checker(collaborators, **overrides):
    kwargs = dict(collaborators)
    kwargs.update(overrides)
    return NodeHealthChecker(
        binary_name='edgecore',
        default_data_source='/var/lib/kubeedge/edgecore.db',
        **kwargs,
    )


class TestNodeHealthChecker:
    """Tests for NodeHealthChecker.check."""

    def test_healthy_node(self, collaborators):
        """Test every step passes on a healthy node."""
        options = DiagnoseOptions(config_path='/etc/kubeedge/config/edgecore.yaml')
        seen = []

        result = make_checker(collaborators).check(options, on_result=seen.append)

        assert result.passed
        assert [r.message for r in seen] == [
            'edgecore is running',
            'edge config exists: /etc/kubeedge/config/edgecore.yaml',
            'edgecore config parsed',
            'dataSource exists: /var/lib/kubeedge/edgecore.db',
            'edgehub websocket is enabled',
            'cloudcore websocket connection success',
        ]
        collaborators['process_checker'].assert_called_once_with('edgecore')
        collaborators['http_checker'].assert_called_once_with('https://10.0.0.1:10000', 3)

    def test_process_not_running_skips_file_checks(self, collaborators):
        """Test no file-system access happens when the agent is down."""
        collaborators['process_checker'].return_value = False
        file_exists = MagicMock(side_effect=AssertionError('file check must not run'))

        result = make_checker(collaborators, file_exists=file_exists).check(DiagnoseOptions())

        assert result.kind == FailureKind.PROCESS_NOT_RUNNING
        assert result.message == 'edgecore is not running'
        file_exists.assert_not_called()
        collaborators['config_loader'].assert_not_called()

    def test_process_query_error(self, collaborators):
        """Test a process-table error counts as not running."""
        collaborators['process_checker'].side_effect = psutil.AccessDenied()

        result = make_checker(collaborators).check(DiagnoseOptions())

        assert result.kind == FailureKind.PROCESS_NOT_RUNNING
        assert result.message == 'get edgecore status fail'
        collaborators['file_exists'].assert_not_called()

    def test_config_missing(self, collaborators):
        """Test a missing config file stops before parsing."""
        collaborators['file_exists'].return_value = False

        result = make_checker(collaborators).check(DiagnoseOptions(config_path='/nope.yaml'))

        assert result.kind == FailureKind.CONFIG_MISSING
        assert '/nope.yaml' in result.message
        collaborators['config_loader'].assert_not_called()

    def test_config_parse_error(self, collaborators):
        """Test a malformed config fails with ConfigParseError."""
        collaborators['config_loader'].side_effect = ConfigError('bad yaml')

        result = make_checker(collaborators).check(DiagnoseOptions())

        assert result.kind == FailureKind.CONFIG_PARSE_ERROR
        assert result.details['error'] == 'bad yaml'
        collaborators['http_checker'].assert_not_called()

    def test_undecodable_config_file(self, collaborators, tmp_path):
        """Test a config that is not UTF-8 fails with ConfigParseError."""
        path = tmp_path / 'edgecore.yaml'
        path.write_bytes(b'database:\n  dataSource: "\xff\xfe\xfa"\n')
        checker = make_checker(collaborators, config_loader=load_edgecore_config)

        result = checker.check(DiagnoseOptions(config_path=str(path)))

        assert result.kind == FailureKind.CONFIG_PARSE_ERROR
        assert result.message == 'parse edgecore config failed'

    def test_data_source_from_config(self, collaborators):
        """Test the configured dataSource is used and recorded."""
        collaborators['config_loader'].return_value = make_config(data_source='/data/custom.db')
        options = DiagnoseOptions()

        make_checker(collaborators).check(options)

        assert options.data_source_path == '/data/custom.db'
        collaborators['file_exists'].assert_any_call('/data/custom.db')

    def test_data_source_default(self, collaborators):
        """Test an empty dataSource falls back to the built-in path."""
        options = DiagnoseOptions()

        make_checker(collaborators).check(options)

        assert options.data_source_path == '/var/lib/kubeedge/edgecore.db'

    def test_data_source_missing_still_recorded(self, collaborators):
        """Test the path is recorded even when the file is missing."""
        collaborators['file_exists'].side_effect = [True, False]
        options = DiagnoseOptions()

        result = make_checker(collaborators).check(options)

        assert result.kind == FailureKind.DATA_SOURCE_MISSING
        assert options.data_source_path == '/var/lib/kubeedge/edgecore.db'

    def test_hub_disabled_skips_network(self, collaborators):
        """Test a disabled EdgeHub websocket fails without probing."""
        collaborators['config_loader'].return_value = make_config(enable=False)

        result = make_checker(collaborators).check(DiagnoseOptions())

        assert result.kind == FailureKind.HUB_DISABLED
        collaborators['http_checker'].assert_not_called()

    def test_network_unreachable(self, collaborators):
        """Test a transport error fails with NetworkUnreachable."""
        collaborators['http_checker'].return_value = (False, 'connection refused')

        result = make_checker(collaborators).check(DiagnoseOptions())

        assert result.kind == FailureKind.NETWORK_UNREACHABLE
        assert result.message == 'cloudcore websocket connection failed'
        assert result.details['error'] == 'connection refused'

    def test_custom_timeout(self, collaborators):
        """Test the reachability probe uses the configured timeout."""
        checker = make_checker(collaborators, timeout=7)
        checker.check(DiagnoseOptions())
        collaborators['http_checker'].assert_called_once_with('https://10.0.0.1:10000', 7)
