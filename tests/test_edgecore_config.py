"""
Tests for edgecore config parsing.

Run: python3 -m pytest tests/test_edgecore_config.py -v
"""

import pytest

from edgediag.utils.edgecore_config import ConfigError, EdgeCoreConfig, load_edgecore_config


class TestLoadEdgecoreConfig:
    """Tests for load_edgecore_config function."""

    def test_reads_database_and_websocket(self, edgecore_config):
        """Test the fields the diagnostics use are parsed."""
        path = edgecore_config(data_source='/data/edge.db', enable=True, server='10.0.0.1:10000')

        config = load_edgecore_config(path)

        assert config.data_base.data_source == '/data/edge.db'
        assert config.data_base.driver_name == 'sqlite3'
        assert config.modules.edge_hub.enable is True
        assert config.modules.edge_hub.websocket.enable is True
        assert config.modules.edge_hub.websocket.server == '10.0.0.1:10000'

    def test_empty_data_source(self, edgecore_config):
        """Test an empty dataSource stays empty."""
        config = load_edgecore_config(edgecore_config(data_source=''))
        assert config.data_base.data_source == ''

    def test_missing_sections_use_defaults(self, edgecore_config):
        """Test a config without database/modules sections."""
        config = load_edgecore_config(edgecore_config(raw='kind: EdgeCore\n'))

        assert config.data_base.data_source == ''
        assert config.modules.edge_hub.websocket.enable is False
        assert config.modules.edge_hub.websocket.server == ''

    def test_empty_file(self, edgecore_config):
        """Test an empty file parses to defaults."""
        config = load_edgecore_config(edgecore_config(raw=''))
        assert config == EdgeCoreConfig()

    def test_invalid_yaml(self, edgecore_config):
        """Test malformed YAML raises ConfigError."""
        with pytest.raises(ConfigError, match='invalid YAML'):
            load_edgecore_config(edgecore_config(raw='modules: [unclosed\n'))

    def test_top_level_not_mapping(self, edgecore_config):
        """Test a YAML list is rejected."""
        with pytest.raises(ConfigError, match='mapping'):
            load_edgecore_config(edgecore_config(raw='- a\n- b\n'))

    def test_section_wrong_type(self, edgecore_config):
        """Test a scalar where a mapping is expected."""
        with pytest.raises(ConfigError, match="'modules' must be a mapping"):
            load_edgecore_config(edgecore_config(raw='modules: 3\n'))

    def test_enable_must_be_bool(self, edgecore_config):
        """Test websocket.enable with a non-boolean value."""
        raw = 'modules:\n  edgeHub:\n    websocket:\n      enable: "yes please"\n'
        with pytest.raises(ConfigError, match='websocket.enable'):
            load_edgecore_config(edgecore_config(raw=raw))

    def test_missing_file(self, tmp_path):
        """Test an unreadable path raises ConfigError."""
        with pytest.raises(ConfigError, match='cannot read'):
            load_edgecore_config(tmp_path / 'nope.yaml')

    def test_not_utf8(self, tmp_path):
        """Test undecodable bytes raise ConfigError, not UnicodeDecodeError."""
        path = tmp_path / 'edgecore.yaml'
        path.write_bytes(b'database:\n  dataSource: "\xff\xfe\xfa"\n')
        with pytest.raises(ConfigError, match='not valid UTF-8'):
            load_edgecore_config(path)
