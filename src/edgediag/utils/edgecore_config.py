"""
edgecore configuration parsing

Only the parts of edgecore.yaml the diagnostics read are modelled:

    database:
      dataSource: /var/lib/kubeedge/edgecore.db
    modules:
      edgeHub:
        websocket:
          enable: true
          server: 192.168.1.10:10000
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Union

import yaml

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when an edgecore config file cannot be read or parsed."""


@dataclass
class DataBase:
    driver_name: str = ''
    alias_name: str = ''
    data_source: str = ''


@dataclass
class WebSocket:
    enable: bool = False
    server: str = ''


@dataclass
class EdgeHub:
    enable: bool = False
    websocket: WebSocket = field(default_factory=WebSocket)


@dataclass
class Modules:
    edge_hub: EdgeHub = field(default_factory=EdgeHub)


@dataclass
class EdgeCoreConfig:
    """Structured view of an edgecore configuration file"""
    data_base: DataBase = field(default_factory=DataBase)
    modules: Modules = field(default_factory=Modules)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EdgeCoreConfig':
        """Build a config from the decoded YAML mapping.

        Raises:
            ConfigError: if a section has the wrong shape
        """
        database = _section(data, 'database')
        modules = _section(data, 'modules')
        edge_hub = _section(modules, 'edgeHub')
        websocket = _section(edge_hub, 'websocket')

        return cls(
            data_base=DataBase(
                driver_name=str(database.get('driverName') or ''),
                alias_name=str(database.get('aliasName') or ''),
                data_source=str(database.get('dataSource') or ''),
            ),
            modules=Modules(
                edge_hub=EdgeHub(
                    enable=_as_bool(edge_hub.get('enable', False), 'edgeHub.enable'),
                    websocket=WebSocket(
                        enable=_as_bool(websocket.get('enable', False), 'websocket.enable'),
                        server=str(websocket.get('server') or ''),
                    ),
                ),
            ),
        )


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a mapping, got {type(value).__name__}")
    return value


def _as_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigError(f"'{name}' must be a boolean, got {value!r}")


def load_edgecore_config(path: Union[str, Path]) -> EdgeCoreConfig:
    """
    Parse an edgecore YAML config file.

    Args:
        path: Path to edgecore.yaml

    Returns:
        EdgeCoreConfig

    Raises:
        ConfigError: if the file cannot be read or is malformed
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"{path} is not valid UTF-8: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} does not contain a mapping")

    config = EdgeCoreConfig.from_dict(data)
    logger.debug(f"Parsed edgecore config {path}: {config}")
    return config
