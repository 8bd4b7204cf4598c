"""
edgediag Path Constants

Centralized path and name definitions for the KubeEdge edge agent.
Values can be overridden through the environment (see env_config).
"""

from pathlib import Path

from .env_config import get_config


class EdgeCorePaths:
    """Paths and names related to the edgecore agent"""

    CONFIG_DIR = Path('/etc/kubeedge/config')
    CONFIG_FILE = CONFIG_DIR / 'edgecore.yaml'
    DATA_DIR = Path('/var/lib/kubeedge')
    DATA_SOURCE = DATA_DIR / 'edgecore.db'
    BINARY_NAME = 'edgecore'

    @classmethod
    def get_config_file(cls) -> str:
        """Get the edgecore config path, honouring EDGECORE_CONFIG_PATH"""
        return get_config('EDGECORE_CONFIG_PATH', str(cls.CONFIG_FILE))

    @classmethod
    def get_data_source(cls) -> str:
        """Get the built-in metadata database path"""
        return get_config('EDGECORE_DATA_SOURCE', str(cls.DATA_SOURCE))

    @classmethod
    def get_binary_name(cls) -> str:
        """Get the process name the agent runs under"""
        return get_config('EDGECORE_BINARY_NAME', cls.BINARY_NAME)


class SystemPaths:
    """System-level paths"""

    PROC_PID_MAX = Path('/proc/sys/kernel/pid_max')
    ROOT_FS = Path('/')
