"""System utilities for host resource and process inspection"""

import logging
from typing import Tuple

import psutil

from .paths import SystemPaths

logger = logging.getLogger(__name__)

MB = 1024 * 1024
GB = 1024 * MB


def is_process_running(name: str) -> bool:
    """
    Check whether a process with the given name is in the process table.

    Matches the process name or the basename of argv[0], so agents
    started through a wrapper path are still found.

    Raises:
        psutil.Error, OSError: if the process table cannot be read
    """
    for proc in psutil.process_iter(['name', 'cmdline']):
        info = proc.info
        if info.get('name') == name:
            logger.debug(f"Found {name} as pid {proc.pid}")
            return True
        cmdline = info.get('cmdline') or []
        if cmdline and cmdline[0].rsplit('/', 1)[-1] == name:
            logger.debug(f"Found {name} as pid {proc.pid} (cmdline)")
            return True
    return False


def get_cpu_count() -> int:
    """Get the number of logical CPUs (0 if unknown)"""
    return psutil.cpu_count(logical=True) or 0


def get_memory_mb() -> Tuple[float, float]:
    """Get (total, available) system memory in MB"""
    mem = psutil.virtual_memory()
    return mem.total / MB, mem.available / MB


def get_disk_gb(path: str = str(SystemPaths.ROOT_FS)) -> Tuple[float, float]:
    """Get (total, free) disk space in GB for the filesystem holding path"""
    disk = psutil.disk_usage(path)
    return disk.total / GB, disk.free / GB


def get_pid_usage() -> Tuple[int, int]:
    """
    Get (pid_max, running process count).

    Raises:
        OSError, ValueError: if pid_max cannot be read
    """
    pid_max = int(SystemPaths.PROC_PID_MAX.read_text().strip())
    return pid_max, len(psutil.pids())
