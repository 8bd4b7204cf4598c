"""
Tests for host resource and process utilities.

Run: python3 -m pytest tests/test_system.py -v
"""

from unittest.mock import MagicMock, patch

import psutil
import pytest

from edgediag.utils import system
from edgediag.utils.system import (
    get_cpu_count,
    get_disk_gb,
    get_memory_mb,
    get_pid_usage,
    is_process_running,
)


def fake_proc(pid, name, cmdline):
    proc = MagicMock(pid=pid)
    proc.info = {'name': name, 'cmdline': cmdline}
    return proc


class TestIsProcessRunning:
    """Tests for is_process_running function."""

    def test_matches_name(self):
        procs = [fake_proc(1, 'systemd', ['/sbin/init']), fake_proc(42, 'edgecore', ['edgecore'])]
        with patch('psutil.process_iter', return_value=procs):
            assert is_process_running('edgecore') is True

    def test_matches_cmdline_basename(self):
        """Test a process renamed by its wrapper is still found by argv[0]."""
        procs = [fake_proc(42, 'wrapper', ['/usr/local/bin/edgecore', '--config', 'x'])]
        with patch('psutil.process_iter', return_value=procs):
            assert is_process_running('edgecore') is True

    def test_not_running(self):
        procs = [fake_proc(1, 'systemd', ['/sbin/init']), fake_proc(2, 'kthreadd', None)]
        with patch('psutil.process_iter', return_value=procs):
            assert is_process_running('edgecore') is False

    def test_substring_does_not_match(self):
        procs = [fake_proc(7, 'edgecore-helper', ['/opt/edgecore-helper'])]
        with patch('psutil.process_iter', return_value=procs):
            assert is_process_running('edgecore') is False

    def test_errors_propagate(self):
        with patch('psutil.process_iter', side_effect=psutil.AccessDenied()):
            with pytest.raises(psutil.Error):
                is_process_running('edgecore')


class TestResources:
    """Tests for resource getters."""

    def test_cpu_count(self):
        with patch('psutil.cpu_count', return_value=8):
            assert get_cpu_count() == 8

    def test_cpu_count_unknown(self):
        with patch('psutil.cpu_count', return_value=None):
            assert get_cpu_count() == 0

    def test_memory_mb(self):
        mem = MagicMock(total=2048 * system.MB, available=512 * system.MB)
        with patch('psutil.virtual_memory', return_value=mem):
            assert get_memory_mb() == (2048.0, 512.0)

    def test_disk_gb(self):
        disk = MagicMock(total=100 * system.GB, free=25 * system.GB)
        with patch('psutil.disk_usage', return_value=disk) as mock_usage:
            assert get_disk_gb('/data') == (100.0, 25.0)
        mock_usage.assert_called_once_with('/data')

    def test_pid_usage(self, tmp_path):
        pid_max = tmp_path / 'pid_max'
        pid_max.write_text('32768\n')
        with patch.object(system.SystemPaths, 'PROC_PID_MAX', pid_max), \
                patch('psutil.pids', return_value=list(range(250))):
            assert get_pid_usage() == (32768, 250)

    def test_pid_usage_missing_file(self, tmp_path):
        with patch.object(system.SystemPaths, 'PROC_PID_MAX', tmp_path / 'absent'):
            with pytest.raises(OSError):
                get_pid_usage()
