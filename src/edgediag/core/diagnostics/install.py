"""
Install readiness checks

Host preconditions for installing edgecore, checked in a fixed order:
CPU, memory, disk, DNS (only when a domain is given), network, PIDs.
The first failing probe's result is returned as is.
"""

import logging
from typing import Optional

import psutil

from ...utils.edgecore_config import ConfigError, load_edgecore_config
from ...utils.env_config import get_config_float, get_config_int
from ...utils.network import check_http, https_url, ping, resolve_domain
from ...utils.system import get_cpu_count, get_disk_gb, get_memory_mb, get_pid_usage
from .chain import ProbeChain, ResultCallback
from .models import CheckOptions, CheckResult, FailureKind

logger = logging.getLogger(__name__)

FAIL = FailureKind.INSTALL_PROBE_FAILURE


def _fail(probe: str, message: str, **details) -> CheckResult:
    return CheckResult.fail(probe, FAIL, message, probe=probe, **details)


class InstallProbes:
    """
    Host probes used by the install check.

    Thresholds default to the EDGEDIAG_MIN_CPU, EDGEDIAG_MIN_MEMORY_MB,
    EDGEDIAG_MIN_DISK_GB and EDGEDIAG_MAX_PID_RATE settings.
    """

    def __init__(
        self,
        min_cpu: Optional[int] = None,
        min_memory_mb: Optional[int] = None,
        min_disk_gb: Optional[int] = None,
        max_pid_rate: Optional[float] = None,
    ):
        self.min_cpu = min_cpu if min_cpu is not None else get_config_int('EDGEDIAG_MIN_CPU', 1)
        self.min_memory_mb = (min_memory_mb if min_memory_mb is not None
                              else get_config_int('EDGEDIAG_MIN_MEMORY_MB', 256))
        self.min_disk_gb = (min_disk_gb if min_disk_gb is not None
                            else get_config_int('EDGEDIAG_MIN_DISK_GB', 1))
        self.max_pid_rate = (max_pid_rate if max_pid_rate is not None
                             else get_config_float('EDGEDIAG_MAX_PID_RATE', 0.05))

    def check_cpu(self) -> CheckResult:
        try:
            cpus = get_cpu_count()
        except (OSError, psutil.Error) as e:
            return _fail('cpu', f"cannot read cpu count: {e}")
        message = f"CPU total: {cpus} core, Allowed >= {self.min_cpu} core"
        if cpus < self.min_cpu:
            return _fail('cpu', message, cpus=cpus)
        return CheckResult.ok('cpu', message, cpus=cpus)

    def check_memory(self) -> CheckResult:
        try:
            total, available = get_memory_mb()
        except (OSError, psutil.Error) as e:
            return _fail('memory', f"cannot read memory usage: {e}")
        message = (f"Memory total: {total:.2f} MB, Memory free: {available:.2f} MB, "
                   f"Allowed >= {self.min_memory_mb} MB")
        if available < self.min_memory_mb:
            return _fail('memory', message, total_mb=total, available_mb=available)
        return CheckResult.ok('memory', message, total_mb=total, available_mb=available)

    def check_disk(self) -> CheckResult:
        try:
            total, free = get_disk_gb()
        except (OSError, psutil.Error) as e:
            return _fail('disk', f"cannot read disk usage: {e}")
        message = (f"Disk total: {total:.2f} GB, Disk free: {free:.2f} GB, "
                   f"Allowed >= {self.min_disk_gb} GB")
        if free < self.min_disk_gb:
            return _fail('disk', message, total_gb=total, free_gb=free)
        return CheckResult.ok('disk', message, total_gb=total, free_gb=free)

    def check_dns(self, domain: str, dns_ip: str = '', timeout: int = 3) -> CheckResult:
        resolved, detail = resolve_domain(domain, dns_ip, timeout)
        if not resolved:
            return _fail('dns', detail, domain=domain, dns_ip=dns_ip)
        return CheckResult.ok('dns', f"dns resolution success: {detail}", domain=domain)

    def check_network(self, options: CheckOptions) -> CheckResult:
        """
        Check every network target that options populate.

        Targets, in order: ping options.ip, HTTPS to cloud_hub_server,
        HTTPS to edgecore_server, HTTPS to the edgehub server named in the
        config at options.config_path.
        """
        timeout = options.timeout_seconds
        checked = []

        if options.ip:
            ok, detail = ping(options.ip, timeout)
            if not ok:
                return _fail('network', f"ping {options.ip} failed: {detail}", target=options.ip)
            checked.append(options.ip)

        servers = [options.cloud_hub_server, options.edgecore_server]
        if options.config_path:
            try:
                config = load_edgecore_config(options.config_path)
            except ConfigError as e:
                return _fail('network', f"parse edgecore config failed: {e}",
                             target=options.config_path)
            servers.append(config.modules.edge_hub.websocket.server)

        for server in filter(None, servers):
            url = https_url(server)
            ok, detail = check_http(url, timeout)
            if not ok:
                return _fail('network', f"connect to {url} failed: {detail}", target=url)
            checked.append(url)

        if not checked:
            return CheckResult.ok('network', "no network target given, skipped")
        return CheckResult.ok('network', f"network reachable: {', '.join(checked)}", targets=checked)

    def check_pid(self) -> CheckResult:
        try:
            pid_max, running = get_pid_usage()
        except (OSError, ValueError, psutil.Error) as e:
            return _fail('pid', f"cannot read pid usage: {e}")
        rate = running / pid_max if pid_max else 1.0
        message = (f"Maximum PIDs: {pid_max}; Running processes: {running}; "
                   f"Allowed <= {self.max_pid_rate:.0%}")
        if rate > self.max_pid_rate:
            return _fail('pid', message, pid_max=pid_max, running=running)
        return CheckResult.ok('pid', message, pid_max=pid_max, running=running)


class InstallReadinessChecker:
    """Runs the install probes as a short-circuiting chain."""

    def __init__(self, probes: Optional[InstallProbes] = None):
        self.probes = probes or InstallProbes()

    def check(self, options: CheckOptions, on_result: Optional[ResultCallback] = None) -> CheckResult:
        probes = self.probes
        chain = ProbeChain('install', on_result=on_result)
        chain.add('cpu', probes.check_cpu)
        chain.add('memory', probes.check_memory)
        chain.add('disk', probes.check_disk)
        if options.domain:
            chain.add('dns', lambda: probes.check_dns(options.domain, options.dns_ip,
                                                      options.timeout_seconds))
        chain.add('network', lambda: probes.check_network(options))
        chain.add('pid', probes.check_pid)
        return chain.run()
