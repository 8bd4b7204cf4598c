"""
Network reachability utilities

Each helper returns (ok, detail) instead of raising, so callers can
turn the outcome straight into a diagnostic line.
"""

import logging
import subprocess
from typing import Tuple

import requests
import urllib3

logger = logging.getLogger(__name__)

# Reachability probes skip certificate checks
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


def https_url(server: str) -> str:
    """Prefix a host:port with the https scheme unless it has one already."""
    if server.startswith(('http://', 'https://')):
        return server
    return f"https://{server}"


def check_http(url: str, timeout: float = 3.0) -> Tuple[bool, str]:
    """
    Check that an HTTP(S) endpoint answers.

    Any response counts as reachable, whatever its status code; only
    transport and TLS handshake errors count as failures.

    Args:
        url: Full URL to request
        timeout: Connect and read timeout in seconds

    Returns:
        Tuple of (reachable, detail)
    """
    try:
        response = requests.get(url, timeout=timeout, verify=False, allow_redirects=False)
    except requests.RequestException as e:
        logger.debug(f"HTTP check failed for {url}: {e}")
        return False, str(e)

    response.close()
    return True, f"HTTP {response.status_code}"


def _is_option_like(value: str) -> bool:
    """A host or domain starting with '-' would be read as a command option."""
    return value.startswith('-')


def ping(host: str, timeout: int = 3, count: int = 3) -> Tuple[bool, str]:
    """
    Ping a host.

    Args:
        host: IP or hostname
        timeout: Per-reply timeout in seconds
        count: Number of echo requests

    Returns:
        Tuple of (reachable, detail)
    """
    if _is_option_like(host):
        return False, f"invalid host: {host}"

    try:
        result = subprocess.run(
            ['ping', '-c', str(count), '-W', str(timeout), host],
            capture_output=True,
            text=True,
            timeout=count * timeout + 2
        )
    except subprocess.TimeoutExpired:
        return False, f"ping {host} timed out"
    except FileNotFoundError:
        return False, "ping command not available"

    if result.returncode == 0:
        return True, f"ping {host} succeeded"
    detail = (result.stderr or result.stdout).strip().splitlines()
    return False, detail[-1] if detail else f"ping {host} failed"


def resolve_domain(domain: str, dns_ip: str = '', timeout: int = 3) -> Tuple[bool, str]:
    """
    Resolve a domain with nslookup, bounded by timeout.

    Without dns_ip nslookup uses the system's configured servers; with
    it, the query goes to that server only.

    Returns:
        Tuple of (resolved, detail)
    """
    if _is_option_like(domain) or _is_option_like(dns_ip):
        return False, f"invalid domain or dns server: {domain} {dns_ip}".rstrip()

    server = dns_ip or 'the system resolver'
    cmd = ['nslookup', f'-timeout={timeout}', domain]
    if dns_ip:
        cmd.append(dns_ip)

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout * 3 + 2
        )
    except subprocess.TimeoutExpired:
        return False, f"{server} timed out resolving {domain}"
    except FileNotFoundError:
        return False, "nslookup command not available"

    if result.returncode != 0:
        return False, f"{server} cannot resolve {domain}"

    # The first Address line belongs to the server itself
    addresses = [
        line.split(':', 1)[1].strip()
        for line in result.stdout.splitlines()
        if line.strip().startswith('Address')
    ][1:]
    if not addresses:
        return False, f"{server} returned no address for {domain}"
    via = f" (via {dns_ip})" if dns_ip else ''
    return True, f"{domain} -> {', '.join(addresses)}{via}"
