#!/usr/bin/env python3
"""
edgediag command line

Usage:
    edgediag diagnose node [-c config]
    edgediag diagnose pod <name> [-n namespace]
    edgediag diagnose install [-D dns-ip] [-d domain] [-i ip] [-s cloud-hub-server]

Exit status is 0 when the diagnosis passes and 1 when it fails.
"""

import logging
import sys

import click

from ..__version__ import get_full_version
from ..core.diagnostics.dispatcher import Dispatcher, build_target_table
from ..core.diagnostics.models import CheckOptions, DiagnoseOptions
from ..utils.env_config import get_config, load_env_file
from ..utils.logging_config import parse_level, setup_logging
from ..utils.paths import EdgeCorePaths
from .output import ConsoleReporter

logger = logging.getLogger(__name__)

DIAGNOSE_EXAMPLES = """
\b
Examples:
  # Diagnose whether the node is normal
  edgediag diagnose node

\b
  # Diagnose whether the pod is normal
  edgediag diagnose pod nginx-xxx -n test

\b
  # Diagnose node installation conditions
  edgediag diagnose install

\b
  # Diagnose node installation conditions and specify the detected ip
  edgediag diagnose install -i 192.168.1.2
"""


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--log-file', type=click.Path(dir_okay=False), default=None,
              help='Also write a debug log to this file')
@click.version_option(get_full_version(), prog_name='edgediag')
@click.pass_context
def cli(ctx, debug, log_file):
    """Diagnostics for KubeEdge edge nodes"""
    load_env_file()

    level = logging.DEBUG if debug else parse_level(get_config('EDGEDIAG_LOG_LEVEL'))
    setup_logging(level=level, log_file=log_file or get_config('EDGEDIAG_LOG_FILE') or None)

    ctx.ensure_object(dict)
    ctx.obj.setdefault('dispatcher', None)


@cli.group(epilog=DIAGNOSE_EXAMPLES)
def diagnose():
    """Diagnose relevant information at edge nodes"""


def _dispatcher(ctx) -> Dispatcher:
    dispatcher = (ctx.obj or {}).get('dispatcher')
    if dispatcher is None:
        dispatcher = Dispatcher(targets=TARGETS, reporter=ConsoleReporter())
    return dispatcher


def _finish(ctx, use: str, options: DiagnoseOptions, args) -> None:
    result = _dispatcher(ctx).run(use, options, args)
    ctx.exit(0 if result.passed else 1)


TARGETS = build_target_table()
_DESCRIPTIONS = {entry.use: entry.description for entry in TARGETS}

_config_option = click.option(
    '-c', '--config', 'config_path', type=click.Path(dir_okay=False), default=None,
    help=f'Specify configuration file, default is {EdgeCorePaths.CONFIG_FILE}')


@diagnose.command('node', help=_DESCRIPTIONS['node'])
@_config_option
@click.pass_context
def diagnose_node(ctx, config_path):
    options = DiagnoseOptions()
    if config_path:
        options.config_path = config_path
    _finish(ctx, 'node', options, [])


@diagnose.command('pod', help=_DESCRIPTIONS['pod'])
@click.argument('pod_name', required=False)
@click.option('-n', '--namespace', default='default', show_default=True, help='Specify namespace')
@_config_option
@click.pass_context
def diagnose_pod(ctx, pod_name, namespace, config_path):
    options = DiagnoseOptions(namespace=namespace)
    if config_path:
        options.config_path = config_path
    _finish(ctx, 'pod', options, [pod_name] if pod_name else [])


@diagnose.command('install', help=_DESCRIPTIONS['install'])
@click.option('-D', '--dns-ip', default='', help='Specify test dns server ip')
@click.option('-d', '--domain', default='', help='Specify test domain')
@click.option('-i', '--ip', default='', help='Specify test ip')
@click.option('-s', '--cloud-hub-server', default='', help='Specify cloudhub server')
@click.option('-e', '--edgecore-server', default='', help='Specify edgecore server')
@click.option('-c', '--config', 'config_path', default='',
              help='Check the edgehub server of this edgecore config')
@click.option('-t', '--timeout', type=click.IntRange(min=1), default=3, show_default=True,
              help='Network probe timeout in seconds')
@click.pass_context
def diagnose_install(ctx, dns_ip, domain, ip, cloud_hub_server, edgecore_server,
                     config_path, timeout):
    options = DiagnoseOptions(check_options=CheckOptions(
        dns_ip=dns_ip,
        domain=domain,
        ip=ip,
        cloud_hub_server=cloud_hub_server,
        edgecore_server=edgecore_server,
        config_path=config_path,
        timeout_seconds=timeout,
    ))
    _finish(ctx, 'install', options, [])


def main():
    """Console script entry point"""
    sys.exit(cli(obj={}))


if __name__ == '__main__':
    main()
