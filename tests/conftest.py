"""
Shared fixtures for edgediag tests.

Run: python3 -m pytest tests/ -v
"""

import json
import sqlite3
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def pod_object(name, namespace='default', phase='Running', conditions=None, containers=None):
    """Build a Kubernetes Pod JSON object the way edgecore stores it."""
    return {
        'apiVersion': 'v1',
        'kind': 'Pod',
        'metadata': {'name': name, 'namespace': namespace, 'uid': f'uid-{name}'},
        'spec': {'containers': [{'name': 'app', 'image': 'nginx'}]},
        'status': {
            'phase': phase,
            'conditions': conditions or [],
            'containerStatuses': containers or [],
        },
    }


def pod_status_request(name, phase='Running', conditions=None, containers=None):
    """Build a podstatus record body ({"UID", "Name", "Status"})."""
    return {
        'UID': f'uid-{name}',
        'Name': name,
        'Status': {
            'phase': phase,
            'conditions': conditions or [],
            'containerStatuses': containers or [],
        },
    }


@pytest.fixture
def make_store(tmp_path):
    """Create an edgecore-style metadata database from (key, body) pairs."""
    def _make(records, name='edgecore.db'):
        db_path = tmp_path / name
        conn = sqlite3.connect(str(db_path))
        conn.execute(
            'CREATE TABLE IF NOT EXISTS meta '
            '(key TEXT NOT NULL PRIMARY KEY, type TEXT, value TEXT)'
        )
        for key, body in records:
            kind = key.split('/')[1]
            value = body if isinstance(body, str) else json.dumps(body)
            conn.execute('INSERT INTO meta (key, type, value) VALUES (?, ?, ?)', (key, kind, value))
        conn.commit()
        conn.close()
        return db_path
    return _make


@pytest.fixture
def edgecore_config(tmp_path):
    """Write an edgecore.yaml and return its path."""
    def _write(data_source='', enable=True, server='127.0.0.1:10000', raw=None):
        path = tmp_path / 'edgecore.yaml'
        if raw is not None:
            path.write_text(raw)
            return path
        lines = [
            'apiVersion: edgecore.config.kubeedge.io/v1alpha2',
            'kind: EdgeCore',
            'database:',
            '  driverName: sqlite3',
            '  aliasName: default',
            f"  dataSource: '{data_source}'",
            'modules:',
            '  edgeHub:',
            '    enable: true',
            '    websocket:',
            f'      enable: {str(enable).lower()}',
            f"      server: '{server}'",
        ]
        path.write_text('\n'.join(lines) + '\n')
        return path
    return _write
