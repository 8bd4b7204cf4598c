"""edgediag - node-side diagnostics for KubeEdge edge nodes."""

from .__version__ import __version__

__all__ = ['__version__']
