"""WAtools - Offline-capable job and tool catalog."""

__version__ = "0.1.0"
__author__ = "WAtools Team"
__email__ = "team@watools.dev"
