"""Command line interface for WAtools."""

from watools.cli.app import app

__all__ = ["app"]
