"""Adapters for the authoritative remote store."""

from watools.remote.base import RemoteStore
from watools.remote.client import clear_online_cache, create_client, is_online
from watools.remote.http import HttpRemoteStore

__all__ = [
    "HttpRemoteStore",
    "RemoteStore",
    "clear_online_cache",
    "create_client",
    "is_online",
]
