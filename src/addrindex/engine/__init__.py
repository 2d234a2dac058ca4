"""Explorer engine: lifecycle owner of the node client, cache and services."""

from addrindex.engine.client import ExplorerEngine

__all__ = ["ExplorerEngine"]
