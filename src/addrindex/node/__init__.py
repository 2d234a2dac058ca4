"""Full node access: JSON-RPC client, typed requests and reply models."""

from addrindex.node.client import NodeClient

__all__ = ["NodeClient"]
