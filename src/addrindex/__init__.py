"""py-addrindex: insight-style address explorer over an address-indexed full node."""

__version__ = "0.1.0"
