"""API middleware: CORS."""

from addrindex.api.middleware.cors import setup_cors

__all__ = ["setup_cors"]
