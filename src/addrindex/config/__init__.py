"""Configuration: pydantic-settings models with YAML overlay."""

from addrindex.config.settings import AppConfig

__all__ = ["AppConfig"]
