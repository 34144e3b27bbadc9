"""Configuration module for respool."""

from .settings import PoolConfig, Settings, settings

__all__ = ["PoolConfig", "Settings", "settings"]
