"""Configuration for the document store."""

from .settings import Settings, StoreCfg, StorageCfg, create_storage

__all__ = ["Settings", "StoreCfg", "StorageCfg", "create_storage"]
