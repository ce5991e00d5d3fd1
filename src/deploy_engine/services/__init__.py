"""Concrete service kinds driven by the lifecycle orchestrator."""

from .application import Application, Storage
from .database import Database, ManagedDatabase, SelfHostedDatabase
from .router import Route, Router
from .versions import DEFAULT_VERSION_CATALOG, DatabaseVersionCatalog

__all__ = [
    "DEFAULT_VERSION_CATALOG",
    "Application",
    "Database",
    "DatabaseVersionCatalog",
    "ManagedDatabase",
    "Route",
    "Router",
    "SelfHostedDatabase",
    "Storage",
]
