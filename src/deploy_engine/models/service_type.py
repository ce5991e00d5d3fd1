"""Service type classification.

A service is an application, a router, or a database of a given kind.
The type decides the workspace subdirectory, the progress scope and
whether database value overlays are applied during a chart release.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from deploy_engine.constants import DEFAULT_CONSTANTS


class DatabaseKind(Enum):
    """Supported database engines."""

    POSTGRESQL = "PostgreSQL"
    MONGODB = "MongoDB"
    MYSQL = "MySQL"
    REDIS = "Redis"

    @property
    def slug(self) -> str:
        """Lowercase identifier used in chart and module paths."""
        return self.value.lower()


class ServiceCategory(Enum):
    """Top-level kind of a service."""

    APPLICATION = "application"
    DATABASE = "database"
    ROUTER = "router"


@dataclass(frozen=True)
class ServiceType:
    """Tagged service type: a category plus the database kind for databases."""

    category: ServiceCategory
    database_kind: DatabaseKind | None = None

    def __post_init__(self) -> None:
        is_database = self.category is ServiceCategory.DATABASE
        if is_database != (self.database_kind is not None):
            raise ValueError(
                "database_kind must be set for databases and only for databases"
            )

    @classmethod
    def application(cls) -> ServiceType:
        return cls(ServiceCategory.APPLICATION)

    @classmethod
    def router(cls) -> ServiceType:
        return cls(ServiceCategory.ROUTER)

    @classmethod
    def database(cls, kind: DatabaseKind) -> ServiceType:
        return cls(ServiceCategory.DATABASE, kind)

    @property
    def is_database(self) -> bool:
        return self.category is ServiceCategory.DATABASE

    @property
    def name(self) -> str:
        """Human readable type name used in user-facing messages."""
        match self.category:
            case ServiceCategory.APPLICATION:
                return "Application"
            case ServiceCategory.ROUTER:
                return "Router"
            case ServiceCategory.DATABASE:
                assert self.database_kind is not None
                return f"{self.database_kind.value} database"

    @property
    def workspace_dir_name(self) -> str:
        """Workspace subdirectory grouping services of this category."""
        match self.category:
            case ServiceCategory.APPLICATION:
                return DEFAULT_CONSTANTS.APPLICATIONS_DIR
            case ServiceCategory.ROUTER:
                return DEFAULT_CONSTANTS.ROUTERS_DIR
            case ServiceCategory.DATABASE:
                return DEFAULT_CONSTANTS.DATABASES_DIR

    def __str__(self) -> str:
        return self.name
