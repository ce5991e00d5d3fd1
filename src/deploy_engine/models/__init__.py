"""Service model value types.

``Service`` and the capability interfaces are imported from their own
modules (``deploy_engine.models.service``, ``deploy_engine.models.capabilities``).
"""

from .action import Action
from .context import ExecutionContext
from .database import DatabaseMode, DatabaseOptions
from .service_type import DatabaseKind, ServiceCategory, ServiceType
from .version import ServiceVersionCheckResult, VersionNumber

__all__ = [
    "Action",
    "DatabaseKind",
    "DatabaseMode",
    "DatabaseOptions",
    "ExecutionContext",
    "ServiceCategory",
    "ServiceType",
    "ServiceVersionCheckResult",
    "VersionNumber",
]
