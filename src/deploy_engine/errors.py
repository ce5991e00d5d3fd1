"""Error taxonomy for the deployment engine.

Collaborator failures (a command exiting non-zero, a template failing to
render, a version string failing to parse) are raised as ``CommandError``.
Deployers wrap them at the point of origin into an ``EngineError``
subclass that records the pipeline context (``EventDetails``), a human
readable category and the underlying collaborator error.

Nothing in this module retries. Retry policy lives in the deployer that
performs the operation.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import ClassVar

from deploy_engine.events.details import EventDetails


class CommandError(Exception):
    """Raised when an external collaborator (kubectl, helm, terraform...) fails.

    Attributes:
        message: Short, safe description of the failure
        full_details: Raw command output, when available
        returncode: Process exit code, when the failure came from a process
    """

    def __init__(
        self,
        message: str,
        full_details: str | None = None,
        returncode: int | None = None,
    ) -> None:
        self.message = message
        self.full_details = full_details
        self.returncode = returncode
        super().__init__(message)


class TemplateRenderError(CommandError):
    """Raised when a template directory cannot be materialized."""


class ErrorCategory(Enum):
    """Cause-based classification of engine errors."""

    TEMPLATE_COPY = "Template materialization failure"
    NAMESPACE_CREATION = "Namespace provisioning failure"
    CHART_RELEASE = "Chart release failure"
    POD_NOT_READY = "Pod readiness timeout"
    SERVICE_FAILED_TO_START = "Service failed to start"
    PROVISIONING_PIPELINE = "Provisioning pipeline failure"
    PROVISIONING_DESTROY = "Provisioning destroy failure"
    VERSION_PARSE = "Version parse failure"
    UNSUPPORTED_VERSION = "Unsupported version"
    CLUSTER_SERVICE = "Cluster service issue"
    SECRET_DELETION = "Secret deletion failure"
    SCALE_REPLICAS = "Replica scaling failure"
    DIAGNOSTICS = "Diagnostics gathering failure"
    KUBECONFIG = "Cluster access failure"


class EngineError(Exception):
    """Base class for every classified engine failure."""

    category: ClassVar[ErrorCategory] = ErrorCategory.CLUSTER_SERVICE

    def __init__(
        self,
        event_details: EventDetails,
        message: str,
        underlying_error: CommandError | None = None,
    ) -> None:
        self.event_details = event_details
        self.message = message
        self.underlying_error = underlying_error
        super().__init__(message)

    def to_safe_message(self) -> str:
        """Render a message suitable for users and logs.

        Only the collaborator's short message is included: raw command
        output may contain credentials passed through the environment.
        """
        text = f"{self.category.value}: {self.message}"
        if self.underlying_error is not None:
            text += f" ({self.underlying_error.message})"
        return text

    def __str__(self) -> str:
        return self.to_safe_message()


class TemplateCopyError(EngineError):
    category = ErrorCategory.TEMPLATE_COPY

    def __init__(
        self,
        event_details: EventDetails,
        source: Path | str,
        destination: Path | str,
        underlying_error: CommandError,
    ) -> None:
        self.source = Path(source)
        self.destination = Path(destination)
        super().__init__(
            event_details,
            f"Cannot copy files from `{source}` to `{destination}`",
            underlying_error,
        )


class NamespaceCreationError(EngineError):
    category = ErrorCategory.NAMESPACE_CREATION

    def __init__(
        self,
        event_details: EventDetails,
        namespace: str,
        underlying_error: CommandError,
    ) -> None:
        self.namespace = namespace
        super().__init__(
            event_details,
            f"Cannot create namespace `{namespace}`",
            underlying_error,
        )


class HelmError(EngineError):
    category = ErrorCategory.CHART_RELEASE

    def __init__(
        self,
        event_details: EventDetails,
        release_name: str,
        underlying_error: CommandError,
    ) -> None:
        self.release_name = release_name
        super().__init__(
            event_details,
            f"Chart release `{release_name}` failed",
            underlying_error,
        )


class PodNotReadyError(EngineError):
    category = ErrorCategory.POD_NOT_READY

    def __init__(
        self,
        event_details: EventDetails,
        selector: str,
        namespace: str,
        underlying_error: CommandError | None = None,
    ) -> None:
        self.selector = selector
        self.namespace = namespace
        super().__init__(
            event_details,
            f"Pods matching `{selector}` in namespace `{namespace}` are not ready",
            underlying_error,
        )


class ServiceFailedToStartError(PodNotReadyError):
    """Readiness retries exhausted after a successful chart release."""

    category = ErrorCategory.SERVICE_FAILED_TO_START

    def __init__(
        self,
        event_details: EventDetails,
        service_name: str,
        service_type_name: str,
        selector: str,
        namespace: str,
        underlying_error: CommandError | None = None,
    ) -> None:
        self.service_name = service_name
        self.selector = selector
        self.namespace = namespace
        EngineError.__init__(
            self,
            event_details,
            f"{service_type_name} `{service_name}` failed to start "
            "after several retries",
            underlying_error,
        )


class TerraformPipelineError(EngineError):
    category = ErrorCategory.PROVISIONING_PIPELINE

    def __init__(
        self, event_details: EventDetails, underlying_error: CommandError
    ) -> None:
        super().__init__(
            event_details,
            "Error while executing the provisioning pipeline",
            underlying_error,
        )


class TerraformDestroyError(EngineError):
    category = ErrorCategory.PROVISIONING_DESTROY

    def __init__(
        self, event_details: EventDetails, underlying_error: CommandError
    ) -> None:
        super().__init__(
            event_details,
            "Error while executing the provisioning destroy pipeline",
            underlying_error,
        )


class VersionParseError(EngineError):
    category = ErrorCategory.VERSION_PARSE

    def __init__(
        self,
        event_details: EventDetails,
        raw_version: str,
        underlying_error: CommandError,
    ) -> None:
        self.raw_version = raw_version
        super().__init__(
            event_details,
            f"Cannot parse version number `{raw_version}`",
            underlying_error,
        )


class UnsupportedVersionError(EngineError):
    category = ErrorCategory.UNSUPPORTED_VERSION

    def __init__(
        self,
        event_details: EventDetails,
        service_type_name: str,
        version: str,
        underlying_error: CommandError | None = None,
    ) -> None:
        self.version = version
        super().__init__(
            event_details,
            f"{service_type_name} version `{version}` is not supported",
            underlying_error,
        )


class KubernetesServiceIssue(EngineError):
    category = ErrorCategory.CLUSTER_SERVICE

    def __init__(
        self,
        event_details: EventDetails,
        underlying_error: CommandError | None = None,
        message: str = "Kubernetes service issue",
    ) -> None:
        super().__init__(event_details, message, underlying_error)


class SecretDeletionError(EngineError):
    category = ErrorCategory.SECRET_DELETION

    def __init__(
        self,
        event_details: EventDetails,
        secret_name: str,
        namespace: str,
        underlying_error: CommandError,
    ) -> None:
        self.secret_name = secret_name
        super().__init__(
            event_details,
            f"Cannot delete secret `{secret_name}` in namespace `{namespace}`",
            underlying_error,
        )


class ScaleReplicasError(EngineError):
    category = ErrorCategory.SCALE_REPLICAS

    def __init__(
        self,
        event_details: EventDetails,
        selector: str,
        namespace: str,
        replicas: int,
        underlying_error: CommandError,
    ) -> None:
        self.selector = selector
        self.replicas = replicas
        super().__init__(
            event_details,
            f"Cannot scale `{selector}` in namespace `{namespace}` "
            f"to {replicas} replica(s)",
            underlying_error,
        )


class DiagnosticsError(EngineError):
    category = ErrorCategory.DIAGNOSTICS

    def __init__(
        self,
        event_details: EventDetails,
        what: str,
        underlying_error: CommandError,
    ) -> None:
        super().__init__(event_details, f"Cannot retrieve {what}", underlying_error)


class KubeconfigError(EngineError):
    category = ErrorCategory.KUBECONFIG

    def __init__(self, event_details: EventDetails, path: Path | None) -> None:
        self.path = path
        super().__init__(
            event_details,
            f"Kubeconfig file `{path}` is not available"
            if path
            else "No kubeconfig file configured",
        )
