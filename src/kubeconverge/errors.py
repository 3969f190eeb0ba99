"""
Exceptions raised by the `KubeClient`. Every failing operation raises its own subclass of `KubeClientError` which
carries the kind, name and namespace that were targeted as well as the underlying cause (usually a
`kubernetes.dynamic.exceptions.DynamicApiError` raised by the gateway).
"""

from dataclasses import dataclass
from typing import ClassVar

from kubernetes.dynamic.exceptions import DynamicApiError, NotFoundError


@dataclass
class KubeClientError(Exception):
    """
    Base class for errors raised by the `KubeClient`.
    """

    operation: ClassVar[str] = "operation"

    kind: str
    name: str = ""
    namespace: str = ""
    cause: BaseException | None = None
    message: str | None = None

    @property
    def not_found(self) -> bool:
        """
        Whether the error was caused by the targeted resource not existing.
        """

        return isinstance(self.cause, NotFoundError)

    @property
    def status(self) -> int | None:
        """
        The HTTP status code returned by the API server, if the error was caused by an API error.
        """

        if isinstance(self.cause, DynamicApiError):
            return self.cause.status
        return None

    def __str__(self) -> str:
        target = f"{self.kind}/{self.name}" if self.name else self.kind
        message = f"{self.operation} of {target}"
        if self.namespace:
            message += f" in namespace '{self.namespace}'"
        message += " failed"
        if self.message:
            message += f": {self.message}"
        elif self.cause is not None:
            message += f": {_describe(self.cause)}"
        return message


class ResolutionError(KubeClientError):
    """
    The kind or resource name could not be resolved to a unique resource type.
    """

    operation = "Resolution"


class ResourceLookupError(KubeClientError):
    """
    Fetching an existing resource failed.
    """

    operation = "Lookup"


class CreateError(KubeClientError):
    operation = "Create"


class ReplaceError(KubeClientError):
    operation = "Replace"


class PatchError(KubeClientError):
    operation = "Patch"


class DeleteError(KubeClientError):
    operation = "Delete"


class ListError(KubeClientError):
    operation = "List"


def _describe(exc: BaseException) -> str:
    if isinstance(exc, DynamicApiError):
        # DynamicApiError.__str__ includes the full response headers and body.
        return f"{exc.status} {exc.reason}".strip() if exc.status else str(exc.reason)
    return str(exc) or type(exc).__name__
