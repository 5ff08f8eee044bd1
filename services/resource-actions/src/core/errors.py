"""
Resource Actions - Errors
=========================

Every error terminates the current invocation; none is retried by the core.
"""

from typing import Optional, TYPE_CHECKING

from shared.schemas import ManagedResource

if TYPE_CHECKING:
    from src.core.resource_selector import SelectorCriteria


class ResourceActionError(Exception):
    """
    Base class for resource-action failures.

    A run invoked through the deprecated `resume` shorthand carries the
    replacement hint in `deprecation_notice`, whether or not it succeeded.
    """
    deprecation_notice: Optional[str] = None


class MalformedActionIdentifier(ResourceActionError):
    """Raised when an action identifier is not of the form group/kind/action."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(
            f"Action name is malformed: {raw!r} (expected GROUP/KIND/ACTION)"
        )


class NoMatchingResource(ResourceActionError):
    """Raised when a single-resource selection matches nothing."""

    def __init__(self, criteria: "SelectorCriteria"):
        self.criteria = criteria
        super().__init__(f"No matching resource found for {criteria.describe()}")


class AmbiguousResourceSelection(ResourceActionError):
    """Raised when a single-resource selection matches more than one resource."""

    def __init__(self, criteria: "SelectorCriteria", matches: list[ManagedResource]):
        self.criteria = criteria
        self.matches = list(matches)
        listed = ", ".join(resource.describe() for resource in self.matches)
        super().__init__(
            f"{len(self.matches)} resources match {criteria.describe()}: {listed}. "
            f"Narrow the selector or apply the action to all matching resources"
        )

    @property
    def count(self) -> int:
        return len(self.matches)


class RemoteCallFailure(ResourceActionError):
    """
    Raised when the managing service fails a request.

    The collaborator's own exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        operation: str,
        app_name: str,
        cause: Exception,
        resource: Optional[ManagedResource] = None,
        completed: int = 0
    ):
        self.operation = operation
        self.app_name = app_name
        self.resource = resource
        self.completed = completed

        target = f" on {resource.describe()}" if resource else ""
        message = f"Failed to {operation} for application {app_name!r}{target}: {cause}"
        if completed:
            message += (
                f" ({completed} earlier resource(s) already had the action applied"
                f" and were not rolled back)"
            )
        super().__init__(message)
