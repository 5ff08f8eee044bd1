"""
Resource Actions - Resource Schemas
===================================

Pydantic models for the managed resources and actions exchanged with the
managing service. These are immutable snapshots for a single invocation.
"""

from typing import NamedTuple
from pydantic import BaseModel, Field

from shared.constants import RESOURCE_KEY_SEPARATOR


class ManagedResource(BaseModel):
    """
    A live cluster object under an application's management.

    Identity is the (group, kind, namespace, name) tuple. The namespace is
    empty for cluster-scoped kinds and the group is empty for core kinds.
    """

    group: str = Field(
        default="",
        description="API group of the resource (empty for the core group)"
    )
    kind: str = Field(
        ...,
        description="Resource kind, e.g. Deployment"
    )
    namespace: str = Field(
        default="",
        description="Namespace of the resource (empty when cluster-scoped)"
    )
    name: str = Field(
        ...,
        description="Resource name"
    )

    class Config:
        frozen = True

    @property
    def identity(self) -> tuple[str, str, str, str]:
        return (self.group, self.kind, self.namespace, self.name)

    @property
    def key(self) -> "ResourceKey":
        return ResourceKey(self.group, self.kind, self.name)

    def describe(self) -> str:
        """Short human-readable reference, e.g. apps/Deployment default/web."""
        kind = f"{self.group}/{self.kind}" if self.group else self.kind
        location = f"{self.namespace}/{self.name}" if self.namespace else self.name
        return f"{kind} {location}"


class ActionRecord(BaseModel):
    """An action a specific resource currently supports, as reported by the server."""

    name: str = Field(
        ...,
        description="Action name, e.g. restart"
    )
    available: bool = Field(
        default=False,
        description="Whether the action can run in the resource's current state"
    )

    class Config:
        frozen = True


class ResourceKey(NamedTuple):
    """
    Grouping key of an action listing.

    The namespace is folded out so that listings group by what the operator
    sees (group, kind, name).
    """
    group: str
    kind: str
    name: str

    def __str__(self) -> str:
        return RESOURCE_KEY_SEPARATOR.join(self)
