"""
Resource Actions - API Schemas
"""

from typing import Optional
from pydantic import BaseModel, Field

from shared.schemas import ActionRecord, ManagedResource


class ResourceActions(BaseModel):
    """Actions available on one resource, grouped by (group, kind, name)."""
    group: str
    kind: str
    name: str
    actions: list[ActionRecord] = Field(default_factory=list)


class ActionListResponse(BaseModel):
    """Response of an action listing."""
    application: str
    resources: list[ResourceActions] = Field(default_factory=list)


class RunActionRequest(BaseModel):
    """Request to run an action on resource(s) of an application."""
    action: str = Field(..., description="GROUP/KIND/ACTION")
    kind: str = Field(
        default="",
        description="Kind hint, only used by the deprecated 'resume' syntax"
    )
    namespace: str = Field(default="")
    resource_name: str = Field(default="")
    all: bool = Field(
        default=False,
        description="Run on every matching resource; stops at the first failure without rollback"
    )


class RunActionResponse(BaseModel):
    """Response from a successful run."""
    application: str
    action: str
    targets: list[ManagedResource] = Field(default_factory=list)
    deprecation_notice: Optional[str] = None


class ErrorDetail(BaseModel):
    """Error body returned for failed list and run requests."""
    error: str
    message: str
    deprecation_notice: Optional[str] = None
