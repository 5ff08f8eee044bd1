"""
Resource Actions - Shared Schemas
=================================

Pydantic models shared by the CLI, the HTTP service and the core.
"""

from shared.schemas.resources import (
    ManagedResource,
    ActionRecord,
    ResourceKey,
)

__all__ = [
    "ManagedResource",
    "ActionRecord",
    "ResourceKey",
]
