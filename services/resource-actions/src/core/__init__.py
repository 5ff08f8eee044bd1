"""
Resource Actions - Core
=======================

Action identifier parsing, resource selection and action dispatch.
"""

from src.core.errors import (
    ResourceActionError,
    MalformedActionIdentifier,
    NoMatchingResource,
    AmbiguousResourceSelection,
    RemoteCallFailure,
)
from src.core.action_identifier import ActionIdentifier, ParsedAction, parse_action_identifier
from src.core.resource_selector import SelectorCriteria, select_resources
from src.core.dispatcher import ActionDispatcher, RunActionResult

__all__ = [
    "ResourceActionError",
    "MalformedActionIdentifier",
    "NoMatchingResource",
    "AmbiguousResourceSelection",
    "RemoteCallFailure",
    "ActionIdentifier",
    "ParsedAction",
    "parse_action_identifier",
    "SelectorCriteria",
    "select_resources",
    "ActionDispatcher",
    "RunActionResult",
]
