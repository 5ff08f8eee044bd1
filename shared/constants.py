"""
Resource Actions - Shared Constants
===================================

Centralized constants used by the CLI, the HTTP service and the core.
"""

from enum import Enum


class ServiceName(str, Enum):
    """Names of the resource-actions entrypoints."""
    RESOURCE_ACTIONS = "resource-actions"
    RESOURCE_ACTIONS_CLI = "resource-actions-cli"


class Multiplicity(str, Enum):
    """How many resources a selection is allowed to resolve to."""
    SINGLE = "single"  # Exactly one resource must match
    ANY = "any"        # Zero or more resources may match


class OutputFormat(str, Enum):
    """Rendering formats for action listings."""
    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


class BackendType(str, Enum):
    """Managing-service backends the client can talk to."""
    ARGOCD = "argocd"  # Argo CD compatible REST API
    MOCK = "mock"      # In-memory inventory for development


# Legacy `run APP resume --kind Rollout` invocation
LEGACY_RESUME_ACTION = "resume"
LEGACY_ROLLOUT_KIND = "Rollout"
LEGACY_ROLLOUT_GROUP = "argoproj.io"

# Separator between group, kind and action in an action identifier
ACTION_SEPARATOR = "/"

# Separator between group, kind and name in action listing keys
RESOURCE_KEY_SEPARATOR = "\t"


# Managing-service REST paths
class ApiPaths:
    """Path templates of the managing service's application API."""
    MANAGED_RESOURCES = "/api/v1/applications/{app_name}/managed-resources"
    RESOURCE_ACTIONS = "/api/v1/applications/{app_name}/resource/actions"
    HEALTH = "/healthz"
