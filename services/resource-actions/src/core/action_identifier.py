"""
Resource Actions - Action Identifier
====================================

Parses `GROUP/KIND/ACTION` identifiers, e.g. `apps/Deployment/restart`.

One legacy form is still accepted: the bare `resume` action together with a
`--kind Rollout` hint, which predates the canonical grammar. It resolves to
`argoproj.io/Rollout/resume` and produces a deprecation notice showing the
invocation to migrate to.
"""

from dataclasses import dataclass
from typing import Optional

from shared.constants import (
    ACTION_SEPARATOR,
    LEGACY_RESUME_ACTION,
    LEGACY_ROLLOUT_GROUP,
    LEGACY_ROLLOUT_KIND,
)
from src.core.errors import MalformedActionIdentifier


@dataclass(frozen=True)
class ActionIdentifier:
    """Normalized (group, kind, action) triple."""
    group: str
    kind: str
    action: str

    @property
    def canonical(self) -> str:
        return ACTION_SEPARATOR.join((self.group, self.kind, self.action))

    def __str__(self) -> str:
        return self.canonical


@dataclass(frozen=True)
class ParsedAction:
    """An identifier plus the deprecation notice, if the legacy form was used."""
    identifier: ActionIdentifier
    deprecation_notice: Optional[str] = None

    @property
    def deprecated(self) -> bool:
        return self.deprecation_notice is not None


def parse_action_identifier(
    raw: str,
    kind_hint: str = "",
    *,
    app_name: str = "APPNAME",
    resource_name: str = "",
    namespace: str = "",
    apply_to_all: bool = False,
    command: str = "resource-actions run"
) -> ParsedAction:
    """
    Parse an action identifier.

    Args:
        raw: The action argument as typed by the operator
        kind_hint: Value of the separate kind selector, only consulted for
            the legacy `resume` form
        app_name: Application name, used in the deprecation hint
        resource_name: Resource name selector, repeated in the hint if set
        namespace: Namespace selector, repeated in the hint if set
        apply_to_all: Whether the invocation applied to all matches
        command: Command prefix shown in the hint

    Returns:
        ParsedAction with the normalized identifier

    Raises:
        MalformedActionIdentifier: If `raw` is not three non-empty segments
    """
    if raw == LEGACY_RESUME_ACTION and kind_hint == LEGACY_ROLLOUT_KIND:
        identifier = ActionIdentifier(
            group=LEGACY_ROLLOUT_GROUP,
            kind=LEGACY_ROLLOUT_KIND,
            action=LEGACY_RESUME_ACTION,
        )
        notice = _deprecation_notice(
            identifier, command, app_name, resource_name, namespace, apply_to_all
        )
        return ParsedAction(identifier=identifier, deprecation_notice=notice)

    segments = raw.split(ACTION_SEPARATOR)
    if len(segments) != 3 or not all(segments):
        raise MalformedActionIdentifier(raw)

    group, kind, action = segments
    return ParsedAction(identifier=ActionIdentifier(group=group, kind=kind, action=action))


def _deprecation_notice(
    identifier: ActionIdentifier,
    command: str,
    app_name: str,
    resource_name: str,
    namespace: str,
    apply_to_all: bool
) -> str:
    tail = ""
    if resource_name:
        tail += f" --resource-name {resource_name}"
    if namespace:
        tail += f" --namespace {namespace}"
    if apply_to_all:
        tail += " --all"

    return (
        f'Warning: this syntax for running the "{identifier.action}" action has been '
        f"deprecated. Please run the action as\n\n"
        f"\t{command} {app_name} {identifier.canonical}{tail}\n"
    )
