"""
Resource Actions - Action Dispatcher
====================================

Lists or runs resource actions across the resources an application manages.

Every invocation fetches a fresh inventory, selects its targets, then calls
the backend once per target, sequentially. The first failure ends the
invocation:

- list mode returns nothing on failure, never a partial listing
- run mode leaves resources processed before the failure with the action
  applied and never touches the ones after it; nothing is rolled back
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from shared.constants import Multiplicity
from shared.schemas import ActionRecord, ManagedResource, ResourceKey
from shared.utils.logging import get_logger
from src.core.action_identifier import ActionIdentifier, parse_action_identifier
from src.core.application_client import ApplicationBackend
from src.core.errors import RemoteCallFailure, ResourceActionError
from src.core.resource_selector import SelectorCriteria, select_resources

logger = get_logger(__name__)


class DispatchPhase(str, Enum):
    """Phases of one list or run invocation."""
    IDLE = "idle"
    IDENTIFYING = "identifying"  # Run mode only
    SELECTING = "selecting"
    DISPATCHING = "dispatching"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunActionResult:
    """Outcome of a successful run: the action and every resource it was applied to."""
    app_name: str
    action: ActionIdentifier
    targets: list[ManagedResource] = field(default_factory=list)
    deprecation_notice: Optional[str] = None


class ActionDispatcher:
    """
    Selects target resources and dispatches list/run calls to a backend.
    """

    def __init__(self, backend: ApplicationBackend, cli_command: str = "resource-actions run"):
        """
        Args:
            backend: Managing-service backend
            cli_command: Command prefix used in deprecation hints
        """
        self.backend = backend
        self.cli_command = cli_command

    def _enter(self, phase: DispatchPhase, mode: str, app_name: str, **extra) -> None:
        logger.debug(
            f"{mode}: {phase.value}",
            extra={"phase": phase.value, "mode": mode, "app_name": app_name, **extra}
        )

    async def _fetch_inventory(self, app_name: str) -> list[ManagedResource]:
        try:
            return await self.backend.fetch_managed_resources(app_name)
        except Exception as e:
            raise RemoteCallFailure("fetch managed resources", app_name, e) from e

    async def list_actions(
        self,
        app_name: str,
        criteria: Optional[SelectorCriteria] = None
    ) -> dict[ResourceKey, list[ActionRecord]]:
        """
        List the actions of every resource matching `criteria`.

        Selection always uses ANY multiplicity. Resources sharing group, kind
        and name across namespaces share a key; the last one listed wins.

        Raises:
            RemoteCallFailure: On the first backend failure
        """
        criteria = (criteria or SelectorCriteria()).with_multiplicity(Multiplicity.ANY)
        self._enter(DispatchPhase.IDLE, "list", app_name)

        try:
            self._enter(DispatchPhase.SELECTING, "list", app_name)
            inventory = await self._fetch_inventory(app_name)
            targets = select_resources(inventory, criteria)

            self._enter(DispatchPhase.DISPATCHING, "list", app_name, targets=len(targets))
            listing: dict[ResourceKey, list[ActionRecord]] = {}
            for resource in targets:
                try:
                    actions = await self.backend.list_resource_actions(
                        app_name,
                        resource.group,
                        resource.kind,
                        resource.namespace,
                        resource.name,
                    )
                except Exception as e:
                    raise RemoteCallFailure(
                        "list actions", app_name, e, resource=resource
                    ) from e
                listing[resource.key] = actions

        except Exception:
            self._enter(DispatchPhase.FAILED, "list", app_name)
            raise

        self._enter(DispatchPhase.COMPLETED, "list", app_name, resources=len(listing))
        return listing

    async def run_action(
        self,
        app_name: str,
        action: str,
        criteria: Optional[SelectorCriteria] = None
    ) -> RunActionResult:
        """
        Run `action` on the resources matching `criteria`.

        `criteria.kind` doubles as the kind hint of the legacy `resume`
        shorthand. Group and kind of the targets come from the action
        identifier; namespace, name and multiplicity from `criteria`.

        Raises:
            MalformedActionIdentifier: If `action` cannot be parsed
            NoMatchingResource: SINGLE multiplicity and nothing matched
            AmbiguousResourceSelection: SINGLE multiplicity and several matched
            RemoteCallFailure: On the first backend failure; earlier targets
                keep the applied action

        Errors raised after a legacy shorthand was parsed carry its
        `deprecation_notice`.
        """
        criteria = criteria or SelectorCriteria()
        applied: list[ManagedResource] = []
        parsed = None
        self._enter(DispatchPhase.IDLE, "run", app_name)

        try:
            self._enter(DispatchPhase.IDENTIFYING, "run", app_name, action=action)
            parsed = parse_action_identifier(
                action,
                criteria.kind,
                app_name=app_name,
                resource_name=criteria.name,
                namespace=criteria.namespace,
                apply_to_all=criteria.multiplicity == Multiplicity.ANY,
                command=self.cli_command,
            )
            identifier = parsed.identifier
            if parsed.deprecated:
                logger.warning(
                    parsed.deprecation_notice,
                    extra={"app_name": app_name, "canonical_action": identifier.canonical}
                )

            self._enter(DispatchPhase.SELECTING, "run", app_name, action=identifier.canonical)
            target_criteria = SelectorCriteria(
                group=identifier.group,
                kind=identifier.kind,
                namespace=criteria.namespace,
                name=criteria.name,
                multiplicity=criteria.multiplicity,
            )
            inventory = await self._fetch_inventory(app_name)
            targets = select_resources(inventory, target_criteria)

            self._enter(DispatchPhase.DISPATCHING, "run", app_name, targets=len(targets))
            for resource in targets:
                logger.info(
                    f"Running {identifier.canonical} on {resource.describe()}",
                    extra={"app_name": app_name, "action": identifier.action}
                )
                try:
                    await self.backend.run_resource_action(
                        app_name,
                        resource.group,
                        resource.kind,
                        resource.namespace,
                        resource.name,
                        identifier.action,
                    )
                except Exception as e:
                    raise RemoteCallFailure(
                        f"run action {identifier.action!r}",
                        app_name,
                        e,
                        resource=resource,
                        completed=len(applied),
                    ) from e
                applied.append(resource)

        except Exception as e:
            if parsed is not None and isinstance(e, ResourceActionError):
                e.deprecation_notice = parsed.deprecation_notice
            logger.error(
                f"Run failed: {e}",
                extra={"app_name": app_name, "applied": len(applied)}
            )
            self._enter(DispatchPhase.FAILED, "run", app_name)
            raise

        self._enter(DispatchPhase.COMPLETED, "run", app_name, applied=len(applied))
        return RunActionResult(
            app_name=app_name,
            action=identifier,
            targets=applied,
            deprecation_notice=parsed.deprecation_notice,
        )
