"""
Resource Actions - Application Client
=====================================

Backends serving an application's managed resources and their actions.

- ArgoCDApplicationClient talks to an Argo CD compatible REST API.
- InMemoryApplicationClient serves seeded data for development and tests.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Optional
import httpx

from shared.constants import ApiPaths, BackendType
from shared.schemas import ActionRecord, ManagedResource
from shared.utils.http_client import ServiceClient, ServiceClientConfig
from shared.utils.logging import get_logger
from shared.utils.retry import RetryConfig, retry_async
from src.config import Settings

logger = get_logger(__name__)


class ApplicationBackend(ABC):
    """Source of managed resources and executor of their actions."""

    @abstractmethod
    async def fetch_managed_resources(self, app_name: str) -> list[ManagedResource]:
        """Return the live resources managed by `app_name`."""
        pass

    @abstractmethod
    async def list_resource_actions(
        self,
        app_name: str,
        group: str,
        kind: str,
        namespace: str,
        name: str
    ) -> list[ActionRecord]:
        """Return the actions one resource currently supports."""
        pass

    @abstractmethod
    async def run_resource_action(
        self,
        app_name: str,
        group: str,
        kind: str,
        namespace: str,
        name: str,
        action: str
    ) -> None:
        """Run `action` on one resource."""
        pass

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class ArgoCDApplicationClient(ApplicationBackend):
    """
    Client for the Argo CD application API.

    Inventory and action-listing requests are retried on transport errors.
    Running an action is sent exactly once.
    """

    def __init__(
        self,
        service_client: ServiceClient,
        read_retry: Optional[RetryConfig] = None
    ):
        self._http = service_client
        self._read_retry = read_retry or RetryConfig(
            retryable_exceptions=(httpx.TransportError,)
        )

    async def _read(self, path: str, params: Optional[dict] = None) -> dict[str, Any]:
        response = await retry_async(
            self._http.get, path, params=params, config=self._read_retry
        )
        response.raise_for_status()
        return response.json() or {}

    @staticmethod
    def _resource_params(group: str, kind: str, namespace: str, name: str) -> dict[str, str]:
        return {
            "namespace": namespace,
            "resourceName": name,
            "group": group,
            "kind": kind,
        }

    async def fetch_managed_resources(self, app_name: str) -> list[ManagedResource]:
        payload = await self._read(ApiPaths.MANAGED_RESOURCES.format(app_name=app_name))

        resources = []
        for item in payload.get("items") or []:
            # Resources that are desired but absent from the cluster have no live state
            if item.get("liveState") == "null":
                continue
            resources.append(ManagedResource(
                group=item.get("group", ""),
                kind=item["kind"],
                namespace=item.get("namespace", ""),
                name=item["name"],
            ))

        logger.debug(
            f"Fetched {len(resources)} managed resources",
            extra={"app_name": app_name}
        )
        return resources

    async def list_resource_actions(
        self,
        app_name: str,
        group: str,
        kind: str,
        namespace: str,
        name: str
    ) -> list[ActionRecord]:
        payload = await self._read(
            ApiPaths.RESOURCE_ACTIONS.format(app_name=app_name),
            params=self._resource_params(group, kind, namespace, name)
        )
        return [
            ActionRecord(name=action["name"], available=action.get("available", False))
            for action in payload.get("actions") or []
        ]

    async def run_resource_action(
        self,
        app_name: str,
        group: str,
        kind: str,
        namespace: str,
        name: str,
        action: str
    ) -> None:
        response = await self._http.post(
            ApiPaths.RESOURCE_ACTIONS.format(app_name=app_name),
            data=action,
            params=self._resource_params(group, kind, namespace, name)
        )
        response.raise_for_status()

    async def health_check(self) -> bool:
        return await self._http.health_check()

    async def close(self) -> None:
        await self._http.close()


class InMemoryApplicationClient(ApplicationBackend):
    """
    In-memory backend for development and testing.

    Every application maps to an ordered inventory; actions are declared per
    (group, kind). Runs are recorded in a history list, and failures can be
    injected per resource name.
    """

    def __init__(
        self,
        inventories: Optional[dict[str, list[ManagedResource]]] = None,
        actions: Optional[dict[tuple[str, str], list[ActionRecord]]] = None,
        failing_resources: Optional[set[str]] = None
    ):
        self._inventories = inventories if inventories is not None else demo_inventories()
        self._actions = actions if actions is not None else demo_actions()
        self.failing_resources = set(failing_resources or ())
        self.history: list[dict] = []

    def _inventory(self, app_name: str) -> list[ManagedResource]:
        if app_name not in self._inventories:
            raise LookupError(f"application {app_name!r} not found")
        return self._inventories[app_name]

    def _check_failure(self, name: str) -> None:
        if name in self.failing_resources:
            raise RuntimeError(f"injected failure for {name}")

    async def fetch_managed_resources(self, app_name: str) -> list[ManagedResource]:
        return list(self._inventory(app_name))

    async def list_resource_actions(
        self,
        app_name: str,
        group: str,
        kind: str,
        namespace: str,
        name: str
    ) -> list[ActionRecord]:
        self._inventory(app_name)
        self._check_failure(name)
        return list(self._actions.get((group, kind), []))

    async def run_resource_action(
        self,
        app_name: str,
        group: str,
        kind: str,
        namespace: str,
        name: str,
        action: str
    ) -> None:
        self._inventory(app_name)
        self._check_failure(name)

        supported = {record.name for record in self._actions.get((group, kind), [])}
        if action not in supported:
            raise ValueError(f"action {action!r} is not supported by {kind} {name}")

        self.history.append({
            "app_name": app_name,
            "group": group,
            "kind": kind,
            "namespace": namespace,
            "name": name,
            "action": action,
            "timestamp": datetime.now(timezone.utc).isoformat()
        })
        logger.info(f"Mock: ran {action} on {kind} {namespace}/{name}")


def demo_inventories() -> dict[str, list[ManagedResource]]:
    """Inventory of the `guestbook` demo application served in mock mode."""
    return {
        "guestbook": [
            ManagedResource(group="", kind="Service", namespace="default", name="guestbook-ui"),
            ManagedResource(group="apps", kind="Deployment", namespace="default", name="guestbook-ui"),
            ManagedResource(group="apps", kind="Deployment", namespace="default", name="guestbook-redis"),
            ManagedResource(group="argoproj.io", kind="Rollout", namespace="default", name="guestbook-canary"),
        ]
    }


def demo_actions() -> dict[tuple[str, str], list[ActionRecord]]:
    """Actions declared per (group, kind) in mock mode."""
    return {
        ("apps", "Deployment"): [
            ActionRecord(name="restart", available=True),
        ],
        ("argoproj.io", "Rollout"): [
            ActionRecord(name="restart", available=True),
            ActionRecord(name="resume", available=False),
            ActionRecord(name="abort", available=False),
        ],
    }


def create_application_client(settings: Settings) -> ApplicationBackend:
    """Build the backend selected by configuration."""
    if settings.backend == BackendType.MOCK:
        logger.info("Using in-memory application backend")
        return InMemoryApplicationClient()

    service_client = ServiceClient(
        base_url=settings.server_url,
        config=ServiceClientConfig(
            timeout_seconds=settings.request_timeout_seconds,
            auth_token=settings.auth_token,
            verify_tls=settings.verify_tls,
            user_agent=f"{settings.service_name}/{settings.service_version}",
        )
    )
    read_retry = RetryConfig(
        max_attempts=settings.read_retry_attempts,
        base_delay=settings.read_retry_base_delay_seconds,
        retryable_exceptions=(httpx.TransportError,),
    )
    return ArgoCDApplicationClient(service_client, read_retry=read_retry)
