"""
Resource Actions - Backend, CLI and API Tests
=============================================

Tests for the managing-service client, the in-memory backend, the command
line and the HTTP routes.
"""

import json
import logging
import pytest
from unittest.mock import patch

import sys
import os

# Add the service and the repository root to the path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', '..'))

import httpx
from click.testing import CliRunner
from fastapi.testclient import TestClient

from shared.constants import Multiplicity
from shared.schemas import ActionRecord, ManagedResource
from shared.utils.http_client import ServiceClient, ServiceClientConfig
from shared.utils.logging import set_correlation_id
from shared.utils.retry import RetryConfig
from src.core.application_client import (
    ArgoCDApplicationClient,
    InMemoryApplicationClient,
)
from src.core.dispatcher import ActionDispatcher
from src.core.errors import RemoteCallFailure
from src.core.resource_selector import SelectorCriteria

BASE_URL = "https://argocd.test"


def argocd_client(handler, token=""):
    """ArgoCDApplicationClient backed by an httpx mock transport."""
    service_client = ServiceClient(
        BASE_URL,
        config=ServiceClientConfig(auth_token=token),
        transport=httpx.MockTransport(handler),
    )
    return ArgoCDApplicationClient(
        service_client,
        read_retry=RetryConfig(
            max_attempts=3,
            base_delay=0,
            retryable_exceptions=(httpx.TransportError,),
        ),
    )


class TestArgoCDApplicationClient:
    """Tests for the REST client."""

    @pytest.mark.asyncio
    async def test_fetch_managed_resources_skips_missing_live_state(self):
        def handler(request):
            assert request.url.path == "/api/v1/applications/guestbook/managed-resources"
            return httpx.Response(200, json={"items": [
                {"group": "apps", "kind": "Deployment", "namespace": "default",
                 "name": "web", "liveState": "{}"},
                {"kind": "Service", "namespace": "default", "name": "web"},
                {"group": "apps", "kind": "Deployment", "namespace": "default",
                 "name": "pruned", "liveState": "null"},
            ]})

        client = argocd_client(handler)
        resources = await client.fetch_managed_resources("guestbook")
        await client.close()

        assert resources == [
            ManagedResource(group="apps", kind="Deployment", namespace="default", name="web"),
            ManagedResource(group="", kind="Service", namespace="default", name="web"),
        ]

    @pytest.mark.asyncio
    async def test_list_resource_actions_query(self):
        seen = {}

        def handler(request):
            seen.update(request.url.params)
            return httpx.Response(200, json={"actions": [
                {"name": "restart", "available": True},
                {"name": "resume"},
            ]})

        client = argocd_client(handler)
        actions = await client.list_resource_actions(
            "guestbook", "argoproj.io", "Rollout", "default", "canary"
        )
        await client.close()

        assert seen == {
            "namespace": "default",
            "resourceName": "canary",
            "group": "argoproj.io",
            "kind": "Rollout",
        }
        assert actions == [
            ActionRecord(name="restart", available=True),
            ActionRecord(name="resume", available=False),
        ]

    @pytest.mark.asyncio
    async def test_run_resource_action_posts_action_name(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={})

        client = argocd_client(handler, token="s3cret")
        set_correlation_id("corr-123")
        await client.run_resource_action(
            "guestbook", "apps", "Deployment", "default", "web", "restart"
        )
        await client.close()

        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/v1/applications/guestbook/resource/actions"
        assert request.url.params["resourceName"] == "web"
        assert json.loads(request.content) == "restart"
        assert request.headers["Authorization"] == "Bearer s3cret"
        assert request.headers["X-Correlation-ID"] == "corr-123"

    @pytest.mark.asyncio
    async def test_reads_retry_on_transport_error(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"items": []})

        client = argocd_client(handler)
        resources = await client.fetch_managed_resources("guestbook")
        await client.close()

        assert resources == []
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_run_is_not_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = argocd_client(handler)
        with pytest.raises(httpx.ConnectError):
            await client.run_resource_action(
                "guestbook", "apps", "Deployment", "default", "web", "restart"
            )
        await client.close()

        assert len(attempts) == 1

    @pytest.mark.asyncio
    async def test_http_error_becomes_remote_call_failure(self):
        def handler(request):
            return httpx.Response(403, json={"error": "permission denied"})

        client = argocd_client(handler)
        with pytest.raises(RemoteCallFailure) as exc_info:
            await ActionDispatcher(client).list_actions("guestbook")
        await client.close()

        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)


class TestInMemoryApplicationClient:
    """Tests for the in-memory backend."""

    @pytest.mark.asyncio
    async def test_demo_application(self):
        client = InMemoryApplicationClient()

        resources = await client.fetch_managed_resources("guestbook")

        assert len(resources) == 4

    @pytest.mark.asyncio
    async def test_unknown_application(self):
        client = InMemoryApplicationClient()

        with pytest.raises(LookupError):
            await client.fetch_managed_resources("missing")

    @pytest.mark.asyncio
    async def test_run_records_history(self):
        client = InMemoryApplicationClient()

        await client.run_resource_action(
            "guestbook", "apps", "Deployment", "default", "guestbook-ui", "restart"
        )

        assert client.history[0]["name"] == "guestbook-ui"
        assert client.history[0]["action"] == "restart"

    @pytest.mark.asyncio
    async def test_unsupported_action(self):
        client = InMemoryApplicationClient()

        with pytest.raises(ValueError):
            await client.run_resource_action(
                "guestbook", "apps", "Deployment", "default", "guestbook-ui", "abort"
            )

    @pytest.mark.asyncio
    async def test_partial_application_is_visible_in_history(self):
        client = InMemoryApplicationClient(failing_resources={"guestbook-redis"})

        with pytest.raises(RemoteCallFailure):
            await ActionDispatcher(client).run_action(
                "guestbook",
                "apps/Deployment/restart",
                SelectorCriteria(multiplicity=Multiplicity.ANY),
            )

        assert [entry["name"] for entry in client.history] == ["guestbook-ui"]


class TestCli:
    """Tests for the command line interface."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        root_logger = logging.getLogger()
        handlers, level = list(root_logger.handlers), root_logger.level
        yield
        root_logger.handlers[:] = handlers
        root_logger.setLevel(level)

    @pytest.fixture
    def backend(self):
        return InMemoryApplicationClient()

    def invoke(self, backend, args):
        from src.cli import cli

        with patch("src.cli.create_application_client", return_value=backend):
            return CliRunner().invoke(cli, ["--log-level", "ERROR", *args])

    def test_list_json(self, backend):
        result = self.invoke(backend, ["list", "guestbook", "-o", "json"])

        assert result.exit_code == 0, result.output
        listing = json.loads(result.output)
        assert sorted(listing) == [
            "\tService\tguestbook-ui",
            "apps\tDeployment\tguestbook-redis",
            "apps\tDeployment\tguestbook-ui",
            "argoproj.io\tRollout\tguestbook-canary",
        ]
        assert listing["apps\tDeployment\tguestbook-ui"] == [{"name": "restart", "available": True}]

    def test_list_table_filtered_by_kind(self, backend):
        result = self.invoke(backend, ["list", "guestbook", "--kind", "Rollout"])

        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert lines[0].split() == ["GROUP", "KIND", "NAME", "ACTION", "AVAILABLE"]
        assert len(lines) == 4

    def test_run_single(self, backend):
        result = self.invoke(
            backend,
            ["run", "guestbook", "apps/Deployment/restart", "--resource-name", "guestbook-ui"],
        )

        assert result.exit_code == 0, result.output
        assert [entry["name"] for entry in backend.history] == ["guestbook-ui"]

    def test_run_ambiguous_fails(self, backend):
        result = self.invoke(backend, ["run", "guestbook", "apps/Deployment/restart"])

        assert result.exit_code == 1
        assert "2 resources match" in result.output
        assert backend.history == []

    def test_run_all(self, backend):
        result = self.invoke(backend, ["run", "guestbook", "apps/Deployment/restart", "--all"])

        assert result.exit_code == 0, result.output
        assert len(backend.history) == 2

    def test_run_legacy_resume_prints_deprecation(self, backend):
        result = self.invoke(backend, ["run", "guestbook", "resume", "--kind", "Rollout"])

        assert result.exit_code == 0, result.output
        assert "argoproj.io/Rollout/resume" in result.output
        assert backend.history[0]["kind"] == "Rollout"

    def test_run_malformed_action(self, backend):
        result = self.invoke(backend, ["run", "guestbook", "apps/restart"])

        assert result.exit_code == 1
        assert "malformed" in result.output

    def test_failed_legacy_resume_still_prints_deprecation(self, backend):
        result = self.invoke(
            backend, ["run", "guestbook", "resume", "--kind", "Rollout", "--namespace", "prod"]
        )

        assert result.exit_code == 1
        assert "argoproj.io/Rollout/resume --namespace prod" in result.output
        assert "No matching resource found" in result.output
        assert backend.history == []

    def test_invalid_log_level_is_a_usage_error(self, backend):
        result = self.invoke(backend, ["--log-level", "foo", "list", "guestbook"])

        assert result.exit_code == 2
        assert "Invalid value for '--log-level'" in result.output


class TestRoutes:
    """Tests for the HTTP API."""

    @pytest.fixture
    def backend(self):
        return InMemoryApplicationClient()

    @pytest.fixture
    def client(self, backend):
        from src.main import app

        app.state.backend = backend
        app.state.dispatcher = ActionDispatcher(backend)
        return TestClient(app)

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_with_in_memory_backend(self, client):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_correlation_id_echoed(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "abc"})

        assert response.headers["X-Correlation-ID"] == "abc"

    def test_list_actions(self, client):
        response = client.get(
            "/api/v1/applications/guestbook/actions", params={"group": "apps"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["application"] == "guestbook"
        assert [r["name"] for r in body["resources"]] == ["guestbook-redis", "guestbook-ui"]
        assert body["resources"][0]["actions"] == [{"name": "restart", "available": True}]

    def test_list_unknown_application(self, client):
        response = client.get("/api/v1/applications/missing/actions")

        assert response.status_code == 502
        assert response.json()["detail"]["error"] == "remote_call_failed"

    def test_run_action(self, client, backend):
        response = client.post(
            "/api/v1/applications/guestbook/actions/run",
            json={"action": "argoproj.io/Rollout/restart"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["action"] == "argoproj.io/Rollout/restart"
        assert body["targets"][0]["name"] == "guestbook-canary"
        assert body["deprecation_notice"] is None
        assert len(backend.history) == 1

    def test_run_legacy_resume(self, client):
        response = client.post(
            "/api/v1/applications/guestbook/actions/run",
            json={"action": "resume", "kind": "Rollout"},
        )

        assert response.status_code == 200
        assert "argoproj.io/Rollout/resume" in response.json()["deprecation_notice"]

    @pytest.mark.parametrize("payload,status_code,error", [
        ({"action": "restart"}, 400, "malformed_action"),
        ({"action": "batch/Job/restart"}, 404, "no_matching_resource"),
        ({"action": "apps/Deployment/restart"}, 409, "ambiguous_selection"),
    ])
    def test_run_errors(self, client, backend, payload, status_code, error):
        response = client.post("/api/v1/applications/guestbook/actions/run", json=payload)

        assert response.status_code == status_code
        assert response.json()["detail"]["error"] == error
        assert backend.history == []

    def test_failed_legacy_resume_returns_deprecation_notice(self, client, backend):
        response = client.post(
            "/api/v1/applications/guestbook/actions/run",
            json={"action": "resume", "kind": "Rollout", "namespace": "prod"},
        )

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["error"] == "no_matching_resource"
        assert "argoproj.io/Rollout/resume --namespace prod" in detail["deprecation_notice"]
        assert backend.history == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
