"""
Resource Actions - API Routes
=============================
"""

from fastapi import APIRouter, HTTPException, Request

from shared.constants import Multiplicity
from shared.utils.logging import get_logger
from src.api.schemas import (
    ActionListResponse,
    ErrorDetail,
    ResourceActions,
    RunActionRequest,
    RunActionResponse,
)
from src.core.errors import (
    AmbiguousResourceSelection,
    MalformedActionIdentifier,
    NoMatchingResource,
    RemoteCallFailure,
    ResourceActionError,
)
from src.core.resource_selector import SelectorCriteria

logger = get_logger(__name__)

router = APIRouter()

_STATUS_CODES: dict[type, tuple[int, str]] = {
    MalformedActionIdentifier: (400, "malformed_action"),
    NoMatchingResource: (404, "no_matching_resource"),
    AmbiguousResourceSelection: (409, "ambiguous_selection"),
    RemoteCallFailure: (502, "remote_call_failed"),
}


def _to_http_error(exc: ResourceActionError) -> HTTPException:
    status_code, error = _STATUS_CODES.get(type(exc), (500, "resource_action_failed"))
    detail = ErrorDetail(
        error=error,
        message=str(exc),
        deprecation_notice=exc.deprecation_notice
    )
    return HTTPException(status_code=status_code, detail=detail.model_dump())


@router.get(
    "/applications/{app_name}/actions",
    response_model=ActionListResponse,
    tags=["actions"]
)
async def list_actions(
    app_name: str,
    request: Request,
    group: str = "",
    kind: str = "",
    namespace: str = "",
    resource_name: str = ""
):
    """List the actions available on an application's resources."""
    dispatcher = request.app.state.dispatcher
    criteria = SelectorCriteria(group=group, kind=kind, namespace=namespace, name=resource_name)

    try:
        listing = await dispatcher.list_actions(app_name, criteria)
    except ResourceActionError as e:
        logger.warning(f"Listing actions failed: {e}", extra={"app_name": app_name})
        raise _to_http_error(e) from e

    return ActionListResponse(
        application=app_name,
        resources=[
            ResourceActions(
                group=key.group,
                kind=key.kind,
                name=key.name,
                actions=listing[key]
            )
            for key in sorted(listing)
        ]
    )


@router.post(
    "/applications/{app_name}/actions/run",
    response_model=RunActionResponse,
    tags=["actions"]
)
async def run_action(app_name: str, req: RunActionRequest, request: Request):
    """
    Run an action on resource(s) of an application.

    With `all`, a failure part-way leaves earlier resources with the action
    applied; the error does not list them.
    """
    dispatcher = request.app.state.dispatcher
    criteria = SelectorCriteria(
        kind=req.kind,
        namespace=req.namespace,
        name=req.resource_name,
        multiplicity=Multiplicity.ANY if req.all else Multiplicity.SINGLE,
    )

    logger.info(
        f"Running action {req.action}",
        extra={"app_name": app_name, "all": req.all}
    )

    try:
        result = await dispatcher.run_action(app_name, req.action, criteria)
    except ResourceActionError as e:
        raise _to_http_error(e) from e

    return RunActionResponse(
        application=app_name,
        action=result.action.canonical,
        targets=result.targets,
        deprecation_notice=result.deprecation_notice
    )
