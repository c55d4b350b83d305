"""Host bridge API routes."""
from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from starlette.background import BackgroundTask

from ifc_bridge.application.services import CommandDispatcher
from ifc_bridge.domain import InvalidArgumentError

router = APIRouter()


def get_dispatcher(request: Request) -> CommandDispatcher:
    """Dispatcher bound to the running app."""
    return request.app.state.dispatcher


@router.get("/status")
async def get_status(dispatcher: CommandDispatcher = Depends(get_dispatcher)) -> dict:
    """Report host readiness.

    Returns:
        {status, connected, configsReady, version}
    """
    status = await dispatcher.get_status()
    return status.to_dict()


@router.get("/select-by-id/{element_id:path}")
async def select_by_id(
    element_id: str,
    dispatcher: CommandDispatcher = Depends(get_dispatcher),
) -> dict:
    """Select an element by host-internal id."""
    return await dispatcher.select_by_id(element_id)


@router.get("/select-by-guid/{guid:path}")
async def select_by_guid(
    guid: str,
    dispatcher: CommandDispatcher = Depends(get_dispatcher),
) -> dict:
    """Select an element by IFC GlobalId (URL-decoded by the router)."""
    return await dispatcher.select_by_global_id(guid)


@router.get("/ifc-configurations")
async def get_ifc_configurations(
    dispatcher: CommandDispatcher = Depends(get_dispatcher),
) -> dict:
    """List IFC export configuration names."""
    return {"configurations": await dispatcher.list_configurations()}


@router.post("/export-ifc")
async def export_ifc(
    request: Request,
    dispatcher: CommandDispatcher = Depends(get_dispatcher),
) -> Response:
    """Export the host model and stream the IFC file back.

    The staged file is deleted once the response has been sent.
    """
    raw = await request.body()
    try:
        body = json.loads(raw) if raw.strip() else None
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise InvalidArgumentError("body", "Request body is not valid JSON", str(e)) from e

    result = await dispatcher.export_ifc(body)

    return Response(
        content=result.file_bytes,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{result.file_name}"'},
        background=BackgroundTask(dispatcher.discard_export, result),
    )
