"""Devfiles router -- serve stack devfiles pulled from the registry."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, JSONResponse, Response

from devreg.registry.errors import IntegrityError, NotFoundError, PullError
from devreg.sync.puller import resolve

from web.backend.app.context import ServerContext
from web.backend.app.models.api import PullErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["devfiles"])


def get_context(request: Request) -> ServerContext:
    """Return the ServerContext stored on the application."""
    return request.app.state.context


def _pull_error(status_code: int, name: str, exc: Exception) -> JSONResponse:
    body = PullErrorResponse(
        error=str(exc),
        status=f"failed to pull the devfile of {name}",
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.get(
    "/devfiles/{name}",
    summary="Get the devfile of a stack",
    responses={404: {"model": PullErrorResponse}, 502: {"model": PullErrorResponse}},
)
async def get_devfile(name: str, ctx: ServerContext = Depends(get_context)):
    """Pull the stack's devfile from the registry and return it verbatim."""
    try:
        content, content_type = await resolve(
            name, ctx.index, ctx.config, transport=ctx.transport
        )
    except NotFoundError as exc:
        return _pull_error(404, name, exc)
    except IntegrityError as exc:
        logger.error("Registry content for %s is inconsistent: %s", name, exc)
        return _pull_error(502, name, exc)
    except PullError as exc:
        logger.warning("Pull of %s failed: %s", name, exc)
        return _pull_error(502, name, exc)
    return Response(content=content, media_type=content_type)


@router.get("/index", summary="Get the registry index")
async def get_index(ctx: ServerContext = Depends(get_context)):
    """Serve the index file exactly as it sits on disk."""
    return FileResponse(ctx.config.index_path, media_type="application/json")
