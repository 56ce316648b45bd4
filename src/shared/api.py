"""FastAPI glue shared by every router: principal resolution and error mapping."""

import structlog
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError
from protean.integrations.fastapi import register_exception_handlers

from shared.errors import (
    AuthorizationFailure,
    ErrorKind,
    Ineligible,
    InvalidTransition,
    NotVisible,
    UpstreamFailure,
)
from shared.identity import Principal

logger = structlog.get_logger(__name__)


def current_principal(
    x_user_id: str | None = Header(default=None),
    x_user_groups: str | None = Header(default=None),
) -> Principal:
    """Resolve the caller from the identity headers set by the upstream authenticator."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    groups = [g.strip() for g in (x_user_groups or "").split(",") if g.strip()]
    return Principal.of(x_user_id, *groups)


def _error_body(kind: ErrorKind, message: str, **extra) -> dict:
    return {"error": kind.value, "message": message, **extra}


async def _invalid_transition(_request: Request, exc: InvalidTransition) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content=_error_body(exc.kind, exc.message, current_status=exc.current_status),
    )


async def _ineligible(_request: Request, exc: Ineligible) -> JSONResponse:
    return JSONResponse(status_code=422, content=_error_body(exc.kind, exc.reason))


async def _upstream_failure(_request: Request, exc: UpstreamFailure) -> JSONResponse:
    logger.warning("upstream_failure", collaborator=exc.collaborator, message=exc.message)
    return JSONResponse(
        status_code=502,
        content=_error_body(exc.kind, exc.message, collaborator=exc.collaborator, retryable=exc.retryable),
    )


async def _unauthorized(_request: Request, exc: AuthorizationFailure) -> JSONResponse:
    return JSONResponse(status_code=403, content=_error_body(exc.kind, exc.message))


async def _not_visible(_request: Request, exc: NotVisible) -> JSONResponse:
    return JSONResponse(status_code=404, content=_error_body(exc.kind, exc.message))


async def _not_found(_request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=_error_body(ErrorKind.NOT_FOUND, str(exc)))


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's default handlers, then the marketplace error kinds on top.

    Starlette resolves handlers along the exception's MRO, so the
    ``ValidationError`` subclasses below win over Protean's generic 400.
    """
    register_exception_handlers(app)
    app.add_exception_handler(InvalidTransition, _invalid_transition)
    app.add_exception_handler(Ineligible, _ineligible)
    app.add_exception_handler(UpstreamFailure, _upstream_failure)
    app.add_exception_handler(AuthorizationFailure, _unauthorized)
    app.add_exception_handler(NotVisible, _not_visible)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
