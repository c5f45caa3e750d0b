"""FastAPI application for WeddingRSVP."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path
import tomllib

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from . import sessions
from .crud import (
    create_invite,
    delete_invite,
    get_invite_by_name,
    list_invites,
    submit_rsvp,
    update_invite,
)
from .database import get_session
from .errors import AuthenticationError, RSVPError
from .models import AdminSession
from .reports import serialize_invite, summarize
from .scheduler import start_scheduler, stop_scheduler
from .storage import init_db
from .utils import ms_to_iso

# Use uvicorn's error logger so messages get the level prefix in the default log
# format.
logger = logging.getLogger("uvicorn.error")


def _load_app_version() -> str:
    """Return the current package version, falling back to pyproject for dev runs."""
    try:
        return pkg_version("weddingrsvp")
    except PackageNotFoundError:
        pyproject_path = Path(__file__).resolve().parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            data = tomllib.loads(pyproject_path.read_text())
            project = data.get("project") or {}
            return str(project.get("version") or "dev")
    return "dev"


APP_VERSION = _load_app_version()


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_db()
    start_scheduler()
    try:
        yield
    finally:
        stop_scheduler()


app = FastAPI(title="WeddingRSVP", version=APP_VERSION, lifespan=lifespan)


def get_db():
    """Yield a request-scoped session that commits once the route returns."""
    with get_session() as db:
        yield db


def _get_bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("authorization") or ""
    if not auth_header.lower().startswith("bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def require_admin_session(
    request: Request, db: Session = Depends(get_db)
) -> AdminSession:
    """Resolve the caller's admin session before any admin work happens."""
    return sessions.require_admin(db, _get_bearer_token(request))


@app.exception_handler(RSVPError)
async def rsvp_error_handler(request: Request, exc: RSVPError):
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(exc.as_dict(), status_code=exc.status_code, headers=headers)


@app.exception_handler(OperationalError)
async def operational_error_handler(request: Request, exc: OperationalError):
    raw = str(exc.orig) if getattr(exc, "orig", None) else str(exc)
    if "database is locked" in raw.lower():
        logger.error(
            "SQLite database is locked while handling %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            {
                "detail": "The database is busy at the moment. "
                "Please wait a few seconds and try again."
            },
            status_code=503,
        )
    logger.error(
        "Operational database error on %s %s: %s",
        request.method,
        request.url.path,
        raw,
    )
    return JSONResponse(
        {"detail": "We hit a database issue. Please try again."}, status_code=500
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"detail": exc.errors()}, status_code=422)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Gracefully handle unexpected errors."""
    logger.exception(
        "Unhandled error while processing %s %s", request.method, request.url.path
    )
    return JSONResponse({"detail": "Internal server error"}, status_code=500)


class GuestPayload(BaseModel):
    name: str
    meal_choice: str = ""


class RSVPSubmitPayload(BaseModel):
    name: str
    attending: bool | None = Field(
        ..., description="true/false, or null to save without answering"
    )
    plus_one: bool
    plus_one_name: str | None = None
    plus_one_meal_choice: str | None = None
    meal_choice: str | None = None
    accommodation: bool
    guests: list[GuestPayload] | None = None
    number_of_kids: int | None = None


class LoginPayload(BaseModel):
    password: str


class InviteSettingsPayload(BaseModel):
    ask_for_plus_one: bool
    ask_for_kids: bool
    max_number_of_kids: int = Field(0, ge=0)
    ask_for_accommodation: bool


class InviteCreatePayload(InviteSettingsPayload):
    name: str
    guests: list[str] = Field(default_factory=list)


@app.get("/healthz", include_in_schema=False)
def healthz():
    return {"status": "ok", "version": APP_VERSION}


# -------- Guest-facing API (v1) --------


@app.get("/api/v1/rsvps/{name}")
def api_get_rsvp(name: str, db: Session = Depends(get_db)):
    invite = get_invite_by_name(db, name)
    return {"rsvp": serialize_invite(invite) if invite else None}


@app.post("/api/v1/rsvps")
def api_submit_rsvp(
    payload: RSVPSubmitPayload, response: Response, db: Session = Depends(get_db)
):
    invite, created = submit_rsvp(
        db,
        name=payload.name,
        attending=payload.attending,
        plus_one=payload.plus_one,
        plus_one_name=payload.plus_one_name,
        plus_one_meal_choice=payload.plus_one_meal_choice,
        meal_choice=payload.meal_choice,
        accommodation=payload.accommodation,
        guests=[g.model_dump() for g in payload.guests] if payload.guests else None,
        number_of_kids=payload.number_of_kids,
    )
    logger.info(
        "RSVP %s for %s (attending=%s)",
        "created" if created else "updated",
        invite.name,
        invite.attending,
    )
    response.status_code = 201 if created else 200
    return {"id": invite.id, "created": created, "rsvp": serialize_invite(invite)}


# -------- Admin API (v1) --------


@app.post("/api/v1/admin/login")
def api_admin_login(payload: LoginPayload, db: Session = Depends(get_db)):
    admin_session = sessions.login(db, payload.password)
    return {
        "token": admin_session.token,
        "expires_at": admin_session.expires_at,
        "expires_at_iso": ms_to_iso(admin_session.expires_at),
    }


@app.get("/api/v1/admin/session")
def api_validate_session(request: Request, db: Session = Depends(get_db)):
    return {"valid": sessions.validate_session(db, _get_bearer_token(request))}


@app.get("/api/v1/admin/rsvps")
def api_list_rsvps(
    _: AdminSession = Depends(require_admin_session),
    db: Session = Depends(get_db),
):
    invites = list_invites(db)
    return {
        "rsvps": [serialize_invite(invite) for invite in invites],
        "summary": summarize(invites),
    }


@app.get("/api/v1/admin/summary")
def api_summary(
    _: AdminSession = Depends(require_admin_session),
    db: Session = Depends(get_db),
):
    return summarize(list_invites(db))


@app.post("/api/v1/admin/invites", status_code=201)
def api_create_invite(
    payload: InviteCreatePayload,
    _: AdminSession = Depends(require_admin_session),
    db: Session = Depends(get_db),
):
    invite = create_invite(
        db,
        name=payload.name,
        guest_names=payload.guests,
        ask_for_plus_one=payload.ask_for_plus_one,
        ask_for_kids=payload.ask_for_kids,
        max_number_of_kids=payload.max_number_of_kids,
        ask_for_accommodation=payload.ask_for_accommodation,
    )
    logger.info("Invite created for %s with %d guests", invite.name, len(invite.guests))
    return {"id": invite.id, "rsvp": serialize_invite(invite)}


@app.patch("/api/v1/admin/invites/{name}")
def api_update_invite(
    name: str,
    payload: InviteSettingsPayload,
    _: AdminSession = Depends(require_admin_session),
    db: Session = Depends(get_db),
):
    invite = update_invite(
        db,
        name=name,
        ask_for_plus_one=payload.ask_for_plus_one,
        ask_for_kids=payload.ask_for_kids,
        max_number_of_kids=payload.max_number_of_kids,
        ask_for_accommodation=payload.ask_for_accommodation,
    )
    logger.info("Invite settings updated for %s", invite.name)
    return {"rsvp": serialize_invite(invite)}


@app.delete("/api/v1/admin/invites/{name}", status_code=204)
def api_delete_invite(
    name: str,
    _: AdminSession = Depends(require_admin_session),
    db: Session = Depends(get_db),
):
    delete_invite(db, name)
    logger.info("Invite deleted for %s", name)
    return Response(status_code=204)
