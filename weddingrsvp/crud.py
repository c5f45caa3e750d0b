"""CRUD helpers for RSVP records and admin-provisioned invites."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from .errors import ConflictError, NotFoundError, ValidationError
from .models import Invite
from .party import GroupInvite, GuestEntry, Party, apply_party, build_party
from .utils import clean_name, utcnow

# Applied when a guest registers under a name no admin provisioned.
SELF_REGISTRATION_DEFAULTS: dict[str, Any] = {
    "ask_for_plus_one": True,
    "ask_for_kids": False,
    "max_number_of_kids": 0,
    "ask_for_accommodation": True,
}

# Columns a guest submission overwrites.
ANSWER_FIELDS = (
    "guests",
    "attending",
    "plus_one",
    "plus_one_name",
    "plus_one_meal_choice",
    "meal_choice",
    "accommodation",
    "number_of_kids",
    "submitted",
    "last_modified",
)


def _now() -> datetime:
    return utcnow()


def get_invite_by_name(session: Session, name: str) -> Invite | None:
    normalized = clean_name(name)
    if not normalized:
        return None
    stmt = select(Invite).where(Invite.name == normalized)
    return session.scalars(stmt).first()


def list_invites(session: Session) -> Sequence[Invite]:
    stmt = select(Invite).order_by(Invite.created_at.asc(), Invite.name.asc())
    return session.scalars(stmt).all()


def _require_name(name: str | None) -> str:
    normalized = clean_name(name)
    if not normalized:
        raise ValidationError("Name is required")
    return normalized


def _validate_party(party: Party, *, attending: bool | None) -> None:
    if not attending:
        return
    if isinstance(party, GroupInvite):
        if any(not g.meal_choice for g in party.guests):
            raise ValidationError("Meal preferences are required for all guests")
        return
    if not party.meal_choice:
        raise ValidationError("Meal preference is required")
    if party.plus_one:
        if not party.plus_one_name:
            raise ValidationError("Plus one name is required")
        if not party.plus_one_meal_choice:
            raise ValidationError("Plus one meal preference is required")


def _validate_kids(
    number_of_kids: int, *, ask_for_kids: bool, max_number_of_kids: int
) -> int:
    if number_of_kids < 0:
        raise ValidationError("Number of kids cannot be negative")
    limit = max_number_of_kids if ask_for_kids else 0
    if number_of_kids > limit:
        raise ValidationError(f"At most {limit} kids can be added to this invite")
    return number_of_kids


def _answer_values(
    party: Party,
    *,
    attending: bool | None,
    accommodation: bool,
    number_of_kids: int,
) -> dict[str, Any]:
    draft = Invite()
    apply_party(draft, party)
    draft.attending = attending
    draft.accommodation = bool(accommodation)
    draft.number_of_kids = number_of_kids
    draft.submitted = attending is not None
    draft.last_modified = _now()
    return {field: getattr(draft, field) for field in ANSWER_FIELDS}


def _upsert_self_registration(
    session: Session, name: str, values: dict[str, Any]
) -> tuple[Invite, bool]:
    # A concurrent first submission under the same name turns this insert
    # into an update of the row that won the race.
    new_id = str(uuid.uuid4())
    stmt = sqlite_insert(Invite).values(
        id=new_id,
        name=name,
        is_predefined=False,
        created_at=_now(),
        **SELF_REGISTRATION_DEFAULTS,
        **values,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Invite.name],
        set_={field: stmt.excluded[field] for field in ANSWER_FIELDS},
    ).returning(Invite.id)
    invite_id = session.execute(stmt).scalar_one()
    invite = session.get(Invite, invite_id, populate_existing=True)
    return invite, invite_id == new_id


def submit_rsvp(
    session: Session,
    *,
    name: str,
    attending: bool | None,
    plus_one: bool = False,
    plus_one_name: str | None = None,
    plus_one_meal_choice: str | None = None,
    meal_choice: str | None = None,
    accommodation: bool = False,
    guests: Iterable[GuestEntry | Mapping[str, Any]] | None = None,
    number_of_kids: int | None = None,
) -> tuple[Invite, bool]:
    """Create or overwrite the RSVP stored under ``name``.

    Every tracked field is replaced on each call, so callers must resend the
    complete response. Invite configuration (question toggles and
    ``is_predefined``) is never touched here.

    Returns the record and whether it was newly created.
    """
    normalized_name = _require_name(name)
    existing = get_invite_by_name(session, normalized_name)
    party = build_party(
        guests=guests,
        meal_choice=meal_choice,
        plus_one=plus_one,
        plus_one_name=plus_one_name,
        plus_one_meal_choice=plus_one_meal_choice,
    )
    _validate_party(party, attending=attending)
    if existing is not None:
        ask_for_kids = existing.ask_for_kids
        max_kids = existing.max_number_of_kids
    else:
        ask_for_kids = SELF_REGISTRATION_DEFAULTS["ask_for_kids"]
        max_kids = SELF_REGISTRATION_DEFAULTS["max_number_of_kids"]
    kids = _validate_kids(
        int(number_of_kids or 0),
        ask_for_kids=ask_for_kids,
        max_number_of_kids=max_kids,
    )
    values = _answer_values(
        party, attending=attending, accommodation=accommodation, number_of_kids=kids
    )

    if existing is None:
        return _upsert_self_registration(session, normalized_name, values)
    for field, value in values.items():
        setattr(existing, field, value)
    session.add(existing)
    session.flush()
    return existing, False


def _clean_guest_names(guest_names: Iterable[str] | None) -> list[str]:
    return [clean_name(g) for g in guest_names or () if clean_name(g)]


def _normalize_max_kids(ask_for_kids: bool, max_number_of_kids: int | None) -> int:
    if not ask_for_kids:
        return 0
    value = int(max_number_of_kids or 0)
    if value < 0:
        raise ValidationError("Maximum number of kids cannot be negative")
    return value


def create_invite(
    session: Session,
    *,
    name: str,
    guest_names: Iterable[str],
    ask_for_plus_one: bool = False,
    ask_for_kids: bool = False,
    max_number_of_kids: int | None = 0,
    ask_for_accommodation: bool = True,
) -> Invite:
    """Provision a group invite with a fixed guest list."""
    normalized_name = _require_name(name)
    cleaned_guests = _clean_guest_names(guest_names)
    if not cleaned_guests:
        raise ValidationError("At least one guest is required")
    if get_invite_by_name(session, normalized_name):
        raise ConflictError(f"An invite for {normalized_name} already exists")

    invite = Invite(
        name=normalized_name,
        attending=None,
        submitted=False,
        is_predefined=True,
        accommodation=False,
        number_of_kids=0,
        ask_for_plus_one=bool(ask_for_plus_one),
        ask_for_kids=bool(ask_for_kids),
        max_number_of_kids=_normalize_max_kids(ask_for_kids, max_number_of_kids),
        ask_for_accommodation=bool(ask_for_accommodation),
        created_at=_now(),
        last_modified=_now(),
    )
    apply_party(
        invite, GroupInvite(guests=tuple(GuestEntry(name=g) for g in cleaned_guests))
    )
    session.add(invite)
    session.flush()
    return invite


def _ensure_invite(session: Session, name: str) -> Invite:
    invite = get_invite_by_name(session, name)
    if not invite:
        raise NotFoundError(f"No invite found for {clean_name(name)}")
    return invite


def update_invite(
    session: Session,
    *,
    name: str,
    ask_for_plus_one: bool,
    ask_for_kids: bool,
    max_number_of_kids: int | None,
    ask_for_accommodation: bool,
) -> Invite:
    """Update the question toggles without altering RSVP answers."""
    invite = _ensure_invite(session, name)
    invite.ask_for_plus_one = bool(ask_for_plus_one)
    invite.ask_for_kids = bool(ask_for_kids)
    invite.max_number_of_kids = _normalize_max_kids(ask_for_kids, max_number_of_kids)
    invite.ask_for_accommodation = bool(ask_for_accommodation)
    invite.last_modified = _now()
    session.add(invite)
    session.flush()
    return invite


def delete_invite(session: Session, name: str) -> None:
    invite = _ensure_invite(session, name)
    session.delete(invite)
    session.flush()
