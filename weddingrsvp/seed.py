"""Development helpers for populating fake invites and responses."""

from __future__ import annotations

import random

from faker import Faker
from sqlalchemy.orm import Session

from .crud import create_invite, get_invite_by_name, submit_rsvp
from .database import get_session
from .models import Invite
from .reports import MEAL_LABELS
from .storage import init_db
from .utils import slugify

_meal_keys = list(MEAL_LABELS)
# Roughly a third of invites stay unanswered.
_attendance_choices = [True, True, True, False, None, None]


def seed_fake_data(
    *,
    invite_count: int = 12,
    group_percentage: int = 40,
) -> dict[str, int]:
    """Populate the database with synthetic invites and RSVP answers."""
    if invite_count < 0:
        raise ValueError("invite_count must be >= 0")
    if not 0 <= group_percentage <= 100:
        raise ValueError("group_percentage must be between 0 and 100")

    init_db()
    fake = Faker()
    stats = {"invites": 0, "groups": 0, "answered": 0}

    with get_session() as session:
        for _ in range(invite_count):
            if random.randint(1, 100) <= group_percentage:
                invite = _create_group_invite(session, fake)
                stats["groups"] += 1
            else:
                invite = None
            answered = _answer(session, fake, invite)
            stats["invites"] += 1
            stats["answered"] += int(answered)

    return stats


def _unique_name(session: Session, candidate: str) -> str:
    name = candidate
    suffix = 2
    while get_invite_by_name(session, name):
        name = f"{candidate}-{suffix}"
        suffix += 1
    return name


def _create_group_invite(session: Session, fake: Faker) -> Invite:
    family = fake.last_name()
    guest_count = random.randint(2, 4)
    guest_names = [f"{fake.first_name()} {family}" for _ in range(guest_count)]
    ask_for_kids = random.random() < 0.3
    return create_invite(
        session,
        name=_unique_name(session, slugify(f"the {family}s")),
        guest_names=guest_names,
        ask_for_plus_one=False,
        ask_for_kids=ask_for_kids,
        max_number_of_kids=random.randint(1, 3) if ask_for_kids else 0,
        ask_for_accommodation=random.random() < 0.7,
    )


def _answer(session: Session, fake: Faker, invite: Invite | None) -> bool:
    attending = random.choice(_attendance_choices)
    if invite is not None and attending is None:
        return False
    if invite is None:
        # Self-registrations always carry an answer.
        attending = bool(attending)
        name = _unique_name(session, fake.name())
        plus_one = bool(attending) and random.random() < 0.3
        submit_rsvp(
            session,
            name=name,
            attending=attending,
            plus_one=plus_one,
            plus_one_name=fake.name() if plus_one else None,
            plus_one_meal_choice=random.choice(_meal_keys) if plus_one else None,
            meal_choice=random.choice(_meal_keys) if attending else None,
            accommodation=bool(attending) and random.random() < 0.4,
        )
        return True

    guests = [
        {
            "name": guest["name"],
            "meal_choice": random.choice(_meal_keys) if attending else "",
        }
        for guest in invite.guests
    ]
    kids = random.randint(0, invite.max_number_of_kids) if invite.ask_for_kids else 0
    submit_rsvp(
        session,
        name=invite.name,
        attending=attending,
        plus_one=False,
        accommodation=bool(attending)
        and invite.ask_for_accommodation
        and random.random() < 0.5,
        guests=guests,
        number_of_kids=kids if attending else 0,
    )
    return True
