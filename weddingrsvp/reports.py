"""Aggregate RSVP responses for the admin dashboard."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import Any

from .models import Invite
from .party import party_meals, party_of

MEAL_LABELS: dict[str, str] = {
    "beef": "Beef Tenderloin",
    "chicken": "Herb-Roasted Chicken",
    "fish": "Pan-Seared Salmon",
    "vegetarian": "Vegetarian Risotto",
    "vegan": "Vegan Buddha Bowl",
}


def meal_label(key: str) -> str:
    return MEAL_LABELS.get(key, key)


def summarize(invites: Iterable[Invite]) -> dict[str, Any]:
    """Return headline counts and the meal breakdown for attending parties."""
    records = list(invites)
    attending = [r for r in records if r.attending is True]
    declined = [r for r in records if r.attending is False]
    awaiting = [r for r in records if r.attending is None]

    meal_counts: Counter[str] = Counter()
    for record in attending:
        meal_counts.update(party_meals(party_of(record)))

    return {
        "total_invites": len(records),
        "attending": len(attending),
        "declined": len(declined),
        "awaiting": len(awaiting),
        "need_accommodation": sum(1 for r in records if r.accommodation),
        "total_guests": sum(r.party_size for r in attending),
        "total_kids": sum(r.number_of_kids or 0 for r in attending),
        "meal_counts": dict(sorted(meal_counts.items())),
    }


def serialize_invite(invite: Invite) -> dict[str, Any]:
    return {
        "id": invite.id,
        "name": invite.name,
        "attending": invite.attending,
        "submitted": invite.submitted,
        "is_predefined": invite.is_predefined,
        "party": party_of(invite).as_dict(),
        "guests": list(invite.guests) if invite.guests else None,
        "plus_one": invite.plus_one,
        "plus_one_name": invite.plus_one_name,
        "plus_one_meal_choice": invite.plus_one_meal_choice,
        "meal_choice": invite.meal_choice,
        "accommodation": invite.accommodation,
        "number_of_kids": invite.number_of_kids,
        "ask_for_plus_one": invite.ask_for_plus_one,
        "ask_for_kids": invite.ask_for_kids,
        "max_number_of_kids": invite.max_number_of_kids,
        "ask_for_accommodation": invite.ask_for_accommodation,
        "created_at": invite.created_at.isoformat(),
        "last_modified": invite.last_modified.isoformat(),
    }
