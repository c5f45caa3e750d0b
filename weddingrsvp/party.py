"""Party shapes for an RSVP record.

A record either answers for a single guest (with an optional plus-one) or for
a fixed group of named guests provisioned by the admin. The two shapes are
kept as separate types so code never has to guess which set of fields is
authoritative.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .models import Invite


@dataclass(frozen=True)
class GuestEntry:
    name: str
    meal_choice: str = ""

    def as_dict(self) -> dict[str, str]:
        return {"name": self.name, "meal_choice": self.meal_choice}


@dataclass(frozen=True)
class SingleGuest:
    meal_choice: str = ""
    plus_one: bool = False
    plus_one_name: str = ""
    plus_one_meal_choice: str = ""

    kind = "single"

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "meal_choice": self.meal_choice,
            "plus_one": self.plus_one,
            "plus_one_name": self.plus_one_name,
            "plus_one_meal_choice": self.plus_one_meal_choice,
        }


@dataclass(frozen=True)
class GroupInvite:
    guests: tuple[GuestEntry, ...] = field(default_factory=tuple)

    kind = "group"

    def as_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "guests": [g.as_dict() for g in self.guests]}


Party = Union[SingleGuest, GroupInvite]


def _guest_entry(raw: GuestEntry | Mapping[str, Any]) -> GuestEntry:
    if isinstance(raw, GuestEntry):
        return raw
    meal = raw.get("meal_choice", raw.get("mealChoice"))
    return GuestEntry(name=str(raw.get("name") or ""), meal_choice=meal or "")


def build_party(
    *,
    guests: Iterable[GuestEntry | Mapping[str, Any]] | None = None,
    meal_choice: str | None = None,
    plus_one: bool = False,
    plus_one_name: str | None = None,
    plus_one_meal_choice: str | None = None,
) -> Party:
    """Normalize submitted fields into one of the two party shapes."""
    entries = tuple(_guest_entry(g) for g in guests or ())
    if entries:
        return GroupInvite(guests=entries)
    return SingleGuest(
        meal_choice=meal_choice or "",
        plus_one=bool(plus_one),
        plus_one_name=plus_one_name or "",
        plus_one_meal_choice=plus_one_meal_choice or "",
    )


def party_of(invite: Invite) -> Party:
    """Return the party shape stored on ``invite``."""
    if invite.guests:
        return GroupInvite(guests=tuple(_guest_entry(g) for g in invite.guests))
    return SingleGuest(
        meal_choice=invite.meal_choice or "",
        plus_one=bool(invite.plus_one),
        plus_one_name=invite.plus_one_name or "",
        plus_one_meal_choice=invite.plus_one_meal_choice or "",
    )


def apply_party(invite: Invite, party: Party) -> None:
    """Write ``party`` onto ``invite``, clearing the other shape's fields."""
    if isinstance(party, GroupInvite):
        # Assign a fresh list so the JSON column is flagged dirty.
        invite.guests = [g.as_dict() for g in party.guests]
        invite.meal_choice = ""
        invite.plus_one = False
        invite.plus_one_name = ""
        invite.plus_one_meal_choice = ""
        return
    invite.guests = None
    invite.meal_choice = party.meal_choice
    invite.plus_one = party.plus_one
    invite.plus_one_name = party.plus_one_name
    invite.plus_one_meal_choice = party.plus_one_meal_choice


def party_meals(party: Party) -> list[str]:
    """Return every non-empty meal choice covered by ``party``."""
    if isinstance(party, GroupInvite):
        return [g.meal_choice for g in party.guests if g.meal_choice]
    meals = [party.meal_choice] if party.meal_choice else []
    if party.plus_one and party.plus_one_meal_choice:
        meals.append(party.plus_one_meal_choice)
    return meals
