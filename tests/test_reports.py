from __future__ import annotations

from weddingrsvp.crud import create_invite, list_invites, submit_rsvp
from weddingrsvp.reports import meal_label, serialize_invite, summarize


def test_summarize_counts_parties_and_meals(session):
    create_invite(session, name="smiths", guest_names=["Amy", "Bob"])
    submit_rsvp(
        session,
        name="smiths",
        attending=True,
        plus_one=False,
        accommodation=True,
        guests=[
            {"name": "Amy", "meal_choice": "fish"},
            {"name": "Bob", "meal_choice": "beef"},
        ],
    )
    submit_rsvp(
        session,
        name="jdoe",
        attending=True,
        plus_one=True,
        plus_one_name="Pat",
        plus_one_meal_choice="fish",
        meal_choice="vegan",
        accommodation=False,
    )
    submit_rsvp(
        session, name="nope", attending=False, plus_one=False, accommodation=True
    )
    create_invite(session, name="quiet", guest_names=["Zed"])
    session.commit()

    stats = summarize(list_invites(session))

    assert stats == {
        "total_invites": 4,
        "attending": 2,
        "declined": 1,
        "awaiting": 1,
        "need_accommodation": 2,
        "total_guests": 4,
        "total_kids": 0,
        "meal_counts": {"beef": 1, "fish": 2, "vegan": 1},
    }


def test_summarize_empty():
    stats = summarize([])
    assert stats["total_invites"] == 0
    assert stats["meal_counts"] == {}


def test_meal_label_falls_back_to_key():
    assert meal_label("fish") == "Pan-Seared Salmon"
    assert meal_label("tofu") == "tofu"


def test_serialize_invite_tags_party_kind(session):
    invite = create_invite(session, name="smiths", guest_names=["Amy"])
    payload = serialize_invite(invite)
    assert payload["party"] == {
        "kind": "group",
        "guests": [{"name": "Amy", "meal_choice": ""}],
    }
    assert payload["attending"] is None
