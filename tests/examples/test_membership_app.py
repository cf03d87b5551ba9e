import pytest

from examples.membership_app import (
    bootstrap_factory,
    list_members,
    rename_and_remove,
    run_demo,
    seed_sample_data,
)
from examples.membership_app.models import Member
from flushorm import ValidationError


def test_membership_example_bootstrap_and_seed(tmp_path):
    factory = bootstrap_factory(dsn=f"sqlite:///{tmp_path / 'membership.db'}")
    try:
        seeded = seed_sample_data(factory)
        assert len(seeded["households"]) == 1
        assert [member["name"] for member in seeded["members"]] == ["A", "Z"]

        household_id = seeded["households"][0]["id"]
        assert list_members(factory) == [
            {"id": 1, "name": "A", "household_id": household_id},
            {"id": 2, "name": "Z", "household_id": None},
        ]

        rename_and_remove(factory)
        assert list_members(factory) == [{"id": 1, "name": "B", "household_id": household_id}]
    finally:
        factory.close()


def test_inactive_member_with_household_is_rejected(tmp_path):
    factory = bootstrap_factory(dsn=f"sqlite:///{tmp_path / 'invalid.db'}")
    try:
        seed_sample_data(factory)
        session = factory.create_session()
        with pytest.raises(ValidationError):
            with session.transaction():
                session.find(Member, 1).active = False
        session.close()
    finally:
        factory.close()


def test_run_demo_returns_remaining_members():
    assert [entry["name"] for entry in run_demo()] == ["B"]
