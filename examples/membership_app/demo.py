"""
Membership example: seed two members, rename one and remove the other in a
single unit of work.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List

from flushorm import PersistenceConfiguration, SessionFactory, create_session_factory

from .models import Household, Member, registry


def bootstrap_factory(dsn: str = "sqlite:///:memory:") -> SessionFactory:
    config = PersistenceConfiguration(url=dsn, entity_classes=[Household, Member])
    factory = create_session_factory(config, registry=registry)
    factory.create_schema()
    return factory


def seed_sample_data(factory: SessionFactory) -> Dict[str, List[Dict[str, Any]]]:
    session = factory.create_session()
    try:
        with session.transaction():
            household = Household(name="Lindqvist")
            session.persist(household)
            session.flush()
            members = [
                Member(id=1, name="A", email="a@example.com", joined=date(2023, 3, 1), household=household),
                Member(id=2, name="Z", email="z@example.com", joined=date(2023, 9, 12)),
            ]
            for member in members:
                session.persist(member)
        return {
            "households": [household.to_dict()],
            "members": [member.to_dict() for member in members],
        }
    finally:
        session.close()


def rename_and_remove(factory: SessionFactory, *, rename_id: int = 1, new_name: str = "B", remove_id: int = 2) -> None:
    """
    Change one member's name and delete another; both writes are flushed on
    commit.
    """
    session = factory.create_session()
    try:
        with session.transaction():
            member = session.find(Member, rename_id)
            if member is not None:
                member.name = new_name
            leaving = session.find(Member, remove_id)
            if leaving is not None:
                session.remove(leaving)
    finally:
        session.close()


def list_members(factory: SessionFactory, *, active: bool = True) -> List[Dict[str, Any]]:
    session = factory.create_session()
    try:
        with session.transaction():
            query = session.create_query("SELECT m FROM Member m WHERE m.active = :active", Member)
            members = query.set_parameter("active", active).get_result_list()
            return [
                {"id": member.id, "name": member.name, "household_id": member.household}
                for member in sorted(members, key=lambda m: m.id)
            ]
    finally:
        session.close()


def run_demo(dsn: str = "sqlite:///:memory:") -> List[Dict[str, Any]]:
    factory = bootstrap_factory(dsn)
    try:
        seed_sample_data(factory)
        rename_and_remove(factory)
        return list_members(factory)
    finally:
        factory.close()


if __name__ == "__main__":
    for entry in run_demo("sqlite:///membership_demo.db"):
        print(f"#{entry['id']} {entry['name']} (household {entry['household_id']})")
