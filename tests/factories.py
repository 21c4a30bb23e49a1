"""Factory functions for creating test records.

``make_*`` builds an instance without touching the database. ``create_*``
adds it to the session and flushes so the primary key is populated and the
record counts as persisted. All fields have defaults that can be overridden
via keyword arguments.

Usage::

    from tests.factories import create_entity

    def test_something(db_session):
        entity = create_entity(db_session, title="Draft")
        assert entity.approve() is True
"""

from typing import List, Type

from sqlalchemy.orm import Session

from tests.models import Entity


_counter = 0


def _next_id() -> int:
    """Return a monotonically increasing integer for unique default values."""
    global _counter
    _counter += 1
    return _counter


def make_entity(model: Type = Entity, **overrides):
    if "title" in model.__table__.c:
        overrides.setdefault("title", f"Entity {_next_id()}")
    return model(**overrides)


def make_entities(count: int, model: Type = Entity, **overrides) -> List:
    return [make_entity(model, **overrides) for _ in range(count)]


def create_entity(session: Session, model: Type = Entity, **overrides):
    entity = make_entity(model, **overrides)
    session.add(entity)
    session.flush()
    return entity


def create_entities(session: Session, count: int, model: Type = Entity, **overrides) -> List:
    return [create_entity(session, model, **overrides) for _ in range(count)]
