# mypy: ignore-errors
# tests/test_db_session.py
"""Tests for transaction helpers."""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from vessel_social.core.errors import Conflict, NotFound, Unavailable
from vessel_social.db.session import unit_of_work
from vessel_social.models import User


def test_unit_of_work_commits(db_session) -> None:
    with unit_of_work(db_session):
        db_session.add(User(handle="erin", display_name="Erin"))

    assert db_session.query(User).filter(User.handle == "erin").count() == 1


def test_unit_of_work_rolls_back_on_domain_error(db_session) -> None:
    with pytest.raises(NotFound):
        with unit_of_work(db_session):
            db_session.add(User(handle="frank", display_name="Frank"))
            db_session.flush()
            raise NotFound("nope")

    assert db_session.query(User).filter(User.handle == "frank").count() == 0


def test_unit_of_work_maps_integrity_errors(db_session, alice) -> None:
    with pytest.raises(Conflict) as excinfo:
        with unit_of_work(db_session):
            db_session.add(User(handle="alice", display_name="Impostor"))
            db_session.flush()
    assert excinfo.value.reason == "integrity"
    assert isinstance(excinfo.value.__cause__, IntegrityError)


def test_unit_of_work_uses_custom_conflict(db_session, alice) -> None:
    custom = Conflict("Handle taken", reason="handle_taken")

    with pytest.raises(Conflict) as excinfo:
        with unit_of_work(db_session, on_conflict=custom):
            db_session.add(User(handle="alice", display_name="Impostor"))
            db_session.flush()
    assert excinfo.value is custom


def test_unit_of_work_maps_driver_failures(db_session) -> None:
    with pytest.raises(Unavailable):
        with unit_of_work(db_session):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))
