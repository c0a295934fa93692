# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-vessel-social")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("MODERATION_ENABLED", "false")

from vessel_social.api.v1.dependencies import get_reviewer_dep  # noqa: E402
from vessel_social.core.security import create_access_token  # noqa: E402
from vessel_social.db.session import Base, configure_sqlite  # noqa: E402
from vessel_social.db.session import get_db as app_get_session  # noqa: E402
from vessel_social.db.time import utcnow  # noqa: E402
from vessel_social.main import app as fastapi_app  # noqa: E402
from vessel_social.models import User  # noqa: E402
from vessel_social.services.follow_graph import FollowGraph  # noqa: E402
from vessel_social.services.identity import IdentityStore  # noqa: E402
from vessel_social.services.message_requests import MessageRequestWorkflow  # noqa: E402
from vessel_social.services.moderation import ReviewResult  # noqa: E402
from vessel_social.services.notifications import NotificationFanout  # noqa: E402
from vessel_social.services.threads import ThreadStore  # noqa: E402

TEST_DB_URL = "sqlite://"


class StubReviewer:
    """Reviewer that rejects any text containing a blocked word."""

    def __init__(self) -> None:
        self.blocked: set[str] = set()
        self.reviewed: list[str] = []

    def review(self, text: str) -> ReviewResult:
        self.reviewed.append(text)
        for word in self.blocked:
            if word in text:
                return ReviewResult(approved=False, reason=f"contains '{word}'")
        return ReviewResult(approved=True)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    """Session whose commits become savepoints inside a rolled-back transaction."""
    connection = engine.connect()
    transaction = connection.begin()
    session = Session(
        bind=connection,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        session.close()
        if transaction.is_active:
            transaction.rollback()
        connection.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def reviewer() -> StubReviewer:
    return StubReviewer()


@pytest.fixture(autouse=True)
def override_dependencies(app: FastAPI, db_session: Session, reviewer: StubReviewer) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_reviewer_dep] = lambda: reviewer
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_reviewer_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with increasing creation times."""
    created: list[User] = []
    base_time = utcnow() - timedelta(days=1)

    def _make_user(handle: str, display_name: str | None = None) -> User:
        user = User(
            handle=handle.lower(),
            display_name=display_name or handle.capitalize(),
            created_at=base_time + timedelta(minutes=len(created)),
        )
        db_session.add(user)
        db_session.commit()
        created.append(user)
        return user

    return _make_user


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("alice")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("bob")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("carol")


@pytest.fixture()
def dave(make_user: Callable[..., User]) -> User:
    return make_user("dave")


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Return a helper building bearer headers for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture()
def identity(db_session: Session) -> IdentityStore:
    return IdentityStore(db_session)


@pytest.fixture()
def notifications(db_session: Session) -> NotificationFanout:
    return NotificationFanout(db_session)


@pytest.fixture()
def graph(db_session: Session, notifications: NotificationFanout) -> FollowGraph:
    return FollowGraph(db_session, notifications)


@pytest.fixture()
def threads(
    db_session: Session,
    identity: IdentityStore,
    graph: FollowGraph,
    reviewer: StubReviewer,
) -> ThreadStore:
    return ThreadStore(db_session, identity=identity, graph=graph, reviewer=reviewer)


@pytest.fixture()
def workflow(
    db_session: Session,
    identity: IdentityStore,
    graph: FollowGraph,
    threads: ThreadStore,
    notifications: NotificationFanout,
    reviewer: StubReviewer,
) -> MessageRequestWorkflow:
    return MessageRequestWorkflow(
        db_session,
        identity=identity,
        graph=graph,
        threads=threads,
        notifications=notifications,
        reviewer=reviewer,
    )


@pytest.fixture()
def mutual(graph: FollowGraph) -> Callable[[User, User], None]:
    """Return a helper making two users follow each other."""

    def _mutual(first: User, second: User) -> None:
        graph.follow(first.id, second.id)
        graph.follow(second.id, first.id)

    return _mutual
