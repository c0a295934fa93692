"""Shared API dependencies for authentication and service wiring."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from vessel_social.core.security import decode_access_token
from vessel_social.db.session import get_db
from vessel_social.models import User
from vessel_social.services.follow_graph import FollowGraph
from vessel_social.services.identity import IdentityStore
from vessel_social.services.message_requests import MessageRequestWorkflow
from vessel_social.services.moderation import ContentReviewer, get_content_reviewer
from vessel_social.services.notifications import NotificationFanout
from vessel_social.services.threads import ThreadStore

# HTTP Bearer scheme for JWT authentication
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials
        db: Database session

    Returns:
        User object for the authenticated caller

    Raises:
        HTTPException: If token is invalid or user not found
    """
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_reviewer_dep() -> ContentReviewer:
    """Return the configured moderation reviewer."""
    return get_content_reviewer()


ReviewerDep = Annotated[ContentReviewer, Depends(get_reviewer_dep)]


def get_identity_store(db: SessionDep) -> IdentityStore:
    return IdentityStore(db)


IdentityDep = Annotated[IdentityStore, Depends(get_identity_store)]


def get_notification_fanout(db: SessionDep) -> NotificationFanout:
    return NotificationFanout(db)


NotificationsDep = Annotated[NotificationFanout, Depends(get_notification_fanout)]


def get_follow_graph(db: SessionDep, notifications: NotificationsDep) -> FollowGraph:
    return FollowGraph(db, notifications)


FollowGraphDep = Annotated[FollowGraph, Depends(get_follow_graph)]


def get_thread_store(
    db: SessionDep,
    identity: IdentityDep,
    graph: FollowGraphDep,
    reviewer: ReviewerDep,
) -> ThreadStore:
    return ThreadStore(db, identity=identity, graph=graph, reviewer=reviewer)


ThreadStoreDep = Annotated[ThreadStore, Depends(get_thread_store)]


def get_request_workflow(
    db: SessionDep,
    identity: IdentityDep,
    graph: FollowGraphDep,
    threads: ThreadStoreDep,
    notifications: NotificationsDep,
    reviewer: ReviewerDep,
) -> MessageRequestWorkflow:
    return MessageRequestWorkflow(
        db,
        identity=identity,
        graph=graph,
        threads=threads,
        notifications=notifications,
        reviewer=reviewer,
    )


RequestWorkflowDep = Annotated[MessageRequestWorkflow, Depends(get_request_workflow)]
