"""Directed follow graph and the mutual-follow predicate."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from vessel_social.core.errors import InvalidOperation, NotFound
from vessel_social.db.session import unit_of_work
from vessel_social.models import FollowEdge, User
from vessel_social.models.notification import NOTIFICATION_FOLLOW
from vessel_social.services.notifications import NotificationFanout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FollowCounts:
    """Follower and following totals for one user."""

    followers: int
    following: int


@dataclass(frozen=True)
class Suggestion:
    """Suggested user and how many of the caller's followees follow them."""

    user: User
    mutual_connections: int


class FollowGraph:
    """Follow edges stored as ``user_follows`` rows."""

    def __init__(self, db: Session, notifications: NotificationFanout | None = None) -> None:
        self.db = db
        self.notifications = notifications or NotificationFanout(db)

    def follow(self, follower_id: str, followee_id: str) -> bool:
        """Create the edge if absent; return True only when a row was inserted.

        The ``follow`` notification is emitted on an actual insert only, so a
        repeated call is a pure no-op.
        """
        if follower_id == followee_id:
            raise InvalidOperation("You cannot follow yourself")
        if self.db.get(User, followee_id) is None:
            raise NotFound("User not found")

        with unit_of_work(self.db):
            if self.is_following(follower_id, followee_id):
                return False
            try:
                with self.db.begin_nested():
                    self.db.add(FollowEdge(follower_id=follower_id, followee_id=followee_id))
                    self.db.flush()
            except IntegrityError:
                # A concurrent follow won the race; the edge exists either way.
                logger.debug("Follow %s -> %s already recorded", follower_id, followee_id)
                return False
            self.notifications.emit(followee_id, follower_id, NOTIFICATION_FOLLOW)

        logger.info("User %s followed %s", follower_id, followee_id)
        return True

    def unfollow(self, follower_id: str, followee_id: str) -> bool:
        """Delete the edge if present; return whether anything was removed."""
        with unit_of_work(self.db):
            removed = (
                self.db.query(FollowEdge)
                .filter(
                    FollowEdge.follower_id == follower_id,
                    FollowEdge.followee_id == followee_id,
                )
                .delete(synchronize_session="fetch")
            )
        if removed:
            logger.info("User %s unfollowed %s", follower_id, followee_id)
        return bool(removed)

    def is_following(self, follower_id: str, followee_id: str) -> bool:
        return self.db.query(
            self.db.query(FollowEdge)
            .filter(
                FollowEdge.follower_id == follower_id,
                FollowEdge.followee_id == followee_id,
            )
            .exists()
        ).scalar() or False

    def is_mutual(self, first_id: str, second_id: str) -> bool:
        """True iff both directed edges exist."""
        if first_id == second_id:
            return False
        edges = self.db.query(func.count()).select_from(FollowEdge).filter(
            ((FollowEdge.follower_id == first_id) & (FollowEdge.followee_id == second_id))
            | ((FollowEdge.follower_id == second_id) & (FollowEdge.followee_id == first_id))
        ).scalar() or 0
        return edges == 2

    def followers(self, user_id: str) -> set[str]:
        """Return ids of users following ``user_id``."""
        rows = self.db.execute(
            select(FollowEdge.follower_id).where(FollowEdge.followee_id == user_id)
        )
        return set(rows.scalars())

    def following(self, user_id: str) -> set[str]:
        """Return ids of users ``user_id`` follows."""
        rows = self.db.execute(
            select(FollowEdge.followee_id).where(FollowEdge.follower_id == user_id)
        )
        return set(rows.scalars())

    def counts(self, user_id: str) -> FollowCounts:
        followers = self.db.query(func.count()).select_from(FollowEdge).filter(
            FollowEdge.followee_id == user_id
        ).scalar() or 0
        following = self.db.query(func.count()).select_from(FollowEdge).filter(
            FollowEdge.follower_id == user_id
        ).scalar() or 0
        return FollowCounts(followers=followers, following=following)

    def list_followers(self, user_id: str, limit: int = 50, offset: int = 0) -> list[User]:
        """Return users following ``user_id`` ordered by display name."""
        return (
            self.db.query(User)
            .join(FollowEdge, FollowEdge.follower_id == User.id)
            .filter(FollowEdge.followee_id == user_id)
            .order_by(User.display_name, User.handle)
            .offset(offset)
            .limit(limit)
            .all()
        )

    def list_following(self, user_id: str, limit: int = 50, offset: int = 0) -> list[User]:
        """Return users ``user_id`` follows ordered by display name."""
        return (
            self.db.query(User)
            .join(FollowEdge, FollowEdge.followee_id == User.id)
            .filter(FollowEdge.follower_id == user_id)
            .order_by(User.display_name, User.handle)
            .offset(offset)
            .limit(limit)
            .all()
        )

    def suggestions(self, user_id: str, limit: int = 10) -> list[Suggestion]:
        """Suggest users followed by the people ``user_id`` follows.

        Candidates are ranked by how many of the caller's followees follow
        them. With no such candidates, the newest users not yet followed are
        returned instead.
        """
        already_following = select(FollowEdge.followee_id).where(
            FollowEdge.follower_id == user_id
        )
        mine = aliased(FollowEdge)
        theirs = aliased(FollowEdge)
        mutual_count = func.count(theirs.follower_id).label("mutual_count")

        rows = self.db.execute(
            select(User, mutual_count)
            .join(theirs, theirs.followee_id == User.id)
            .join(mine, mine.followee_id == theirs.follower_id)
            .where(
                mine.follower_id == user_id,
                User.id != user_id,
                User.id.not_in(already_following),
            )
            .group_by(User.id)
            .order_by(mutual_count.desc(), User.created_at.desc(), User.id)
            .limit(limit)
        ).all()
        if rows:
            return [Suggestion(user=user, mutual_connections=count) for user, count in rows]

        fallback = (
            self.db.query(User)
            .filter(User.id != user_id, User.id.not_in(already_following))
            .order_by(User.created_at.desc(), User.id)
            .limit(limit)
            .all()
        )
        return [Suggestion(user=user, mutual_connections=0) for user in fallback]
