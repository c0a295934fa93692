# src/vessel_social/scripts/tokens.py
"""Issue a development bearer token for a user handle.

Tokens are normally minted by the authentication service. This helper signs
one with the local ``SECRET_KEY`` so the API can be exercised by hand::

    python -m vessel_social.scripts.tokens alice --create --display-name Alice
"""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.orm import Session

from vessel_social.core.errors import NotFound
from vessel_social.core.security import create_access_token
from vessel_social.db.session import SessionLocal, unit_of_work
from vessel_social.models import User
from vessel_social.services.identity import IdentityStore, normalize_handle


def ensure_user(db: Session, handle: str, display_name: str | None = None) -> User:
    """Return the user for ``handle``, creating a local record if needed."""
    identity = IdentityStore(db)
    user = identity.find_by_handle(handle)
    if user is not None:
        return user
    normalized = normalize_handle(handle)
    with unit_of_work(db):
        user = User(handle=normalized, display_name=display_name or normalized)
        db.add(user)
        db.flush()
    print(f"Created user @{user.handle} ({user.id})", file=sys.stderr)
    return user


def issue_token(db: Session, handle: str, *, create: bool = False, display_name: str | None = None) -> str:
    if create:
        user = ensure_user(db, handle, display_name)
    else:
        identity = IdentityStore(db)
        user = identity.resolve_by_id(identity.resolve_by_handle(handle))
    return create_access_token(user.id)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Issue a development bearer token")
    parser.add_argument("handle", help="Handle of the user, '@' optional")
    parser.add_argument("--create", action="store_true", help="Create the user when it does not exist")
    parser.add_argument("--display-name", default=None, help="Display name for a created user")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    db = SessionLocal()
    try:
        token = issue_token(db, args.handle, create=args.create, display_name=args.display_name)
    except NotFound as exc:
        print(f"{exc.detail}; pass --create to add it", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
