"""Helpers for working with users."""
from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from app.db.models.user import User


def get_or_create_user(db: Session, user_id: UUID) -> User:
    """Fetch the user row, inserting it inside the caller's transaction if absent.

    A concurrent insert of the same id surfaces as ``IntegrityError`` when the
    caller flushes or commits, which rolls back the caller's whole transaction.
    """
    user = db.get(User, user_id)
    if user:
        return user

    user = User(id=user_id)
    db.add(user)
    db.flush()
    return user
