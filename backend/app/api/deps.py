from collections.abc import Generator

from fastapi import Header
from sqlalchemy.orm import Session

from app.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor_id(x_user_id: str | None = Header(default=None, max_length=36)) -> str | None:
    """Id of the acting user, forwarded by the authenticating gateway; recorded in the audit trail."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None
