from fastapi import Header

from funeral_core.db import SessionLocal

SYSTEM_ACTOR = "system"


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor(x_actor_id: str | None = Header(default=None)) -> str:
    """Identify who is making the change, for the audit columns.

    Authentication happens upstream; this service trusts the gateway's
    X-Actor-Id header and falls back to the system actor.
    """
    if x_actor_id is None or not x_actor_id.strip():
        return SYSTEM_ACTOR
    return x_actor_id.strip()
