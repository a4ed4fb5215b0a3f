"""Common helpers used across multiple schemas"""
from datetime import datetime, timezone
from uuid import uuid4


def new_id() -> str:
    """Opaque record identifier"""
    return uuid4().hex


def utcnow() -> datetime:
    """Timezone-aware current time"""
    return datetime.now(timezone.utc)
