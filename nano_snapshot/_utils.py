"""Shared helpers: package logger and snapshot naming."""

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

logger = logging.getLogger("nano-snapshot")

SNAPSHOT_PREFIX = "snapshot."
# snapshot.<yyyyMMddHHmmssSSS>, same layout the cluster uses for generated names
_SNAPSHOT_PATTERN = re.compile(r"^snapshot\.(\d{17})$")


def generate_snapshot_name(now: Optional[datetime] = None) -> str:
    """Generate a timestamped snapshot name.

    Args:
        now: Optional timestamp, defaults to the current UTC time

    Returns:
        Snapshot name in format: snapshot.yyyyMMddHHmmssSSS
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    millis = now.microsecond // 1000
    return f"{SNAPSHOT_PREFIX}{now.strftime('%Y%m%d%H%M%S')}{millis:03d}"


def is_snapshot_name(name: str) -> bool:
    return bool(_SNAPSHOT_PATTERN.match(name or ""))


def resolve_latest_snapshot(names: Iterable[str]) -> Optional[str]:
    """Pick the most recent timestamp-named snapshot.

    Names that do not follow the snapshot.<timestamp> layout are ignored.

    Args:
        names: Candidate backup names found at a location

    Returns:
        Latest snapshot name, or None if no candidate matches
    """
    latest = None
    for name in names:
        match = _SNAPSHOT_PATTERN.match(name)
        if not match:
            continue
        if latest is None or match.group(1) > latest[0]:
            latest = (match.group(1), name)
    return latest[1] if latest else None


def generate_request_id() -> str:
    """Generate an id for tracking an asynchronous cluster request."""
    return uuid.uuid4().hex
