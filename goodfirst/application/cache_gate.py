"""Freshness check deciding whether a stored snapshot can be reused."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from goodfirst.domain.repository import StoreState, parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_CACHE_WINDOW = timedelta(hours=8)


def should_refresh(
    store: StoreState,
    now: Optional[datetime] = None,
    window: timedelta = DEFAULT_CACHE_WINDOW,
    logger: logging.Logger = logger,
) -> bool:
    """
    Decide whether the snapshot is stale.

    Args:
        store: Snapshot read from the store
        now: Current time, defaults to the wall clock in UTC
        window: Age below which the snapshot is reused

    Returns:
        False when the snapshot is younger than ``window``, True otherwise.
        An absent or unparseable timestamp always means True.
    """
    last_modified = parse_timestamp(store.last_modified)
    if last_modified is None:
        logger.info("Cache has no usable timestamp, refreshing")
        return True

    current = parse_timestamp(now) or datetime.now(timezone.utc)
    age = current - last_modified
    if age < window:
        hours = age.total_seconds() / 3600
        logger.info(f"Using cached data (age: {hours:.1f}h, {len(store.details)} repos)")
        return False

    return True
