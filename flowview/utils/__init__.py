"""Utility functions for flowview."""

from flowview.utils.identifiers import (
    generate_event_id,
    generate_subscription_id,
    utc_timestamp,
)

__all__ = [
    "generate_event_id",
    "generate_subscription_id",
    "utc_timestamp",
]
