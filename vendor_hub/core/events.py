"""Structured observability events.

Every warning the vendor identity subsystem raises for operators goes through
:func:`emit_event`, which logs on the ``vendor_hub.events`` logger and attaches
two stable attributes to the record:

  event    — one of the identifiers below (never reworded)
  context  — dict of the values that explain the event

Consumers (log shippers, tests) match on ``record.event`` instead of the
human-readable message. Events are observability only; no control flow
depends on them.
"""


import logging
from typing import Any

event_logger = logging.getLogger("vendor_hub.events")

LEGACY_IDENTIFIER_FALLBACK = "legacy_identifier_fallback"
IMMUTABLE_FIELD_REJECTED = "immutable_field_rejected"
PERSISTENCE_MISMATCH = "persistence_mismatch"
VENDOR_LIMIT_REACHED = "vendor_limit_reached"
PROVISIONING_RACE_RESOLVED = "provisioning_race_resolved"


def emit_event(event: str, message: str, level: int = logging.WARNING, **context: Any) -> None:
    """Log a structured event. ``context`` must never contain credential values."""
    event_logger.log(
        level,
        "[%s] %s %s",
        event,
        message,
        context,
        extra={"event": event, "context": context},
    )
