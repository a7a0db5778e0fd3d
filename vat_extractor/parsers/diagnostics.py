"""Parse diagnostics reported by the engine through an injectable observer."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional

# Event kinds
HEADER_FOUND = "header_found"
HEADER_DEGRADED = "header_degraded"
ROLE_UNMAPPED = "role_unmapped"
ROW_SKIPPED = "row_skipped"
DIRECTION_CONFLICT = "direction_conflict"
AMOUNT_AMBIGUOUS = "amount_ambiguous"
AMOUNT_UNPARSEABLE = "amount_unparseable"


@dataclass(frozen=True)
class ParseEvent:
    """
    A single diagnostic emitted while parsing a statement.

    Attributes:
        kind: Event kind (one of the module-level constants)
        message: Human-readable description
        row_index: Raw row index the event refers to, if any
        details: Extra context for the event
    """
    kind: str
    message: str
    row_index: Optional[int] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        if self.row_index is None:
            return self.message
        return f"Row {self.row_index}: {self.message}"


class ParseObserver:
    """Receives parse events. The base class ignores them."""

    def notify(self, event: ParseEvent) -> None:
        pass


class DiagnosticsCollector(ParseObserver):
    """Keeps every event in memory for later inspection."""

    def __init__(self):
        self.events: List[ParseEvent] = []

    def notify(self, event: ParseEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: str) -> List[ParseEvent]:
        """Get events of a given kind, in emission order."""
        return [event for event in self.events if event.kind == kind]

    def clear(self) -> None:
        self.events.clear()


class LoggingObserver(ParseObserver):
    """Forwards events to a logger (conflicts at WARNING, the rest at DEBUG)."""

    WARNING_KINDS = frozenset({DIRECTION_CONFLICT, HEADER_DEGRADED, AMOUNT_UNPARSEABLE})

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def notify(self, event: ParseEvent) -> None:
        level = logging.WARNING if event.kind in self.WARNING_KINDS else logging.DEBUG
        self.logger.log(level, str(event))


class CompositeObserver(ParseObserver):
    """Fans events out to several observers."""

    def __init__(self, *observers: ParseObserver):
        self.observers = observers

    def notify(self, event: ParseEvent) -> None:
        for observer in self.observers:
            observer.notify(event)
