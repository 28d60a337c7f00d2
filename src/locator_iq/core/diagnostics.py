"""
Diagnostics sinks.
"""

import logging
import threading
from typing import List, Optional, Sequence

from locator_iq.interfaces.diagnostics import DiagnosticEvent, DiagnosticKind, IDiagnosticsSink

logger = logging.getLogger(__name__)


class LoggingDiagnosticsSink(IDiagnosticsSink):
    """Write events to the standard logging system."""

    LEVELS = {
        DiagnosticKind.PATTERN_NOT_CONFIGURED: logging.WARNING,
        DiagnosticKind.NO_ELEMENT_MATCHED: logging.ERROR,
        DiagnosticKind.LOCATOR_TIMEOUT: logging.ERROR,
    }

    def __init__(self, log: Optional[logging.Logger] = None):
        self._log = log or logger

    def emit(self, event: DiagnosticEvent) -> None:
        level = self.LEVELS.get(event.kind, logging.WARNING)
        self._log.log(
            level,
            f"{event.message} [page={event.page} type={event.field_type} "
            f"field={event.field_name} key={event.key}]",
        )
        for i, candidate in enumerate(event.candidates, 1):
            self._log.log(level, f"  candidate {i}: {candidate}")


class CollectingDiagnosticsSink(IDiagnosticsSink):
    """Keep events in memory, e.g. for reports or assertions."""

    def __init__(self):
        self._events: List[DiagnosticEvent] = []
        self._lock = threading.Lock()

    def emit(self, event: DiagnosticEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[DiagnosticEvent]:
        return list(self._events)

    def of_kind(self, kind: DiagnosticKind) -> List[DiagnosticEvent]:
        return [e for e in self._events if e.kind == kind]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class FanOutDiagnosticsSink(IDiagnosticsSink):
    """Forward every event to several sinks."""

    def __init__(self, sinks: Sequence[IDiagnosticsSink]):
        self._sinks = list(sinks)

    def emit(self, event: DiagnosticEvent) -> None:
        for sink in self._sinks:
            sink.emit(event)
