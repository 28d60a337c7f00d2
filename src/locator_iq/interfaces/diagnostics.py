"""
Diagnostics Interface - Structured events for external logging and reporting.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class DiagnosticKind(str, Enum):
    """Kinds of diagnostic events."""
    PATTERN_NOT_CONFIGURED = "pattern_not_configured"
    NO_ELEMENT_MATCHED = "no_element_matched"
    LOCATOR_TIMEOUT = "locator_timeout"


@dataclass
class DiagnosticEvent:
    """
    One diagnostic event.

    Attributes:
        kind: What happened
        message: Human-readable summary
        page: Page name of the request
        field_type: Field type of the request
        field_name: Field name of the request
        key: Resolved cache key (rendered)
        pattern_code: Page object the request was resolved against
        candidates: Candidates attempted or generated, in order
    """
    kind: DiagnosticKind
    message: str
    page: Optional[str] = None
    field_type: Optional[str] = None
    field_name: Optional[str] = None
    key: Optional[str] = None
    pattern_code: Optional[str] = None
    candidates: List[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "page": self.page,
            "field_type": self.field_type,
            "field_name": self.field_name,
            "key": self.key,
            "pattern_code": self.pattern_code,
            "candidates": list(self.candidates),
            "timestamp": self.timestamp.isoformat(),
        }


class IDiagnosticsSink(ABC):
    """Receiver of diagnostic events."""

    @abstractmethod
    def emit(self, event: DiagnosticEvent) -> None:
        """
        Record a diagnostic event.

        Must not raise; diagnostics never abort a resolution.
        """
        ...
