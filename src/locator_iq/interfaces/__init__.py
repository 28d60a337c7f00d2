"""
Interfaces module - Abstract base classes for external collaborators.

This module defines the contracts that document drivers and diagnostics
sinks must implement to be used by the resolver and matcher.
"""

from locator_iq.interfaces.document import IDocumentQuery
from locator_iq.interfaces.diagnostics import (
    IDiagnosticsSink,
    DiagnosticEvent,
    DiagnosticKind,
)

__all__ = [
    "IDocumentQuery",
    "IDiagnosticsSink",
    "DiagnosticEvent",
    "DiagnosticKind",
]
