"""Observability for registry traffic.

Every command submitted and every notification published can be captured as
a durable record with both "occurred at" and "logged at" timestamps. Records
are written to a sink (DuckDB by default) off the event loop.
"""

from .models import ObservabilityRecord
from .recorder import ObservabilityRecorder
from .sinks import DuckDBObservabilitySink, InMemoryObservabilitySink, ObservabilitySink

__all__ = [
    "DuckDBObservabilitySink",
    "InMemoryObservabilitySink",
    "ObservabilityRecord",
    "ObservabilityRecorder",
    "ObservabilitySink",
]
