"""
Diagnostic events emitted while decoding.

The decoder does not print anything. At well-defined points (a section is
entered, a record or block is parsed, a declared length does not reconcile, a
channel or layer finishes decoding) it calls a *sink* with a
:py:class:`DiagnosticEvent`. A sink is any callable taking one event.

Example::

    from psd_layers.diagnostics import CollectingSink, EventKind
    from psd_layers.psd import PSD

    sink = CollectingSink()
    with open('example.psd', 'rb') as f:
        psd = PSD.read(f, sink=sink)

    for event in sink.of_kind(EventKind.LENGTH_MISMATCH):
        print(event)

When no sink is given, :py:data:`DEFAULT_SINK` forwards events to the
``psd_layers`` logger.
"""

import logging
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from attrs import define, field

logger = logging.getLogger("psd_layers")


class EventKind(Enum):
    """Kinds of diagnostic events."""

    SECTION = "section"
    RECORD = "record"
    BLOCK = "block"
    LENGTH_MISMATCH = "length_mismatch"
    CHANNEL_DECODED = "channel_decoded"
    LAYER_DECODED = "layer_decoded"


@define(frozen=True)
class DiagnosticEvent:
    """
    Single diagnostic event.

    .. py:attribute:: kind

        See :py:class:`EventKind`.

    .. py:attribute:: name

        Name of the section, record or block the event is about.

    .. py:attribute:: offset

        Byte offset the event refers to.

    .. py:attribute:: details

        Event specific values, e.g. ``length``, ``declared``, ``consumed``,
        ``ok`` or ``error``.
    """

    kind: EventKind
    name: str
    offset: Optional[int] = None
    details: dict = field(factory=dict)

    @property
    def is_failure(self) -> bool:
        return self.details.get("ok", True) is False

    def __str__(self) -> str:
        items = " ".join("%s=%r" % item for item in self.details.items())
        if self.offset is None:
            return "%s %s %s" % (self.kind.value, self.name, items)
        return "%s %s offset=%d %s" % (self.kind.value, self.name, self.offset, items)


Sink = Callable[[DiagnosticEvent], None]


class LoggingSink:
    """
    Sink that writes events to a logger.

    Length mismatches are logged as warnings, failed channel or layer results
    as errors, everything else at debug level.
    """

    def __init__(self, logger: logging.Logger = logger):
        self.logger = logger

    def __call__(self, event: DiagnosticEvent) -> None:
        if event.kind == EventKind.LENGTH_MISMATCH:
            level = logging.WARNING
        elif event.is_failure:
            level = logging.ERROR
        else:
            level = logging.DEBUG
        self.logger.log(level, "%s", event)


class CollectingSink:
    """
    Sink that keeps every event in memory, optionally forwarding to another
    sink.
    """

    def __init__(self, forward: Optional[Sink] = None):
        self.events: list[DiagnosticEvent] = []
        self.forward = forward

    def __call__(self, event: DiagnosticEvent) -> None:
        self.events.append(event)
        if self.forward is not None:
            self.forward(event)

    def __iter__(self) -> Iterator[DiagnosticEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    def of_kind(self, kind: EventKind) -> list[DiagnosticEvent]:
        return [event for event in self.events if event.kind == kind]


DEFAULT_SINK: Sink = LoggingSink()


def emit(
    sink: Optional[Sink],
    kind: EventKind,
    name: str,
    offset: Optional[int] = None,
    **details: Any,
) -> None:
    """Send an event to ``sink``, or to :py:data:`DEFAULT_SINK` if `None`."""
    if sink is None:
        sink = DEFAULT_SINK
    sink(DiagnosticEvent(kind, name, offset, details))


def report_mismatch(
    sink: Optional[Sink], name: str, offset: int, declared: int, consumed: int
) -> None:
    """Report a declared length that does not reconcile with consumed bytes."""
    emit(
        sink,
        EventKind.LENGTH_MISMATCH,
        name,
        offset,
        declared=declared,
        consumed=consumed,
        difference=declared - consumed,
    )
