"""
Voice engine interface and an in-process implementation.

The real engine (a hosted voice agent SDK) lives outside this package. The
session controller only needs the narrow surface defined by VoiceEngine.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ...interview.events import (
    VoiceEventBus, VoiceEvent, VoiceEventType, MessageEvent, ErrorEvent, EventHandler
)

logger = logging.getLogger("voice_engine")

StartTarget = Union[str, Dict[str, Any]]


class VoiceEngine(ABC):
    """Event-emitting voice call engine."""

    @abstractmethod
    def on(self, event_type: VoiceEventType, handler: EventHandler) -> None:
        """Register a handler for an event type."""

    @abstractmethod
    def off(self, event_type: VoiceEventType, handler: EventHandler) -> None:
        """Remove a previously registered handler."""

    @abstractmethod
    def start(self, target: StartTarget, variables: Dict[str, Any]) -> None:
        """Start a call against a workflow id or an assistant definition."""

    @abstractmethod
    def stop(self) -> None:
        """Stop the current call."""


class LocalVoiceEngine(VoiceEngine):
    """
    Voice engine that lives entirely in-process.

    Events are pushed in by the owner (emit, say, replay) and fanned out to
    subscribers through a VoiceEventBus. Useful for replaying recorded calls.
    """

    def __init__(self, emit_call_start_on_start: bool = True, emit_call_end_on_stop: bool = True):
        self.bus = VoiceEventBus()
        self.emit_call_start_on_start = emit_call_start_on_start
        self.emit_call_end_on_stop = emit_call_end_on_stop
        self.started_with: List[Tuple[StartTarget, Dict[str, Any]]] = []
        self.stop_count = 0
        self.in_call = False

    def on(self, event_type: VoiceEventType, handler: EventHandler) -> None:
        self.bus.subscribe(event_type, handler)

    def off(self, event_type: VoiceEventType, handler: EventHandler) -> None:
        self.bus.unsubscribe(event_type, handler)

    def start(self, target: StartTarget, variables: Dict[str, Any]) -> None:
        self.started_with.append((target, dict(variables)))
        self.in_call = True
        logger.info(f"Call started against {target if isinstance(target, str) else target.get('name', 'assistant')}")
        if self.emit_call_start_on_start:
            self.emit(VoiceEvent(VoiceEventType.CALL_START))

    def stop(self) -> None:
        self.stop_count += 1
        was_in_call = self.in_call
        self.in_call = False
        logger.info("Call stop requested")
        if self.emit_call_end_on_stop and was_in_call:
            self.emit(VoiceEvent(VoiceEventType.CALL_END))

    def emit(self, event: VoiceEvent) -> None:
        self.bus.emit(event)

    def say(self, role: str, text: str, final: bool = True) -> None:
        """Emit one transcript message as the engine would."""
        self.emit(MessageEvent(
            message_type="transcript",
            transcript_type="final" if final else "partial",
            role=role,
            transcript=text,
        ))

    def fail(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.emit(ErrorEvent(message, details))

    def replay(self, events: Iterable[Dict[str, Any]]) -> int:
        """
        Replay recorded engine events of the form {"event": name, ...payload}.

        Returns:
            Number of events emitted
        """
        count = 0
        for raw in events:
            if not isinstance(raw, dict):
                logger.warning(f"Skipping recorded event that is not an object: {raw!r}")
                continue
            payload = dict(raw)
            name = payload.pop("event", None)
            if not name:
                logger.warning(f"Skipping recorded event without a name: {raw}")
                continue
            try:
                event = VoiceEvent.from_wire(name, payload)
            except ValueError:
                logger.warning(f"Skipping recorded event with unknown name: {name}")
                continue
            if event.event_type == VoiceEventType.CALL_END:
                self.in_call = False
            self.emit(event)
            count += 1
        return count
