"""
Voice engine events and the in-process event bus they travel on.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import TRANSCRIPT_MESSAGE_TYPE, FINAL_TRANSCRIPT_TYPE

logger = logging.getLogger("events")


class VoiceEventType(str, Enum):
    """Event names emitted by the voice engine."""
    CALL_START = "call-start"
    CALL_END = "call-end"
    MESSAGE = "message"
    SPEECH_START = "speech-start"
    SPEECH_END = "speech-end"
    ERROR = "error"


@dataclass
class VoiceEvent:
    """Base class for all voice engine events."""
    event_type: VoiceEventType
    timestamp: float = field(default_factory=time.time)
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_wire(cls, name: str, payload: Optional[Dict[str, Any]] = None) -> "VoiceEvent":
        """
        Build a typed event from an engine event name and its raw payload.

        Raises:
            ValueError: If the event name is unknown
        """
        event_type = VoiceEventType(name)
        payload = dict(payload or {})
        if event_type == VoiceEventType.MESSAGE:
            return MessageEvent(
                message_type=payload.get("type", ""),
                transcript_type=payload.get("transcriptType", ""),
                role=payload.get("role", ""),
                transcript=payload.get("transcript", ""),
            )
        if event_type == VoiceEventType.ERROR:
            return ErrorEvent(
                message=str(payload.get("message") or payload.get("error") or "unknown voice engine error"),
                details=payload,
            )
        return cls(event_type=event_type, data=payload)


class MessageEvent(VoiceEvent):
    """A transcript (or other) message from the voice engine."""
    def __init__(self, message_type: str, transcript_type: str, role: str, transcript: str,
                 timestamp: Optional[float] = None):
        super().__init__(
            event_type=VoiceEventType.MESSAGE,
            timestamp=timestamp if timestamp is not None else time.time(),
            data={
                "type": message_type,
                "transcriptType": transcript_type,
                "role": role,
                "transcript": transcript
            }
        )

    @property
    def role(self) -> str:
        return self.data["role"]

    @property
    def transcript(self) -> str:
        return self.data["transcript"]

    @property
    def is_final_transcript(self) -> bool:
        return (self.data["type"] == TRANSCRIPT_MESSAGE_TYPE
                and self.data["transcriptType"] == FINAL_TRANSCRIPT_TYPE)


class ErrorEvent(VoiceEvent):
    """An error reported by the voice engine. Never fatal to the session."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 timestamp: Optional[float] = None):
        super().__init__(
            event_type=VoiceEventType.ERROR,
            timestamp=timestamp if timestamp is not None else time.time(),
            data={
                "message": message,
                "details": dict(details or {})
            }
        )

    @property
    def message(self) -> str:
        return self.data["message"]


EventHandler = Callable[[VoiceEvent], None]


class VoiceEventBus:
    """Event bus for voice engine communication."""

    def __init__(self):
        self._handlers: Dict[VoiceEventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []

    def subscribe(self, event_type: VoiceEventType, handler: EventHandler) -> None:
        """
        Subscribe to specific event type.

        Args:
            event_type: Type of event to listen for
            handler: Function to call when event occurs
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)
        logger.debug(f"Subscribed handler to {event_type.value}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to all events."""
        self._global_handlers.append(handler)
        logger.debug("Subscribed global handler")

    def unsubscribe(self, event_type: VoiceEventType, handler: EventHandler) -> None:
        """
        Unsubscribe from specific event type.

        Args:
            event_type: Type of event to stop listening for
            handler: Handler function to remove
        """
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Unsubscribed handler from {event_type.value}")
            except ValueError:
                logger.warning(f"Handler not found for {event_type.value}")

    def handler_count(self, event_type: Optional[VoiceEventType] = None) -> int:
        """Number of handlers for one event type, or for all types plus global ones."""
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(h) for h in self._handlers.values()) + len(self._global_handlers)

    def emit(self, event: VoiceEvent) -> None:
        """
        Emit an event to all subscribers.

        Handlers run in subscription order; one failing handler does not stop the rest.
        """
        logger.debug(f"Emitting event: {event.event_type.value}")

        # Copy so handlers may unsubscribe while being called
        for handler in list(self._handlers.get(event.event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type.value}: {e}")

        for handler in list(self._global_handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in global event handler: {e}")


class EventSubscription:
    """
    A set of (event type, handler) registrations acquired and released together.

    Works against anything exposing on(event_type, handler) / off(event_type, handler),
    such as a VoiceEngine. release() is the single exit path and is idempotent.
    """

    def __init__(self, source, handlers: Dict[VoiceEventType, EventHandler]):
        self._source = source
        self._handlers: Tuple[Tuple[VoiceEventType, EventHandler], ...] = tuple(handlers.items())
        self._bound: List[Tuple[VoiceEventType, EventHandler]] = []

    @property
    def active(self) -> bool:
        return bool(self._bound)

    def bind(self) -> "EventSubscription":
        if self._bound:
            return self
        try:
            for event_type, handler in self._handlers:
                self._source.on(event_type, handler)
                self._bound.append((event_type, handler))
        except Exception:
            # Never leave a partial registration behind
            self.release()
            raise
        return self

    def release(self) -> None:
        while self._bound:
            event_type, handler = self._bound.pop()
            try:
                self._source.off(event_type, handler)
            except Exception as e:
                logger.error(f"Failed to unsubscribe {event_type.value} handler: {e}")

    def __enter__(self) -> "EventSubscription":
        return self.bind()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class EventLogger:
    """Logs all events for debugging and analysis."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("event_logger")
        self.log_level = log_level

    def handle_event(self, event: VoiceEvent) -> None:
        """Log event details."""
        self.logger.log(self.log_level, f"Event: {event.event_type.value} | Data: {event.data}")


class SessionMetrics:
    """Collects counters from voice events."""

    def __init__(self):
        self.calls_started = 0
        self.calls_ended = 0
        self.final_messages = 0
        self.ignored_messages = 0
        self.engine_errors = 0

    def handle_event(self, event: VoiceEvent) -> None:
        """Update metrics based on event."""
        if event.event_type == VoiceEventType.CALL_START:
            self.calls_started += 1
        elif event.event_type == VoiceEventType.CALL_END:
            self.calls_ended += 1
        elif event.event_type == VoiceEventType.MESSAGE:
            if isinstance(event, MessageEvent) and event.is_final_transcript:
                self.final_messages += 1
            else:
                self.ignored_messages += 1
        elif event.event_type == VoiceEventType.ERROR:
            self.engine_errors += 1

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics snapshot."""
        return {
            "calls_started": self.calls_started,
            "calls_ended": self.calls_ended,
            "final_messages": self.final_messages,
            "ignored_messages": self.ignored_messages,
            "engine_errors": self.engine_errors
        }
