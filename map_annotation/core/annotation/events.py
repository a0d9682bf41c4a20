"""
Event system for the annotation workflow.

Provides a decoupled way for the annotation core to notify the render
surface and other UI collaborators about state changes without depending
on a specific UI framework.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur during annotation."""

    # File events
    FEATURES_LOADED = "features_loaded"
    IMPORT_FAILED = "import_failed"
    FILE_EXPORTED = "file_exported"

    # Marker events
    MARKER_ADDED = "marker_added"
    MARKER_UPDATED = "marker_updated"
    MARKER_REMOVED = "marker_removed"

    # Presenter events
    HOVER_CHANGED = "hover_changed"
    SELECTION_CHANGED = "selection_changed"
    MENU_ACTION = "menu_action"

    # Session events
    MODE_CHANGED = "mode_changed"
    SESSION_SAVED = "session_saved"


@dataclass
class AnnotationEvent:
    """Event that occurs during annotation."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Simple event emitter for pub/sub pattern.

    Allows components to subscribe to events without tight coupling.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def off(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Unsubscribe from an event type."""
        if event_type in self._listeners:
            self._listeners[event_type].remove(callback)

    def emit(self, event: AnnotationEvent):
        """Emit an event to all subscribers."""
        for callback in list(self._listeners.get(event.event_type, [])):
            try:
                callback(event)
            except Exception:
                # A broken listener must not stop the others
                logger.exception(
                    "Error in listener for %s", event.event_type.value
                )

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
