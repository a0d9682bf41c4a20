"""
Core annotation module - UI-agnostic annotation logic.

This module provides the base abstractions for annotating a feature map
with point markers that can be used with any UI framework (Tkinter, Web,
CLI, etc).
"""

from .session import AnnotationSession
from .events import AnnotationEvent, EventType, EventEmitter
from .modes import ModeController, ModeState
from .state import (
    ClickAction,
    Extent,
    Feature,
    FeatureStore,
    HoverState,
    Marker,
    MenuOption,
    PointerEvent,
    PointerKind,
)

__all__ = [
    "AnnotationSession",
    "AnnotationEvent",
    "EventType",
    "EventEmitter",
    "ModeController",
    "ModeState",
    "ClickAction",
    "Extent",
    "Feature",
    "FeatureStore",
    "HoverState",
    "Marker",
    "MenuOption",
    "PointerEvent",
    "PointerKind",
]
