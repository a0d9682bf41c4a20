"""
Interaction modes of an annotation session.

Edit mode gates every marker mutation. Add and delete are mutually
exclusive sub-modes of edit mode; turning edit mode off leaves the
sub-mode flags untouched, so switching it back on resumes the previously
chosen sub-mode. Only ``save`` resets everything.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional

from .events import AnnotationEvent, EventEmitter, EventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModeState:
    edit_mode: bool = False
    add_mode: bool = False
    delete_mode: bool = False

    def to_dict(self):
        return asdict(self)


class ModeController:
    """State machine over the (edit, add, delete) flags."""

    def __init__(self, events: Optional[EventEmitter] = None):
        self.state = ModeState()
        self.events = events

    @property
    def edit_mode(self) -> bool:
        return self.state.edit_mode

    @property
    def add_mode(self) -> bool:
        return self.state.add_mode

    @property
    def delete_mode(self) -> bool:
        return self.state.delete_mode

    @property
    def can_create(self) -> bool:
        return self.edit_mode and self.add_mode

    @property
    def can_edit(self) -> bool:
        return self.edit_mode and not self.delete_mode

    @property
    def can_delete(self) -> bool:
        return self.edit_mode and self.delete_mode

    def toggle_edit(self) -> ModeState:
        return self._set(
            ModeState(not self.edit_mode, self.add_mode, self.delete_mode)
        )

    def enter_add(self) -> ModeState:
        return self._set(ModeState(self.edit_mode, True, False))

    def enter_delete(self) -> ModeState:
        return self._set(ModeState(self.edit_mode, False, True))

    def save(self) -> ModeState:
        return self._set(ModeState())

    def _set(self, new_state: ModeState) -> ModeState:
        previous, self.state = self.state, new_state
        if previous != new_state:
            logger.debug("Mode changed: %s -> %s", previous, new_state)
            if self.events is not None:
                self.events.emit(
                    AnnotationEvent(EventType.MODE_CHANGED, new_state.to_dict())
                )
        return new_state
