"""
Tests for ModeController.
"""

import itertools

import pytest

from map_annotation.core.annotation import (
    EventEmitter,
    EventType,
    ModeController,
    ModeState,
)


@pytest.fixture
def controller():
    return ModeController()


class TestModeController:
    """Test suite for the interaction mode state machine."""

    def test_initial_state(self, controller):
        assert controller.state == ModeState(False, False, False)
        assert not controller.can_create
        assert not controller.can_edit
        assert not controller.can_delete

    def test_toggle_edit(self, controller):
        controller.toggle_edit()
        assert controller.edit_mode
        controller.toggle_edit()
        assert not controller.edit_mode

    def test_enter_add_clears_delete(self, controller):
        controller.enter_delete()
        controller.enter_add()
        assert controller.add_mode
        assert not controller.delete_mode

    def test_enter_delete_clears_add(self, controller):
        controller.enter_add()
        controller.enter_delete()
        assert controller.delete_mode
        assert not controller.add_mode

    def test_sub_mode_resumes_after_edit_toggle(self, controller):
        controller.toggle_edit()
        controller.enter_delete()
        controller.toggle_edit()

        assert controller.delete_mode
        assert not controller.can_delete

        controller.toggle_edit()
        assert controller.can_delete

    def test_save_resets_everything(self, controller):
        controller.toggle_edit()
        controller.enter_add()
        controller.save()
        assert controller.state == ModeState()

    def test_save_is_idempotent(self, controller):
        controller.toggle_edit()
        controller.enter_delete()
        once = controller.save()
        twice = controller.save()
        assert once == twice == ModeState()

    def test_add_and_delete_never_both_set(self, controller):
        """Any sequence of operations keeps add/delete exclusive."""
        operations = [
            controller.toggle_edit,
            controller.enter_add,
            controller.enter_delete,
            controller.save,
        ]
        for sequence in itertools.product(operations, repeat=4):
            controller.save()
            for op in sequence:
                op()
                assert not (controller.add_mode and controller.delete_mode)

    def test_guards(self, controller):
        controller.toggle_edit()
        assert controller.can_edit
        assert not controller.can_create

        controller.enter_add()
        assert controller.can_create
        assert controller.can_edit
        assert not controller.can_delete

        controller.enter_delete()
        assert controller.can_delete
        assert not controller.can_edit
        assert not controller.can_create

    def test_mode_changed_event(self):
        emitter = EventEmitter()
        received = []
        emitter.on(EventType.MODE_CHANGED, received.append)

        controller = ModeController(emitter)
        controller.toggle_edit()
        controller.enter_add()
        controller.enter_add()  # no change, no event

        assert len(received) == 2
        assert received[-1].data == {
            "edit_mode": True,
            "add_mode": True,
            "delete_mode": False,
        }
