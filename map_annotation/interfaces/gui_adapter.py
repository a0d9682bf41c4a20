"""
GUI adapter for annotation session.

Bridges the AnnotationSession with a map widget and the dialogs around it.
"""

import logging
from gettext import gettext as _
from typing import Callable, List, Optional, Tuple, Union

from ..core.annotation import (
    AnnotationEvent,
    AnnotationSession,
    EventType,
    Extent,
    MenuOption,
    PointerEvent,
    PointerKind,
)
from ..core.codec import ParseError

logger = logging.getLogger(__name__)


class MapAnnotationAdapter:
    """
    Adapter connecting AnnotationSession to a map UI.

    Provides a compatibility layer that:
    - Translates pointer events from the map widget into session calls
    - Binds the toolkit's text prompt to the configured messages
    - Translates session events into render, info box and menu callbacks
    """

    def __init__(
        self,
        session: AnnotationSession,
        prompt: Callable[[str, str], Optional[str]],
        render_callback: Optional[Callable] = None,
        fit_extent_callback: Optional[Callable[[Extent], None]] = None,
        show_menu_callback: Optional[
            Callable[[List[MenuOption], Callable[[], None]], None]
        ] = None,
        hide_menu_callback: Optional[Callable[[], None]] = None,
        info_box_callback: Optional[Callable] = None,
        notify_callback: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize adapter.

        Args:
            session: Core annotation session
            prompt: Text prompt of the toolkit, called as prompt(message, default)
            render_callback: Redraws the map from session.get_render_data()
            fit_extent_callback: Frames the view on an extent
            show_menu_callback: Opens the action menu with (options, on_close)
            hide_menu_callback: Closes the action menu
            info_box_callback: Called with (text, position) or (None, None)
            notify_callback: Shows a message to the user
        """
        self.session = session
        self.prompt = prompt
        self.render_callback = render_callback
        self.fit_extent_callback = fit_extent_callback
        self.show_menu_callback = show_menu_callback
        self.hide_menu_callback = hide_menu_callback
        self.info_box_callback = info_box_callback
        self.notify_callback = notify_callback

        # Subscribe to session events
        self._setup_event_handlers()

    def _setup_event_handlers(self):
        """Setup event handlers for session events."""
        events = self.session.events
        events.on(EventType.FEATURES_LOADED, self._on_features_loaded)
        events.on(EventType.IMPORT_FAILED, self._on_import_failed)
        for event_type in (
            EventType.MARKER_ADDED,
            EventType.MARKER_UPDATED,
            EventType.MARKER_REMOVED,
        ):
            events.on(event_type, self._on_markers_changed)
        events.on(EventType.HOVER_CHANGED, self._on_hover_changed)
        events.on(EventType.SELECTION_CHANGED, self._on_selection_changed)

    def _on_features_loaded(self, event: AnnotationEvent):
        """Redraw and frame the imported features."""
        self._render()
        extent = event.data.get("extent")
        if extent is not None and self.fit_extent_callback:
            self.fit_extent_callback(extent)

    def _on_import_failed(self, event: AnnotationEvent):
        if self.notify_callback:
            self.notify_callback(
                _("Invalid file: {error}").format(error=event.data["error"])
            )

    def _on_markers_changed(self, event: AnnotationEvent):
        self._render()

    def _on_hover_changed(self, event: AnnotationEvent):
        if not self.info_box_callback:
            return
        hovered = event.data["hovered"]
        if hovered is None:
            self.info_box_callback(None, None)
        else:
            self.info_box_callback(
                hovered.marker.display_text, hovered.display_position
            )

    def _on_selection_changed(self, event: AnnotationEvent):
        if event.data["selected"] is None:
            if self.hide_menu_callback:
                self.hide_menu_callback()
        elif self.show_menu_callback:
            self.show_menu_callback(event.data["options"], self.close_menu)

    def _render(self):
        if self.render_callback:
            self.render_callback(self.session.get_render_data())

    # Prompts bound to their messages

    def _prompt_create(self, default: str) -> Optional[str]:
        return self.prompt(_(self.session.config.prompt.create_message), default)

    def _prompt_edit(self, default: str) -> Optional[str]:
        return self.prompt(_(self.session.config.prompt.edit_message), default)

    # Methods for the UI

    def open_file(self, raw_text: Union[str, bytes]) -> bool:
        """
        Import a file picked by the user.

        Returns:
            False if the file was rejected; the map is left unchanged
        """
        try:
            self.session.load_file(raw_text)
        except ParseError:
            logger.debug("Rejected file", exc_info=True)
            return False
        return True

    def handle_pointer_event(self, event: PointerEvent):
        """Dispatch a pointer event from the map widget."""
        if event.kind == PointerKind.CLICK:
            if event.target_marker_id is not None:
                self.session.route_click(event.target_marker_id, self._prompt_edit)
            elif event.map_coordinate is not None:
                self.session.create_at(event.map_coordinate, self._prompt_create)
        elif event.kind == PointerKind.HOVER_ENTER:
            marker = self.session.store.find_marker(event.target_marker_id)
            if marker is not None and event.screen_coordinate is not None:
                self.session.on_hover_enter(marker, event.screen_coordinate)
        elif event.kind == PointerKind.HOVER_LEAVE:
            self.session.on_hover_leave()

    def close_menu(self):
        """Close callback handed to the action menu."""
        self.session.clear_selection()

    def download(self) -> Tuple[str, str, str]:
        """(filename, mime type, content) of the merged document."""
        return self.session.export_download()

    # Mode controls

    def toggle_edit_mode(self):
        self.session.toggle_edit()

    def add_mode(self):
        self.session.enter_add()

    def delete_mode(self):
        self.session.enter_delete()

    def save(self):
        self.session.save()

    @property
    def is_edit_mode(self) -> bool:
        return self.session.modes.edit_mode

    @property
    def is_add_mode(self) -> bool:
        return self.session.modes.add_mode

    @property
    def is_delete_mode(self) -> bool:
        return self.session.modes.delete_mode
