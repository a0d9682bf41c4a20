"""
Annotation session management.

Core logic for annotating a feature map with point markers.
UI-agnostic - can be used with any interface (GUI, Web, CLI).
"""

import logging
import time
from typing import Callable, List, Optional, Tuple, Union

from easydict import EasyDict as edict

from ...utils.config import get_config
from ..codec import geojson
from .events import AnnotationEvent, EventEmitter, EventType
from .modes import ModeController
from .state import (
    ClickAction,
    Coordinate,
    Extent,
    Feature,
    FeatureStore,
    HoverState,
    Marker,
    MarkerId,
    MenuOption,
)
from .utils import (
    allocate_marker_id,
    build_default_menu_options,
    compute_extent,
    compute_marker_statistics,
    marker_extent,
    normalize_info,
    offset_point,
)

logger = logging.getLogger(__name__)

PromptForInfo = Callable[[str], Optional[str]]


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class AnnotationSession:
    """
    Manages the state and logic of an annotation session.

    This class handles:
    - Import of base features and export of the merged document
    - Interaction modes (view / add / delete)
    - Marker lifecycle (create, edit info, delete)
    - Hover and selection state for the info box and action menu
    - Event emission for UI updates

    The session is UI-agnostic - it emits events that UI components
    can listen to, rather than directly manipulating UI elements.
    Prompts are injected per call, so a modal dialog of any toolkit can
    stand in for them.
    """

    def __init__(
        self,
        config: Optional[edict] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        """
        Initialize annotation session.

        Args:
            config: Configuration tree (see map_annotation.utils.config)
            clock: Returns the current time in milliseconds, used for ids
        """
        self.config = config if config is not None else get_config()
        self.clock = clock

        # Event emitter for UI notifications
        self.events = EventEmitter()

        self.store = FeatureStore()
        self.modes = ModeController(self.events)

        self.hovered: Optional[HoverState] = None
        self.selected: Optional[Marker] = None
        self.extent: Optional[Extent] = None

        self._last_marker_id: Optional[int] = None
        # Set while a prompt is outstanding
        self._prompt_pending = False

    @property
    def working_crs(self) -> str:
        return self.config.crs.working

    @property
    def storage_crs(self) -> str:
        return self.config.crs.storage

    # Modes

    def toggle_edit(self):
        self.modes.toggle_edit()

    def enter_add(self):
        self.modes.enter_add()

    def enter_delete(self):
        self.modes.enter_delete()

    def save(self):
        """End the editing session: leave every mode and drop the selection."""
        self.modes.save()
        self.clear_selection()
        self.events.emit(
            AnnotationEvent(EventType.SESSION_SAVED, {"num_markers": len(self.markers)})
        )

    # Import / export

    @property
    def base_features(self) -> List[Feature]:
        return self.store.base_features

    @property
    def markers(self) -> List[Marker]:
        return self.store.markers

    def load_file(
        self, raw_text: Union[str, bytes], restore_markers: bool = False
    ) -> Optional[Extent]:
        """
        Replace the base features with the content of a GeoJSON document.

        Args:
            raw_text: Document content
            restore_markers: Turn point features carrying ``id`` and ``info``
                attributes (as written by export) back into markers

        Returns:
            Combined extent of the imported features, None if they have none

        Raises:
            ParseError: If the document is invalid; the store is unchanged
        """
        try:
            features = geojson.import_geojson(raw_text, working_crs=self.working_crs)
        except geojson.ParseError as e:
            logger.warning("Import failed: %s", e)
            self.events.emit(AnnotationEvent(EventType.IMPORT_FAILED, {"error": str(e)}))
            raise

        markers = None
        if restore_markers:
            features, markers = self._split_markers(features)

        extent = compute_extent([f.geometry for f in features])
        restored_extent = marker_extent(markers or [])
        if restored_extent is not None:
            extent = (
                restored_extent if extent is None else extent.union(restored_extent)
            )

        self.store.replace_base(features)
        if markers is not None:
            self.store.replace_markers(markers)
            self._forget_missing_markers()
        self.extent = extent

        logger.info(
            "Loaded %d features%s",
            len(features),
            "" if markers is None else f" and {len(markers)} markers",
        )
        self.events.emit(
            AnnotationEvent(
                EventType.FEATURES_LOADED,
                {
                    "num_features": len(features),
                    "num_markers": len(self.markers),
                    "extent": extent,
                },
            )
        )
        return extent

    def export_file(self, indent: Optional[int] = None) -> str:
        """Serialize base features followed by markers as GeoJSON."""
        text = geojson.export_geojson(
            self.base_features,
            self.markers,
            working_crs=self.working_crs,
            storage_crs=self.storage_crs,
            indent=indent,
        )
        logger.info(
            "Exported %d features and %d markers",
            len(self.base_features),
            len(self.markers),
        )
        self.events.emit(
            AnnotationEvent(
                EventType.FILE_EXPORTED,
                {
                    "num_features": len(self.base_features),
                    "num_markers": len(self.markers),
                },
            )
        )
        return text

    def export_download(self) -> Tuple[str, str, str]:
        """Return (filename, mime type, content) for the download sink."""
        return (
            self.config.export.filename,
            self.config.export.mime_type,
            self.export_file(),
        )

    # Marker lifecycle

    def create_at(
        self, point: Coordinate, prompt_for_info: PromptForInfo
    ) -> Optional[Marker]:
        """
        Create a marker at a map coordinate.

        Only acts in edit+add mode; otherwise nothing happens and the prompt
        is not shown.

        Args:
            point: Position in the working coordinate system
            prompt_for_info: Asks the user for the marker info

        Returns:
            The new marker, or None if nothing was created
        """
        if not self.modes.can_create:
            logger.debug("Ignoring map click outside add mode")
            return None
        if self._prompt_pending:
            logger.debug("Ignoring map click while a prompt is open")
            return None

        info = normalize_info(self._prompt(prompt_for_info, ""))

        marker = Marker(
            id=self._next_marker_id(),
            position=(float(point[0]), float(point[1])),
            info=info,
        )
        self.store.add_marker(marker)
        logger.debug("Created marker %s at %s", marker.id, marker.position)

        self.events.emit(
            AnnotationEvent(
                EventType.MARKER_ADDED,
                {"marker": marker, "num_markers": len(self.markers)},
            )
        )
        return marker

    def edit_info(
        self, marker_id: MarkerId, prompt_for_info: PromptForInfo
    ) -> Optional[Marker]:
        """
        Replace a marker's info with the prompt result.

        Returns:
            The edited marker, or None when not in edit mode, in delete mode
            or when no marker has this id
        """
        if not self.modes.can_edit or self._prompt_pending:
            return None
        marker = self.store.find_marker(marker_id)
        if marker is None:
            logger.debug("No marker with id %r to edit", marker_id)
            return None

        marker.info = normalize_info(self._prompt(prompt_for_info, marker.info))
        logger.debug("Updated info of marker %s", marker.id)

        self.events.emit(AnnotationEvent(EventType.MARKER_UPDATED, {"marker": marker}))
        return marker

    def delete_at(self, marker_id: MarkerId) -> Optional[Marker]:
        """
        Remove a marker.

        Returns:
            The removed marker, or None if outside delete mode or unknown id
        """
        if not self.modes.can_delete or self._prompt_pending:
            return None
        marker = self.store.remove_marker(marker_id)
        if marker is None:
            logger.debug("No marker with id %r to delete", marker_id)
            return None

        logger.debug("Deleted marker %s", marker.id)
        self._forget_missing_markers()
        self.events.emit(
            AnnotationEvent(
                EventType.MARKER_REMOVED,
                {"marker": marker, "num_markers": len(self.markers)},
            )
        )
        return marker

    def route_click(
        self, marker_id: MarkerId, prompt_for_info: PromptForInfo
    ) -> ClickAction:
        """
        Dispatch a click on a marker.

        Edit mode without delete edits the info, edit mode with delete
        removes the marker, and outside edit mode the marker is selected.

        Returns:
            The branch that was taken
        """
        if self.modes.edit_mode and not self.modes.delete_mode:
            self.edit_info(marker_id, prompt_for_info)
            return ClickAction.EDIT
        if self.modes.edit_mode and self.modes.delete_mode:
            self.delete_at(marker_id)
            return ClickAction.DELETE
        marker = self.store.find_marker(marker_id)
        if marker is not None:
            self.select(marker)
        return ClickAction.SELECT

    # Hover and selection

    def on_hover_enter(self, marker: Marker, screen_point: Coordinate) -> HoverState:
        """Show the info box for a marker next to the pointer."""
        delta = (self.config.hover.offset_x, self.config.hover.offset_y)
        self.hovered = HoverState(marker, offset_point(screen_point, delta))
        self.events.emit(
            AnnotationEvent(EventType.HOVER_CHANGED, {"hovered": self.hovered})
        )
        return self.hovered

    def on_hover_leave(self):
        self.hovered = None
        self.events.emit(AnnotationEvent(EventType.HOVER_CHANGED, {"hovered": None}))

    def select(self, marker: Marker):
        self.selected = marker
        self.events.emit(
            AnnotationEvent(
                EventType.SELECTION_CHANGED,
                {"selected": marker, "options": self.menu_options_for(marker)},
            )
        )

    def clear_selection(self):
        """Close the action menu. Does nothing when no marker is selected."""
        if self.selected is None:
            return
        self.selected = None
        self.events.emit(
            AnnotationEvent(EventType.SELECTION_CHANGED, {"selected": None, "options": []})
        )

    def menu_options_for(self, marker: Marker) -> List[MenuOption]:
        """Action menu entries for a marker."""
        if marker.menu_options:
            return list(marker.menu_options)
        return build_default_menu_options(
            marker, self._on_menu_action, self.config.menu.external_url
        )

    # Introspection

    def get_render_data(self) -> dict:
        """State the render surface draws from."""
        return {
            "base_features": list(self.base_features),
            "markers": list(self.markers),
            "hovered": self.hovered,
            "selected": self.selected,
            "extent": self.extent,
        }

    def to_dict(self) -> dict:
        return {
            "modes": self.modes.state.to_dict(),
            "num_features": len(self.base_features),
            "markers": [m.to_dict() for m in self.markers],
            "marker_statistics": compute_marker_statistics(self.markers),
            "hovered_id": None if self.hovered is None else self.hovered.marker.id,
            "selected_id": None if self.selected is None else self.selected.id,
            "extent": None if self.extent is None else self.extent.to_tuple(),
        }

    # Internals

    def _prompt(self, prompt_for_info: PromptForInfo, default: str) -> Optional[str]:
        self._prompt_pending = True
        try:
            return prompt_for_info(default)
        finally:
            self._prompt_pending = False

    def _next_marker_id(self) -> int:
        marker_id = allocate_marker_id(
            self.clock(), self._last_marker_id, set(self.store.marker_ids())
        )
        self._last_marker_id = marker_id
        return marker_id

    def _on_menu_action(self, label: str, marker: Marker, extra: dict):
        logger.debug("Menu action %r on marker %s", label, marker.id)
        self.events.emit(
            AnnotationEvent(
                EventType.MENU_ACTION,
                {"label": label, "marker_id": marker.id, **extra},
            )
        )

    def _forget_missing_markers(self):
        """Drop hover/selection state that points at removed markers."""
        ids = set(self.store.marker_ids())
        if self.hovered is not None and self.hovered.marker.id not in ids:
            self.on_hover_leave()
        if self.selected is not None and self.selected.id not in ids:
            self.clear_selection()

    def _split_markers(
        self, features: List[Feature]
    ) -> Tuple[List[Feature], List[Marker]]:
        base, markers = [], []
        seen = set()
        for feature in features:
            attrs = feature.attributes
            if (
                feature.geometry_type == "Point"
                and not feature.geometry.is_empty
                and set(attrs) == {"id", "info"}
                and isinstance(attrs["id"], (int, str))
                and not isinstance(attrs["id"], bool)
                and attrs["id"] not in seen
            ):
                seen.add(attrs["id"])
                markers.append(
                    Marker(
                        id=attrs["id"],
                        position=(feature.geometry.x, feature.geometry.y),
                        info=normalize_info(attrs["info"]),
                    )
                )
            else:
                base.append(feature)
        return base, markers
