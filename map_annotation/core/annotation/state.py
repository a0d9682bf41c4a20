"""
State management for annotation sessions.

Contains the records handled by an annotation session and the store that
keeps imported features apart from user-created markers.
"""

from dataclasses import dataclass, field
from enum import Enum
from gettext import gettext as _
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from shapely.geometry.base import BaseGeometry

Coordinate = Tuple[float, float]
MarkerId = Union[int, str]


@dataclass(frozen=True)
class Extent:
    """Axis-aligned bounding box in the map working coordinate system."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_bounds(cls, bounds: Iterable[float]) -> "Extent":
        min_x, min_y, max_x, max_y = (float(v) for v in bounds)
        return cls(min_x, min_y, max_x, max_y)

    def union(self, other: "Extent") -> "Extent":
        return Extent(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def contains(self, other: "Extent") -> bool:
        return (
            self.min_x <= other.min_x
            and self.min_y <= other.min_y
            and self.max_x >= other.max_x
            and self.max_y >= other.max_y
        )

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Coordinate:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.min_x, self.min_y, self.max_x, self.max_y)


@dataclass(frozen=True)
class Feature:
    """
    Feature imported from a file.

    Geometry is kept in the working coordinate system. A feature without
    geometry (``"geometry": null`` in GeoJSON) has ``geometry=None``.
    """

    geometry: Optional[BaseGeometry]
    attributes: Dict[str, Any] = field(default_factory=dict)
    feature_id: Optional[Union[str, int]] = None

    @property
    def geometry_type(self) -> Optional[str]:
        return None if self.geometry is None else self.geometry.geom_type

    def extent(self) -> Optional[Extent]:
        if self.geometry is None or self.geometry.is_empty:
            return None
        return Extent.from_bounds(self.geometry.bounds)


@dataclass
class MenuOption:
    """Labeled entry of a marker's action menu."""

    label: str
    action: Callable[[], None]

    def invoke(self):
        self.action()


@dataclass
class Marker:
    """Point annotation created by the user."""

    id: MarkerId
    position: Coordinate
    info: str = ""
    menu_options: List[MenuOption] = field(default_factory=list)

    @property
    def display_text(self) -> str:
        """Text shown in the hover info box."""
        return self.info or _("No info available")

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "position": list(self.position),
            "info": self.info,
            "menu_options": [option.label for option in self.menu_options],
        }


@dataclass(frozen=True)
class HoverState:
    """Marker under the pointer and where its info box goes on screen."""

    marker: Marker
    display_position: Coordinate


class PointerKind(Enum):
    """Pointer events reported by the render surface."""

    CLICK = "click"
    HOVER_ENTER = "hoverEnter"
    HOVER_LEAVE = "hoverLeave"


@dataclass(frozen=True)
class PointerEvent:
    """
    Pointer event coming from the render surface.

    ``target_marker_id`` is set when the pointer is over a marker,
    ``map_coordinate`` is in the working coordinate system and
    ``screen_coordinate`` in pixels.
    """

    kind: PointerKind
    target_marker_id: Optional[MarkerId] = None
    map_coordinate: Optional[Coordinate] = None
    screen_coordinate: Optional[Coordinate] = None


class ClickAction(Enum):
    """Branch taken when a marker is clicked."""

    EDIT = "edit"
    DELETE = "delete"
    SELECT = "select"


class FeatureStore:
    """
    Holds imported base features and user markers as two ordered sequences.

    Base features are only ever replaced wholesale, markers are mutated one
    at a time.
    """

    def __init__(self):
        self.base_features: List[Feature] = []
        self.markers: List[Marker] = []

    def replace_base(self, features: Iterable[Feature]) -> List[Feature]:
        self.base_features = list(features)
        return self.base_features

    def replace_markers(self, markers: Iterable[Marker]) -> List[Marker]:
        self.markers = list(markers)
        return self.markers

    def add_marker(self, marker: Marker) -> Marker:
        if self.find_marker(marker.id) is not None:
            raise ValueError(f"Duplicate marker id: {marker.id!r}")
        self.markers.append(marker)
        return marker

    def find_marker(self, marker_id: MarkerId) -> Optional[Marker]:
        for marker in self.markers:
            if marker.id == marker_id:
                return marker
        return None

    def remove_marker(self, marker_id: MarkerId) -> Optional[Marker]:
        marker = self.find_marker(marker_id)
        if marker is not None:
            self.markers = [m for m in self.markers if m.id != marker_id]
        return marker

    def marker_ids(self) -> List[MarkerId]:
        return [m.id for m in self.markers]

    def __len__(self):
        return len(self.base_features) + len(self.markers)
