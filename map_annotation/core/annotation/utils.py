"""
Pure utility functions for annotation logic.

These functions have no side effects and can be tested in isolation.
"""

from gettext import gettext as _
from typing import Callable, Collection, Iterable, List, Optional, Tuple

import numpy as np
from shapely.geometry.base import BaseGeometry

from .state import Coordinate, Extent, Marker, MarkerId, MenuOption


def compute_extent(geometries: Iterable[Optional[BaseGeometry]]) -> Optional[Extent]:
    """
    Compute the combined bounding extent of several geometries.

    Args:
        geometries: Geometries in a common coordinate system; None and
            empty geometries are skipped

    Returns:
        Union of the individual extents, or None when nothing has an extent
    """
    bounds = [
        geom.bounds
        for geom in geometries
        if geom is not None and not geom.is_empty
    ]
    if not bounds:
        return None

    arr = np.asarray(bounds, dtype=np.float64)
    return Extent(
        float(arr[:, 0].min()),
        float(arr[:, 1].min()),
        float(arr[:, 2].max()),
        float(arr[:, 3].max()),
    )


def offset_point(point: Coordinate, delta: Coordinate) -> Coordinate:
    """
    Shift a screen point by a pixel delta.

    Args:
        point: (x, y) screen coordinate
        delta: (dx, dy) offset

    Returns:
        Shifted (x, y)
    """
    return (point[0] + delta[0], point[1] + delta[1])


def allocate_marker_id(
    now_ms: int, last_id: Optional[int], taken: Collection[MarkerId]
) -> int:
    """
    Pick a new marker id based on the creation time in milliseconds.

    Ids never go backwards, so two markers created within the same
    millisecond (or after a clock step back) still get distinct ids.

    Args:
        now_ms: Current time in milliseconds
        last_id: Last id handed out, if any
        taken: Ids already in use

    Returns:
        Unused id
    """
    candidate = int(now_ms)
    if last_id is not None and candidate <= last_id:
        candidate = last_id + 1
    while candidate in taken:
        candidate += 1
    return candidate


def build_default_menu_options(
    marker: Marker,
    on_action: Callable[[str, Marker, dict], None],
    external_url: str,
) -> List[MenuOption]:
    """
    Build the action menu shown for a marker without own options.

    Args:
        marker: Selected marker
        on_action: Called with (label, marker, extra) when an entry is invoked
        external_url: Target of the "External Link" entry

    Returns:
        Ordered list of menu options
    """

    def bind(label: str, extra: Optional[dict] = None) -> MenuOption:
        return MenuOption(label, lambda: on_action(label, marker, extra or {}))

    return [
        bind(_("New Feature")),
        bind(_("Info"), {"info": marker.info}),
        bind(_("New Settings")),
        bind(_("External Link"), {"url": external_url}),
    ]


def compute_marker_statistics(markers: List[Marker]) -> dict:
    """
    Compute statistics about markers.

    Args:
        markers: List of markers

    Returns:
        Dictionary with statistics
    """
    if not markers:
        return {
            "num_total": 0,
            "num_with_info": 0,
            "num_without_info": 0,
            "ratio_with_info": 0.0,
        }

    num_with_info = sum(1 for m in markers if m.info)

    return {
        "num_total": len(markers),
        "num_with_info": num_with_info,
        "num_without_info": len(markers) - num_with_info,
        "ratio_with_info": num_with_info / len(markers),
    }


def normalize_info(value: Optional[str]) -> str:
    """Map a cancelled prompt (None) to empty info."""
    return "" if value is None else str(value)


def marker_extent(markers: Iterable[Marker]) -> Optional[Extent]:
    """Extent covering marker positions."""
    positions: List[Tuple[float, float]] = [m.position for m in markers]
    if not positions:
        return None
    arr = np.asarray(positions, dtype=np.float64)
    return Extent(
        float(arr[:, 0].min()),
        float(arr[:, 1].min()),
        float(arr[:, 0].max()),
        float(arr[:, 1].max()),
    )
