"""
Test fixtures and utilities for map annotation tests.

Provides reusable fixtures for sessions, documents and UI collaborators.
"""

import json

import pytest
from unittest.mock import Mock


def polygon(min_lon, min_lat, max_lon, max_lat):
    return {
        "type": "Polygon",
        "coordinates": [
            [
                [min_lon, min_lat],
                [max_lon, min_lat],
                [max_lon, max_lat],
                [min_lon, max_lat],
                [min_lon, min_lat],
            ]
        ],
    }


@pytest.fixture
def config():
    """Default configuration without environment overrides."""
    from map_annotation.utils.config import get_config

    return get_config({})


@pytest.fixture
def clock():
    """Deterministic millisecond clock."""
    ticks = iter(range(1_700_000_000_000, 1_700_000_100_000, 1000))
    return lambda: next(ticks)


@pytest.fixture
def session(config, clock):
    """Create an AnnotationSession with a deterministic clock."""
    from map_annotation.core.annotation import AnnotationSession

    return AnnotationSession(config=config, clock=clock)


@pytest.fixture
def two_polygons_document():
    """FeatureCollection with two polygons."""
    return json.dumps(
        {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "id": "park",
                    "geometry": polygon(2.0, 48.0, 2.5, 48.5),
                    "properties": {"name": "Park", "area": 12.5},
                },
                {
                    "type": "Feature",
                    "geometry": polygon(3.0, 47.0, 3.25, 49.0),
                    "properties": {"name": "Field", "tags": ["a", "b"]},
                },
            ],
        }
    )


@pytest.fixture
def mixed_document():
    """FeatureCollection with a point, a line and a null geometry."""
    return json.dumps(
        {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "geometry": {"type": "Point", "coordinates": [-122.4194, 37.7749]},
                    "properties": {"name": "HQ"},
                },
                {
                    "type": "Feature",
                    "geometry": {
                        "type": "LineString",
                        "coordinates": [[-122.4, 37.77], [-122.41, 37.78]],
                    },
                    "properties": None,
                },
                {
                    "type": "Feature",
                    "id": 7,
                    "geometry": None,
                    "properties": {"note": "no geometry"},
                },
            ],
        }
    )


@pytest.fixture
def prompt():
    """Prompt collaborator answering 'Bench'."""
    return Mock(return_value="Bench")


@pytest.fixture
def editing_session(session):
    """Session in edit+add mode."""
    session.toggle_edit()
    session.enter_add()
    return session
