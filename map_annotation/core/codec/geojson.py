"""
GeoJSON import/export.

Import reprojects geometries from the document CRS into the map working
CRS; export concatenates base features and markers and reprojects them
back into the storage CRS.
"""

import json
import logging
from functools import lru_cache
from typing import Any, Dict, Iterable, List, Optional, Union

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError
from shapely.errors import ShapelyError
from shapely.geometry import Point, mapping, shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import transform

from ..annotation.state import Feature, Marker

logger = logging.getLogger(__name__)

DEFAULT_CRS = "EPSG:4326"
GEOMETRY_TYPES = (
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
    "GeometryCollection",
)


class ParseError(ValueError):
    """Raised when a document is not a well-formed GeoJSON document."""


@lru_cache(maxsize=32)
def get_transformer(source_crs: str, target_crs: str) -> Transformer:
    return Transformer.from_crs(source_crs, target_crs, always_xy=True)


def reproject(
    geometry: Optional[BaseGeometry], source_crs: str, target_crs: str
) -> Optional[BaseGeometry]:
    if geometry is None or source_crs == target_crs:
        return geometry
    return transform(get_transformer(source_crs, target_crs).transform, geometry)


def read_document_crs(document: Dict[str, Any]) -> str:
    """
    Return the CRS a document is stored in.

    RFC 7946 documents are always WGS 84; older documents may carry a named
    ``crs`` member.
    """
    crs = document.get("crs")
    if crs is None:
        return DEFAULT_CRS
    try:
        name = crs["properties"]["name"]
        return CRS.from_user_input(name).to_string()
    except (KeyError, TypeError) as exc:
        raise ParseError(f"Unsupported crs member: {crs!r}") from exc
    except CRSError as exc:
        raise ParseError(f"Unknown coordinate reference system: {exc}") from exc


def _parse_geometry(raw: Any) -> Optional[BaseGeometry]:
    if raw is None:
        return None
    if not isinstance(raw, dict) or raw.get("type") not in GEOMETRY_TYPES:
        raise ParseError(f"Invalid geometry: {raw!r}")
    try:
        return shape(raw)
    except (ShapelyError, ValueError, TypeError, KeyError, IndexError) as exc:
        raise ParseError(f"Invalid {raw['type']} geometry: {exc}") from exc


def _parse_feature(raw: Any, idx: int) -> Feature:
    if not isinstance(raw, dict) or raw.get("type") != "Feature":
        raise ParseError(f"Feature #{idx} is not a GeoJSON Feature")
    if "geometry" not in raw:
        raise ParseError(f"Feature #{idx} has no geometry member")

    properties = raw.get("properties")
    if properties is None:
        properties = {}
    if not isinstance(properties, dict):
        raise ParseError(f"Feature #{idx} has invalid properties")

    return Feature(
        geometry=_parse_geometry(raw["geometry"]),
        attributes=dict(properties),
        feature_id=raw.get("id"),
    )


def import_geojson(
    raw_text: Union[str, bytes], working_crs: str = "EPSG:3857"
) -> List[Feature]:
    """
    Parse a GeoJSON document into features.

    Args:
        raw_text: Document content
        working_crs: CRS the returned geometries are expressed in

    Returns:
        Features in document order

    Raises:
        ParseError: If the document is not valid GeoJSON
    """
    if isinstance(raw_text, bytes):
        try:
            raw_text = raw_text.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Document is not UTF-8: {exc}") from exc

    try:
        document = json.loads(raw_text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ParseError(f"Document is not valid JSON: {exc}") from exc

    if not isinstance(document, dict):
        raise ParseError("Document is not a GeoJSON object")

    doc_type = document.get("type")
    if doc_type == "FeatureCollection":
        raw_features = document.get("features")
        if not isinstance(raw_features, list):
            raise ParseError("FeatureCollection has no features array")
        features = [_parse_feature(raw, idx) for idx, raw in enumerate(raw_features)]
    elif doc_type == "Feature":
        features = [_parse_feature(document, 0)]
    elif doc_type in GEOMETRY_TYPES:
        features = [Feature(geometry=_parse_geometry(document))]
    else:
        raise ParseError(f"Unsupported GeoJSON type: {doc_type!r}")

    source_crs = read_document_crs(document)
    features = [
        Feature(
            geometry=reproject(f.geometry, source_crs, working_crs),
            attributes=f.attributes,
            feature_id=f.feature_id,
        )
        for f in features
    ]
    logger.debug(
        "Parsed %d features from %s into %s", len(features), source_crs, working_crs
    )
    return features


def feature_to_geojson(
    feature: Feature, working_crs: str, storage_crs: str
) -> Dict[str, Any]:
    geometry = reproject(feature.geometry, working_crs, storage_crs)
    gj_feature: Dict[str, Any] = {"type": "Feature"}
    if feature.feature_id is not None:
        gj_feature["id"] = feature.feature_id
    gj_feature["geometry"] = None if geometry is None else mapping(geometry)
    gj_feature["properties"] = dict(feature.attributes)
    return gj_feature


def marker_to_feature(marker: Marker) -> Feature:
    """Point feature carrying a marker's id and info."""
    return Feature(
        geometry=Point(marker.position),
        attributes={"id": marker.id, "info": marker.info},
    )


def export_geojson(
    base_features: Iterable[Feature],
    markers: Iterable[Marker],
    working_crs: str = "EPSG:3857",
    storage_crs: str = DEFAULT_CRS,
    indent: Optional[int] = None,
) -> str:
    """
    Serialize base features followed by markers into a FeatureCollection.

    Args:
        base_features: Imported features, working CRS
        markers: User markers, working CRS
        working_crs: CRS of the in-memory geometries
        storage_crs: CRS of the written document
        indent: JSON indentation

    Returns:
        GeoJSON document text
    """
    features = list(base_features) + [marker_to_feature(m) for m in markers]
    document: Dict[str, Any] = {
        "type": "FeatureCollection",
        "features": [
            feature_to_geojson(f, working_crs, storage_crs) for f in features
        ],
    }
    if CRS.from_user_input(storage_crs) != CRS.from_user_input(DEFAULT_CRS):
        document["crs"] = {"type": "name", "properties": {"name": storage_crs}}
    return json.dumps(document, indent=indent)
