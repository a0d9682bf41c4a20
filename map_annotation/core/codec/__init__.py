"""
Codecs between interchange documents and the annotation store.
"""

from .geojson import ParseError, export_geojson, import_geojson

__all__ = ["ParseError", "export_geojson", "import_geojson"]
