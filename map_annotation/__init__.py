"""Interactive point annotation of GeoJSON feature files."""
