"""
Default configuration for annotation sessions.

Values can be overridden with ``MAP_ANNOTATION_*`` environment variables,
see :func:`map_annotation.utils.env.load_cfg_from_env`.
"""

import copy
import os
from typing import Dict, Optional

from easydict import EasyDict as edict

from .env import load_cfg_from_env

DEFAULT_CONFIG = edict(
    {
        "crs": {
            # Coordinate system the map works in
            "working": "EPSG:3857",
            # Coordinate system GeoJSON files are stored in (RFC 7946)
            "storage": "EPSG:4326",
        },
        "hover": {
            "offset_x": -60,
            "offset_y": -60,
        },
        "export": {
            "filename": "merged-map.geojson",
            "mime_type": "application/geo+json",
        },
        "menu": {
            "external_url": "https://example.com",
        },
        "prompt": {
            "create_message": "Enter info for this icon:",
            "edit_message": "Edit info:",
        },
    }
)


def get_config(env: Optional[Dict[str, str]] = None) -> edict:
    """
    Build a configuration tree.

    Args:
        env: Environment mapping to read overrides from (defaults to os.environ)

    Returns:
        Fresh copy of DEFAULT_CONFIG with overrides applied
    """
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if env is None:
        env = dict(os.environ)
    return load_cfg_from_env(cfg, env)
