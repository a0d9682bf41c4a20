import map_annotation.utils.i18n  # noqa:F401

from easydict import EasyDict as edict

from .env import load_cfg_from_env


def test_load_cfg_from_env():
    input_dict = {"MAP_ANNOTATION_a": "2", "MAP_ANNOTATION_eoq__trabson": "3"}
    loaded = load_cfg_from_env(edict(), input_dict)
    assert loaded.a == "2"
    assert loaded.eoq.trabson == "3"


def test_load_cfg_from_env_keeps_default_types():
    cfg = edict({"hover": {"offset_x": -60, "scale": 1.0, "enabled": False}})
    loaded = load_cfg_from_env(
        cfg,
        {
            "MAP_ANNOTATION_HOVER__OFFSET_X": "-30",
            "MAP_ANNOTATION_HOVER__SCALE": "0.5",
            "MAP_ANNOTATION_HOVER__ENABLED": "yes",
        },
    )
    assert loaded.hover.offset_x == -30
    assert loaded.hover.scale == 0.5
    assert loaded.hover.enabled is True


def test_load_cfg_from_env_ignores_other_variables():
    loaded = load_cfg_from_env(edict(), {"PATH": "/usr/bin", "MAP_a": "1"})
    assert loaded == {}
