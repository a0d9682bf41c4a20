import importlib.util
import sys
from pathlib import Path


def load_module(script_path: Path, module_name: str = "module"):
    spec = importlib.util.spec_from_file_location(module_name, str(script_path))
    assert spec is not None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module
