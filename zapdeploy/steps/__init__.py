import importlib
import pkgutil
from typing import List

from zapdeploy.constants import STEPS_PACKAGE
from zapdeploy.step import Step


def discover_steps(package: str = STEPS_PACKAGE) -> List[Step]:
    """Collects the STEPS declared by every module of the steps package, in module order."""
    module = importlib.import_module(package)
    steps = list()
    for module_info in sorted(pkgutil.iter_modules(module.__path__), key=lambda m: m.name):
        step_module = importlib.import_module(f"{package}.{module_info.name}")
        steps.extend(getattr(step_module, "STEPS", []))
    return steps
