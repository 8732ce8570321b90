"""Find candidate resource classes in importable modules and packages."""

import importlib
import inspect
import logging
import pkgutil
from collections.abc import Iterable
from types import ModuleType

from api_doc_reader.annotations.markers import find_api
from api_doc_reader.errors import DiscoveryError

logger = logging.getLogger(__name__)


def _import(name: str) -> ModuleType:
    try:
        return importlib.import_module(name)
    except ImportError as exc:
        raise DiscoveryError("Cannot import resource location", {"location": name, "reason": str(exc)}) from exc


def _modules(location: str) -> list[ModuleType]:
    """The module itself, plus every submodule when it is a package."""
    module = _import(location)
    modules = [module]
    if hasattr(module, "__path__"):
        for info in pkgutil.walk_packages(module.__path__, prefix=module.__name__ + "."):
            modules.append(_import(info.name))
    return modules


def resource_classes(module: ModuleType) -> list[type]:
    """Classes defined in ``module`` that carry the ``@api`` marker, in definition order."""
    return [
        obj
        for obj in vars(module).values()
        if inspect.isclass(obj) and obj.__module__ == module.__name__ and find_api(obj) is not None
    ]


def discover_resources(locations: Iterable[str]) -> list[type]:
    """Import each location and collect its resource classes without duplicates."""
    found: list[type] = []
    for location in locations:
        for module in _modules(location):
            for cls in resource_classes(module):
                if cls not in found:
                    found.append(cls)
    logger.info(f"Discovered {len(found)} resource class(es)")
    return found
