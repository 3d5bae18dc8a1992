\
from __future__ import annotations
import importlib
import pkgutil
from typing import Dict, Type

from ..checks.base import CheckPlugin


def _discover_package_classes(pkg, base_cls) -> Dict[str, Type]:
    discovered: Dict[str, Type] = {}
    for m in pkgutil.iter_modules(pkg.__path__, pkg.__name__ + "."):
        module = importlib.import_module(m.name)
        for attr_name in dir(module):
            obj = getattr(module, attr_name)
            if isinstance(obj, type) and issubclass(obj, base_cls) and obj is not base_cls:
                name = getattr(obj, "NAME", obj.__name__).lower()
                discovered[name] = obj
    return discovered


def discover_check_plugins() -> Dict[str, CheckPlugin]:
    """Instantiate every check in ``metascan.checks``, in run order."""
    from .. import checks as checks_pkg  # lazy import
    classes = _discover_package_classes(checks_pkg, CheckPlugin)
    ordered = sorted(classes.items(), key=lambda item: (item[1].ORDER, item[0]))
    return {name: cls() for name, cls in ordered}


def select_check_plugins(all_plugins: Dict[str, CheckPlugin], selector: str) -> Dict[str, CheckPlugin]:
    selector = (selector or "").strip().lower()
    if selector == "all" or selector == "*":
        return dict(all_plugins)
    wanted = {t.strip() for t in selector.split(",") if t.strip()}
    # keep run order regardless of how the selector lists them
    return {name: plugin for name, plugin in all_plugins.items() if name in wanted}
