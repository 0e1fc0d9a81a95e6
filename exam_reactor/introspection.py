"""Resolution of test classes and discovery of their test methods."""

import importlib
import inspect
from collections.abc import Sequence


def resolve_test_class(class_name: str) -> type:
    """Import a test class from ``package.module:Class`` or ``package.module.Class``.

    Raises:
        LookupError: If the module cannot be imported or holds no such class

    """
    if ":" in class_name:
        module_name, _, qualname = class_name.partition(":")
    else:
        module_name, _, qualname = class_name.rpartition(".")

    if not module_name or not qualname:
        raise LookupError(f"Invalid test class path: {class_name}")

    try:
        target: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise LookupError(f"Cannot import module {module_name}: {exc}") from exc

    for part in qualname.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise LookupError(f"Test class not found: {class_name}") from exc

    if not inspect.isclass(target):
        raise LookupError(f"Not a class: {class_name}")
    return target


def is_test_method_name(name: str) -> bool:
    """Private and dunder methods are never tests."""
    return not name.startswith("_")


def discover_test_methods(cls: type) -> Sequence[str]:
    """Return the public methods of a test class, sorted by name."""
    return [
        name
        for name, _ in inspect.getmembers(cls, inspect.isfunction)
        if is_test_method_name(name)
    ]
