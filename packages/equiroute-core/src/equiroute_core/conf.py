"""Configuration helpers shared by EquiRoute apps."""

from functools import lru_cache
from importlib import import_module

from django.conf import settings

from .exceptions import ConfigurationError


def get_setting(name: str, default=None):
    """Get a setting with EQUIROUTE_ prefix."""
    return getattr(settings, f"EQUIROUTE_{name}", default)


@lru_cache(maxsize=64)
def import_class(dotted_path: str):
    """
    Import a class from a dotted path.

    Raises ConfigurationError for malformed paths, missing modules
    and missing attributes.
    """
    try:
        module_path, class_name = dotted_path.rsplit('.', 1)
    except ValueError:
        raise ConfigurationError(dotted_path, "Invalid dotted path format")

    try:
        module = import_module(module_path)
    except ImportError as e:
        raise ConfigurationError(dotted_path, f"Cannot import module: {e}")

    try:
        return getattr(module, class_name)
    except AttributeError:
        raise ConfigurationError(dotted_path, f"Class '{class_name}' not found in module")


def load_class(dotted_path: str, base_class: type):
    """
    Import a class from a dotted path and check it subclasses base_class.

    Returns the class itself; callers decide how to instantiate it.
    """
    cls = import_class(dotted_path)
    if not isinstance(cls, type) or not issubclass(cls, base_class):
        raise ConfigurationError(
            dotted_path,
            f"'{dotted_path.rsplit('.', 1)[-1]}' must be a subclass of {base_class.__name__}"
        )
    return cls


def clear_class_cache():
    """Clear the class import cache. Useful for testing."""
    import_class.cache_clear()
