"""Configuration helpers for django-carbon-registry."""

from functools import lru_cache
from importlib import import_module

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured


DEFAULTS = {
    "NOTARY_BACKEND": "django_carbon_registry.notary.MockNotary",
    "PROJECT_SEQUENCE_WIDTH": 4,
    "BATCH_SEQUENCE_WIDTH": 3,
    "SERIAL_PREFIX": "CR",
    "ACTIVITY_DEFAULT_LIMIT": 50,
    "ACTIVITY_MAX_LIMIT": 500,
}


def get_setting(name: str, default=None):
    """Get a setting with REGISTRY_ prefix, falling back to package defaults."""
    if default is None:
        default = DEFAULTS.get(name)
    return getattr(settings, f"REGISTRY_{name}", default)


@lru_cache(maxsize=16)
def load_notary(dotted_path: str):
    """
    Import and instantiate a notary backend from dotted path.

    Raises ImproperlyConfigured for bad imports or non-subclass backends.
    """
    from .notary import BaseNotary

    try:
        module_path, class_name = dotted_path.rsplit(".", 1)
    except ValueError:
        raise ImproperlyConfigured(f"Invalid notary backend path '{dotted_path}'")

    try:
        module = import_module(module_path)
    except ImportError as e:
        raise ImproperlyConfigured(f"Cannot import notary module '{module_path}': {e}")

    backend_class = getattr(module, class_name, None)
    if not isinstance(backend_class, type) or not issubclass(backend_class, BaseNotary):
        raise ImproperlyConfigured(
            f"'{dotted_path}' must be a subclass of BaseNotary"
        )

    return backend_class()


def get_notary():
    """Return the configured notary backend instance."""
    return load_notary(get_setting("NOTARY_BACKEND"))


def clear_notary_cache():
    """Clear the notary loading cache. Useful for testing."""
    load_notary.cache_clear()
