"""
Adapt callback-style host APIs into future-returning ones.

:func:`promisify` wraps one ``func(*args, callback)`` function so each call
returns an :class:`asyncio.Future`; :func:`bind_known_callbacks` applies it to
the named methods of a host namespace; :func:`install_catalog` applies a whole
YAML catalogue of namespaces to a host root object.
"""

from .config import BridgeSettings, load_settings
from .core import (
    BindingCatalog,
    BlockingCaller,
    CatalogLoadError,
    HostError,
    HostFault,
    InstallReport,
    LastErrorSlot,
    NamespaceBinding,
    add_async_wrappers,
    bind_known_callbacks,
    install_catalog,
    last_error,
    load_default_catalog,
    promisify,
)

__all__ = [
    "BindingCatalog",
    "BlockingCaller",
    "BridgeSettings",
    "CatalogLoadError",
    "HostError",
    "HostFault",
    "InstallReport",
    "LastErrorSlot",
    "NamespaceBinding",
    "add_async_wrappers",
    "bind_known_callbacks",
    "install_catalog",
    "last_error",
    "load_default_catalog",
    "load_settings",
    "promisify",
]
