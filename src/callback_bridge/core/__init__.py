"""
Core adapter machinery.

The adapter and binder depend only on the standard library; the catalogue
loader adds PyYAML and the blocking caller adds anyio.
"""

from .adapter import HostError, describe_error, normalize_payload, promisify, split_secondary_callback
from .binder import add_async_wrappers, bind_known_callbacks
from .blocking import BlockingCaller
from .catalog import BindingCatalog, CatalogLoadError, InstallReport, NamespaceBinding, install_catalog, load_default_catalog, resolve_path
from .logging import configure_logging, get_logger, log_progress
from .signal import HostFault, LastErrorSlot, last_error

__all__ = [
    "BindingCatalog",
    "BlockingCaller",
    "CatalogLoadError",
    "HostError",
    "HostFault",
    "InstallReport",
    "LastErrorSlot",
    "NamespaceBinding",
    "add_async_wrappers",
    "bind_known_callbacks",
    "configure_logging",
    "describe_error",
    "get_logger",
    "install_catalog",
    "last_error",
    "load_default_catalog",
    "log_progress",
    "normalize_payload",
    "promisify",
    "resolve_path",
    "split_secondary_callback",
]
