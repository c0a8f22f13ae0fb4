"""
Catalogue of host namespaces and their callback-style methods.

Each entry names a namespace by its dotted path from the host root object and
lists the methods that follow the trailing-callback convention. Entries may
declare ``members``: sub-objects of the namespace that all expose the same
method set (for example the ``sync``, ``local`` and ``managed`` storage
areas), so the list is written once and applied to every instance.

Catalogues are maintained as YAML documents and loaded into typed
:class:`NamespaceBinding` entries. :meth:`BindingCatalog.install` walks a host
object and runs the selective binder on every target it can resolve.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, MutableMapping, Optional, Sequence

import yaml

from .binder import bind_known_callbacks
from .logging import get_logger, log_progress
from .signal import LastErrorSlot

if TYPE_CHECKING:
    from ..config import BridgeSettings

LOGGER = get_logger(__name__)

DEFAULT_CATALOG_PACKAGE = "callback_bridge.resources.catalogs"
DEFAULT_CATALOG_FILE = "chrome.yaml"


class CatalogLoadError(RuntimeError):
    """Raised when a catalogue YAML file cannot be parsed or validated."""


def _is_dotted_identifier(value: str) -> bool:
    return bool(value) and all(part.isidentifier() for part in value.split("."))


@dataclass(slots=True)
class NamespaceBinding:
    """
    Callback-style methods exposed by one host namespace.

    Parameters
    ----------
    namespace:
        Dotted path from the host root (``tabs``, ``contentSettings``).
    methods:
        Method names following the trailing-callback convention.
    members:
        Optional sub-objects of ``namespace`` sharing ``methods``. When set the
        namespace itself is not bound, only ``namespace.member`` for each member.
    reference:
        Documentation link for the namespace.
    notes:
        Free-form maintainer notes.
    """

    namespace: str
    methods: Sequence[str]
    members: Sequence[str] = field(default_factory=tuple)
    reference: Optional[str] = None
    notes: Optional[str] = None

    def validate(self) -> None:
        """Validate internal consistency of the entry."""

        if not _is_dotted_identifier(self.namespace):
            raise CatalogLoadError(f"Namespace '{self.namespace}' must be a dotted path of identifiers.")
        if not self.methods:
            raise CatalogLoadError(f"Namespace '{self.namespace}' does not list any methods.")
        seen: set[str] = set()
        for method in self.methods:
            if not method.isidentifier():
                raise CatalogLoadError(f"Method '{method}' in '{self.namespace}' is not a valid identifier.")
            if method in seen:
                raise CatalogLoadError(f"Method '{method}' is listed twice in '{self.namespace}'.")
            seen.add(method)
        for member in self.members:
            if not _is_dotted_identifier(member):
                raise CatalogLoadError(f"Member '{member}' of '{self.namespace}' must be a dotted path of identifiers.")

    def targets(self) -> Iterator[str]:
        """Yield the dotted paths this entry binds."""

        if not self.members:
            yield self.namespace
            return
        for member in self.members:
            yield f"{self.namespace}.{member}"

    def to_json(self) -> str:
        payload = {
            "namespace": self.namespace,
            "methods": list(self.methods),
            "members": list(self.members),
            "targets": list(self.targets()),
            "reference": self.reference,
            "notes": self.notes,
        }
        return json.dumps(payload, ensure_ascii=False, indent=2)


@dataclass(slots=True)
class InstallReport:
    """Outcome of :meth:`BindingCatalog.install`."""

    bound: Dict[str, List[str]] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def method_count(self) -> int:
        return sum(len(names) for names in self.bound.values())


def resolve_path(root: Any, path: str) -> Any:
    """Follow a dotted path from ``root``; return ``None`` if any segment is absent."""

    current = root
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, MutableMapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


class BindingCatalog:
    """In-memory catalogue of :class:`NamespaceBinding` entries keyed by namespace."""

    def __init__(self, entries: Iterable[NamespaceBinding] = ()) -> None:
        self._entries: MutableMapping[str, NamespaceBinding] = {}
        for entry in entries:
            self.register(entry)

    def register(self, binding: NamespaceBinding) -> None:
        """Register or overwrite an entry."""

        binding.validate()
        self._entries[binding.namespace] = binding

    def unregister(self, namespace: str) -> None:
        self._entries.pop(namespace, None)

    def get(self, namespace: str) -> Optional[NamespaceBinding]:
        return self._entries.get(namespace)

    def require(self, namespace: str) -> NamespaceBinding:
        """Retrieve an entry or raise an informative error."""

        binding = self.get(namespace)
        if binding is None:
            raise KeyError(f"Namespace '{namespace}' is not in the catalog.")
        return binding

    def list(self) -> List[NamespaceBinding]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[NamespaceBinding]:
        return iter(list(self._entries.values()))

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._entries

    def install(
        self,
        host: Any,
        *,
        skip: Iterable[str] = (),
        signal: Optional[LastErrorSlot] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> InstallReport:
        """
        Bind every catalogued target found on ``host``.

        Targets whose path cannot be resolved are recorded in
        :attr:`InstallReport.missing` and otherwise ignored; optional host
        namespaces are expected to be absent on some hosts. Namespaces listed
        in ``skip`` are recorded in :attr:`InstallReport.skipped`.
        """

        excluded = set(skip)
        report = InstallReport()
        for binding in self._entries.values():
            if binding.namespace in excluded:
                report.skipped.append(binding.namespace)
                continue
            for path in binding.targets():
                target = resolve_path(host, path)
                if not target:
                    report.missing.append(path)
                    continue
                report.bound[path] = bind_known_callbacks(target, binding.methods, signal=signal, loop=loop)

        log_progress(
            LOGGER,
            "Catalog installed",
            level=logging.DEBUG,
            status="completed",
            extra={"target": len(report.bound), "count": report.method_count, "missing": report.missing or None},
        )
        return report

    @classmethod
    def from_yaml(cls, path: Path | str) -> "BindingCatalog":
        """Load entries from a YAML document."""

        location = Path(path)
        if not location.is_file():
            raise CatalogLoadError(f"Catalog file '{location}' does not exist.")

        try:
            with location.open("r", encoding="utf-8") as handle:
                payload = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise CatalogLoadError(f"Failed to parse '{location}': {exc}") from exc

        if not isinstance(payload, list):
            raise CatalogLoadError(f"Catalog file '{location}' must contain a list of namespaces.")

        return cls(cls._binding_from_payload(entry, origin=location) for entry in payload)

    @staticmethod
    def _binding_from_payload(entry: object, *, origin: Path) -> NamespaceBinding:
        if not isinstance(entry, dict):
            raise CatalogLoadError(f"Invalid entry in '{origin}': expected mapping, got {type(entry)!r}")

        try:
            binding = NamespaceBinding(
                namespace=str(entry["namespace"]),
                methods=tuple(_ensure_list(entry["methods"])),
                members=tuple(_ensure_list(entry.get("members"))),
                reference=_optional_str(entry.get("reference")),
                notes=_optional_str(entry.get("notes")),
            )
        except KeyError as exc:
            raise CatalogLoadError(f"Missing required key {exc!s} in '{origin}'.") from exc

        binding.validate()
        return binding


def _ensure_list(value: object | None) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value]
    return [str(value)]


def _optional_str(value: object | None) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def load_default_catalog() -> BindingCatalog:
    """Load the catalogue shipped with the package."""

    with resources.as_file(resources.files(DEFAULT_CATALOG_PACKAGE) / DEFAULT_CATALOG_FILE) as resolved:
        return BindingCatalog.from_yaml(resolved)


def install_catalog(
    host: Any,
    catalog: Optional[BindingCatalog] = None,
    *,
    settings: Optional["BridgeSettings"] = None,
    signal: Optional[LastErrorSlot] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> InstallReport:
    """
    Adapt the callback-style methods of ``host`` in place.

    The catalogue is taken from ``catalog`` when given, otherwise from
    ``settings.catalog_path``, otherwise the packaged default. Call once per
    host object.
    """

    if catalog is None:
        if settings is not None and settings.catalog_path is not None:
            catalog = BindingCatalog.from_yaml(settings.catalog_path)
        else:
            catalog = load_default_catalog()
    skip = settings.skip_namespaces if settings is not None else ()
    return catalog.install(host, skip=skip, signal=signal, loop=loop)


__all__ = [
    "BindingCatalog",
    "CatalogLoadError",
    "InstallReport",
    "NamespaceBinding",
    "install_catalog",
    "load_default_catalog",
    "resolve_path",
]
