"""Discovery of browser drivers registered as entry points."""

import logging
from importlib.metadata import EntryPoint, entry_points
from typing import Any

from page_probe.drivers.manifest import DriverManifest
from page_probe.errors import DriverNotFoundError, InvalidDriverError

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "page_probe.drivers"


def available_drivers() -> list[str]:
    """Keys of every installed driver, sorted."""
    return sorted(entry.name for entry in entry_points(group=ENTRY_POINT_GROUP))


def resolve_manifest(entry: EntryPoint) -> DriverManifest[Any]:
    """Load an entry point and check that it names a driver manifest."""
    target = entry.load()
    if not isinstance(target, DriverManifest):
        raise InvalidDriverError(
            f"Driver {entry.name!r} points at {entry.value!r}, which is a "
            f"{type(target).__name__}, not a DriverManifest"
        )
    return target


def load_driver_manifest(key: str) -> DriverManifest[Any]:
    """Find the driver registered under ``key``.

    Raises:
        DriverNotFoundError: If no installed distribution registers ``key``
        InvalidDriverError: If ``key`` resolves to something other than a manifest

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not matches:
        installed = ", ".join(available_drivers()) or "none"
        raise DriverNotFoundError(f"Unknown driver {key!r} (installed: {installed})")

    entry = matches[key]
    log.debug("Loading driver %s from %s", key, entry.value)
    return resolve_manifest(entry)
