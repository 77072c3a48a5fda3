"""Parsing of the ``--resources`` input into ResourceSpec triples."""

from __future__ import annotations

from collections.abc import Callable, Iterator

from kubequery.models.resources import ResourceSpec, ResourceType
from kubequery.observability.logging import get_logger

_log = get_logger("parser")

InvalidEntryCallback = Callable[[str, str], None]

_VALID_TYPES = {t.value: t for t in ResourceType}


def parse_entry(entry: str) -> ResourceSpec:
    """Parse a single ``namespace:resourceType:resourceName`` entry.

    Raises:
        ValueError: wrong number of parts, an empty part, or an unsupported
            resource type.
    """
    parts = entry.split(":")
    if len(parts) != 3 or not all(p.strip() for p in parts):
        raise ValueError(f"Invalid resource format: {entry}")
    namespace, resource_type, resource_name = (p.strip() for p in parts)
    kind = _VALID_TYPES.get(resource_type)
    if kind is None:
        raise ValueError(f"Unsupported resource type: {resource_type}")
    return ResourceSpec(namespace=namespace, resource_type=kind, resource_name=resource_name)


def parse_resource_specs(text: str, on_invalid: InvalidEntryCallback | None = None) -> Iterator[ResourceSpec]:
    """Yield a ResourceSpec for every valid newline-separated entry of *text*.

    Invalid entries are logged, reported to *on_invalid* as
    ``(entry, reason)`` and skipped; parsing continues with the next line.
    Blank lines are ignored.
    """
    for line in text.split("\n"):
        entry = line.strip()
        if not entry:
            continue
        try:
            spec = parse_entry(entry)
        except ValueError as exc:
            _log.warning("resource_entry_skipped", entry=entry, reason=str(exc))
            if on_invalid is not None:
                on_invalid(entry, str(exc))
            continue
        yield spec
