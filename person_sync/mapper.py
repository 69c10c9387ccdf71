from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from person_sync.errors import ValidationError
from person_sync.paths import MISSING, get_path, set_path

NAME_KEY = "name"

Transform = Callable[[Any], Any]


@dataclass(frozen=True)
class FieldMapping:
    """One row of the mapping table: input document path -> Pipedrive person key."""
    source_path: str
    target_key: str

    @classmethod
    def from_dict(cls, row: Any) -> "FieldMapping":
        if not isinstance(row, Mapping):
            raise ValidationError(f"Mapping entry must be an object, got {type(row).__name__}")
        source = row.get("inputKey", row.get("source_path"))
        target = row.get("pipedriveKey", row.get("target_key"))
        for label, value in (("inputKey", source), ("pipedriveKey", target)):
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"Mapping entry {dict(row)!r} has no usable '{label}'")
        return cls(source_path=source.strip(), target_key=target.strip())


def as_text(value: Any) -> str:
    """JSON text for non-string values (null, true, 1 rather than None, True, 1.0)."""
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return json.dumps(value)


def primary_value(value: Any) -> List[Dict[str, Any]]:
    """Pipedrive stores email/phone as a list of {value, primary} entries."""
    return [{"value": as_text(value), "primary": True}]


DEFAULT_TRANSFORMS: Dict[str, Transform] = {
    "email": primary_value,
    "phone": primary_value,
}


def load_mappings(rows: Any) -> List[FieldMapping]:
    if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Sequence):
        raise ValidationError("Mappings must be an array")
    return [r if isinstance(r, FieldMapping) else FieldMapping.from_dict(r) for r in rows]


def find_name_mapping(mappings: Iterable[FieldMapping]) -> FieldMapping:
    for m in mappings:
        if m.target_key == NAME_KEY:
            return m
    raise ValidationError(
        "No mapping found for 'name' field - name mapping is required for person lookup"
    )


def map_document(
    document: Any,
    mappings: Any,
    transforms: Optional[Dict[str, Transform]] = None,
) -> Dict[str, Any]:
    """
    Build a Pipedrive person payload from `document` following `mappings` in order.

    Source paths that don't resolve are left out of the payload. Keys present in
    `transforms` are written whole at the top level (last mapping wins); every
    other key goes through set_path, so "org.address.city" builds nested dicts.
    """
    if document is None:
        raise ValidationError("Input data is required")
    table = load_mappings(mappings)
    transforms = DEFAULT_TRANSFORMS if transforms is None else transforms

    name_mapping = find_name_mapping(table)
    if not get_path(document, name_mapping.source_path):
        raise ValidationError(
            f"Name value not found in input data using path: {name_mapping.source_path}"
        )

    payload: Dict[str, Any] = {}
    for m in table:
        value = get_path(document, m.source_path)
        if value is MISSING:
            continue
        transform = transforms.get(m.target_key)
        if transform is not None:
            payload[m.target_key] = transform(value)
        else:
            set_path(payload, m.target_key, value)
    return payload


def resolve_name(document: Any, mappings: Any) -> str:
    """Return the trimmed person name used for the Pipedrive search."""
    name_mapping = find_name_mapping(load_mappings(mappings))
    value = get_path(document, name_mapping.source_path)
    if not isinstance(value, str):
        kind = "nothing" if value is MISSING else type(value).__name__
        raise ValidationError(f"Expected string for person name, but got {kind}")
    name = value.strip()
    if not name:
        raise ValidationError("Person name cannot be empty or whitespace only")
    return name
