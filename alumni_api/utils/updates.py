"""
Partial update helpers.

Update payloads are nested (``{"date": {"start": ...}}``) while the tables
store flat columns (``start_date``). Only keys that are present and non-null
are applied, so nested objects merge key by key.
"""
import enum
from typing import Any, Dict, Mapping, Optional


def _plain(value: Any) -> Any:
    if isinstance(value, list):
        return [item.value if isinstance(item, enum.Enum) else item for item in value]
    return value


def flatten_update(
    data: Mapping[str, Any],
    field_map: Optional[Mapping[str, str]] = None,
    prefix: str = "",
) -> Dict[str, Any]:
    """
    Flatten a nested update dict into ``{column: value}``.

    Dotted paths found in ``field_map`` are renamed to their column; nested
    dicts without a mapping are descended into. ``None`` leaves are dropped.
    """
    field_map = field_map or {}
    flat: Dict[str, Any] = {}

    for key, value in data.items():
        path = f"{prefix}{key}"
        if value is None:
            continue
        if path in field_map:
            flat[field_map[path]] = _plain(value)
        elif isinstance(value, dict):
            flat.update(flatten_update(value, field_map, prefix=f"{path}."))
        else:
            flat[path] = _plain(value)

    return flat


def merge_dict(current: Optional[Mapping[str, Any]], patch: Mapping[str, Any]) -> Dict[str, Any]:
    """Key-by-key merge for JSON columns; ``None`` in the patch keeps the current value"""
    merged = dict(current or {})
    for key, value in patch.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_dict(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_updates(obj: Any, values: Mapping[str, Any]) -> list:
    """Set attributes on a model; returns the names that changed"""
    changed = []
    for name, value in values.items():
        if getattr(obj, name) != value:
            setattr(obj, name, value)
            changed.append(name)
    return changed
