"""
JSON Schema generation for tool argument records.

Pydantic produces the raw schema; this module flattens it into the
self-contained subset every vendor accepts: ``$ref`` pointers are inlined,
``title`` keywords are dropped and ``Optional[X]`` collapses to ``X``
(optionality is expressed by absence from ``required``).
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

__all__ = ["generate_schema"]

_SCHEMA_LIST_KEYS = ("anyOf", "allOf", "oneOf", "prefixItems")


def generate_schema(args_type: type) -> dict[str, Any]:
    """Derive the JSON Schema object describing ``args_type``.

    Field descriptions come from ``pydantic.Field(description=...)``, either
    as a default value or inside ``Annotated[...]``.
    """
    raw = TypeAdapter(args_type).json_schema()
    defs = raw.pop("$defs", {})
    schema = _clean(raw, defs, ())
    schema.setdefault("type", "object")
    schema.setdefault("properties", {})
    return schema


def _clean(node: dict[str, Any], defs: dict[str, Any], stack: tuple[str, ...]) -> dict[str, Any]:
    if "$ref" in node:
        ref_name = node["$ref"].rsplit("/", 1)[-1]
        if ref_name in stack:
            # self-referencing record; stop expanding
            resolved: dict[str, Any] = {"type": "object"}
        else:
            resolved = _clean(defs[ref_name], defs, stack + (ref_name,))
        siblings = {k: v for k, v in node.items() if k != "$ref"}
        return {**resolved, **_clean(siblings, defs, stack)}

    any_of = node.get("anyOf")
    if any_of is not None:
        non_null = [s for s in any_of if s.get("type") != "null"]
        if len(non_null) == 1 and len(non_null) < len(any_of):
            rest = {k: v for k, v in node.items() if k != "anyOf"}
            return {**_clean(non_null[0], defs, stack), **_clean(rest, defs, stack)}

    cleaned: dict[str, Any] = {}
    for key, value in node.items():
        if key == "title":
            continue
        if key == "default" and value is None:
            continue
        if key == "properties":
            cleaned[key] = {
                name: _clean(prop, defs, stack) for name, prop in value.items()
            }
        elif key in ("items", "additionalProperties") and isinstance(value, dict):
            cleaned[key] = _clean(value, defs, stack)
        elif key in _SCHEMA_LIST_KEYS:
            cleaned[key] = [_clean(item, defs, stack) for item in value]
        else:
            cleaned[key] = value
    return cleaned
