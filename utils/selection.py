"""
Canonical encoding of parameter selections.

A selection maps parameter group id -> parameter id. It is persisted as JSON
text with sorted integer keys, so two equal selections always produce the same
string and upsert matching can be done with a plain equality test in SQL.
"""

import json


def normalize_selection(selection: dict | None) -> dict[int, int]:
    if not selection:
        return {}
    return {int(group_id): int(parameter_id) for group_id, parameter_id in selection.items()}


def encode_selection(selection: dict | None) -> str:
    normalized = normalize_selection(selection)
    return json.dumps({str(group_id): normalized[group_id] for group_id in sorted(normalized)})


def decode_selection(raw: str | dict | None) -> dict[int, int]:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return normalize_selection(raw)
    return normalize_selection(json.loads(raw))
