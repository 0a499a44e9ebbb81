"""Helpers for inspecting OSCAL model data."""

from __future__ import annotations

import dataclasses
from typing import Any, Sequence, TypeVar

T = TypeVar("T")


def nil_if_empty(items: Sequence[T] | None) -> Sequence[T] | None:
    """Return None for a missing or empty sequence, otherwise the sequence itself."""
    if not items:
        return None
    return items


def find_values_by_name(model: Any, name: str) -> list[str]:
    """Return every string value stored under the key ``name`` at any depth."""
    results: list[str] = []
    seen: set[int] = set()

    def walk(value: Any, key: str) -> None:
        if isinstance(value, str):
            if key == name:
                results.append(value)
            return
        if isinstance(value, (dict, list, tuple)) or (
            dataclasses.is_dataclass(value) and not isinstance(value, type)
        ):
            if id(value) in seen:
                return
            seen.add(id(value))
        if isinstance(value, dict):
            for child_key, child in value.items():
                if isinstance(child_key, str):
                    walk(child, child_key)
        elif isinstance(value, (list, tuple)):
            for index, child in enumerate(value):
                walk(child, str(index))
        elif dataclasses.is_dataclass(value) and not isinstance(value, type):
            for model_field in dataclasses.fields(value):
                walk(getattr(value, model_field.name), model_field.name)

    walk(model, "")
    return results


def has_duplicate_values_by_name(model: Any, name: str) -> bool:
    """Return True if any value stored under ``name`` appears more than once."""
    seen: set[str] = set()
    for value in find_values_by_name(model, name):
        if value in seen:
            return True
        seen.add(value)
    return False