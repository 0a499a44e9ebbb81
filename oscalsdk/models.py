"""Loading OSCAL documents and creating sample model data."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import IO, Any

from oscalsdk.validation import OSCAL_VERSION, Validator

SAMPLE_REQUIRED_STRING = "REPLACE_ME"
_DEFAULT_VERSION = "0.1.0"

_MODEL_KEYS = frozenset(
    {
        "catalog",
        "profile",
        "component-definition",
        "system-security-plan",
        "assessment-plan",
        "assessment-results",
        "plan-of-action-and-milestones",
    }
)


def _load(reader: IO[Any], validator: Validator, key: str) -> dict[str, Any] | None:
    document = json.load(reader)
    if not isinstance(document, dict):
        raise ValueError("OSCAL document must be a JSON object")
    unknown = sorted(set(document) - _MODEL_KEYS)
    if unknown:
        raise ValueError(f"unknown field {unknown[0]!r}")
    validator.validate(document)
    return document.get(key)


def new_catalog(reader: IO[Any], validator: Validator) -> dict[str, Any] | None:
    """Read and validate an OSCAL catalog."""
    return _load(reader, validator, "catalog")


def new_profile(reader: IO[Any], validator: Validator) -> dict[str, Any] | None:
    """Read and validate an OSCAL profile."""
    return _load(reader, validator, "profile")


def new_component_definition(reader: IO[Any], validator: Validator) -> dict[str, Any] | None:
    """Read and validate an OSCAL component definition."""
    return _load(reader, validator, "component-definition")


def new_system_security_plan(reader: IO[Any], validator: Validator) -> dict[str, Any] | None:
    """Read and validate an OSCAL system security plan."""
    return _load(reader, validator, "system-security-plan")


def new_assessment_plan(reader: IO[Any], validator: Validator) -> dict[str, Any] | None:
    """Read and validate an OSCAL assessment plan."""
    return _load(reader, validator, "assessment-plan")


def new_assessment_results(reader: IO[Any], validator: Validator) -> dict[str, Any] | None:
    """Read and validate OSCAL assessment results."""
    return _load(reader, validator, "assessment-results")


def new_poam(reader: IO[Any], validator: Validator) -> dict[str, Any] | None:
    """Read and validate an OSCAL plan of action and milestones."""
    return _load(reader, validator, "plan-of-action-and-milestones")


def new_sample_metadata() -> dict[str, Any]:
    """Return OSCAL metadata with defaults for every required field."""
    return {
        "title": SAMPLE_REQUIRED_STRING,
        "last-modified": datetime.now(timezone.utc).isoformat(),
        "oscal-version": OSCAL_VERSION,
        "version": _DEFAULT_VERSION,
    }