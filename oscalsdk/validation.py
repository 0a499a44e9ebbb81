"""Semantic validation of decoded OSCAL models."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from oscalsdk.modelutils import has_duplicate_values_by_name

OSCAL_VERSION = "1.1.3"

OscalModels = Mapping[str, Any]


class ValidationError(Exception):
    """Raised when OSCAL data is not valid."""

    def __init__(self, type: str, model: str, err: BaseException) -> None:
        super().__init__(f"{type}: {err}")
        self.type = type
        self.model = model
        self.err = err


class _JoinedError(Exception):
    """Several errors reported together, one message per line."""

    def __init__(self, errors: list[BaseException]) -> None:
        super().__init__("\n".join(str(error) for error in errors))
        self.errors = errors


class Validator(ABC):
    """Validates decoded OSCAL models, raising on invalid data."""

    @abstractmethod
    def validate(self, models: OscalModels) -> None:
        """Raise if ``models`` is not valid."""


class NoopValidator(Validator):
    """A validator that accepts everything."""

    def validate(self, models: OscalModels) -> None:
        return None


class UuidValidator(Validator):
    """Rejects models with duplicate UUIDs, or duplicate parameter ids in profiles."""

    def validate(self, models: OscalModels) -> None:
        if has_duplicate_values_by_name(models, "uuid"):
            raise ValidationError("uuid", "", ValueError("duplicate UUIDs found"))
        if models.get("profile") is not None and has_duplicate_values_by_name(
            models, "param-id"
        ):
            raise ValidationError("uuid", "profile", ValueError("duplicate ParamIds found"))


@dataclass(frozen=True)
class ValidatorFunc(Validator):
    """A validator backed by a plain function."""

    func: Callable[[OscalModels], None]

    def validate(self, models: OscalModels) -> None:
        self.func(models)

    def __call__(self, models: OscalModels) -> None:
        self.validate(models)


def validate_all(*args: Validator) -> ValidatorFunc:
    """Return a validator running every given validator and reporting all failures."""
    validators = args

    def run(models: OscalModels) -> None:
        errors: list[BaseException] = []
        for validator in validators:
            try:
                validator.validate(models)
            except Exception as error:  # noqa: BLE001 - every failure is reported
                errors.append(error)
        if errors:
            raise ValidationError("all", "", _JoinedError(errors))

    return ValidatorFunc(run)