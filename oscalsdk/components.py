"""Uniform access to OSCAL components and control implementations.

Component definitions and system security plans describe components and
their control implementations in different shapes. The adapters here wrap
the JSON form of either (dictionaries keyed by OSCAL field names) behind
one set of interfaces.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Mapping

OscalObject = Mapping[str, Any]

_DEFAULT_STATE = "operational"

_SHARED_OPTIONAL_FIELDS = (
    "props",
    "links",
    "protocols",
    "purpose",
    "remarks",
    "responsible-roles",
)


class ComponentType(str, Enum):
    """Valid component types in OSCAL."""

    VALIDATION = "validation"
    SOFTWARE = "software"
    SERVICE = "service"
    INTERCONNECTION = "interconnection"
    THIS_SYSTEM = "this-system"
    SYSTEM = "system"
    HARDWARE = "hardware"
    POLICY = "policy"
    PHYSICAL = "physical"
    PROCESS_PROCEDURE = "process-procedure"
    PLAN = "plan"
    GUIDANCE = "guidance"
    STANDARD = "standard"
    NETWORK = "network"


def _component_type(value: str) -> ComponentType | str:
    try:
        return ComponentType(value)
    except ValueError:
        return value


def _list(obj: OscalObject, key: str) -> list[Any]:
    return list(obj.get(key) or [])


def _with_by_component_props(obj: OscalObject) -> list[dict[str, Any]]:
    props = _list(obj, "props")
    for by_component in obj.get("by-components") or []:
        props.extend(by_component.get("props") or [])
    return props


def _shared_fields(obj: OscalObject) -> dict[str, Any]:
    shared: dict[str, Any] = {
        "uuid": obj.get("uuid", ""),
        "type": obj.get("type", ""),
        "title": obj.get("title", ""),
        "description": obj.get("description", ""),
    }
    for key in _SHARED_OPTIONAL_FIELDS:
        if obj.get(key):
            shared[key] = obj[key]
    return shared


class Component(ABC):
    """Common information about an OSCAL component."""

    @abstractmethod
    def title(self) -> str:
        """Return the component title."""

    @abstractmethod
    def type(self) -> ComponentType | str:
        """Return the component type."""

    @abstractmethod
    def uuid(self) -> str:
        """Return the component UUID."""

    @abstractmethod
    def props(self) -> list[dict[str, Any]]:
        """Return the properties of the component."""

    @abstractmethod
    def as_defined_component(self) -> dict[str, Any] | None:
        """Return the component as a component-definition component, or None."""

    @abstractmethod
    def as_system_component(self) -> dict[str, Any] | None:
        """Return the component as a system component, or None."""


class Statement(ABC):
    """An implemented statement of a requirement."""

    @abstractmethod
    def statement_id(self) -> str:
        """Return the statement identifier."""

    @abstractmethod
    def uuid(self) -> str:
        """Return the statement UUID."""

    @abstractmethod
    def props(self) -> list[dict[str, Any]]:
        """Return the properties of the statement."""


class Requirement(ABC):
    """An implemented requirement of a control implementation."""

    @abstractmethod
    def control_id(self) -> str:
        """Return the control identifier."""

    @abstractmethod
    def uuid(self) -> str:
        """Return the requirement UUID."""

    @abstractmethod
    def set_parameters(self) -> list[dict[str, Any]]:
        """Return the set-parameters of the requirement."""

    @abstractmethod
    def props(self) -> list[dict[str, Any]]:
        """Return the properties of the requirement."""

    @abstractmethod
    def statements(self) -> list[Statement]:
        """Return the implemented statements of the requirement."""


class Implementation(ABC):
    """A control implementation of a component."""

    @abstractmethod
    def requirements(self) -> list[Requirement]:
        """Return the implemented requirements."""

    @abstractmethod
    def set_parameters(self) -> list[dict[str, Any]]:
        """Return the set-parameters of the implementation."""

    @abstractmethod
    def props(self) -> list[dict[str, Any]]:
        """Return the properties of the implementation."""


class DefinedComponentAdapter(Component):
    """Wraps a component from a component definition."""

    def __init__(self, defined_component: OscalObject) -> None:
        self._component = defined_component

    def uuid(self) -> str:
        return self._component.get("uuid", "")

    def title(self) -> str:
        return self._component.get("title", "")

    def type(self) -> ComponentType | str:
        return _component_type(self._component.get("type", ""))

    def props(self) -> list[dict[str, Any]]:
        return _list(self._component, "props")

    def as_defined_component(self) -> dict[str, Any]:
        return dict(self._component)

    def as_system_component(self) -> dict[str, Any]:
        system_component = _shared_fields(self._component)
        system_component["status"] = {"state": _DEFAULT_STATE}
        return system_component


class ControlStatementAdapter(Statement):
    """Wraps a statement from a component definition."""

    def __init__(self, statement: OscalObject) -> None:
        self._statement = statement

    def statement_id(self) -> str:
        return self._statement.get("statement-id", "")

    def uuid(self) -> str:
        return self._statement.get("uuid", "")

    def props(self) -> list[dict[str, Any]]:
        return _list(self._statement, "props")


class ImplementedRequirementImplementationAdapter(Requirement):
    """Wraps an implemented requirement from a component definition."""

    def __init__(self, requirement: OscalObject) -> None:
        self._requirement = requirement

    def control_id(self) -> str:
        return self._requirement.get("control-id", "")

    def uuid(self) -> str:
        return self._requirement.get("uuid", "")

    def set_parameters(self) -> list[dict[str, Any]]:
        return _list(self._requirement, "set-parameters")

    def props(self) -> list[dict[str, Any]]:
        return _list(self._requirement, "props")

    def statements(self) -> list[Statement]:
        return [ControlStatementAdapter(stm) for stm in self._requirement.get("statements") or []]


class ControlImplementationSetAdapter(Implementation):
    """Wraps a control implementation set from a component definition."""

    def __init__(self, control_implementation: OscalObject) -> None:
        self._implementation = control_implementation

    def requirements(self) -> list[Requirement]:
        return [
            ImplementedRequirementImplementationAdapter(requirement)
            for requirement in self._implementation.get("implemented-requirements") or []
        ]

    def set_parameters(self) -> list[dict[str, Any]]:
        return _list(self._implementation, "set-parameters")

    def props(self) -> list[dict[str, Any]]:
        return _list(self._implementation, "props")


class SystemComponentAdapter(Component):
    """Wraps a component from a system security plan."""

    def __init__(self, system_component: OscalObject) -> None:
        self._component = system_component

    def uuid(self) -> str:
        return self._component.get("uuid", "")

    def title(self) -> str:
        return self._component.get("title", "")

    def type(self) -> ComponentType | str:
        return _component_type(self._component.get("type", ""))

    def props(self) -> list[dict[str, Any]]:
        return _list(self._component, "props")

    def as_defined_component(self) -> dict[str, Any]:
        return _shared_fields(self._component)

    def as_system_component(self) -> dict[str, Any]:
        return dict(self._component)


class StatementAdapter(Statement):
    """Wraps a statement from a system security plan."""

    def __init__(self, statement: OscalObject) -> None:
        self._statement = statement

    def statement_id(self) -> str:
        return self._statement.get("statement-id", "")

    def uuid(self) -> str:
        return self._statement.get("uuid", "")

    def props(self) -> list[dict[str, Any]]:
        return _with_by_component_props(self._statement)


class ImplementedRequirementAdapter(Requirement):
    """Wraps an implemented requirement from a system security plan."""

    def __init__(self, requirement: OscalObject) -> None:
        self._requirement = requirement

    def control_id(self) -> str:
        return self._requirement.get("control-id", "")

    def uuid(self) -> str:
        return self._requirement.get("uuid", "")

    def set_parameters(self) -> list[dict[str, Any]]:
        return _list(self._requirement, "set-parameters")

    def props(self) -> list[dict[str, Any]]:
        return _with_by_component_props(self._requirement)

    def statements(self) -> list[Statement]:
        return [StatementAdapter(stm) for stm in self._requirement.get("statements") or []]


class ControlImplementationAdapter(Implementation):
    """Wraps the control implementation of a system security plan."""

    def __init__(self, control_implementation: OscalObject) -> None:
        self._implementation = control_implementation

    def requirements(self) -> list[Requirement]:
        return [
            ImplementedRequirementAdapter(requirement)
            for requirement in self._implementation.get("implemented-requirements") or []
        ]

    def set_parameters(self) -> list[dict[str, Any]]:
        return _list(self._implementation, "set-parameters")

    def props(self) -> list[dict[str, Any]]:
        return []