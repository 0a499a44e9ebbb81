"""Framework settings that tailor component rule sets for implementation or assessment.

OSCAL objects are handled in their JSON form: dictionaries keyed by OSCAL
field names such as ``control-id``, ``set-parameters`` and ``props``.
"""

from __future__ import annotations

import dataclasses
import posixpath
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from oscalsdk.components import ControlImplementationSetAdapter, Implementation, Requirement
from oscalsdk.extensions import (
    FRAMEWORK_PROP,
    RULE_ID_PROP,
    TEST_PARAMETER_CLASS,
    RuleSet,
    find_all_props,
    get_trestle_prop,
)
from oscalsdk.rules import Store

_EXPECTED_PATH_PARTS = 3
_MODEL_ID_INDEX = 1
_FILENAME_INDEX = 2


class RulesNotFoundError(LookupError):
    """Raised when no rule sets of a component match the given settings."""


@dataclass
class Settings:
    """Rules mapped to a requirement and the parameter values selected for them."""

    mapped_rules: set[str] = field(default_factory=set)
    selected_parameters: dict[str, str] = field(default_factory=dict)

    def apply_parameter_settings(self, rule_set: RuleSet) -> RuleSet:
        """Return the rule set with selected parameter values applied.

        The given rule set is left unchanged; a copy carries the new values.
        """
        if not self.selected_parameters or not rule_set.rule.parameters:
            return rule_set
        parameters = [
            dataclasses.replace(
                parameter,
                value=self.selected_parameters.get(parameter.id, parameter.value),
            )
            for parameter in rule_set.rule.parameters
        ]
        rule = dataclasses.replace(rule_set.rule, parameters=parameters)
        return dataclasses.replace(rule_set, rule=rule, checks=list(rule_set.checks))

    def contains_rule(self, rule_id: str) -> bool:
        """Return whether the rule id is mapped in these settings."""
        return rule_id in self.mapped_rules


@dataclass
class FrameworkSource:
    """Data describing a control source or framework."""

    title: str = ""
    description: str = ""
    href: str = ""


def _set_parameters(
    parameters: Iterable[Mapping[str, Any]], selected: dict[str, str]
) -> None:
    for parameter in parameters:
        values = parameter.get("values") or []
        # Parameters used for rule selection map to exactly one value.
        if len(values) != 1:
            continue
        selected[parameter.get("param-id", "")] = values[0]


def new_settings(rules: Iterable[str], parameters: Mapping[str, str]) -> Settings:
    """Return settings with the given mapped rules and selected parameters."""
    return Settings(mapped_rules=set(rules), selected_parameters=dict(parameters))


def settings_from_implemented_requirement(requirement: Requirement) -> Settings:
    """Return the settings described by an implemented requirement and its statements."""
    result = new_settings((), {})
    for prop in find_all_props(requirement.props(), name=RULE_ID_PROP):
        result.mapped_rules.add(prop.get("value", ""))
    _set_parameters(requirement.set_parameters(), result.selected_parameters)
    for statement in requirement.statements():
        for prop in find_all_props(statement.props(), name=RULE_ID_PROP):
            result.mapped_rules.add(prop.get("value", ""))
    return result


@dataclass
class ImplementationSettings:
    """Settings for rule sets at the control implementation and control level."""

    settings: Settings = field(default_factory=Settings)
    implemented_req_settings: dict[str, Settings] = field(default_factory=dict)
    controls_by_id: dict[str, dict[str, str]] = field(default_factory=dict)
    controls_by_rules: dict[str, set[str]] = field(default_factory=dict)

    def all_settings(self) -> Settings:
        """Return the settings of the overall control implementation."""
        return self.settings

    def all_controls(self) -> list[dict[str, str]]:
        """Return a control selection for every control in the implementation."""
        return [dict(control) for control in self.controls_by_id.values()]

    def by_control_id(self, control_id: str) -> Settings:
        """Return the requirement settings for a control id."""
        try:
            return self.implemented_req_settings[control_id]
        except KeyError:
            raise LookupError(f"control {control_id} not found in settings") from None

    def applicable_controls(self, rule_id: str) -> list[dict[str, str]]:
        """Return the control selections that a rule applies to."""
        controls = self.controls_by_rules.get(rule_id)
        if controls is None:
            raise LookupError(f"rule id {rule_id} not found in settings")
        selected = []
        for control_id in sorted(controls):
            control = self.controls_by_id.get(control_id)
            if control is None:
                raise LookupError(
                    f"assessed control object {control_id} not found for rule {rule_id}"
                )
            selected.append(dict(control))
        return selected

    def merge(self, implementation: Implementation) -> None:
        """Merge another control implementation, including its requirements."""
        _set_parameters(implementation.set_parameters(), self.settings.selected_parameters)
        for requirement in implementation.requirements():
            control_id = requirement.control_id()
            existing = self.implemented_req_settings.get(control_id)
            if existing is None:
                self._add_requirement(requirement)
                continue
            incoming = settings_from_implemented_requirement(requirement)
            if not incoming.mapped_rules:
                continue
            for rule_id in incoming.mapped_rules:
                self.controls_by_rules.setdefault(rule_id, set()).add(control_id)
                self.settings.mapped_rules.add(rule_id)
                existing.mapped_rules.add(rule_id)
            existing.selected_parameters.update(incoming.selected_parameters)

    def _add_requirement(self, requirement: Requirement) -> None:
        control_id = requirement.control_id()
        requirement_settings = settings_from_implemented_requirement(requirement)
        # Requirements without mapped rules are not recorded.
        if not requirement_settings.mapped_rules:
            return
        for rule_id in requirement_settings.mapped_rules:
            self.controls_by_rules.setdefault(rule_id, set()).add(control_id)
            self.controls_by_id[control_id] = {"control-id": control_id}
            self.settings.mapped_rules.add(rule_id)
        self.implemented_req_settings[control_id] = requirement_settings


def new_implementation_settings(control_implementation: Implementation) -> ImplementationSettings:
    """Return settings populated from a control implementation and its requirements."""
    implementation = ImplementationSettings()
    _set_parameters(
        control_implementation.set_parameters(),
        implementation.settings.selected_parameters,
    )
    for requirement in control_implementation.requirements():
        implementation._add_requirement(requirement)
    return implementation


def new_assessment_activities_settings(activities: Iterable[Mapping[str, Any]]) -> Settings:
    """Return settings from assessment activities.

    An activity title names a rule; its test-parameter properties give parameter values.
    """
    result = Settings()
    for activity in activities:
        props = activity.get("props")
        # Rule-based activities carry at least one property.
        if props is None:
            continue
        for prop in find_all_props(props, prop_class=TEST_PARAMETER_CLASS):
            result.selected_parameters[prop.get("name", "")] = prop.get("value", "")
        result.mapped_rules.add(activity.get("title", ""))
    return result


def get_framework_short_name(implementation: Mapping[str, Any]) -> str | None:
    """Return the short name of the control source of an implementation, or None.

    The framework property is used first; otherwise the name is taken from a
    source of the form ``$MODEL/$MODEL_ID/$MODEL.json``.
    """
    props = implementation.get("props")
    if props is not None:
        prop = get_trestle_prop(FRAMEWORK_PROP, props)
        if prop is not None:
            return prop.get("value", "")

    parts = posixpath.normpath(implementation.get("source", "")).split("/")
    if len(parts) == _EXPECTED_PATH_PARTS and parts[_FILENAME_INDEX].endswith(".json"):
        return parts[_MODEL_ID_INDEX]
    return None


def by_framework(
    framework: str, control_implementations: Iterable[Mapping[str, Any]]
) -> tuple[ImplementationSettings, FrameworkSource]:
    """Return merged settings and source data for the implementations of a framework."""
    implementation_settings: ImplementationSettings | None = None
    source = FrameworkSource()
    for control_implementation in control_implementations:
        if get_framework_short_name(control_implementation) != framework:
            continue
        adapter = ControlImplementationSetAdapter(control_implementation)
        if implementation_settings is None:
            implementation_settings = new_implementation_settings(adapter)
            source = FrameworkSource(
                title=framework,
                description=control_implementation.get("description", ""),
                href=control_implementation.get("source", ""),
            )
        else:
            implementation_settings.merge(adapter)

    if implementation_settings is None:
        raise LookupError(f"framework {framework} is not in control implementations")
    return implementation_settings, source


def apply_to_component(component_id: str, store: Store, settings: Settings) -> list[RuleSet]:
    """Return the component's rule sets that the settings map, with parameters applied."""
    resolved = [
        settings.apply_parameter_settings(rule_set)
        for rule_set in store.find_by_component(component_id)
        if settings.contains_rule(rule_set.rule.id)
    ]
    if not resolved:
        raise RulesNotFoundError(f"component {component_id}: no rules found with criteria")
    return resolved