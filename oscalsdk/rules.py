"""Indexing and lookup of rule sets defined through OSCAL component properties."""

from __future__ import annotations

import copy
import json
import re
from abc import ABC, abstractmethod
from typing import Any, Iterable, Sequence

from oscalsdk.components import Component
from oscalsdk.extensions import (
    CHECK_DESCRIPTION_PROP,
    CHECK_ID_PROP,
    PARAMETER_DEFAULT_PROP,
    PARAMETER_DESCRIPTION_PROP,
    PARAMETER_ID_PROP,
    RULE_DESCRIPTION_PROP,
    RULE_ID_PROP,
    Check,
    Parameter,
    Property,
    RuleSet,
    get_trestle_prop,
)

# Parameter properties may carry a numerical suffix, e.g. Parameter_Id_1,
# to describe several parameters of one rule.
_NUMBERED_PARAMETER = re.compile(r"Parameter_.*\d+")
_UNNUMBERED_SUFFIX = "0"

_PARAMETER_FIELDS = {
    PARAMETER_ID_PROP: "id",
    PARAMETER_DESCRIPTION_PROP: "description",
    PARAMETER_DEFAULT_PROP: "value",
}


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class RuleNotFoundError(LookupError):
    """Raised when a rule set cannot be found."""

    def __init__(self, message: str, rule_sets: Sequence[RuleSet] | None = None) -> None:
        super().__init__(message)
        self.rule_sets = list(rule_sets or [])


class ComponentsNotFoundError(ValueError):
    """Raised when there are no components to index."""


class Store(ABC):
    """Searches rule sets generated from OSCAL rule and check extensions."""

    @abstractmethod
    def get_by_rule_id(self, rule_id: str) -> RuleSet:
        """Return the rule set for the given rule id."""

    @abstractmethod
    def get_by_check_id(self, check_id: str) -> RuleSet:
        """Return the rule set that owns the given check id."""

    @abstractmethod
    def find_by_component(self, component_id: str) -> list[RuleSet]:
        """Return the rule sets of a component.

        For validation components only the relevant checks are returned.
        """


def _prop_key(prop: Property) -> tuple[tuple[str, Any], ...]:
    return tuple(sorted((key, repr(value)) for key, value in prop.items()))


def _group_props_by_remarks(props: Iterable[Property]) -> dict[str, list[Property]]:
    """Group distinct properties by their remarks; properties without remarks are skipped."""
    grouped: dict[str, dict[tuple[tuple[str, Any], ...], Property]] = {}
    for prop in props:
        remarks = prop.get("remarks", "")
        if not remarks:
            continue
        grouped.setdefault(remarks, {}).setdefault(_prop_key(prop), prop)
    return {remarks: list(members.values()) for remarks, members in grouped.items()}


def _split_name(prop_name: str) -> tuple[str, str]:
    if _NUMBERED_PARAMETER.fullmatch(prop_name):
        prefix, _, suffix = prop_name.rpartition("_")
        return prefix, suffix
    return prop_name, _UNNUMBERED_SUFFIX


class MemoryStore(Store):
    """An in-memory rule store. Not safe for concurrent use."""

    def __init__(self) -> None:
        self._nodes: dict[str, RuleSet] = {}
        self._by_check: dict[str, str] = {}
        self._rules_by_component: dict[str, dict[str, None]] = {}
        self._checks_by_validation_component: dict[str, dict[str, None]] = {}

    def index_all(self, components: Sequence[Component]) -> None:
        """Index rule and check information from the given components."""
        if not components:
            raise ComponentsNotFoundError(
                "failed to index components: no components not found"
            )
        for component in components:
            title = component.title()
            rules, checks = self._index_component(component)
            if rules:
                merged = dict(self._rules_by_component.get(title, {}))
                merged.update(rules)
                self._rules_by_component[title] = merged
            if checks:
                merged = dict(self._checks_by_validation_component.get(title, {}))
                merged.update(checks)
                self._checks_by_validation_component[title] = merged

    def _index_component(
        self, component: Component
    ) -> tuple[dict[str, None], dict[str, None]]:
        rules: dict[str, None] = {}
        checks: dict[str, None] = {}
        props = component.props()
        if not props:
            return rules, checks

        for prop_group in _group_props_by_remarks(props).values():
            rule_id_prop = get_trestle_prop(RULE_ID_PROP, prop_group)
            if rule_id_prop is None:
                continue

            existing = self._nodes.get(rule_id_prop.get("value", ""))
            rule_set = copy.deepcopy(existing) if existing is not None else RuleSet()
            check = Check()
            parameters: dict[str, Parameter] = {}

            for prop in prop_group:
                name, suffix = _split_name(prop.get("name", ""))
                value = prop.get("value", "")
                if name == RULE_ID_PROP:
                    rule_set.rule.id = value
                elif name == RULE_DESCRIPTION_PROP:
                    rule_set.rule.description = value
                elif name == CHECK_ID_PROP:
                    check.id = value
                elif name == CHECK_DESCRIPTION_PROP:
                    check.description = value
                elif name in _PARAMETER_FIELDS:
                    parameter = parameters.setdefault(suffix, Parameter())
                    setattr(parameter, _PARAMETER_FIELDS[name], value)

            if parameters:
                rule_set.rule.parameters = list(parameters.values())

            if check.id:
                rule_set.checks.append(check)
                self._by_check[check.id] = rule_set.rule.id
                checks[check.id] = None
            rules[rule_set.rule.id] = None
            self._nodes[rule_set.rule.id] = rule_set
        return rules, checks

    def get_by_rule_id(self, rule_id: str) -> RuleSet:
        rule_set = self._nodes.get(rule_id)
        if rule_set is None:
            raise RuleNotFoundError(
                f"rule {_quote(rule_id)}: associated rule object not found"
            )
        return copy.deepcopy(rule_set)

    def get_by_check_id(self, check_id: str) -> RuleSet:
        rule_id = self._by_check.get(check_id)
        if rule_id is None:
            raise RuleNotFoundError(
                f"failed to find rule for check {_quote(check_id)}: "
                "associated rule object not found"
            )
        return self.get_by_rule_id(rule_id)

    def find_by_component(self, component_id: str) -> list[RuleSet]:
        rule_ids = self._rules_by_component.get(component_id)
        if rule_ids is None:
            raise LookupError(f"failed to find rules for component {_quote(component_id)}")

        check_ids = self._checks_by_validation_component.get(component_id)
        rule_sets: list[RuleSet] = []
        errors: list[RuleNotFoundError] = []
        for rule_id in rule_ids:
            try:
                rule_set = self.get_by_rule_id(rule_id)
            except RuleNotFoundError as error:
                errors.append(error)
                rule_set = RuleSet()
            if check_ids is not None:
                rule_set.checks = [c for c in rule_set.checks if c.id in check_ids]
            rule_sets.append(rule_set)

        if errors:
            joined = "\n".join(str(error) for error in errors)
            raise RuleNotFoundError(
                f"failed to find rules for component {_quote(component_id)}: {joined}",
                rule_sets,
            )
        return rule_sets