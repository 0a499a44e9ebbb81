"""Generation of OSCAL assessment plans from components and implementation settings.

OSCAL objects are produced in their JSON form: dictionaries keyed by OSCAL
field names such as ``local-definitions`` and ``reviewed-controls``.
"""

from __future__ import annotations

import json
import uuid
from typing import Any, Iterable, Mapping, Sequence

from oscalsdk.components import Component, ComponentType
from oscalsdk.extensions import TEST_PARAMETER_CLASS, TRESTLE_NAMESPACE
from oscalsdk.models import SAMPLE_REQUIRED_STRING, new_sample_metadata
from oscalsdk.modelutils import nil_if_empty
from oscalsdk.rules import ComponentsNotFoundError, MemoryStore, Store
from oscalsdk.settings import ImplementationSettings, apply_to_component

_DEFAULT_SUBJECT_TYPE = "component"
_DEFAULT_TASK_TYPE = "action"


def _new_uuid() -> str:
    return str(uuid.uuid4())


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def _new_task() -> dict[str, Any]:
    return {
        "uuid": _new_uuid(),
        "title": "Automated Assessment",
        "type": _DEFAULT_TASK_TYPE,
        "description": "Evaluation of defined rules for components.",
        "subjects": [],
        "associated-activities": [],
    }


def _create_reviewed_controls(selected_controls: list[dict[str, str]]) -> dict[str, Any]:
    return {"control-selections": [{"include-controls": selected_controls}]}


def _create_local_definitions(
    activities: list[dict[str, Any]], local_components: Iterable[Component]
) -> dict[str, Any]:
    local_definitions: dict[str, Any] = {"activities": activities}
    local_components = list(local_components)
    if not local_components:
        return local_definitions
    system_components = []
    for component in local_components:
        system_component = component.as_system_component()
        if system_component is not None:
            system_components.append(system_component)
    local_definitions["components"] = system_components
    return local_definitions


def all_reviewed_controls(implementation_settings: ImplementationSettings) -> dict[str, Any]:
    """Return reviewed controls holding every applicable control of the implementation."""
    return _create_reviewed_controls(implementation_settings.all_controls())


def reviewed_controls(
    rule_id: str, implementation_settings: ImplementationSettings
) -> dict[str, Any]:
    """Return reviewed controls holding the controls associated with a rule."""
    try:
        controls = implementation_settings.applicable_controls(rule_id)
    except LookupError as error:
        raise LookupError(
            f"error getting applicable controls for rule {rule_id}: {error}"
        ) from error
    return _create_reviewed_controls(controls)


def activities_for_component(
    component_id: str, store: Store, implementation_settings: ImplementationSettings
) -> list[dict[str, Any]]:
    """Return assessment activities for the component with the given title.

    Each rule becomes an activity titled by the rule id; its parameters become
    test-parameter properties and its checks become activity steps.
    """
    try:
        applied_rules = apply_to_component(
            component_id, store, implementation_settings.all_settings()
        )
    except LookupError as error:
        raise LookupError(
            f"error getting applied rules for component {component_id}: {error}"
        ) from error

    activities = []
    for rule_set in applied_rules:
        related_controls = reviewed_controls(rule_set.rule.id, implementation_settings)
        steps = [
            {"uuid": _new_uuid(), "title": check.id, "description": check.description}
            for check in rule_set.checks
        ]
        props: list[dict[str, str]] = [{"name": "method", "value": "TEST"}]
        props.extend(
            {
                "name": parameter.id,
                "value": parameter.value,
                "ns": TRESTLE_NAMESPACE,
                "class": TEST_PARAMETER_CLASS,
            }
            for parameter in rule_set.rule.parameters
        )
        activity: dict[str, Any] = {
            "uuid": _new_uuid(),
            "title": rule_set.rule.id,
            "description": rule_set.rule.description,
            "props": props,
            "related-controls": related_controls,
        }
        if nil_if_empty(steps) is not None:
            activity["steps"] = steps
        activities.append(activity)
    return activities


def assessment_activities(
    subject: Mapping[str, Any], activities: Iterable[Mapping[str, Any]]
) -> list[dict[str, Any]]:
    """Return associated activities linking each activity to the subject."""
    return [
        {"activity-uuid": activity.get("uuid", ""), "subjects": [subject]}
        for activity in activities
    ]


def assessment_assets(comps: Iterable[Component]) -> dict[str, Any]:
    """Return assessment assets built from the validation components given."""
    system_components = []
    used_components = []
    for component in comps:
        if component.type() != ComponentType.VALIDATION:
            continue
        system_component = component.as_system_component()
        if system_component is None:
            continue
        system_components.append(system_component)
        # Validation components are assumed to belong to a single platform.
        used_components.append({"component-uuid": system_component.get("uuid", "")})

    platform: dict[str, Any] = {"uuid": _new_uuid(), "title": SAMPLE_REQUIRED_STRING}
    if nil_if_empty(used_components) is not None:
        platform["uses-components"] = used_components
    return {"components": system_components, "assessment-platforms": [platform]}


def generate_assessment_plan(
    comps: Sequence[Component] | None,
    implementation_settings: ImplementationSettings,
    *,
    title: str = SAMPLE_REQUIRED_STRING,
    import_ssp: str = SAMPLE_REQUIRED_STRING,
) -> dict[str, Any]:
    """Generate an assessment plan for components and implementation settings.

    Without an SSP import, the assessed components are placed in the local
    definitions of the plan.
    """
    comps = list(comps or [])
    store = MemoryStore()
    try:
        store.index_all(comps)
    except ComponentsNotFoundError as error:
        raise ComponentsNotFoundError(
            f"failed processing components for assessment plan {_quote(title)}: {error}"
        ) from error

    all_activities: list[dict[str, Any]] = []
    subject_selectors: list[dict[str, str]] = []
    local_components: list[Component] = []
    task = _new_task()

    for component in comps:
        if component.type() == ComponentType.VALIDATION:
            continue
        component_title = component.title()
        try:
            component_activities = activities_for_component(
                component_title, store, implementation_settings
            )
        except LookupError as error:
            raise LookupError(
                "error generating assessment activities for component "
                f"{component_title}: {error}"
            ) from error
        if not component_activities:
            continue

        all_activities.extend(component_activities)
        selector = {"type": _DEFAULT_SUBJECT_TYPE, "subject-uuid": component.uuid()}
        subject_selectors.append(selector)
        subject = {"include-subjects": [selector], "type": _DEFAULT_SUBJECT_TYPE}
        task["associated-activities"].extend(
            assessment_activities(subject, component_activities)
        )
        if import_ssp == SAMPLE_REQUIRED_STRING:
            # Without a linked SSP the components are defined locally.
            local_components.append(component)

    task["subjects"].append(
        {"include-subjects": list(subject_selectors), "type": _DEFAULT_SUBJECT_TYPE}
    )

    metadata = new_sample_metadata()
    metadata["title"] = title

    return {
        "uuid": _new_uuid(),
        "import-ssp": {"href": import_ssp},
        "metadata": metadata,
        "assessment-subjects": [
            {"include-subjects": list(subject_selectors), "type": _DEFAULT_SUBJECT_TYPE}
        ],
        "local-definitions": _create_local_definitions(all_activities, local_components),
        "reviewed-controls": all_reviewed_controls(implementation_settings),
        "assessment-assets": assessment_assets(comps),
        "tasks": [task],
    }