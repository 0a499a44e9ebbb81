"""OSCAL-to-OSCAL transformations between component definitions, plans and results."""

from __future__ import annotations

import uuid
from typing import Any, Iterable, Mapping

from oscalsdk.components import (
    Component,
    ComponentType,
    ControlImplementationAdapter,
    DefinedComponentAdapter,
    SystemComponentAdapter,
)
from oscalsdk.plans import generate_assessment_plan
from oscalsdk.results import generate_assessment_results
from oscalsdk.settings import by_framework, new_implementation_settings

_THIS_SYSTEM_TITLE = "This System"


def component_definitions_to_assessment_plan(
    definitions: Iterable[Mapping[str, Any]], framework: str
) -> dict[str, Any]:
    """Build one assessment plan from component definitions for a framework."""
    all_components: list[Component] = []
    all_implementations: list[Mapping[str, Any]] = []
    for definition in definitions:
        for component in definition.get("components") or []:
            implementations = component.get("control-implementations")
            if (
                implementations is not None
                or component.get("type") == ComponentType.VALIDATION.value
            ):
                all_components.append(DefinedComponentAdapter(component))
                if implementations is not None:
                    all_implementations.extend(implementations)

    try:
        implementation_settings, source = by_framework(framework, all_implementations)
    except LookupError as error:
        raise LookupError(
            f"cannot transform definitions for framework {framework}: {error}"
        ) from error

    plan = generate_assessment_plan(all_components, implementation_settings)

    # Record the control source so the reviewed controls stay traceable to it.
    control_source = {
        "uuid": str(uuid.uuid4()),
        "title": source.title,
        "description": source.description,
        "rlinks": [{"media-type": "application/oscal+json", "href": source.href}],
    }
    plan["back-matter"] = {"resources": [control_source]}

    source_link = {
        "href": f"#{control_source['uuid']}",
        "rel": "includes-controls-from-source",
        "text": "The reviewed controls are derived from the linked OSCAL profile.",
    }
    reviewed = plan["reviewed-controls"]
    reviewed["links"] = list(reviewed.get("links") or []) + [source_link]
    return plan


def ssp_to_assessment_plan(ssp: Mapping[str, Any], ssp_import_path: str) -> dict[str, Any]:
    """Build an assessment plan from a system security plan at an import path."""
    system_implementation = ssp.get("system-implementation") or {}
    all_components: list[Component] = []
    for system_component in system_implementation.get("components") or []:
        adapter = SystemComponentAdapter(system_component)
        # Components without rules, typically "This System", are not assessed.
        if not adapter.props() or adapter.title() == _THIS_SYSTEM_TITLE:
            continue
        all_components.append(adapter)

    implementation = ControlImplementationAdapter(ssp.get("control-implementation") or {})
    implementation_settings = new_implementation_settings(implementation)
    return generate_assessment_plan(
        all_components, implementation_settings, import_ssp=ssp_import_path
    )


def assessment_plan_to_assessment_results(
    plan: Mapping[str, Any], ap_import_path: str, *args: Mapping[str, Any]
) -> dict[str, Any]:
    """Build assessment results from a plan, using any given observations."""
    observations = list(args) if args else None
    return generate_assessment_results(
        plan, import_ap=ap_import_path, observations=observations
    )