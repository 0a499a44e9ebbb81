"""Generation of OSCAL assessment results from assessment plans.

OSCAL objects are handled in their JSON form: dictionaries keyed by OSCAL
field names such as ``local-definitions`` and ``associated-activities``.
"""

from __future__ import annotations

import copy
import json
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from oscalsdk.extensions import (
    ASSESSMENT_CHECK_ID_PROP,
    CHECK_ID_PROP,
    find_all_props,
    get_trestle_prop,
)
from oscalsdk.models import SAMPLE_REQUIRED_STRING, new_sample_metadata

_DEFAULT_ACTOR = "tool"


def _new_uuid() -> str:
    return str(uuid.uuid4())


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class _ObservationsManager:
    """Indexes observations by check and attaches the acting validation component."""

    def __init__(self, plan: Mapping[str, Any]) -> None:
        self._by_check: dict[str, dict[str, Any]] = {}
        self._actors_by_check: dict[str, str] = {}
        assets = plan.get("assessment-assets") or {}
        for component in assets.get("components") or []:
            props = component.get("props")
            if props is None:
                continue
            for check in find_all_props(props, name=CHECK_ID_PROP):
                self._actors_by_check[check.get("value", "")] = component.get("uuid", "")

    def load(self, observations: Iterable[Mapping[str, Any]]) -> None:
        for observation in observations:
            self._update(copy.deepcopy(dict(observation)))

    def create_or_get(self, check_id: str) -> dict[str, Any]:
        """Return a copy of the observation for a check, creating it if needed."""
        for observation in self._by_check.values():
            props = observation.get("props")
            if props is None:
                continue
            check = get_trestle_prop(ASSESSMENT_CHECK_ID_PROP, props)
            if check is not None and check.get("value", "") == check_id:
                return copy.deepcopy(observation)

        # The observation title is the fallback for matching a check.
        existing = self._by_check.get(check_id)
        if existing is not None:
            return copy.deepcopy(existing)

        observation: dict[str, Any] = {
            "uuid": _new_uuid(),
            "title": check_id,
            "collected": _now(),
        }
        self._update(observation)
        return copy.deepcopy(observation)

    def _update(self, observation: dict[str, Any]) -> None:
        title = observation.get("title", "")
        actor = self._actors_by_check.get(title)
        if actor is not None:
            observation["origins"] = [
                {"actors": [{"type": _DEFAULT_ACTOR, "actor-uuid": actor}]}
            ]
        self._by_check[title] = observation


def generate_assessment_results(
    plan: Mapping[str, Any],
    *,
    title: str = SAMPLE_REQUIRED_STRING,
    import_ap: str = SAMPLE_REQUIRED_STRING,
    observations: Iterable[Mapping[str, Any]] | None = None,
) -> dict[str, Any]:
    """Generate assessment results with one result per task of the plan.

    Each activity step yields an observation titled by the step. Given
    observations are matched by their assessment check id or title; where
    none matches, an empty observation is created.
    """
    metadata = new_sample_metadata()
    metadata["title"] = title

    tasks = plan.get("tasks")
    if tasks is None:
        raise ValueError("assessment plan tasks cannot be empty")

    manager = _ObservationsManager(plan)
    if observations is not None:
        manager.load(observations)

    local_definitions = plan.get("local-definitions") or {}
    activities_by_uuid = {
        activity.get("uuid", ""): activity
        for activity in local_definitions.get("activities") or []
    }

    results: list[dict[str, Any]] = []
    for task in tasks:
        task_title = task.get("title", "")
        result: dict[str, Any] = {
            "uuid": _new_uuid(),
            "title": f"Result For Task {_quote(task_title)}",
            "description": f"OSCAL Assessment Result For Task {_quote(task_title)}",
            "start": _now(),
        }

        associated = task.get("associated-activities")
        if associated is None:
            results.append(result)
            continue

        control_selections: list[Any] = []
        task_observations: list[dict[str, Any]] = []
        for associated_activity in associated:
            activity = activities_by_uuid.get(associated_activity.get("activity-uuid", ""), {})

            related_controls = activity.get("related-controls")
            if related_controls is not None:
                control_selections.extend(related_controls.get("control-selections") or [])

            steps = activity.get("steps")
            if steps is None:
                continue

            related_task = {
                "task-uuid": task.get("uuid", ""),
                "subjects": list(associated_activity.get("subjects") or []),
            }
            props = activity.get("props")
            methods = (
                [m.get("value", "") for m in find_all_props(props, name="method", namespace="")]
                if props is not None
                else None
            )

            # One observation per step; the step title names the check.
            for step in steps:
                observation = manager.create_or_get(step.get("title", ""))
                if methods is not None:
                    observation["methods"] = list(observation.get("methods") or []) + methods
                origins = observation.get("origins")
                if origins is not None and len(origins) == 1:
                    origin = origins[0]
                    origin["related-tasks"] = list(origin.get("related-tasks") or []) + [
                        copy.deepcopy(related_task)
                    ]
                task_observations.append(observation)

        result["reviewed-controls"] = {"control-selections": control_selections}
        if task_observations:
            result["observations"] = task_observations
        results.append(result)

    return {
        "uuid": _new_uuid(),
        "import-ap": {"href": import_ap},
        "metadata": metadata,
        "results": results,
    }