import pytest

from oscalsdk.components import DefinedComponentAdapter
from oscalsdk.extensions import TRESTLE_NAMESPACE
from oscalsdk.models import SAMPLE_REQUIRED_STRING
from oscalsdk.plans import (
    activities_for_component,
    all_reviewed_controls,
    assessment_activities,
    assessment_assets,
    generate_assessment_plan,
    reviewed_controls,
)
from oscalsdk.rules import ComponentsNotFoundError, MemoryStore
from oscalsdk.settings import by_framework

KUBERNETES_UUID = "c8106bc8-5174-4e86-91a4-52f2fe0ed027"
VALIDATOR_UUID = "701c70f1-482b-42b0-a419-9870158cd9e2"
VALIDATOR2_UUID = "1d3fc0d6-8b0e-4b3f-9a4a-0f3c2f0b7c11"


def _prop(name, value, remarks):
    return {"name": name, "value": value, "ns": TRESTLE_NAMESPACE, "remarks": remarks}


def _component_definition():
    kubernetes = {
        "uuid": KUBERNETES_UUID,
        "type": "service",
        "title": "TestKubernetes",
        "description": "Test Kubernetes component",
        "props": [
            _prop("Rule_Id", "etcd_cert_file", "rule_set_1"),
            _prop(
                "Rule_Description",
                "Ensure that the --cert-file argument is set as appropriate",
                "rule_set_1",
            ),
            _prop("Rule_Id", "etcd_key_file", "rule_set_2"),
            _prop(
                "Rule_Description",
                "Ensure that the --key-file argument is set as appropriate",
                "rule_set_2",
            ),
            _prop("Parameter_Id", "file_name", "rule_set_2"),
            _prop("Parameter_Description", "A parameter for a file name", "rule_set_2"),
            _prop("Parameter_Value_Default", "A default value", "rule_set_2"),
        ],
        "control-implementations": [
            {
                "uuid": "2d3f1a4e-8d2b-4a7c-9a3b-1a2b3c4d5e6f",
                "source": "profiles/cis/profile.json",
                "description": "CIS Profile",
                "set-parameters": [
                    {"param-id": "file_name", "values": ["file_name_override"]}
                ],
                "implemented-requirements": [
                    {
                        "uuid": "a1b5b713-52c7-46fb-ab57-ebac7f576b23",
                        "control-id": "CIS-2.1",
                        "description": "",
                        "props": [
                            {"name": "Rule_Id", "value": "etcd_cert_file", "ns": TRESTLE_NAMESPACE},
                            {"name": "Rule_Id", "value": "etcd_key_file", "ns": TRESTLE_NAMESPACE},
                        ],
                        "statements": [
                            {
                                "uuid": "cb9219b1-e51c-4680-abb0-616a43bbfbb2",
                                "statement-id": "CIS-2.1_smt",
                                "description": "",
                            }
                        ],
                    }
                ],
            }
        ],
    }
    validator = {
        "uuid": VALIDATOR_UUID,
        "type": "validation",
        "title": "Validator",
        "description": "Validator",
        "props": [
            _prop("Rule_Id", "etcd_key_file", "rule_set_0"),
            _prop("Check_Id", "etcd_key_file", "rule_set_0"),
            _prop(
                "Check_Description",
                "Check that the --key-file argument is set as appropriate",
                "rule_set_0",
            ),
        ],
    }
    validator2 = {
        "uuid": VALIDATOR2_UUID,
        "type": "validation",
        "title": "Validator2",
        "description": "Validator2",
        "props": [
            _prop("Rule_Id", "etcd_cert_file", "rule_set_0"),
            _prop("Check_Id", "etcd_cert_file", "rule_set_0"),
            _prop(
                "Check_Description",
                "Check that the --cert-file argument is set as appropriate",
                "rule_set_0",
            ),
        ],
    }
    return {"components": [kubernetes, validator, validator2]}


def _components(definition):
    return [DefinedComponentAdapter(comp) for comp in definition["components"]]


def _settings(definition):
    implementations = []
    for comp in definition["components"]:
        implementations.extend(comp.get("control-implementations") or [])
    settings, _ = by_framework("cis", implementations)
    return settings


@pytest.fixture
def definition():
    return _component_definition()


def test_generate_assessment_plan_defaults(definition):
    plan = generate_assessment_plan(_components(definition), _settings(definition))

    assert len(plan["local-definitions"]["activities"]) == 2
    assert len(plan["assessment-assets"]["components"]) == 2
    assert len(plan["assessment-subjects"]) == 1
    assert len(plan["reviewed-controls"]["control-selections"]) == 1

    assert plan["metadata"]["title"] == SAMPLE_REQUIRED_STRING
    assert plan["import-ssp"]["href"] == SAMPLE_REQUIRED_STRING

    local_components = plan["local-definitions"]["components"]
    assert len(local_components) == 1
    assert local_components[0]["uuid"] == KUBERNETES_UUID


def test_generate_assessment_plan_with_options(definition):
    plan = generate_assessment_plan(
        _components(definition),
        _settings(definition),
        title="mytitle",
        import_ssp="myimport",
    )
    assert plan["metadata"]["title"] == "mytitle"
    assert plan["import-ssp"]["href"] == "myimport"
    assert "components" not in plan["local-definitions"]


def test_generate_assessment_plan_no_components(definition):
    with pytest.raises(ComponentsNotFoundError) as excinfo:
        generate_assessment_plan(None, _settings(definition))
    assert str(excinfo.value) == (
        'failed processing components for assessment plan "REPLACE_ME": '
        "failed to index components: no components not found"
    )


def test_generate_assessment_plan_task_links_activities(definition):
    plan = generate_assessment_plan(_components(definition), _settings(definition))
    tasks = plan["tasks"]
    assert len(tasks) == 1
    task = tasks[0]
    assert task["type"] == "action"
    assert task["title"] == "Automated Assessment"

    activity_uuids = {a["uuid"] for a in plan["local-definitions"]["activities"]}
    associated = task["associated-activities"]
    assert len(associated) == 2
    assert {a["activity-uuid"] for a in associated} == activity_uuids
    for assoc in associated:
        assert assoc["subjects"] == [
            {
                "include-subjects": [
                    {"type": "component", "subject-uuid": KUBERNETES_UUID}
                ],
                "type": "component",
            }
        ]
    assert task["subjects"][0]["include-subjects"] == [
        {"type": "component", "subject-uuid": KUBERNETES_UUID}
    ]


def test_generate_assessment_plan_reviewed_controls(definition):
    plan = generate_assessment_plan(_components(definition), _settings(definition))
    assert plan["reviewed-controls"] == {
        "control-selections": [{"include-controls": [{"control-id": "CIS-2.1"}]}]
    }


def test_activities_for_component(definition):
    store = MemoryStore()
    store.index_all(_components(definition))
    activities = activities_for_component("TestKubernetes", store, _settings(definition))

    assert len(activities) == 2
    activity = next(a for a in activities if a["title"] == "etcd_key_file")
    assert activity["description"] == "Ensure that the --key-file argument is set as appropriate"
    assert len(activity["steps"]) == 1
    assert activity["steps"][0]["title"] == "etcd_key_file"
    assert activity["related-controls"] == {
        "control-selections": [{"include-controls": [{"control-id": "CIS-2.1"}]}]
    }
    assert activity["props"] == [
        {"name": "method", "value": "TEST"},
        {
            "name": "file_name",
            "value": "file_name_override",
            "ns": TRESTLE_NAMESPACE,
            "class": "test-parameter",
        },
    ]


def test_activities_without_checks_have_no_steps(definition):
    comps = _components(definition)[:1]
    store = MemoryStore()
    store.index_all(comps)
    activities = activities_for_component("TestKubernetes", store, _settings(definition))
    assert sorted(a["title"] for a in activities) == ["etcd_cert_file", "etcd_key_file"]
    assert all("steps" not in a for a in activities)


def test_activities_for_unknown_component(definition):
    store = MemoryStore()
    store.index_all(_components(definition))
    with pytest.raises(LookupError) as excinfo:
        activities_for_component("missing", store, _settings(definition))
    assert str(excinfo.value).startswith("error getting applied rules for component missing: ")


def test_reviewed_controls_for_rule(definition):
    settings = _settings(definition)
    assert reviewed_controls("etcd_cert_file", settings) == {
        "control-selections": [{"include-controls": [{"control-id": "CIS-2.1"}]}]
    }


def test_reviewed_controls_unknown_rule(definition):
    with pytest.raises(LookupError) as excinfo:
        reviewed_controls("nope", _settings(definition))
    assert str(excinfo.value) == (
        "error getting applicable controls for rule nope: rule id nope not found in settings"
    )


def test_all_reviewed_controls(definition):
    assert all_reviewed_controls(_settings(definition)) == {
        "control-selections": [{"include-controls": [{"control-id": "CIS-2.1"}]}]
    }


def test_assessment_activities():
    subject = {"type": "component", "include-subjects": []}
    result = assessment_activities(subject, [{"uuid": "a"}, {"uuid": "b"}])
    assert result == [
        {"activity-uuid": "a", "subjects": [subject]},
        {"activity-uuid": "b", "subjects": [subject]},
    ]


def test_assessment_assets_uses_validation_components(definition):
    assets = assessment_assets(_components(definition))
    assert [c["uuid"] for c in assets["components"]] == [VALIDATOR_UUID, VALIDATOR2_UUID]
    assert all(c["status"] == {"state": "operational"} for c in assets["components"])
    platforms = assets["assessment-platforms"]
    assert len(platforms) == 1
    assert platforms[0]["title"] == SAMPLE_REQUIRED_STRING
    assert platforms[0]["uses-components"] == [
        {"component-uuid": VALIDATOR_UUID},
        {"component-uuid": VALIDATOR2_UUID},
    ]


def test_assessment_assets_without_validation_components(definition):
    assets = assessment_assets(_components(definition)[:1])
    assert assets["components"] == []
    assert "uses-components" not in assets["assessment-platforms"][0]