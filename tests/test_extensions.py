import pytest

from oscalsdk.extensions import (
    TRESTLE_NAMESPACE,
    Check,
    Parameter,
    Rule,
    RuleSet,
    find_all_props,
    get_trestle_prop,
)


@pytest.mark.parametrize(
    "input_name, input_props, want",
    [
        (
            "testProp1",
            [
                {"name": "testProp1", "value": "testValue"},
                {"name": "testProp1", "value": "testValue", "ns": TRESTLE_NAMESPACE},
            ],
            {"name": "testProp1", "value": "testValue", "ns": TRESTLE_NAMESPACE},
        ),
        (
            "testProp",
            [
                {"name": "testProp1", "value": "testValue"},
                {"name": "testProp2", "value": "testValue", "ns": TRESTLE_NAMESPACE},
            ],
            None,
        ),
        (
            "testProp1",
            [
                {"name": "testProp1", "value": "testValue"},
                {"name": "testProp2", "value": "testValue"},
            ],
            None,
        ),
    ],
    ids=["PropFound", "PropNotFound", "PropNotFoundNs"],
)
def test_get_trestle_prop(input_name, input_props, want):
    assert get_trestle_prop(input_name, input_props) == want


def test_find_all_props_defaults():
    props = [
        {"name": "testProp1", "value": "testValue1", "ns": TRESTLE_NAMESPACE},
        {"name": "testProp2", "value": "testValue2", "ns": TRESTLE_NAMESPACE},
        {"name": "testProp3", "value": "testValue3"},
    ]
    assert find_all_props(props) == props[:2]


def test_find_all_props_by_name():
    props = [
        {"name": "testProp1", "value": "testValue1", "ns": TRESTLE_NAMESPACE},
        {"name": "testProp1", "value": "testValue2", "ns": TRESTLE_NAMESPACE},
        {"name": "testProp1", "value": "testValue3"},
    ]
    assert find_all_props(props, name="testProp1") == [
        {"name": "testProp1", "value": "testValue1", "ns": TRESTLE_NAMESPACE},
        {"name": "testProp1", "value": "testValue2", "ns": TRESTLE_NAMESPACE},
    ]


def test_find_all_props_none_found():
    props = [
        {"name": "testProp1", "value": f"testValue{i}", "ns": TRESTLE_NAMESPACE}
        for i in (1, 2, 3)
    ]
    assert find_all_props(props, name="testProp3") == []


def test_find_all_props_by_class_and_any_namespace():
    props = [
        {"name": "method", "value": "TEST"},
        {"name": "p", "value": "v", "ns": TRESTLE_NAMESPACE, "class": "test-parameter"},
        {"name": "q", "value": "w", "ns": TRESTLE_NAMESPACE},
    ]
    assert find_all_props(props, prop_class="test-parameter") == [props[1]]
    assert find_all_props(props, name="method", namespace="") == [props[0]]


def test_rule_set_defaults_are_independent():
    first = RuleSet()
    second = RuleSet()
    first.checks.append(Check(id="c"))
    first.rule.parameters.append(Parameter(id="p"))
    assert second.checks == []
    assert second.rule == Rule()