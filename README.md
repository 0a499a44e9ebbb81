# oscalsdk

A library for working with OSCAL documents in their JSON form. It also
supports the rule, check and parameter extensions that compliance tooling
stores in OSCAL properties.

OSCAL objects go in and come out as plain dictionaries and lists, keyed by
OSCAL field names such as `control-id`, `set-parameters` and `props`.

## Modules

- `oscalsdk.models` reads an OSCAL JSON document from a file-like object with
  `new_catalog`, `new_profile`, `new_component_definition`,
  `new_system_security_plan`, `new_assessment_plan`, `new_assessment_results`
  or `new_poam`. Each one runs the validator you pass in and returns the model
  stored under its key, or `None` if the document holds no such model. A
  document whose top level is not a JSON object, or that has unknown top-level
  keys, raises `ValueError`. `new_sample_metadata()` returns metadata that
  fills every required field with default values, using the title
  `SAMPLE_REQUIRED_STRING` (`"REPLACE_ME"`).
- `oscalsdk.validation` defines the `Validator` base class and these
  validators:
  - `NoopValidator` accepts everything.
  - `UuidValidator` raises `ValidationError` when `uuid` values repeat
    anywhere in a model. It also raises when a profile repeats `param-id`
    values.
  - `ValidatorFunc` wraps a plain function.
  - `validate_all(*validators)` runs several validators and raises one
    `ValidationError` that joins all of their failures.
- `oscalsdk.modelutils` provides `find_values_by_name` (collects every string
  stored under a key, at any depth), `has_duplicate_values_by_name` and
  `nil_if_empty`.
- `oscalsdk.extensions` defines the `Rule`, `Check`, `Parameter` and `RuleSet`
  dataclasses, the extension property names (for example `RULE_ID_PROP` and
  `TRESTLE_NAMESPACE`), and two property search helpers:
  - `find_all_props(props, name=..., prop_class=..., namespace=...)`
  - `get_trestle_prop(name, props)`, which returns `None` when nothing
    matches.
- `oscalsdk.components` gives component definition structures and system
  security plan structures one interface: `Component`, `Implementation`,
  `Requirement` and `Statement`. It does this through adapters such as
  `DefinedComponentAdapter`, `SystemComponentAdapter`,
  `ControlImplementationSetAdapter` and `ControlImplementationAdapter`. The
  module also defines the `ComponentType` enum.
- `oscalsdk.rules.MemoryStore` indexes rule sets from component properties
  with `index_all`. Properties that share the same `remarks` form one rule
  set. You can then look rule sets up with `get_by_rule_id`,
  `get_by_check_id` and `find_by_component`; for validation components,
  `find_by_component` returns only the relevant checks. Errors raised:
  - An unknown rule or check raises `RuleNotFoundError`.
  - An unknown component raises `LookupError`.
  - Indexing an empty list raises `ComponentsNotFoundError`.
- `oscalsdk.settings` collects the rules and parameter values chosen for
  controls. It provides:
  - `new_implementation_settings` and `by_framework`, which merge every
    control implementation of one framework.
  - `new_assessment_activities_settings` and
    `settings_from_implemented_requirement`.
  - `get_framework_short_name`.
  - `apply_to_component`, which returns a component's mapped rule sets with
    the selected parameter values applied. It raises `RulesNotFoundError`
    when none match.
- `oscalsdk.plans` builds assessment plans. `generate_assessment_plan` takes
  components and implementation settings, with optional `title` and
  `import_ssp`. The module also provides `activities_for_component`,
  `reviewed_controls`, `all_reviewed_controls`, `assessment_activities` and
  `assessment_assets`.
- `oscalsdk.results.generate_assessment_results` builds assessment results
  from an assessment plan, with one result per task. It takes the optional
  arguments `title`, `import_ap` and `observations`, and raises `ValueError`
  when the plan has no tasks.
- `oscalsdk.transformers` provides the end-to-end transformations:
  - `component_definitions_to_assessment_plan(definitions, framework)`
  - `ssp_to_assessment_plan(ssp, ssp_import_path)`
  - `assessment_plan_to_assessment_results(plan, ap_import_path, *observations)`

## Installation

```
pip install .
```

Run the tests with:

```
pip install ".[test]"
pytest
```

## Example

```python
from oscalsdk.models import new_component_definition
from oscalsdk.validation import NoopValidator
from oscalsdk.transformers import (
    component_definitions_to_assessment_plan,
    assessment_plan_to_assessment_results,
)

with open("component-definition.json") as handle:
    definition = new_component_definition(handle, NoopValidator())

plan = component_definitions_to_assessment_plan([definition], "cis")
results = assessment_plan_to_assessment_results(plan, "assessment-plan.json")
```

If a framework is not found in the control implementations,
`component_definitions_to_assessment_plan` raises a `LookupError` that names
the framework.

## What it does not do

- It does not validate documents against the OSCAL JSON schema. The checks it
  offers are the ones listed above under `oscalsdk.validation`.
- It does not build typed model objects. Documents stay as dictionaries.
- It has no command-line interface. It is a library only.
- It does not write documents to disk. To save one, serialise it yourself,
  for example with `json.dump`.