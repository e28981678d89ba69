import json

import pytest

from nejiba.services.normalizer import normalize_workshop_plan
from nejiba.services.taxonomy import PlanRules
from nejiba.services.validator import (
    check_json_syntax,
    validate_activity,
    validate_workshop_json,
    validate_workshop_plan,
)


def paths(findings):
    return [f.path for f in findings]


def short_activity(**overrides):
    activity = {
        "title": "X",
        "description": "Y",
        "mainSteps": ["a", "b"],
        "energyLevel": "high",
        "activityType": "t",
        "whatYouNeed": [],
        "lifeSkillsFocus": ["confidence"],
        "confidenceBuildingMoment": "c",
        "whyItMatters": "w",
        "visualCues": ["a", "b"],
        "spokenPhrases": ["a", "b"],
    }
    activity.update(overrides)
    return activity


def short_plan(**activity_overrides):
    return {
        "title": {"ar": "ورشة: الثقة"},
        "generalInfo": {"duration": "45 دقيقة"},
        "timeline": [short_activity(**activity_overrides)],
    }


def test_valid_plan_has_no_findings(plan):
    result = validate_workshop_plan(plan)
    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []


def test_empty_object_stops_after_top_level_errors():
    result = validate_workshop_json("{}")
    assert not result.is_valid
    assert paths(result.errors) == ["title.ar", "generalInfo", "timeline"]
    assert result.warnings == []
    assert result.fixed_plan is None


def test_timeline_not_a_list_stops_early():
    result = validate_workshop_plan({"title": {"ar": "ورشة"}, "generalInfo": {}, "timeline": {"a": 1}})
    assert paths(result.errors) == ["timeline"]


def test_empty_timeline_is_an_error(plan):
    plan["timeline"] = []
    result = validate_workshop_plan(plan)
    assert not result.is_valid
    assert paths(result.errors) == ["timeline"]


def test_two_steps_is_one_error_and_short_lists_warn():
    result = validate_workshop_plan(short_plan())
    assert not result.is_valid
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.path == "timeline[0].mainSteps"
    assert error.value == 2
    assert error.suggestion == "أضف المزيد من الخطوات"

    warning_paths = paths(result.warnings)
    assert warning_paths.count("timeline[0].visualCues") == 1
    assert warning_paths.count("timeline[0].spokenPhrases") == 1
    cue_warning = next(w for w in result.warnings if w.path == "timeline[0].visualCues")
    assert cue_warning.value == 2
    assert "2" in cue_warning.message


def test_invalid_energy_level_adds_error():
    result = validate_workshop_plan(short_plan(energyLevel="extreme"))
    assert paths(result.errors) == ["timeline[0].mainSteps", "timeline[0].energyLevel"]
    energy_error = result.errors[1]
    assert energy_error.value == "extreme"
    assert '"extreme"' in energy_error.message


def test_too_many_steps_suggests_shortening():
    result = validate_workshop_plan(short_plan(mainSteps=list("abcdef")))
    assert result.errors[0].value == 6
    assert result.errors[0].suggestion == "اختصر الخطوات لتكون أوضح"


@pytest.mark.parametrize("count", [3, 4, 5])
def test_three_to_five_steps_accepted(count):
    result = validate_workshop_plan(short_plan(mainSteps=["s"] * count))
    assert result.is_valid


def test_steps_not_a_list():
    result = validate_workshop_plan(short_plan(mainSteps="افعلوا كذا"))
    assert len(result.errors) == 1
    assert result.errors[0].value == "string"


def test_each_missing_field_is_reported_with_activity_name():
    findings = validate_activity({"title": "لعبة الظل"}, 2)
    errors = [f for f in findings if f.severity == "error"]
    assert len(errors) == 10
    assert all(f.path.startswith("timeline[2].") for f in errors)
    assert all('"لعبة الظل"' in f.suggestion for f in errors)
    assert errors[0].field == "النشاط 3 - الوصف"


def test_untitled_activity_named_by_index():
    findings = validate_activity({}, 0)
    assert len(findings) == 11
    assert '"1"' in findings[0].suggestion


def test_non_object_activity_reports_all_fields():
    assert len(validate_activity("نص", 0)) == 11


def test_empty_list_counts_as_present():
    findings = validate_activity(short_activity(mainSteps=["a", "b", "c"]), 0)
    assert "timeline[0].whatYouNeed" not in paths(findings)


def test_introduction_warnings(plan):
    del plan["introduction"]
    assert paths(validate_workshop_plan(plan).warnings) == ["introduction"]

    plan["introduction"] = {"phrase1": "مرحبا", "phrase2": "", "phrase3": "هيا"}
    result = validate_workshop_plan(plan)
    assert result.is_valid
    assert paths(result.warnings) == ["introduction"]


def test_few_objectives_and_materials_only_warn(plan):
    plan["objectives"] = plan["objectives"][:2]
    plan["materials"] = plan["materials"][:3]
    result = validate_workshop_plan(plan)
    assert result.is_valid
    assert paths(result.warnings) == ["objectives", "materials"]


def test_validation_is_repeatable():
    plan = short_plan(energyLevel="extreme")
    first = validate_workshop_plan(plan)
    second = validate_workshop_plan(plan)
    assert first == second


def test_strict_taxonomy_warns_on_unknown_values():
    rules = PlanRules(strict_taxonomy=True)
    activity = short_activity(mainSteps=["a", "b", "c"], lifeSkillsFocus=["confidence", "juggling"])
    findings = validate_activity(activity, 0, rules)
    warnings = {f.path: f for f in findings if f.severity == "warning"}
    assert warnings["timeline[0].activityType"].value == "t"
    assert warnings["timeline[0].lifeSkillsFocus"].value == ["juggling"]

    known = short_activity(mainSteps=["a", "b", "c"], activityType="storytelling")
    assert "timeline[0].activityType" not in paths(validate_activity(known, 0, rules))


def test_taxonomy_not_checked_by_default():
    findings = validate_activity(short_activity(mainSteps=["a", "b", "c"]), 0)
    assert "timeline[0].activityType" not in paths(findings)


def test_nested_activity_passes_after_normalization():
    raw = {
        "title": {"ar": "ورشة: الفن"},
        "generalInfo": {"duration": "30 دقيقة"},
        "timeline": [
            {
                "title": "X",
                "facilitatorScript": {
                    "mainSteps": [{"exactAction": letter} for letter in "ABCDEF"],
                },
            }
        ],
    }
    normalized = normalize_workshop_plan(raw)
    assert normalized["timeline"][0]["mainSteps"] == ["A", "B", "C", "D", "E"]
    result = validate_workshop_plan(normalized)
    assert result.is_valid
    assert not any(f.path.endswith("mainSteps") for f in result.errors + result.warnings)


def test_syntax_error_reported_at_root():
    result = validate_workshop_json("{title: }")
    assert not result.is_valid
    assert len(result.errors) == 1
    error = result.errors[0]
    assert error.path == "root"
    assert error.field == "JSON Syntax"
    assert error.message == check_json_syntax("{title: }").error
    assert result.warnings == []


def test_syntax_check_accepts_valid_json():
    check = check_json_syntax('{"a": [1, 2]}')
    assert check.is_valid
    assert check.error is None


def test_pipeline_returns_normalized_plan_when_valid(plan):
    plan["timeline"][0].pop("visualCues")
    result = validate_workshop_json(plan)
    assert result.is_valid
    assert result.fixed_plan["timeline"][0]["visualCues"]
    assert "visualCues" not in plan["timeline"][0]


def test_pipeline_withholds_plan_when_invalid():
    result = validate_workshop_json(short_plan(energyLevel="extreme"))
    assert not result.is_valid
    assert result.fixed_plan is None


def test_result_serializes_with_wire_keys(plan):
    dumped = validate_workshop_json(plan).model_dump(by_alias=True)
    assert set(dumped) == {"isValid", "errors", "warnings", "fixedPlan"}


def test_empty_life_skills_is_an_error():
    findings = validate_activity(short_activity(mainSteps=["a", "b", "c"], lifeSkillsFocus=[]), 0)
    errors = [f for f in findings if f.severity == "error"]
    assert paths(errors) == ["timeline[0].lifeSkillsFocus"]
    assert errors[0].value == 0


def test_empty_life_skills_backfilled_by_pipeline():
    result = validate_workshop_json(short_plan(mainSteps=["a", "b", "c"], lifeSkillsFocus=[]))
    assert result.is_valid
    assert result.fixed_plan["timeline"][0]["lifeSkillsFocus"]


@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
def test_non_standard_constants_are_syntax_errors(plan, constant):
    text = json.dumps(plan)[:-1] + f', "score": {constant}}}'
    check = check_json_syntax(text)
    assert not check.is_valid
    assert constant in check.error

    result = validate_workshop_json(text)
    assert paths(result.errors) == ["root"]
    assert result.errors[0].field == "JSON Syntax"
    assert result.fixed_plan is None


def test_extremely_deep_json_is_a_syntax_error():
    text = "[" * 100_000 + "]" * 100_000
    assert not check_json_syntax(text).is_valid

    result = validate_workshop_json(text)
    assert not result.is_valid
    assert paths(result.errors) == ["root"]
    assert result.errors[0].field == "JSON Syntax"


def test_deep_json_text_reported_at_root():
    text = '{"title": {"ar": "ورشة"}, "extra": ' + "[" * 900 + "]" * 900 + "}"
    result = validate_workshop_json(text)
    assert not result.is_valid
    assert paths(result.errors) == ["root"]


def test_deep_parsed_plan_reported_at_root(plan):
    nested = []
    for _ in range(5000):
        nested = [nested]
    plan["extra"] = nested

    result = validate_workshop_json(plan)
    assert not result.is_valid
    assert paths(result.errors) == ["root"]
    assert result.errors[0].field == "JSON Structure"
    assert result.fixed_plan is None
