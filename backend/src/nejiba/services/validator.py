"""Rule-based validation of normalized workshop plans.

The validator never raises: every problem becomes a ``Finding`` and all of
them are collected in a single pass. Only a missing or non-list ``timeline``
stops the run early, since there are no activities to walk without one.
"""

import json
import logging
from typing import Any

from nejiba.schemas.workshop import Finding, JsonSyntaxCheck, ValidationResult
from nejiba.services.json_values import is_missing, json_type_name
from nejiba.services.normalizer import normalize_workshop_plan
from nejiba.services.taxonomy import DEFAULT_RULES, REQUIRED_ACTIVITY_FIELDS, PlanRules

logger = logging.getLogger(__name__)


def validate_workshop_plan(plan: Any, rules: PlanRules = DEFAULT_RULES) -> ValidationResult:
    """Validate an already-normalized plan."""
    if not isinstance(plan, dict):
        plan = {}

    errors: list[Finding] = []
    warnings: list[Finding] = []

    title = plan.get("title")
    if not isinstance(title, dict) or is_missing(title.get("ar")):
        errors.append(Finding(
            path="title.ar",
            field="عنوان الورشة بالعربية",
            message="العنوان العربي مطلوب",
            severity="error",
            suggestion="أضف عنواناً بالعربية في حقل title.ar",
        ))

    if is_missing(plan.get("generalInfo")):
        errors.append(Finding(
            path="generalInfo",
            field="المعلومات العامة",
            message="حقل generalInfo مطلوب",
            severity="error",
        ))

    timeline = plan.get("timeline")
    if not isinstance(timeline, list):
        errors.append(Finding(
            path="timeline",
            field="الأنشطة",
            message="حقل timeline مطلوب ويجب أن يكون مصفوفة",
            severity="error",
        ))
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

    if not timeline:
        errors.append(Finding(
            path="timeline",
            field="الأنشطة",
            message="يجب أن تحتوي الورشة على نشاط واحد على الأقل",
            severity="error",
            value=0,
        ))

    warnings.extend(_check_introduction(plan.get("introduction")))

    for index, activity in enumerate(timeline):
        for finding in validate_activity(activity, index, rules):
            if finding.severity == "error":
                errors.append(finding)
            else:
                warnings.append(finding)

    objective_count = _count(plan.get("objectives"))
    if objective_count < rules.min_objectives:
        warnings.append(Finding(
            path="objectives",
            field="الأهداف",
            message=f"عدد الأهداف قليل ({objective_count}) - يفضل {rules.min_objectives} أهداف على الأقل",
            severity="warning",
            value=objective_count,
        ))

    material_count = _count(plan.get("materials"))
    if material_count < rules.min_materials:
        warnings.append(Finding(
            path="materials",
            field="المواد",
            message=f"قائمة المواد قصيرة ({material_count}) - يفضل {rules.min_materials} مواد على الأقل",
            severity="warning",
            value=material_count,
        ))

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def validate_activity(activity: Any, index: int, rules: PlanRules = DEFAULT_RULES) -> list[Finding]:
    """Findings (errors and warnings) for the activity at ``timeline[index]``."""
    if not isinstance(activity, dict):
        activity = {}

    findings: list[Finding] = []
    prefix = f"timeline[{index}]"
    label = f"النشاط {index + 1}"
    name = activity.get("title") if not is_missing(activity.get("title")) else index + 1

    for key, field_name in REQUIRED_ACTIVITY_FIELDS:
        if is_missing(activity.get(key)):
            findings.append(Finding(
                path=f"{prefix}.{key}",
                field=f"{label} - {field_name}",
                message=f"الحقل {field_name} مطلوب",
                severity="error",
                suggestion=f'أضف {field_name} للنشاط "{name}"',
            ))

    if activity.get("lifeSkillsFocus") == []:
        findings.append(Finding(
            path=f"{prefix}.lifeSkillsFocus",
            field=f"{label} - المهارات الحياتية",
            message="يجب اختيار مهارة حياتية واحدة على الأقل",
            severity="error",
            suggestion=f'أضف مهارة حياتية للنشاط "{name}"',
            value=0,
        ))

    steps = activity.get("mainSteps")
    if not is_missing(steps):
        if not isinstance(steps, list):
            findings.append(Finding(
                path=f"{prefix}.mainSteps",
                field=f"{label} - الخطوات",
                message="mainSteps يجب أن يكون مصفوفة",
                severity="error",
                value=json_type_name(steps),
            ))
        elif not rules.min_steps <= len(steps) <= rules.max_steps:
            step_count = len(steps)
            findings.append(Finding(
                path=f"{prefix}.mainSteps",
                field=f"{label} - عدد الخطوات",
                message=(
                    f"عدد الخطوات {step_count} - يجب أن يكون بين "
                    f"{rules.min_steps} و {rules.max_steps}"
                ),
                severity="error",
                suggestion=(
                    "أضف المزيد من الخطوات"
                    if step_count < rules.min_steps
                    else "اختصر الخطوات لتكون أوضح"
                ),
                value=step_count,
            ))

    cues = activity.get("visualCues")
    if isinstance(cues, list) and len(cues) < rules.min_visual_cues:
        findings.append(Finding(
            path=f"{prefix}.visualCues",
            field=f"{label} - الإشارات البصرية",
            message=(
                f"يجب أن يكون هناك {rules.min_visual_cues} إشارات بصرية على الأقل "
                f"(موجود: {len(cues)})"
            ),
            severity="warning",
            value=len(cues),
        ))

    phrases = activity.get("spokenPhrases")
    if isinstance(phrases, list) and len(phrases) < rules.min_spoken_phrases:
        findings.append(Finding(
            path=f"{prefix}.spokenPhrases",
            field=f"{label} - العبارات المنطوقة",
            message=(
                f"يجب أن يكون هناك {rules.min_spoken_phrases} عبارات منطوقة على الأقل "
                f"(موجود: {len(phrases)})"
            ),
            severity="warning",
            value=len(phrases),
        ))

    energy = activity.get("energyLevel")
    if not is_missing(energy) and energy not in rules.energy_levels:
        findings.append(Finding(
            path=f"{prefix}.energyLevel",
            field=f"{label} - مستوى الطاقة",
            message=(
                f'قيمة غير صحيحة "{energy}" - يجب أن تكون: '
                + ", ".join(rules.energy_levels)
            ),
            severity="error",
            value=energy,
        ))

    if rules.strict_taxonomy:
        findings.extend(_check_taxonomy(activity, prefix, label, rules))

    return findings


def check_json_syntax(text: str) -> JsonSyntaxCheck:
    """Try to parse ``text`` as JSON and report the parser's own message on failure."""
    try:
        _parse_json(text)
    except RecursionError:
        return JsonSyntaxCheck(is_valid=False, error="JSON nesting is too deep")
    except (TypeError, ValueError) as e:
        return JsonSyntaxCheck(is_valid=False, error=str(e) or "Invalid JSON syntax")
    return JsonSyntaxCheck(is_valid=True)


def validate_workshop_json(raw: Any, rules: PlanRules = DEFAULT_RULES) -> ValidationResult:
    """Full import pipeline: syntax check, normalize, validate.

    ``raw`` is either JSON text or an already-parsed object. When the plan is
    valid the normalized copy is returned as ``fixed_plan``.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        syntax = check_json_syntax(raw)
        if not syntax.is_valid:
            logger.debug("Rejected workshop JSON with syntax error: %s", syntax.error)
            return _root_error("JSON Syntax", syntax.error or "خطأ في صيغة JSON")
        raw = _parse_json(raw)

    try:
        normalized = normalize_workshop_plan(raw)
    except RecursionError:
        return _root_error("JSON Structure", "الخطة متداخلة بعمق كبير ولا يمكن معالجتها")

    result = validate_workshop_plan(normalized, rules)
    if result.is_valid:
        result.fixed_plan = normalized
    return result


def _parse_json(text: str | bytes | bytearray) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are accepted by Python's parser but are not JSON
    raise ValueError(f"{name} is not a valid JSON value")


def _root_error(field: str, message: str) -> ValidationResult:
    return ValidationResult(
        is_valid=False,
        errors=[Finding(path="root", field=field, message=message, severity="error")],
    )


def _check_introduction(introduction: Any) -> list[Finding]:
    if is_missing(introduction):
        return [Finding(
            path="introduction",
            field="المقدمة",
            message="المقدمة غير موجودة - سيتم إنشاء واحدة تلقائياً",
            severity="warning",
            suggestion="أضف حقل introduction بثلاث جمل بسيطة",
        )]
    phrases = introduction if isinstance(introduction, dict) else {}
    if any(is_missing(phrases.get(key)) for key in ("phrase1", "phrase2", "phrase3")):
        return [Finding(
            path="introduction",
            field="المقدمة",
            message="المقدمة يجب أن تحتوي على 3 جمل (phrase1, phrase2, phrase3)",
            severity="warning",
        )]
    return []


def _check_taxonomy(activity: dict, prefix: str, label: str, rules: PlanRules) -> list[Finding]:
    findings = []
    activity_type = activity.get("activityType")
    if not is_missing(activity_type) and not rules.is_known_activity_type(activity_type):
        findings.append(Finding(
            path=f"{prefix}.activityType",
            field=f"{label} - نوع النشاط",
            message=f'نوع النشاط "{activity_type}" غير موجود في قائمة الأنواع المعروفة',
            severity="warning",
            value=activity_type,
        ))

    skills = activity.get("lifeSkillsFocus")
    if isinstance(skills, list):
        unknown = [skill for skill in skills if not rules.is_known_life_skill(skill)]
        if unknown:
            findings.append(Finding(
                path=f"{prefix}.lifeSkillsFocus",
                field=f"{label} - المهارات الحياتية",
                message="مهارات غير معروفة: " + ", ".join(str(s) for s in unknown),
                severity="warning",
                value=unknown,
            ))
    return findings


def _count(items: Any) -> int:
    return len(items) if isinstance(items, list) else 0
