"""Collapse the workshop-plan shapes produced over time into one canonical shape.

Plans arrive from LLM output or human paste in several generations of schema:

* flat activities carrying ``mainSteps``, ``visualCues`` and friends directly;
* activities wrapping a ``facilitatorScript`` whose ``mainSteps`` are step
  objects (``exactAction``, ``facilitatorSays``, ``visualCue``);
* the older game shape with ``instructions`` and ``gameType``;
* plans with a ``schedule`` of blocks instead of a ``timeline``.

Normalization is best-effort backfill: it never raises and never mutates the
caller's object. Defaults are literal templates so the same input always
produces the same output, and running it on its own output changes nothing.
"""

import copy
import json
import logging
from typing import Any

from nejiba.services.json_values import is_missing
from nejiba.services.taxonomy import (
    CONFIDENCE_MOMENT_TEMPLATE,
    DEFAULT_ACTIVITY_TYPE,
    DEFAULT_ENERGY_LEVEL,
    DEFAULT_LIFE_SKILLS,
    DEFAULT_SPOKEN_PHRASES,
    DEFAULT_VISUAL_CUES,
    DESCRIPTION_TEMPLATE,
    INTRODUCTION_TEMPLATE,
    TITLE_PREFIXES,
    WHY_IT_MATTERS_TEMPLATE,
)

logger = logging.getLogger(__name__)

MAX_STEPS = 5
MIN_CUES = 3

# Energy labels used by the game-era schema, e.g. "🔋🔋🔋 عالي"
_LEGACY_ENERGY_WORDS: dict[str, str] = {
    "عالي": "high",
    "متوسط": "medium",
    "منخفض": "low",
}


def normalize_workshop_plan(plan: Any) -> Any:
    """Return a canonical copy of ``plan``. Non-object input is returned as a copy."""
    if not isinstance(plan, dict):
        return copy.deepcopy(plan)

    plan = copy.deepcopy(plan)

    title = plan.get("title")
    if isinstance(title, str) and title:
        plan["title"] = {"ar": title, "en": ""}

    if is_missing(plan.get("introduction")):
        introduction = build_introduction(plan.get("title"))
        if introduction is not None:
            plan["introduction"] = introduction

    objectives = plan.get("objectives")
    if isinstance(objectives, list):
        plan["objectives"] = [
            {"ar": obj, "en": ""} if isinstance(obj, str) else obj for obj in objectives
        ]

    if is_missing(plan.get("timeline")) and isinstance(plan.get("schedule"), list):
        plan["timeline"] = _timeline_from_schedule(plan["schedule"])

    timeline = plan.get("timeline")
    if isinstance(timeline, list):
        for activity in timeline:
            if isinstance(activity, dict):
                _normalize_activity_in_place(activity)

    return plan


def normalize_activity(activity: Any) -> Any:
    """Return a canonical copy of a single timeline activity."""
    activity = copy.deepcopy(activity)
    if isinstance(activity, dict):
        _normalize_activity_in_place(activity)
    return activity


def build_introduction(title: Any) -> dict[str, str] | None:
    """Three-phrase welcome built from the Arabic title, or None without one."""
    if not isinstance(title, dict):
        return None
    topic = title.get("ar")
    if not isinstance(topic, str) or not topic:
        return None

    for prefix in TITLE_PREFIXES:
        topic = topic.replace(prefix, "", 1)

    hook, topic_link, agenda = INTRODUCTION_TEMPLATE
    return {
        "phrase1": hook,
        "phrase2": topic_link.format(topic=topic),
        "phrase3": agenda,
    }


def _timeline_from_schedule(schedule: list) -> list[dict]:
    timeline = []
    for block in schedule:
        if not isinstance(block, dict) or not isinstance(block.get("activity"), dict):
            continue
        activity = copy.deepcopy(block["activity"])
        if is_missing(activity.get("blockType")) and not is_missing(block.get("blockType")):
            activity["blockType"] = block["blockType"]
        timeline.append(activity)
    logger.debug("Built timeline of %d activities from schedule", len(timeline))
    return timeline


def _normalize_activity_in_place(activity: dict) -> None:
    script = activity.get("facilitatorScript")
    if not isinstance(script, dict):
        script = {}
    script_steps = script.get("mainSteps")
    if not isinstance(script_steps, list):
        script_steps = []
    step_objects = [step for step in script_steps if isinstance(step, dict)]
    label = _activity_label(activity)

    if is_missing(activity.get("description")):
        room_setup = script.get("roomSetup")
        activity["description"] = (
            room_setup
            if not is_missing(room_setup)
            else DESCRIPTION_TEMPLATE.format(activity=label)
        )

    if is_missing(activity.get("mainSteps")):
        instructions = activity.get("instructions")
        if script_steps:
            activity["mainSteps"] = [_step_text(step) for step in script_steps][:MAX_STEPS]
        elif isinstance(instructions, list) and instructions:
            activity["mainSteps"] = instructions[:MAX_STEPS]

    if is_missing(activity.get("whatYouNeed")):
        activity["whatYouNeed"] = _materials_needed(activity.get("materials"), script)

    if not _has_enough(activity.get("visualCues")):
        extracted = _unique_texts(
            step.get("visualCue") or step.get("exactAction") for step in step_objects
        )
        activity["visualCues"] = (
            extracted if len(extracted) >= MIN_CUES else list(DEFAULT_VISUAL_CUES)
        )

    if not _has_enough(activity.get("spokenPhrases")):
        candidates = [script.get("openingPhrase")]
        candidates.extend(step.get("facilitatorSays") for step in step_objects)
        extracted = _unique_texts(candidates)
        activity["spokenPhrases"] = (
            extracted if len(extracted) >= MIN_CUES else list(DEFAULT_SPOKEN_PHRASES)
        )

    skills = activity.get("lifeSkillsFocus")
    if is_missing(skills) or skills == []:
        activity["lifeSkillsFocus"] = list(DEFAULT_LIFE_SKILLS)

    if is_missing(activity.get("confidenceBuildingMoment")):
        activity["confidenceBuildingMoment"] = CONFIDENCE_MOMENT_TEMPLATE.format(activity=label)

    if is_missing(activity.get("whyItMatters")):
        activity["whyItMatters"] = WHY_IT_MATTERS_TEMPLATE.format(activity=label)

    energy = activity.get("energyLevel")
    if is_missing(energy):
        activity["energyLevel"] = DEFAULT_ENERGY_LEVEL
    elif isinstance(energy, str):
        for word, level in _LEGACY_ENERGY_WORDS.items():
            if word in energy:
                activity["energyLevel"] = level
                break

    if is_missing(activity.get("activityType")):
        for legacy_key in ("gameType", "blockType"):
            if not is_missing(activity.get(legacy_key)):
                activity["activityType"] = activity[legacy_key]
                break
        else:
            activity["activityType"] = DEFAULT_ACTIVITY_TYPE

    steps = activity.get("mainSteps")
    step_count = len(steps) if isinstance(steps, list) else None
    if is_missing(activity.get("complexityLevel")):
        activity["complexityLevel"] = (
            "simple" if step_count is not None and step_count <= 3 else "moderate"
        )
    if is_missing(activity.get("estimatedSteps")):
        activity["estimatedSteps"] = step_count if step_count is not None else 3


def _activity_label(activity: dict) -> str:
    title = activity.get("title")
    if isinstance(title, str) and title.strip():
        return f"نشاط «{title.strip()}»"
    return "هذا النشاط"


def _step_text(step: Any) -> Any:
    if isinstance(step, str):
        return step
    if isinstance(step, dict):
        for key in ("exactAction", "facilitatorSays", "action"):
            if not is_missing(step.get(key)):
                return step[key]
    return json.dumps(step, ensure_ascii=False, separators=(",", ":"))


def _materials_needed(materials: Any, script: dict) -> list:
    if isinstance(materials, list):
        names = []
        for material in materials:
            name = material.get("item") if isinstance(material, dict) else material
            if not is_missing(name):
                names.append(name)
        if names:
            return names

    ready = script.get("materialsReady")
    if isinstance(ready, list) and ready:
        return list(ready)
    return []


def _has_enough(items: Any) -> bool:
    return isinstance(items, list) and len(items) >= MIN_CUES


def _unique_texts(values) -> list[str]:
    seen: list[str] = []
    for value in values:
        if isinstance(value, str) and value.strip() and value not in seen:
            seen.append(value)
    return seen
