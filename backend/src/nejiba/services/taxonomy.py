"""Fixed tables shared by the normalizer and the validator.

Everything here is immutable and built at import time. The validator receives
its thresholds through a ``PlanRules`` instance so callers can tighten them
without touching module state.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ActivityTypeInfo:
    slug: str
    name_ar: str
    name_en: str


ACTIVITY_TYPES: tuple[ActivityTypeInfo, ...] = (
    ActivityTypeInfo("creative-making", "صنع وإبداع", "Creative Making"),
    ActivityTypeInfo("art-expression", "فن وتعبير", "Art & Expression"),
    ActivityTypeInfo("problem-solving", "حل مشكلات", "Problem-Solving"),
    ActivityTypeInfo("brainstorming", "عصف ذهني", "Brainstorming"),
    ActivityTypeInfo("exploration", "استكشاف", "Exploration"),
    ActivityTypeInfo("reflection", "تأمل وتفكير", "Reflection"),
    ActivityTypeInfo("storytelling", "قصص ورواية", "Storytelling"),
    ActivityTypeInfo("discussion", "نقاش ومشاركة", "Discussion"),
    ActivityTypeInfo("movement", "حركة", "Movement"),
    ActivityTypeInfo("drama", "تمثيل", "Drama"),
    ActivityTypeInfo("music", "موسيقى", "Music"),
    ActivityTypeInfo("team-challenge", "تحدي فريق", "Team Challenge"),
    ActivityTypeInfo("collaboration", "تعاون", "Collaboration"),
)

LIFE_SKILLS: tuple[str, ...] = (
    "confidence",
    "bravery",
    "friendship",
    "creativity",
    "teamwork",
    "communication",
    "self-expression",
    "empathy",
    "problem-solving",
    "critical-thinking",
    "listening",
    "leadership",
    "curiosity",
    "emotional-awareness",
    "persistence",
)

ENERGY_LEVELS: tuple[str, ...] = ("high", "medium", "low")

# (key, Arabic label) in the order findings are reported
REQUIRED_ACTIVITY_FIELDS: tuple[tuple[str, str], ...] = (
    ("title", "العنوان"),
    ("description", "الوصف"),
    ("activityType", "نوع النشاط"),
    ("mainSteps", "الخطوات الأساسية"),
    ("energyLevel", "مستوى الطاقة"),
    ("whatYouNeed", "المواد المطلوبة"),
    ("lifeSkillsFocus", "المهارات الحياتية"),
    ("confidenceBuildingMoment", "لحظة بناء الثقة"),
    ("visualCues", "الإشارات البصرية"),
    ("spokenPhrases", "العبارات المنطوقة"),
    ("whyItMatters", "لماذا هذا مهم"),
)

# Defaults used by the normalizer. Each list is written as a whole, never merged.
DEFAULT_VISUAL_CUES: tuple[str, ...] = (
    "عرض المواد على الأطفال",
    "تمثيل الخطوة الأولى أمامهم",
    "الإشارة إلى الطفل صاحب الدور",
    "التصفيق والتشجيع بعد كل مشاركة",
)

DEFAULT_SPOKEN_PHRASES: tuple[str, ...] = (
    "يلا نبدأ!",
    "رائع! أحسنتم!",
    "من يريد أن يجرب؟",
    "كلكم أبطال اليوم!",
)

DEFAULT_LIFE_SKILLS: tuple[str, ...] = ("confidence", "creativity", "teamwork")

DEFAULT_ENERGY_LEVEL = "medium"
DEFAULT_ACTIVITY_TYPE = "نشاط"

TITLE_PREFIXES: tuple[str, ...] = ("ورشة: ", "ورشة ")

INTRODUCTION_TEMPLATE: tuple[str, str, str] = (
    "مرحباً أصدقائي! اليوم عندنا ورشة رائعة!",
    "رح نتعلم عن {topic} بطريقة ممتعة!",
    "رح نلعب ألعاب ونصنع أشياء جميلة ونتعلم مهارات جديدة!",
)

DESCRIPTION_TEMPLATE = "{activity}: اتبع الخطوات مع الأطفال خطوة بخطوة."
CONFIDENCE_MOMENT_TEMPLATE = "عندما يكمل الطفل {activity} ويسمع التصفيق من زملائه"
WHY_IT_MATTERS_TEMPLATE = "يساعد {activity} الطفل على تطوير مهاراته وبناء ثقته بنفسه"


def _known_activity_types() -> frozenset[str]:
    names: set[str] = set()
    for info in ACTIVITY_TYPES:
        names.update((info.slug, info.name_ar, info.name_en))
    return frozenset(names)


@dataclass(frozen=True)
class PlanRules:
    """Thresholds and enumerations the validator checks against."""

    min_steps: int = 3
    max_steps: int = 5
    min_visual_cues: int = 3
    min_spoken_phrases: int = 3
    min_objectives: int = 3
    min_materials: int = 5
    energy_levels: tuple[str, ...] = ENERGY_LEVELS
    activity_types: frozenset[str] = field(default_factory=_known_activity_types)
    life_skills: frozenset[str] = frozenset(LIFE_SKILLS)
    strict_taxonomy: bool = False

    def is_known_activity_type(self, value: str) -> bool:
        return isinstance(value, str) and value in self.activity_types

    def is_known_life_skill(self, value: str) -> bool:
        return isinstance(value, str) and value.lower() in self.life_skills


DEFAULT_RULES = PlanRules()
