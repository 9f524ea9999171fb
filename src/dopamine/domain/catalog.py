"""Domain models for the activity catalog and menu metadata."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class ActivityCategory(StrEnum):
    """Menu section an activity belongs to."""

    STARTERS = "starters"
    MAINS = "mains"
    SIDES = "sides"
    DESSERTS = "desserts"
    SPECIAL = "special"


class Difficulty(StrEnum):
    """Effort level of a catalog activity."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class ActivityType(StrEnum):
    """Theme of a catalog activity."""

    FOCUS = "focus"
    CREATIVITY = "creativity"
    PRODUCTIVITY = "productivity"
    WELLNESS = "wellness"
    MINDFULNESS = "mindfulness"
    ENERGY = "energy"

    @property
    def icon(self) -> str:
        return _ACTIVITY_TYPE_ICONS[self]


_ACTIVITY_TYPE_ICONS = {
    ActivityType.FOCUS: "target",
    ActivityType.CREATIVITY: "paintbrush.fill",
    ActivityType.PRODUCTIVITY: "chart.line.uptrend.xyaxis",
    ActivityType.WELLNESS: "heart.fill",
    ActivityType.MINDFULNESS: "brain.head.profile",
    ActivityType.ENERGY: "bolt.fill",
}


@dataclass(frozen=True)
class Activity:
    """System-provided catalog activity."""

    id: str
    name: str
    description: str
    category: ActivityCategory
    duration_minutes: int
    difficulty: Difficulty
    benefits: tuple[str, ...]
    icon: str
    activity_type: ActivityType | None = None


@dataclass(frozen=True)
class UserActivity:
    """Activity authored by a user."""

    id: UUID
    user_id: str
    title: str
    category: ActivityCategory
    duration_minutes: int
    scheduled_time: datetime
    scheduled_date: datetime
    created_at: datetime
    is_on_home_screen: bool = False


@dataclass(frozen=True)
class ResolvedActivity:
    """Denormalized view of a catalog reference."""

    activity_id: str
    name: str
    duration_minutes: int
    icon: str | None = None


@dataclass(frozen=True)
class MenuCategoryInfo:
    """Display metadata for one menu section."""

    title: str
    description: str
    icon: str
    order: int


@dataclass(frozen=True)
class MenuConfiguration:
    """Display metadata for every menu section."""

    categories: dict[ActivityCategory, MenuCategoryInfo]
    updated_at: datetime | None = None

    def info_for(self, category: ActivityCategory) -> MenuCategoryInfo:
        return self.categories.get(category, DEFAULT_MENU_CATEGORIES[category])

    def ordered(self) -> list[tuple[ActivityCategory, MenuCategoryInfo]]:
        """Return categories sorted by their display order."""
        return sorted(
            ((category, self.info_for(category)) for category in ActivityCategory),
            key=lambda entry: entry[1].order,
        )


DEFAULT_MENU_CATEGORIES: dict[ActivityCategory, MenuCategoryInfo] = {
    ActivityCategory.STARTERS: MenuCategoryInfo(
        title="Starters",
        description=(
            "Quick 5-10 minute activities for a fast mood lift (like a short walk, "
            "stretching, or listening to a favorite song)."
        ),
        icon="⚡",
        order=1,
    ),
    ActivityCategory.MAINS: MenuCategoryInfo(
        title="Mains",
        description=(
            "Longer, more fulfilling activities that provide a deeper sense of "
            "reward and satisfaction (like exercising, organizing a space, or "
            "cooking a meal)."
        ),
        icon="🎯",
        order=2,
    ),
    ActivityCategory.SIDES: MenuCategoryInfo(
        title="Sides",
        description=(
            "Complementary actions that make tasks easier or more enjoyable "
            "(setting reminders, playing music while cleaning, etc.)."
        ),
        icon="🔧",
        order=3,
    ),
    ActivityCategory.DESSERTS: MenuCategoryInfo(
        title="Desserts",
        description=(
            "Pleasurable activities to enjoy in moderation (watching a show, "
            "social media time, snacks)."
        ),
        icon="🍰",
        order=4,
    ),
    ActivityCategory.SPECIAL: MenuCategoryInfo(
        title="Specials",
        description=(
            "Planned or goal-oriented activities for extra motivation (journal "
            "sessions, hobby time, creative projects)."
        ),
        icon="⭐",
        order=5,
    ),
}


def _sample(  # noqa: PLR0913
    activity_id: str,
    name: str,
    description: str,
    category: ActivityCategory,
    duration: int,
    difficulty: Difficulty,
    benefits: tuple[str, ...],
    icon: str,
    activity_type: ActivityType,
) -> Activity:
    return Activity(
        id=activity_id,
        name=name,
        description=description,
        category=category,
        duration_minutes=duration,
        difficulty=difficulty,
        benefits=benefits,
        icon=icon,
        activity_type=activity_type,
    )


SAMPLE_ACTIVITIES: tuple[Activity, ...] = (
    _sample(
        "1",
        "5-Min Breathing",
        "Deep breathing exercise to center your mind and reduce stress",
        ActivityCategory.STARTERS,
        5,
        Difficulty.EASY,
        ("Focus", "Calm", "Energy"),
        "🧘",
        ActivityType.MINDFULNESS,
    ),
    _sample(
        "2",
        "Morning Stretch",
        "Gentle stretching routine to wake up your body",
        ActivityCategory.STARTERS,
        10,
        Difficulty.EASY,
        ("Energy", "Flexibility", "Wellness"),
        "💪",
        ActivityType.WELLNESS,
    ),
    _sample(
        "3",
        "Morning Meditation",
        "Start your day with mindful meditation",
        ActivityCategory.STARTERS,
        15,
        Difficulty.EASY,
        ("Focus", "Peace", "Clarity"),
        "🧘",
        ActivityType.FOCUS,
    ),
    _sample(
        "4",
        "Deep Work Session",
        "90 minutes of focused, uninterrupted work",
        ActivityCategory.MAINS,
        90,
        Difficulty.HARD,
        ("Productivity", "Achievement", "Growth"),
        "💻",
        ActivityType.PRODUCTIVITY,
    ),
    _sample(
        "5",
        "Creative Writing",
        "Express yourself through creative writing",
        ActivityCategory.MAINS,
        60,
        Difficulty.MEDIUM,
        ("Creativity", "Expression", "Flow"),
        "✍️",
        ActivityType.CREATIVITY,
    ),
    _sample(
        "6",
        "Learning Session",
        "Study something new and expand your knowledge",
        ActivityCategory.MAINS,
        45,
        Difficulty.MEDIUM,
        ("Knowledge", "Growth", "Achievement"),
        "📚",
        ActivityType.FOCUS,
    ),
    _sample(
        "7",
        "Quick Walk",
        "15-minute walk to refresh your mind",
        ActivityCategory.SIDES,
        15,
        Difficulty.EASY,
        ("Energy", "Health", "Clarity"),
        "🚶",
        ActivityType.ENERGY,
    ),
    _sample(
        "8",
        "Hydration Break",
        "Drink water and take a mindful break",
        ActivityCategory.SIDES,
        5,
        Difficulty.EASY,
        ("Health", "Energy", "Wellness"),
        "💧",
        ActivityType.WELLNESS,
    ),
    _sample(
        "9",
        "Organize Space",
        "Tidy up your workspace for better focus",
        ActivityCategory.SIDES,
        20,
        Difficulty.EASY,
        ("Focus", "Order", "Clarity"),
        "🧹",
        ActivityType.PRODUCTIVITY,
    ),
    _sample(
        "10",
        "Evening Reading",
        "Wind down with a good book",
        ActivityCategory.DESSERTS,
        30,
        Difficulty.EASY,
        ("Relaxation", "Knowledge", "Peace"),
        "📖",
        ActivityType.MINDFULNESS,
    ),
    _sample(
        "11",
        "Gratitude Journal",
        "Reflect on three things you're grateful for",
        ActivityCategory.DESSERTS,
        10,
        Difficulty.EASY,
        ("Positivity", "Peace", "Mindfulness"),
        "📝",
        ActivityType.MINDFULNESS,
    ),
    _sample(
        "12",
        "Evening Reflection",
        "Review your day and plan for tomorrow",
        ActivityCategory.DESSERTS,
        15,
        Difficulty.EASY,
        ("Clarity", "Planning", "Peace"),
        "🌙",
        ActivityType.FOCUS,
    ),
    _sample(
        "13",
        "Digital Detox Hour",
        "One hour completely away from screens",
        ActivityCategory.SPECIAL,
        60,
        Difficulty.MEDIUM,
        ("Mindfulness", "Peace", "Presence"),
        "📵",
        ActivityType.MINDFULNESS,
    ),
    _sample(
        "14",
        "Nature Connection",
        "Spend time outdoors connecting with nature",
        ActivityCategory.SPECIAL,
        45,
        Difficulty.EASY,
        ("Peace", "Energy", "Wellness"),
        "🌳",
        ActivityType.WELLNESS,
    ),
    _sample(
        "15",
        "Creative Project",
        "Work on a personal creative project",
        ActivityCategory.SPECIAL,
        120,
        Difficulty.MEDIUM,
        ("Creativity", "Joy", "Achievement"),
        "🎨",
        ActivityType.CREATIVITY,
    ),
)
