"""Fixed Excel skill taxonomy: categories, role weights and difficulty tiers."""
from __future__ import annotations

from enum import Enum
from typing import Dict, List, Mapping, Tuple


class SkillCategory(str, Enum):
    BASIC_FORMULAS = "basic_formulas"
    DATA_MANIPULATION = "data_manipulation"
    PIVOT_TABLES = "pivot_tables"
    ADVANCED_FUNCTIONS = "advanced_functions"
    DATA_VISUALIZATION = "data_visualization"
    MACROS_VBA = "macros_vba"
    DATA_MODELING = "data_modeling"


class RoleLevel(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Difficulty(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# Enumeration order doubles as the selector's tie-break order.
CATEGORY_ORDER: Tuple[SkillCategory, ...] = tuple(SkillCategory)

ROLE_WEIGHTS: Dict[RoleLevel, Dict[SkillCategory, float]] = {
    RoleLevel.BASIC: {
        SkillCategory.BASIC_FORMULAS: 0.4,
        SkillCategory.DATA_MANIPULATION: 0.3,
        SkillCategory.PIVOT_TABLES: 0.1,
        SkillCategory.ADVANCED_FUNCTIONS: 0.0,
        SkillCategory.DATA_VISUALIZATION: 0.2,
        SkillCategory.MACROS_VBA: 0.0,
        SkillCategory.DATA_MODELING: 0.0,
    },
    RoleLevel.INTERMEDIATE: {
        SkillCategory.BASIC_FORMULAS: 0.2,
        SkillCategory.DATA_MANIPULATION: 0.3,
        SkillCategory.PIVOT_TABLES: 0.25,
        SkillCategory.ADVANCED_FUNCTIONS: 0.1,
        SkillCategory.DATA_VISUALIZATION: 0.15,
        SkillCategory.MACROS_VBA: 0.0,
        SkillCategory.DATA_MODELING: 0.0,
    },
    RoleLevel.ADVANCED: {
        SkillCategory.BASIC_FORMULAS: 0.1,
        SkillCategory.DATA_MANIPULATION: 0.2,
        SkillCategory.PIVOT_TABLES: 0.2,
        SkillCategory.ADVANCED_FUNCTIONS: 0.25,
        SkillCategory.DATA_VISUALIZATION: 0.1,
        SkillCategory.MACROS_VBA: 0.1,
        SkillCategory.DATA_MODELING: 0.05,
    },
}

SKILL_PROGRESSION: Dict[SkillCategory, Tuple[Difficulty, ...]] = {
    SkillCategory.BASIC_FORMULAS: (Difficulty.BASIC, Difficulty.INTERMEDIATE, Difficulty.ADVANCED),
    SkillCategory.DATA_MANIPULATION: (Difficulty.BASIC, Difficulty.INTERMEDIATE, Difficulty.ADVANCED),
    SkillCategory.PIVOT_TABLES: (Difficulty.INTERMEDIATE, Difficulty.ADVANCED),
    SkillCategory.ADVANCED_FUNCTIONS: (Difficulty.INTERMEDIATE, Difficulty.ADVANCED),
    SkillCategory.DATA_VISUALIZATION: (Difficulty.BASIC, Difficulty.INTERMEDIATE, Difficulty.ADVANCED),
    SkillCategory.MACROS_VBA: (Difficulty.ADVANCED,),
    SkillCategory.DATA_MODELING: (Difficulty.ADVANCED,),
}

CATEGORY_LABELS: Dict[SkillCategory, str] = {
    SkillCategory.BASIC_FORMULAS: "basic formulas",
    SkillCategory.DATA_MANIPULATION: "data manipulation",
    SkillCategory.PIVOT_TABLES: "pivot tables",
    SkillCategory.ADVANCED_FUNCTIONS: "advanced functions",
    SkillCategory.DATA_VISUALIZATION: "data visualization",
    SkillCategory.MACROS_VBA: "macros and VBA",
    SkillCategory.DATA_MODELING: "data modeling",
}


def role_weights(role_level: RoleLevel | str) -> Dict[SkillCategory, float]:
    """Return a copy of the category weight table for ``role_level``."""

    return dict(ROLE_WEIGHTS[RoleLevel(role_level)])


def weighted_categories(weights: Mapping[SkillCategory, float]) -> List[SkillCategory]:
    """Categories with a nonzero weight, in enumeration order."""

    return [category for category in CATEGORY_ORDER if weights.get(category, 0.0) > 0.0]


def supports(category: SkillCategory, difficulty: Difficulty) -> bool:
    return difficulty in SKILL_PROGRESSION[category]


def label(category: SkillCategory | str) -> str:
    return CATEGORY_LABELS[SkillCategory(category)]


__all__ = [
    "SkillCategory",
    "RoleLevel",
    "Difficulty",
    "CATEGORY_ORDER",
    "ROLE_WEIGHTS",
    "SKILL_PROGRESSION",
    "CATEGORY_LABELS",
    "role_weights",
    "weighted_categories",
    "supports",
    "label",
]
