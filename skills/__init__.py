"""Skill taxonomy shared by selection, scoring and reporting."""
from .taxonomy import (
    CATEGORY_ORDER,
    ROLE_WEIGHTS,
    SKILL_PROGRESSION,
    Difficulty,
    RoleLevel,
    SkillCategory,
    label,
    role_weights,
    supports,
    weighted_categories,
)

__all__ = [
    "CATEGORY_ORDER",
    "ROLE_WEIGHTS",
    "SKILL_PROGRESSION",
    "Difficulty",
    "RoleLevel",
    "SkillCategory",
    "label",
    "role_weights",
    "supports",
    "weighted_categories",
]
