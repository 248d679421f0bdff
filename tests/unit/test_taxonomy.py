import pytest

from skills.taxonomy import (
    CATEGORY_ORDER,
    ROLE_WEIGHTS,
    Difficulty,
    RoleLevel,
    SkillCategory,
    label,
    role_weights,
    supports,
    weighted_categories,
)


@pytest.mark.parametrize("level", list(RoleLevel))
def test_role_weights_sum_to_one(level):
    assert sum(ROLE_WEIGHTS[level].values()) == pytest.approx(1.0)
    assert set(ROLE_WEIGHTS[level]) == set(CATEGORY_ORDER)


def test_role_weights_returns_copy():
    weights = role_weights("basic")
    weights[SkillCategory.BASIC_FORMULAS] = 0.0
    assert ROLE_WEIGHTS[RoleLevel.BASIC][SkillCategory.BASIC_FORMULAS] == 0.4


def test_weighted_categories_skips_zero_weights():
    categories = weighted_categories(role_weights(RoleLevel.BASIC))
    assert SkillCategory.MACROS_VBA not in categories
    assert categories[0] is SkillCategory.BASIC_FORMULAS


def test_progression_and_labels():
    assert supports(SkillCategory.MACROS_VBA, Difficulty.ADVANCED)
    assert not supports(SkillCategory.MACROS_VBA, Difficulty.BASIC)
    assert label("pivot_tables") == "pivot tables"
