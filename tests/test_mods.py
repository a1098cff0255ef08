"""Tests for mod application and difficulty-adjustment combinations."""

import pytest

from strain_engine.mods import (
    Mod,
    apply_mods,
    are_compatible,
    difficulty_adjustment_combinations,
    parse_mods,
)


class TestApplyMods:
    def test_no_mods(self):
        settings = apply_mods((), 4, 1.0, 7.0)
        assert (settings.column_count, settings.time_rate, settings.overall_difficulty) == (4, 1.0, 7.0)

    def test_rate_mods(self):
        assert apply_mods([Mod.DOUBLE_TIME], 4).time_rate == 1.5
        assert apply_mods([Mod.HALF_TIME], 4).time_rate == 0.75

    def test_difficulty_mods(self):
        assert apply_mods([Mod.EASY], 4, overall_difficulty=8.0).overall_difficulty == 4.0
        assert apply_mods([Mod.HARD_ROCK], 4, overall_difficulty=5.0).overall_difficulty == pytest.approx(7.0)
        assert apply_mods([Mod.HARD_ROCK], 4, overall_difficulty=9.0).overall_difficulty == 10.0

    def test_key_mod_sets_columns(self):
        assert apply_mods([Mod.KEY7], 4).column_count == 7
        assert Mod.KEY7.key_count == 7
        assert Mod.DOUBLE_TIME.key_count is None

    def test_combined(self):
        settings = apply_mods([Mod.DOUBLE_TIME, Mod.EASY, Mod.KEY5], 4, 1.0, 6.0)
        assert (settings.column_count, settings.time_rate, settings.overall_difficulty) == (5, 1.5, 3.0)

    @pytest.mark.parametrize(
        "mods",
        [
            [Mod.DOUBLE_TIME, Mod.HALF_TIME],
            [Mod.EASY, Mod.HARD_ROCK],
            [Mod.KEY4, Mod.KEY7],
        ],
    )
    def test_incompatible_mods_raise(self, mods):
        assert not are_compatible(mods)
        with pytest.raises(ValueError, match="Incompatible"):
            apply_mods(mods, 4)


class TestParseMods:
    def test_acronyms(self):
        assert parse_mods("dt, HR") == (Mod.DOUBLE_TIME, Mod.HARD_ROCK)
        assert parse_mods("7k") == (Mod.KEY7,)

    def test_empty(self):
        assert parse_mods("") == ()

    def test_unknown(self):
        with pytest.raises(ValueError, match="XX"):
            parse_mods("DT,XX")


class TestCombinations:
    def test_own_ruleset(self):
        combinations = list(difficulty_adjustment_combinations())
        assert combinations[0] == ()
        assert len(combinations) == 9
        assert (Mod.DOUBLE_TIME, Mod.HARD_ROCK) in combinations
        assert all(mod.key_count is None for combo in combinations for mod in combo)

    def test_converts_add_key_mods(self):
        combinations = list(difficulty_adjustment_combinations(is_convert=True))
        assert len(combinations) == 90
        assert (Mod.HALF_TIME, Mod.EASY, Mod.KEY9) in combinations

    def test_every_combination_is_compatible_and_unique(self):
        combinations = list(difficulty_adjustment_combinations(is_convert=True))
        assert all(are_compatible(combo) for combo in combinations)
        assert len({frozenset(combo) for combo in combinations}) == len(combinations)
