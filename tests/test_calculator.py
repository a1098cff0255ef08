"""End-to-end tests for the calculator and its rating properties."""

import numpy as np
import pytest

from strain_engine import Mod, Note, calculate, calculate_all, calculate_with_mods
from strain_engine.calculator import great_hit_window


def stream(interval, duration=10000.0, column_count=4):
    """Notes rolling across columns every *interval* ms."""
    times = np.arange(0.0, duration, interval)
    return [Note(i % column_count, float(t)) for i, t in enumerate(times)]


class TestBoundary:
    def test_empty_chart_rates_zero(self):
        result = calculate([], 4)
        assert result.star_rating == 0.0
        assert result.great_hit_window == 0.0
        assert result.note_count == 0

    @pytest.mark.parametrize("time_rate", [0.0, -1.5])
    def test_non_positive_time_rate_is_rejected(self, time_rate):
        with pytest.raises(ValueError, match="time_rate"):
            calculate([Note(0, 0.0)], 4, time_rate=time_rate)

    def test_empty_chart_still_checks_the_time_rate(self):
        with pytest.raises(ValueError):
            calculate([], 4, time_rate=0.0)

    def test_column_count_must_be_positive(self):
        with pytest.raises(ValueError, match="column_count"):
            calculate([Note(0, 0.0)], 0)

    def test_column_outside_the_chart_is_rejected(self):
        with pytest.raises(ValueError, match="column 4"):
            calculate([Note(4, 0.0)], 4)


class TestRating:
    def test_single_note_in_the_first_window_has_a_fixed_rating(self, constants):
        difficulty = 3.0 * 0.8 * 0.018
        weight = difficulty / 2.5
        expected = (1 - 0.025 * weight) * difficulty * (1 + 0.065 * weight)

        for column in range(4):
            result = calculate([Note(column, 100.0)], 4, constants=constants)
            assert result.star_rating == pytest.approx(expected)
            assert result.consistency_error == 0.0

    def test_leading_empty_windows_lower_the_rating(self, constants):
        # Empty windows before the first note count as zero-strain windows
        ratings = [
            calculate([Note(0, start)], 4, constants=constants)
            for start in (100.0, 1000.0, 10000.0)
        ]
        assert ratings[0].star_rating > ratings[1].star_rating > ratings[2].star_rating
        assert ratings[2].consistency_error > 0.0

        notes = stream(125.0, duration=8000.0)
        shifted = [Note(n.column, n.start_time + 20000.0) for n in notes]
        assert calculate(shifted, 4).star_rating < calculate(notes, 4).star_rating

    def test_rating_is_deterministic(self, random_chart):
        notes = random_chart(1)
        assert calculate(notes, 4).star_rating == calculate(notes, 4).star_rating

    def test_input_order_does_not_matter(self, random_chart):
        notes = random_chart(2)
        rng = np.random.default_rng(5)
        for _ in range(5):
            shuffled = [notes[i] for i in rng.permutation(len(notes))]
            assert calculate(shuffled, 4).star_rating == calculate(notes, 4).star_rating

    @pytest.mark.parametrize("seed", range(6))
    def test_scaling_time_and_rate_together_keeps_the_rating(self, random_chart, seed):
        notes = random_chart(seed, column_count=6)
        scaled = [Note(n.column, n.start_time * 2, n.end_time * 2) for n in notes]

        base = calculate(notes, 6, time_rate=1.0).star_rating
        assert calculate(scaled, 6, time_rate=2.0).star_rating == pytest.approx(base, rel=1e-12)

    def test_denser_charts_rate_higher(self):
        sparse = calculate(stream(400.0), 4).star_rating
        medium = calculate(stream(200.0), 4).star_rating
        dense = calculate(stream(100.0), 4).star_rating
        assert 0.0 < sparse < medium < dense

    def test_faster_playback_rates_higher(self):
        notes = stream(150.0)
        assert calculate(notes, 4, time_rate=1.5).star_rating > calculate(notes, 4).star_rating

    def test_input_is_not_mutated(self, random_chart):
        notes = random_chart(4)
        original = list(notes)
        calculate(notes, 4)
        assert notes == original


class TestAttributes:
    @pytest.mark.parametrize(
        "od, time_rate, expected",
        [(5.0, 1.0, 49.0), (8.0, 1.5, 40.0 / 1.5), (7.3, 1.0, 42.0), (0.0, 0.75, 64.0 / 0.75)],
    )
    def test_great_hit_window(self, constants, od, time_rate, expected):
        assert great_hit_window(od, time_rate, constants) == pytest.approx(expected)

    def test_attributes_are_packaged(self, random_chart):
        notes = random_chart(6)
        result = calculate(notes, 4, time_rate=1.5, overall_difficulty=8.0)
        assert result.note_count == len(notes)
        assert result.column_count == 4
        assert result.time_rate == 1.5
        assert result.great_hit_window == pytest.approx(40.0 / 1.5)
        assert result.strains is None

        payload = result.as_dict()
        assert payload["star_rating"] == result.star_rating
        assert payload["mods"] == []

    def test_strains_can_be_kept_for_diagnostics(self, random_chart):
        notes = random_chart(8)
        result = calculate(notes, 4, keep_strains=True)
        assert len(result.strains) == len(notes)
        starts = [state.start_time for state in result.strains]
        assert starts == sorted(starts)


class TestMods:
    def test_double_time_matches_a_faster_rate(self, random_chart):
        notes = random_chart(10)
        modded = calculate_with_mods(notes, 4, mods=(Mod.DOUBLE_TIME,))
        assert modded.star_rating == calculate(notes, 4, time_rate=1.5).star_rating
        assert modded.mods == (Mod.DOUBLE_TIME,)

    def test_hard_rock_only_changes_the_hit_window(self, random_chart):
        notes = random_chart(12)
        plain = calculate_with_mods(notes, 4, overall_difficulty=5.0)
        hard = calculate_with_mods(notes, 4, mods=(Mod.HARD_ROCK,), overall_difficulty=5.0)
        assert hard.star_rating == plain.star_rating
        assert hard.great_hit_window < plain.great_hit_window

    def test_all_combinations(self):
        results = calculate_all(stream(150.0), 4, overall_difficulty=7.0)
        assert len(results) == 9
        assert results[0].mods == ()
        ratings = {result.mods: result.star_rating for result in results}
        assert ratings[(Mod.DOUBLE_TIME,)] > ratings[()] > ratings[(Mod.HALF_TIME,)]

    def test_converts_need_a_converter(self, random_chart):
        with pytest.raises(ValueError, match="convert_notes"):
            calculate_all(random_chart(14), 4, is_convert=True)

    def test_converts_are_rated_for_every_key_count(self, random_chart):
        source = random_chart(15, note_count=40)

        def convert_notes(column_count):
            return [Note(n.column % column_count, n.start_time, n.end_time) for n in source]

        results = calculate_all(source, 4, is_convert=True, convert_notes=convert_notes)
        assert len(results) == 90
        for result in results:
            key_mods = [mod for mod in result.mods if mod.key_count is not None]
            expected_columns = key_mods[0].key_count if key_mods else 4
            assert result.column_count == expected_columns
            assert result.star_rating > 0.0
