from datetime import date

import pytest

from app.models.wellness_entry import WellnessEntry, Mood
from app.services.wellness_stats import round_half_up, wellness_stats_service

GOALS = {"daily_steps": 10000, "sleep_hours": 8, "study_hours": 6, "water_intake": 2.5}


def make_entry(steps=0, sleep=None, study=None, stress=None, water=2.0, exercise=False, mood=Mood.okay):
    return WellnessEntry(
        date=date(2024, 3, 1),
        steps=steps,
        sleep_hours=sleep,
        study_hours=study,
        stress_level=stress,
        mood=mood,
        diet={"meals": 3, "water_intake": water, "junk_food": False},
        activity={"exercise": exercise, "exercise_type": None, "exercise_duration_minutes": None},
    )


def test_empty_window_yields_zeros():
    stats = wellness_stats_service.calculate_wellness_stats([], GOALS)

    assert stats.average_steps == 0
    assert stats.average_sleep == 0
    assert stats.average_stress == 0
    assert stats.exercise_days == 0
    assert stats.mood_distribution == {}
    assert stats.goal_progress == {}


def test_average_steps_rounds_half_up():
    stats = wellness_stats_service.calculate_wellness_stats(
        [make_entry(steps=2), make_entry(steps=3)], GOALS
    )
    assert stats.average_steps == 3


def test_goal_progress_from_average_steps():
    stats = wellness_stats_service.calculate_wellness_stats(
        [make_entry(steps=6000), make_entry(steps=10000)], GOALS
    )
    assert stats.average_steps == 8000
    assert stats.goal_progress["steps"] == 80


def test_progress_is_not_capped():
    stats = wellness_stats_service.calculate_wellness_stats([make_entry(steps=15000)], GOALS)
    assert stats.goal_progress["steps"] == 150


def test_missing_metrics_use_fallbacks():
    stats = wellness_stats_service.calculate_wellness_stats(
        [make_entry(sleep=8, stress=9), make_entry(sleep=None, stress=None)], GOALS
    )
    # missing sleep counts as 0, missing stress as 5
    assert stats.average_sleep == 4.0
    assert stats.average_stress == 7.0
    assert stats.goal_progress["sleep"] == 50


def test_one_decimal_averages():
    stats = wellness_stats_service.calculate_wellness_stats(
        [make_entry(study=1, water=1.0), make_entry(study=2, water=1.5), make_entry(study=2, water=1.5)],
        GOALS,
    )
    assert stats.average_study == 1.7
    assert stats.average_water == 1.3
    assert stats.goal_progress["water"] == 52


def test_mood_distribution_and_exercise_days():
    entries = [
        make_entry(mood=Mood.good, exercise=True),
        make_entry(mood=Mood.good),
        make_entry(mood=Mood.poor, exercise=True),
    ]
    stats = wellness_stats_service.calculate_wellness_stats(entries, GOALS)

    assert stats.mood_distribution == {"good": 2, "poor": 1}
    assert stats.exercise_days == 2


def test_zero_goal_target_gives_zero_progress():
    stats = wellness_stats_service.calculate_wellness_stats(
        [make_entry(steps=5000)], {**GOALS, "daily_steps": 0}
    )
    assert stats.goal_progress["steps"] == 0


@pytest.mark.parametrize(
    "value,digits,expected",
    [(2.5, 0, 3), (3.5, 0, 4), (0.25, 1, 0.3), (1.05, 1, 1.1), (7.44, 1, 7.4)],
)
def test_round_half_up(value, digits, expected):
    assert round_half_up(value, digits) == expected
