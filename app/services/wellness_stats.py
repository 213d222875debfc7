# services/wellness_stats.py
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Union

from app.models.wellness_entry import WellnessEntry
from app.schemas.wellness import WellnessStats

Number = Union[int, float]


def round_half_up(value: Number, digits: int = 0) -> Number:
    """Round halves away from zero for positive values (2.5 -> 3, 0.25 -> 0.3)."""
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if digits == 0 else float(rounded)


def _mean(values: List[Number]) -> float:
    return sum(values) / len(values)


def _progress(average: Number, target: Optional[Number]) -> int:
    if not target:
        return 0
    return round_half_up(average / target * 100)


class WellnessStatsService:
    """Pure aggregation over a window of entries; touches no storage."""

    def calculate_wellness_stats(
        self, entries: Iterable[WellnessEntry], goals: Dict[str, Number]
    ) -> WellnessStats:
        """
        Summarize entries against the user's daily goal targets.

        Args:
            entries: Entries in the window, any order
            goals: {"daily_steps", "sleep_hours", "study_hours", "water_intake"}

        Returns:
            WellnessStats; an empty window yields zeros and empty maps.
        """
        entries = list(entries)
        if not entries:
            return WellnessStats()

        average_steps = round_half_up(_mean([e.steps or 0 for e in entries]))
        average_sleep = round_half_up(_mean([e.sleep_hours or 0 for e in entries]), 1)
        average_study = round_half_up(_mean([e.study_hours or 0 for e in entries]), 1)
        average_stress = round_half_up(_mean([e.stress_level or 5 for e in entries]), 1)
        average_water = round_half_up(_mean([e.water_intake or 0 for e in entries]), 1)

        mood_distribution: Dict[str, int] = {}
        for entry in entries:
            mood = entry.mood.value if hasattr(entry.mood, "value") else str(entry.mood)
            mood_distribution[mood] = mood_distribution.get(mood, 0) + 1

        return WellnessStats(
            average_steps=average_steps,
            average_sleep=average_sleep,
            average_study=average_study,
            average_stress=average_stress,
            average_water=average_water,
            exercise_days=sum(1 for e in entries if e.exercised),
            mood_distribution=mood_distribution,
            goal_progress={
                "steps": _progress(average_steps, goals.get("daily_steps")),
                "sleep": _progress(average_sleep, goals.get("sleep_hours")),
                "study": _progress(average_study, goals.get("study_hours")),
                "water": _progress(average_water, goals.get("water_intake")),
            },
        )


wellness_stats_service = WellnessStatsService()
