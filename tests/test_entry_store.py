from datetime import date, timedelta

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.crud.wellness_entry import CRUDWellnessEntry, crud_wellness_entry
from app.models.wellness_entry import EntrySource, Mood
from app.schemas.wellness import WellnessEntryCreate, WellnessEntryPatch
from tests.conftest import TODAY


def patch(**values) -> WellnessEntryPatch:
    return WellnessEntryPatch.model_validate(values)


def test_first_write_creates_with_defaults(db, user):
    entry, created = crud_wellness_entry.upsert_entry(
        db, user_id=user.id, day=TODAY, patch=patch(sleep_hours=7)
    )

    assert created is True
    assert entry.steps == 0
    assert entry.mood == Mood.okay
    assert entry.source == EntrySource.manual
    assert entry.diet == {"meals": 3, "water_intake": 2.0, "junk_food": False}
    assert entry.activity["exercise"] is False
    assert entry.sleep_hours == 7


def test_repeated_upserts_keep_one_entry(db, user):
    first, created_first = crud_wellness_entry.upsert_entry(
        db, user_id=user.id, day=TODAY, patch=patch(steps=1000)
    )
    second, created_second = crud_wellness_entry.upsert_entry(
        db, user_id=user.id, day=TODAY, patch=patch(steps=2000, mood="good")
    )

    assert created_first is True
    assert created_second is False
    assert first.id == second.id
    assert second.steps == 2000
    assert second.mood == Mood.good
    assert crud_wellness_entry.count_by_user(db, user_id=user.id) == 1


def test_diet_and_activity_merge_field_by_field(db, user):
    crud_wellness_entry.upsert_entry(
        db, user_id=user.id, day=TODAY, patch=patch(diet={"meals": 2}, activity={"exercise": True})
    )
    entry, _ = crud_wellness_entry.upsert_entry(
        db,
        user_id=user.id,
        day=TODAY,
        patch=patch(diet={"waterIntake": 1.0}, activity={"exerciseType": "running"}),
    )

    assert entry.diet == {"meals": 2, "water_intake": 1.0, "junk_food": False}
    assert entry.activity["exercise"] is True
    assert entry.activity["exercise_type"] == "running"


def test_absent_fields_untouched_and_explicit_null_clears(db, user):
    crud_wellness_entry.upsert_entry(
        db, user_id=user.id, day=TODAY, patch=patch(sleep_hours=7, notes="tired")
    )
    entry, _ = crud_wellness_entry.upsert_entry(
        db, user_id=user.id, day=TODAY, patch=patch(notes=None)
    )

    assert entry.notes is None
    assert entry.sleep_hours == 7


@pytest.mark.parametrize("field", ["steps", "mood", "source"])
def test_required_fields_cannot_be_cleared(field):
    with pytest.raises(PydanticValidationError):
        patch(**{field: None})


@pytest.mark.parametrize(
    "values",
    [{"stressLevel": 11}, {"heartRate": 20}, {"sleepHours": 25}, {"steps": -1}, {"diet": {"meals": 11}}],
)
def test_out_of_range_values_rejected(values):
    with pytest.raises(PydanticValidationError):
        WellnessEntryPatch.model_validate(values)


def test_concurrent_insert_is_replayed_as_update(db, user, monkeypatch):
    existing, _ = crud_wellness_entry.upsert_entry(
        db, user_id=user.id, day=TODAY, patch=patch(steps=100)
    )

    real_lookup = CRUDWellnessEntry.get_by_user_and_date
    calls = {"count": 0}

    def lost_race(self, db, *, user_id, day, for_update=False):
        # first lookup misses the row another writer just committed
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return real_lookup(self, db, user_id=user_id, day=day, for_update=for_update)

    monkeypatch.setattr(CRUDWellnessEntry, "get_by_user_and_date", lost_race)

    entry, created = crud_wellness_entry.upsert_entry(
        db, user_id=user.id, day=TODAY, patch=patch(sleep_hours=6.5)
    )

    assert created is False
    assert entry.id == existing.id
    assert entry.steps == 100
    assert entry.sleep_hours == 6.5
    assert crud_wellness_entry.count_by_user(db, user_id=user.id) == 1


def test_query_range_is_inclusive_and_newest_first(db, user):
    for offset in range(5):
        crud_wellness_entry.upsert_entry(
            db, user_id=user.id, day=TODAY - timedelta(days=offset), patch=patch(steps=offset)
        )

    entries = crud_wellness_entry.query_range(
        db, user_id=user.id, start=TODAY - timedelta(days=3), end=TODAY - timedelta(days=1)
    )
    assert [e.date for e in entries] == [TODAY - timedelta(days=d) for d in (1, 2, 3)]

    limited = crud_wellness_entry.query_range(db, user_id=user.id, limit=2)
    assert [e.date for e in limited] == [TODAY, TODAY - timedelta(days=1)]


def test_entries_are_partitioned_by_user(db, user, other_user):
    crud_wellness_entry.upsert_entry(db, user_id=user.id, day=TODAY, patch=patch(steps=1))
    crud_wellness_entry.upsert_entry(db, user_id=other_user.id, day=TODAY, patch=patch(steps=2))

    assert crud_wellness_entry.count_by_user(db, user_id=user.id) == 1
    assert crud_wellness_entry.query_range(db, user_id=other_user.id)[0].steps == 2


def test_create_payload_truncates_datetime_to_day():
    body = WellnessEntryCreate.model_validate({"date": "2024-03-10T18:45:00Z", "steps": 10})

    assert body.date == date(2024, 3, 10)
    assert body.to_patch().model_fields_set == {"steps"}


def test_create_payload_keeps_nested_presence():
    body = WellnessEntryCreate.model_validate({"date": "2024-03-10", "diet": {"junkFood": True}})
    converted = body.to_patch()

    assert converted.diet_changes() == {"junk_food": True}
    assert converted.activity_changes() == {}
