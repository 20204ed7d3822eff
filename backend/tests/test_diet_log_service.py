from datetime import datetime, timedelta, timezone

import pytest

from diet_tracker.models.schemas import DietLogCreate, DietLogUpdate
from diet_tracker.services import diet_log_service
from diet_tracker.services.diet_log_service import DietLogNotFoundError


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def test_create_defaults_logged_at_and_created_at(db_session):
    before = _now() - timedelta(seconds=5)
    entry = await diet_log_service.create_entry(
        db_session, DietLogCreate(userId="u1", foodName="apple")
    )

    assert isinstance(entry.id, int)
    assert entry.user_id == "u1"
    assert entry.food_name == "apple"
    assert entry.notes is None
    assert entry.logged_at >= before
    assert abs(entry.logged_at - _now()) < timedelta(minutes=1)
    assert entry.created_at is not None


async def test_create_keeps_explicit_logged_at_in_utc(db_session):
    eaten = datetime(2026, 3, 1, 9, 30, tzinfo=timezone(timedelta(hours=2)))
    entry = await diet_log_service.create_entry(
        db_session, DietLogCreate(userId="u1", foodName="porridge", loggedAt=eaten)
    )
    assert entry.logged_at == datetime(2026, 3, 1, 7, 30)


async def test_list_is_newest_logged_at_first_and_scoped_to_user(db_session):
    base = datetime(2026, 1, 1, 12, 0)
    for hours, food in [(1, "lunch"), (3, "dinner"), (0, "breakfast")]:
        await diet_log_service.create_entry(
            db_session,
            DietLogCreate(userId="u1", foodName=food, loggedAt=base + timedelta(hours=hours)),
        )
    await diet_log_service.create_entry(db_session, DietLogCreate(userId="u2", foodName="tea"))

    entries = await diet_log_service.list_for_user(db_session, "u1")
    assert [e.food_name for e in entries] == ["dinner", "lunch", "breakfast"]
    assert await diet_log_service.list_for_user(db_session, "nobody") == []


async def test_update_applies_only_present_fields(db_session):
    entry = await diet_log_service.create_entry(
        db_session, DietLogCreate(userId="u1", foodName="apple", notes="green")
    )
    original_logged_at = entry.logged_at

    updated = await diet_log_service.update_entry(
        db_session, entry.id, DietLogUpdate.model_validate({"foodName": "pear"})
    )
    assert updated.food_name == "pear"
    assert updated.notes == "green"
    assert updated.logged_at == original_logged_at


async def test_update_notes_empty_string_clears(db_session):
    entry = await diet_log_service.create_entry(
        db_session, DietLogCreate(userId="u1", foodName="apple", notes="green")
    )
    updated = await diet_log_service.update_entry(
        db_session, entry.id, DietLogUpdate.model_validate({"notes": ""})
    )
    assert updated.notes == ""

    fetched = await diet_log_service.list_for_user(db_session, "u1")
    assert fetched[0].notes == ""


async def test_update_missing_entry_raises(db_session):
    with pytest.raises(DietLogNotFoundError):
        await diet_log_service.update_entry(
            db_session, 999999, DietLogUpdate.model_validate({"notes": "x"})
        )


async def test_empty_patch_returns_current_row(db_session):
    entry = await diet_log_service.create_entry(db_session, DietLogCreate(userId="u1", foodName="apple"))
    same = await diet_log_service.update_entry(db_session, entry.id, DietLogUpdate())
    assert same.id == entry.id
    assert same.food_name == "apple"

    with pytest.raises(DietLogNotFoundError):
        await diet_log_service.update_entry(db_session, 999999, DietLogUpdate())


async def test_delete_then_delete_again(db_session):
    entry = await diet_log_service.create_entry(db_session, DietLogCreate(userId="u1", foodName="apple"))

    deleted = await diet_log_service.delete_entry(db_session, entry.id)
    assert deleted.id == entry.id
    assert deleted.food_name == "apple"
    assert await diet_log_service.get_entry(db_session, entry.id) is None

    with pytest.raises(DietLogNotFoundError):
        await diet_log_service.delete_entry(db_session, entry.id)


async def test_created_at_default_is_utc(db_session):
    entry = await diet_log_service.create_entry(db_session, DietLogCreate(userId="u1", foodName="apple"))
    assert abs(entry.created_at - _now()) < timedelta(minutes=1)
