import json
from datetime import timedelta

import httpx
import pytest
from sqlalchemy.orm import Query

from app.core.clock import ensure_utc
from app.core.exceptions import ConflictError, NotFoundError, UpstreamProviderError, ValidationError
from app.crud.smartwatch_connection import crud_smartwatch_connection
from app.crud.wellness_entry import crud_wellness_entry
from app.models.smartwatch_connection import Provider, ConnectionStatus
from app.models.wellness_entry import EntrySource
from app.schemas.smartwatch import ConnectRequest
from app.schemas.wellness import WellnessEntryPatch
from app.services.smartwatch import smartwatch_service
from app.services.wellness import wellness_service
from app.services.wellness_alerts import wellness_alert_service
from tests.conftest import NOW, TODAY, add_fitbit_day, add_fitbit_token

YESTERDAY = TODAY - timedelta(days=1)


def connect_fitbit(db, user, client, clock):
    return smartwatch_service.connect(
        db,
        user_id=user.id,
        provider=Provider.fitbit,
        request=ConnectRequest(code="auth-code"),
        client=client,
        clock=clock,
    )


def sync(db, user, client, clock, provider=Provider.fitbit):
    return smartwatch_service.sync(db, user_id=user.id, provider=provider, client=client, clock=clock)


# =====================================================================
# CONNECT
# =====================================================================

def test_fitbit_connect_exchanges_code(db, user, clock, provider_routes, provider_client):
    add_fitbit_token(provider_routes, expires_in=3600)

    connection = connect_fitbit(db, user, provider_client, clock)

    assert connection.status == ConnectionStatus.connected
    assert connection.is_active is True
    assert connection.access_token == "fitbit-access"
    assert ensure_utc(connection.expires_at) == NOW + timedelta(seconds=3600)

    token_request = provider_routes.requests[0]
    assert token_request.headers["Authorization"].startswith("Basic ")
    assert b"code=auth-code" in token_request.content


def test_connecting_twice_keeps_one_connection(db, user, clock, provider_routes, provider_client):
    add_fitbit_token(provider_routes, access_token="first")
    connect_fitbit(db, user, provider_client, clock)
    add_fitbit_token(provider_routes, access_token="second")
    connect_fitbit(db, user, provider_client, clock)

    connections = smartwatch_service.list_connections(db, user_id=user.id)
    assert len(connections) == 1
    assert connections[0].access_token == "second"


def test_concurrent_connect_conflicts(db, user, clock, provider_routes, provider_client, monkeypatch):
    add_fitbit_token(provider_routes, access_token="first")
    connect_fitbit(db, user, provider_client, clock)

    # another request re-inserted the row right after this one cleared it
    monkeypatch.setattr(Query, "delete", lambda self, *args, **kwargs: 0)
    add_fitbit_token(provider_routes, access_token="second")

    with pytest.raises(ConflictError):
        connect_fitbit(db, user, provider_client, clock)

    monkeypatch.undo()
    connections = crud_smartwatch_connection.list_by_user(db, user_id=user.id)
    assert len(connections) == 1
    assert connections[0].access_token == "first"
    assert connections[0].status == ConnectionStatus.connected


def test_failed_exchange_leaves_provider_disconnected(db, user, clock, provider_routes, provider_client):
    add_fitbit_token(provider_routes)
    connect_fitbit(db, user, provider_client, clock)
    provider_routes.add("POST", "/oauth2/token", json={"errors": ["invalid_grant"]}, status_code=400)

    with pytest.raises(UpstreamProviderError):
        connect_fitbit(db, user, provider_client, clock)

    assert crud_smartwatch_connection.get(db, user_id=user.id, provider=Provider.fitbit) is None


def test_missing_code_has_no_side_effects(db, user, clock, provider_routes, provider_client):
    add_fitbit_token(provider_routes)
    connect_fitbit(db, user, provider_client, clock)

    with pytest.raises(ValidationError):
        smartwatch_service.connect(
            db, user_id=user.id, provider=Provider.fitbit, request=ConnectRequest(),
            client=provider_client, clock=clock,
        )

    assert crud_smartwatch_connection.get(db, user_id=user.id, provider=Provider.fitbit) is not None


def test_token_providers_store_supplied_token(db, user, clock, provider_client):
    connection = smartwatch_service.connect(
        db,
        user_id=user.id,
        provider=Provider.google_fit,
        request=ConnectRequest(access_token="g-token", refresh_token="g-refresh"),
        client=provider_client,
        clock=clock,
    )

    assert connection.access_token == "g-token"
    assert connection.expires_at is None
    assert connection.status == ConnectionStatus.connected


# =====================================================================
# SYNC
# =====================================================================

def test_sync_writes_yesterdays_entry(db, user, clock, provider_routes, provider_client):
    add_fitbit_token(provider_routes)
    connect_fitbit(db, user, provider_client, clock)
    add_fitbit_day(provider_routes, YESTERDAY, steps=8000, minutes_asleep=450, resting=62)
    clock.advance(hours=1)

    result = sync(db, user, provider_client, clock)

    assert result.steps == 8000
    assert result.sleep_hours == 7.5
    assert result.heart_rate == 62
    assert result.date == YESTERDAY

    entry = crud_wellness_entry.get_by_user_and_date(db, user_id=user.id, day=YESTERDAY)
    assert entry.steps == 8000
    assert entry.source == EntrySource.smartwatch

    connection = crud_smartwatch_connection.get(db, user_id=user.id, provider=Provider.fitbit)
    assert ensure_utc(connection.last_sync) == NOW + timedelta(hours=1)
    assert connection.status == ConnectionStatus.connected


def test_second_sync_overwrites(db, user, clock, provider_routes, provider_client):
    add_fitbit_token(provider_routes)
    connect_fitbit(db, user, provider_client, clock)
    add_fitbit_day(provider_routes, YESTERDAY, steps=3000, minutes_asleep=300)
    sync(db, user, provider_client, clock)
    add_fitbit_day(provider_routes, YESTERDAY, steps=9000, minutes_asleep=480)
    sync(db, user, provider_client, clock)

    entries = crud_wellness_entry.query_range(db, user_id=user.id)
    assert len(entries) == 1
    assert entries[0].steps == 9000
    assert entries[0].sleep_hours == 8


def test_sync_keeps_manual_fields_and_raises_alerts(db, user, clock, provider_routes, provider_client):
    crud_wellness_entry.upsert_entry(
        db, user_id=user.id, day=YESTERDAY,
        patch=WellnessEntryPatch(study_hours=4),
    )
    add_fitbit_token(provider_routes)
    connect_fitbit(db, user, provider_client, clock)
    add_fitbit_day(provider_routes, YESTERDAY, steps=1500, minutes_asleep=480)

    sync(db, user, provider_client, clock)

    entry = crud_wellness_entry.get_by_user_and_date(db, user_id=user.id, day=YESTERDAY)
    assert entry.study_hours == 4
    alerts = wellness_alert_service.list_alerts(db, user_id=user.id)
    assert [a.type.value for a in alerts] == ["low_steps"]


def test_sync_without_connection(db, user, clock, provider_client):
    with pytest.raises(NotFoundError):
        sync(db, user, provider_client, clock)


def test_sync_with_expired_token(db, user, clock, provider_routes, provider_client):
    add_fitbit_token(provider_routes, expires_in=60)
    connect_fitbit(db, user, provider_client, clock)
    clock.advance(minutes=5)

    with pytest.raises(UpstreamProviderError):
        sync(db, user, provider_client, clock)


@pytest.mark.parametrize(
    "failure",
    [
        httpx.Response(500, json={"errors": ["boom"]}),
        httpx.ReadTimeout("timed out"),
        httpx.Response(200, json={"unexpected": True}),
        httpx.Response(200, text="not json"),
    ],
)
def test_provider_failure_writes_nothing(db, user, clock, provider_routes, provider_client, failure):
    add_fitbit_token(provider_routes)
    connection = connect_fitbit(db, user, provider_client, clock)
    last_sync = connection.last_sync
    add_fitbit_day(provider_routes, YESTERDAY, steps=8000, minutes_asleep=450)
    provider_routes.add("GET", f"/1/user/-/activities/steps/date/{YESTERDAY.isoformat()}/1d.json", failure)
    clock.advance(hours=1)

    with pytest.raises(UpstreamProviderError):
        sync(db, user, provider_client, clock)

    assert crud_wellness_entry.query_range(db, user_id=user.id) == []
    connection = crud_smartwatch_connection.get(db, user_id=user.id, provider=Provider.fitbit)
    assert connection.last_sync == last_sync
    assert connection.status == ConnectionStatus.connected


def test_entry_write_failure_after_fetch_resets_status(db, user, clock, provider_routes, provider_client, monkeypatch):
    add_fitbit_token(provider_routes)
    connection = connect_fitbit(db, user, provider_client, clock)
    last_sync = connection.last_sync
    add_fitbit_day(provider_routes, YESTERDAY, steps=8000, minutes_asleep=450)
    clock.advance(hours=1)

    def failing_write(*args, **kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(wellness_service, "record_entry", failing_write)

    with pytest.raises(RuntimeError):
        sync(db, user, provider_client, clock)

    assert any("/activities/steps/" in r.url.path for r in provider_routes.requests)
    connection = crud_smartwatch_connection.get(db, user_id=user.id, provider=Provider.fitbit)
    assert connection.status == ConnectionStatus.connected
    assert connection.last_sync == last_sync
    assert crud_wellness_entry.query_range(db, user_id=user.id) == []


def test_google_fit_sync_sums_points(db, user, clock, provider_routes, provider_client):
    smartwatch_service.connect(
        db, user_id=user.id, provider=Provider.google_fit,
        request=ConnectRequest(access_token="g-token"), client=provider_client, clock=clock,
    )

    hour_nanos = 3600 * 1_000_000_000

    def aggregate(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        data_type = body["aggregateBy"][0]["dataTypeName"]
        if data_type == "com.google.step_count.delta":
            points = [{"value": [{"intVal": 4000}]}, {"value": [{"intVal": 2500}]}]
        else:
            points = [
                {"startTimeNanos": "0", "endTimeNanos": str(6 * hour_nanos)},
                {"startTimeNanos": str(7 * hour_nanos), "endTimeNanos": str(8 * hour_nanos)},
            ]
        return httpx.Response(200, json={"bucket": [{"dataset": [{"point": points}]}]})

    provider_routes.add("POST", "/fitness/v1/users/me/dataset:aggregate", aggregate)

    result = sync(db, user, provider_client, clock, provider=Provider.google_fit)

    assert result.steps == 6500
    assert result.sleep_hours == 7
    assert result.heart_rate is None
    assert provider_routes.requests[0].headers["Authorization"] == "Bearer g-token"


def test_apple_health_sync_is_unsupported(db, user, clock, provider_client):
    smartwatch_service.connect(
        db, user_id=user.id, provider=Provider.apple_health,
        request=ConnectRequest(access_token="a-token"), client=provider_client, clock=clock,
    )

    with pytest.raises(ValidationError, match="Unsupported provider"):
        sync(db, user, provider_client, clock, provider=Provider.apple_health)


# =====================================================================
# DISCONNECT
# =====================================================================

def test_disconnect(db, user, clock, provider_routes, provider_client):
    add_fitbit_token(provider_routes)
    connect_fitbit(db, user, provider_client, clock)

    smartwatch_service.disconnect(db, user_id=user.id, provider=Provider.fitbit)

    assert smartwatch_service.list_connections(db, user_id=user.id) == []
    with pytest.raises(NotFoundError):
        smartwatch_service.disconnect(db, user_id=user.id, provider=Provider.fitbit)
    with pytest.raises(NotFoundError):
        sync(db, user, provider_client, clock)
