import json
from datetime import date, datetime, timezone

import pytest

from entities import Category, MaintenanceEvent, Notification, Property, PropertyType, RecurringPeriod, StoreState, parse_date
from persistence import (
    DEFAULT_STORAGE_KEY,
    MemoryStorage,
    SqlStorage,
    StatePersister,
    dump_state,
    load_state,
)


def sample_state():
    return StoreState(
        properties=(Property("p1", "Chalupa", "Lesní 5", PropertyType.COTTAGE),),
        maintenance_events=(
            MaintenanceEvent(
                id="e1",
                property_id="p1",
                title="Servis kotle",
                category=Category.HEATING,
                date=date(2024, 1, 15),
                recurring_period=RecurringPeriod.MONTHLY,
                notes="Filtr",
                photo="data:image/png;base64,AAAA",
                next_due_date=date(2024, 2, 15),
            ),
        ),
        notifications=(Notification("n1", "e1", "p1", "Servis kotle", date(2024, 2, 15), True),),
        selected_property_id="p1",
    )


class TestSerialization:

    def test_layout_uses_camel_case_keys(self):
        payload = json.loads(dump_state(sample_state()))
        state = payload["state"]
        assert payload["version"] == 0
        assert set(state) == {"properties", "maintenanceEvents", "notifications", "selectedPropertyId"}
        assert state["maintenanceEvents"][0]["nextDueDate"] == "2024-02-15"
        assert state["notifications"][0]["isRead"] is True

    def test_round_trip(self):
        state = sample_state()
        assert load_state(dump_state(state)) == state

    def test_accepts_full_timestamps(self):
        raw = json.dumps({"state": {
            "properties": [{"id": "p1", "name": "Byt"}],
            "maintenanceEvents": [{
                "id": "e1", "propertyId": "p1", "title": "Revize", "category": "gas",
                "date": "2024-01-15T09:30:00.000Z", "recurringPeriod": "annually",
                "nextDueDate": "2025-01-15T09:30:00.000Z",
            }],
            "notifications": [],
            "selectedPropertyId": None,
        }, "version": 0})

        state = load_state(raw)

        event = state.maintenance_events[0]
        assert event.date == date(2024, 1, 15)
        assert event.next_due_date == date(2025, 1, 15)
        assert state.properties[0].type == PropertyType.HOUSE

    def test_utc_timestamp_is_read_as_local_day(self):
        raw = json.dumps({"state": {
            "properties": [{"id": "p1", "name": "Byt"}],
            "maintenanceEvents": [{
                "id": "e1", "propertyId": "p1", "title": "Revize", "category": "gas",
                "date": "2024-01-14T23:00:00.000Z", "recurringPeriod": "monthly",
                "nextDueDate": "2024-02-14T23:00:00.000Z",
            }],
            "notifications": [],
            "selectedPropertyId": None,
        }, "version": 0})

        event = load_state(raw).maintenance_events[0]

        assert event.date == date(2024, 1, 15)
        assert event.next_due_date == date(2024, 2, 15)

    def test_missing_value_starts_empty(self):
        assert load_state(None) == StoreState()

    def test_corrupt_value_starts_empty(self):
        assert load_state("{not json") == StoreState()
        assert load_state(json.dumps({"state": {"properties": [{"name": "no id"}]}})) == StoreState()


class TestParseDate:

    @pytest.mark.parametrize("value, expected", [
        ("2024-01-15", date(2024, 1, 15)),
        ("2024-06-30T22:30:00Z", date(2024, 7, 1)),
        ("2024-01-14T23:00:00+00:00", date(2024, 1, 15)),
        ("2024-01-15T23:30:00", date(2024, 1, 15)),
        ("2024-01-15T08:00:00+05:00", date(2024, 1, 15)),
    ])
    def test_strings(self, value, expected):
        assert parse_date(value) == expected

    def test_aware_datetime_uses_local_day(self):
        assert parse_date(datetime(2024, 1, 14, 23, 0, tzinfo=timezone.utc)) == date(2024, 1, 15)

    def test_naive_datetime_keeps_its_day(self):
        assert parse_date(datetime(2024, 1, 14, 23, 0)) == date(2024, 1, 14)

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty(self, value):
        assert parse_date(value) is None

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_date("2024-01-15Tsoon")


class TestStorages:

    def test_memory_storage(self):
        storage = MemoryStorage()
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_persister_round_trip(self):
        persister = StatePersister(MemoryStorage())
        persister.save(sample_state())
        assert persister.load() == sample_state()
        persister.clear()
        assert persister.load() == StoreState()

    def test_sql_storage(self, app):
        with app.app_context():
            storage = SqlStorage()
            assert storage.get_item("x") is None
            storage.set_item("x", "1")
            storage.set_item("x", "2")
            assert storage.get_item("x") == "2"
            storage.remove_item("x")
            assert storage.get_item("x") is None

    def test_app_store_writes_under_configured_key(self, app, app_store):
        app_store.add_property({"name": "Byt"})
        raw = SqlStorage().get_item(app.config["STORAGE_KEY"])
        assert app.config["STORAGE_KEY"] == DEFAULT_STORAGE_KEY
        assert json.loads(raw)["state"]["properties"][0]["name"] == "Byt"
