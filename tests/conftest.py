"""
conftest.py
-----------
Shared pytest fixtures: a store backed by in-memory storage with
predictable ids, and a Flask app on an in-memory SQLite database.
"""
import itertools
from datetime import date

import pytest

from app import create_app, get_store
from entities import Category, RecurringPeriod
from maintenance_store import MaintenanceStore
from persistence import MemoryStorage, StatePersister


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def persister(memory_storage):
    return StatePersister(memory_storage)


@pytest.fixture
def store(persister, id_factory):
    return MaintenanceStore(persister=persister, id_factory=id_factory)


@pytest.fixture
def house(store):
    """A store with one property; returns that property's id."""
    store.add_property({"name": "Chalupa", "address": "Lesní 5", "type": "cottage"})
    return store.properties[-1].id


@pytest.fixture
def event_data(house):
    def make(**overrides):
        data = {
            "property_id": house,
            "title": "Servis kotle",
            "category": Category.HEATING,
            "date": date(2024, 1, 15),
            "recurring_period": RecurringPeriod.MONTHLY,
        }
        data.update(overrides)
        return data

    return make


# ----- Flask -----

@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "SUPABASE_URL": "",
        "SUPABASE_ANON_KEY": "",
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_store(app):
    with app.app_context():
        yield get_store()
