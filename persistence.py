# persistence.py
"""
Serializes the whole store state under one named key of a key/value
"local storage", and reads it back.

Layout of the stored value:

    {"state": {"properties": [...], "maintenanceEvents": [...],
               "notifications": [...], "selectedPropertyId": null},
     "version": 0}
"""
import json
import logging
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from entities import MaintenanceEvent, Notification, Property, StoreState
from models import LocalStorageItem, db

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "upkeep-guardian-storage"
STATE_VERSION = 0


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: Optional[dict] = None):
        self._items = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class SqlStorage:
    """Key/value storage on the local_storage table. Needs an app context."""

    def get_item(self, key: str) -> Optional[str]:
        item = db.session.get(LocalStorageItem, key)
        return item.value if item else None

    def set_item(self, key: str, value: str) -> None:
        item = db.session.get(LocalStorageItem, key)
        if item is None:
            db.session.add(LocalStorageItem(key=key, value=value))
        else:
            item.value = value
        db.session.commit()

    def remove_item(self, key: str) -> None:
        LocalStorageItem.query.filter_by(key=key).delete(synchronize_session=False)
        db.session.commit()


def dump_state(state: StoreState) -> str:
    payload = {
        "state": {
            "properties": [p.to_dict() for p in state.properties],
            "maintenanceEvents": [e.to_dict() for e in state.maintenance_events],
            "notifications": [n.to_dict() for n in state.notifications],
            "selectedPropertyId": state.selected_property_id,
        },
        "version": STATE_VERSION,
    }
    return json.dumps(payload, ensure_ascii=False)


def load_state(raw: Optional[str]) -> StoreState:
    if not raw:
        return StoreState()

    try:
        payload = json.loads(raw)
        state = payload.get("state", payload)
        return StoreState(
            properties=tuple(Property.from_dict(p) for p in state.get("properties") or []),
            maintenance_events=tuple(MaintenanceEvent.from_dict(e) for e in state.get("maintenanceEvents") or []),
            notifications=tuple(Notification.from_dict(n) for n in state.get("notifications") or []),
            selected_property_id=state.get("selectedPropertyId"),
        )
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning("Stored state is corrupt, starting empty: %s", e)
        return StoreState()


class StatePersister:
    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> StoreState:
        try:
            raw = self.storage.get_item(self.key)
        except SQLAlchemyError:
            logger.exception("Could not read %s from storage", self.key)
            return StoreState()
        return load_state(raw)

    def save(self, state: StoreState) -> None:
        # In-memory state stays authoritative when the write fails.
        try:
            self.storage.set_item(self.key, dump_state(state))
        except (SQLAlchemyError, OSError):
            logger.exception("Could not persist state under %s", self.key)
            if isinstance(self.storage, SqlStorage):
                db.session.rollback()

    def clear(self) -> None:
        self.storage.remove_item(self.key)
