# maintenance_store.py
"""
The maintenance store owns properties, maintenance events, notifications
and the selected property. All mutations go through its methods; each one
swaps in new collections and then hands the full state to the persister.

Updates and deletes of unknown ids are silent no-ops.
"""
import logging
import threading
import uuid
from dataclasses import replace
from typing import Callable, Iterable, Optional

from entities import (
    PLACEHOLDER_PROPERTY_NAME,
    Category,
    MaintenanceEvent,
    Notification,
    Property,
    PropertyType,
    RecurringPeriod,
    StoreState,
)
from persistence import StatePersister
from recurrence import calculate_next_due_date

logger = logging.getLogger(__name__)

PROPERTY_FIELDS = {"name", "address", "type"}
EVENT_FIELDS = {"property_id", "title", "category", "date", "notes", "photo", "recurring_period"}
NOTIFICATION_FIELDS = {"maintenance_event_id", "property_id", "maintenance_title", "date", "is_read"}


def _new_id() -> str:
    return str(uuid.uuid4())


def _pick(data: dict, allowed: Iterable[str]) -> dict:
    return {k: v for k, v in data.items() if k in allowed}


class MaintenanceStore:
    def __init__(
        self,
        state: Optional[StoreState] = None,
        persister: Optional[StatePersister] = None,
        id_factory: Callable[[], str] = _new_id,
    ):
        state = state or StoreState()
        self._properties = list(state.properties)
        self._events = list(state.maintenance_events)
        self._notifications = list(state.notifications)
        self._selected_property_id = state.selected_property_id
        self._persister = persister
        self._new_id = id_factory
        # Guards each mutation together with its persist call.
        self._lock = threading.RLock()

    @classmethod
    def load(cls, persister: StatePersister, **kwargs) -> "MaintenanceStore":
        return cls(state=persister.load(), persister=persister, **kwargs)

    # --------------------
    # Reads
    # --------------------

    @property
    def properties(self) -> list[Property]:
        return list(self._properties)

    @property
    def maintenance_events(self) -> list[MaintenanceEvent]:
        return list(self._events)

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    @property
    def selected_property_id(self) -> Optional[str]:
        return self._selected_property_id

    def get_property(self, property_id: str) -> Optional[Property]:
        return next((p for p in self._properties if p.id == property_id), None)

    def get_maintenance_event(self, event_id: str) -> Optional[MaintenanceEvent]:
        return next((e for e in self._events if e.id == event_id), None)

    def get_notification(self, notification_id: str) -> Optional[Notification]:
        return next((n for n in self._notifications if n.id == notification_id), None)

    def snapshot(self) -> StoreState:
        with self._lock:
            return StoreState(
                properties=tuple(self._properties),
                maintenance_events=tuple(self._events),
                notifications=tuple(self._notifications),
                selected_property_id=self._selected_property_id,
            )

    def _persist(self) -> None:
        if self._persister is not None:
            self._persister.save(self.snapshot())

    # --------------------
    # Properties
    # --------------------

    def create_property(self, data: dict) -> Property:
        fields = _pick(data, PROPERTY_FIELDS)
        with self._lock:
            prop = Property(
                id=self._new_id(),
                name=fields.get("name") or PLACEHOLDER_PROPERTY_NAME,
                address=fields.get("address") or None,
                type=PropertyType(fields.get("type") or PropertyType.HOUSE),
            )
            self._properties = [*self._properties, prop]
            logger.debug("Added property %s", prop.id)
            self._persist()
        return prop

    def add_property(self, data: dict) -> None:
        self.create_property(data)

    def update_property(self, property_id: str, partial: dict) -> None:
        fields = _pick(partial, PROPERTY_FIELDS)
        if "type" in fields:
            fields["type"] = PropertyType(fields["type"])
        if "name" in fields and not fields["name"]:
            fields["name"] = PLACEHOLDER_PROPERTY_NAME

        with self._lock:
            self._properties = [replace(p, **fields) if p.id == property_id else p for p in self._properties]
            self._persist()

    def delete_property(self, property_id: str) -> None:
        with self._lock:
            removed_events = {e.id for e in self._events if e.property_id == property_id}

            self._properties = [p for p in self._properties if p.id != property_id]
            self._events = [e for e in self._events if e.property_id != property_id]
            self._notifications = [
                n
                for n in self._notifications
                if n.property_id != property_id and n.maintenance_event_id not in removed_events
            ]
            if self._selected_property_id == property_id:
                self._selected_property_id = None

            logger.debug("Deleted property %s with %d events", property_id, len(removed_events))
            self._persist()

    def select_property(self, property_id: Optional[str]) -> None:
        with self._lock:
            self._selected_property_id = property_id
            self._persist()

    # --------------------
    # Maintenance events
    # --------------------

    def create_maintenance_event(self, data: dict) -> MaintenanceEvent:
        fields = _pick(data, EVENT_FIELDS)
        period = RecurringPeriod(fields.get("recurring_period") or RecurringPeriod.NONE)
        with self._lock:
            event = MaintenanceEvent(
                id=self._new_id(),
                property_id=fields["property_id"],
                title=fields["title"],
                category=Category(fields["category"]),
                date=fields["date"],
                recurring_period=period,
                notes=fields.get("notes") or None,
                photo=fields.get("photo") or None,
                next_due_date=calculate_next_due_date(fields["date"], period),
            )
            self._events = [*self._events, event]

            notification = self._notification_for(event)
            if notification is not None:
                self._notifications = [*self._notifications, notification]

            self._persist()
        return event

    def add_maintenance_event(self, data: dict) -> None:
        self.create_maintenance_event(data)

    def update_maintenance_event(self, event_id: str, partial: dict) -> None:
        fields = _pick(partial, EVENT_FIELDS)
        if "category" in fields:
            fields["category"] = Category(fields["category"])
        if "recurring_period" in fields:
            fields["recurring_period"] = RecurringPeriod(fields["recurring_period"])

        with self._lock:
            current = self.get_maintenance_event(event_id)
            if current is None:
                return

            updated = replace(current, **fields)
            if "date" in fields or "recurring_period" in fields:
                updated = replace(
                    updated,
                    next_due_date=calculate_next_due_date(updated.date, updated.recurring_period),
                )

            self._events = [updated if e.id == event_id else e for e in self._events]
            self._sync_notifications(updated)
            self._persist()

    def delete_maintenance_event(self, event_id: str) -> None:
        with self._lock:
            self._events = [e for e in self._events if e.id != event_id]
            self._notifications = [n for n in self._notifications if n.maintenance_event_id != event_id]
            self._persist()

    # --------------------
    # Notification synchronizer
    # --------------------

    def _notification_for(self, event: MaintenanceEvent) -> Optional[Notification]:
        if event.next_due_date is None or event.recurring_period == RecurringPeriod.NONE:
            return None
        return Notification(
            id=self._new_id(),
            maintenance_event_id=event.id,
            property_id=event.property_id,
            maintenance_title=event.title,
            date=event.next_due_date,
            is_read=False,
        )

    def _sync_notifications(self, event: MaintenanceEvent) -> None:
        # Regenerates on every update, whichever fields changed; read state is dropped.
        notifications = [n for n in self._notifications if n.maintenance_event_id != event.id]
        fresh = self._notification_for(event)
        if fresh is not None:
            notifications.append(fresh)
        self._notifications = notifications

    # --------------------
    # Notifications
    # --------------------

    def add_notification(self, data: dict) -> None:
        fields = _pick(data, NOTIFICATION_FIELDS)
        with self._lock:
            notification = Notification(
                id=self._new_id(),
                maintenance_event_id=fields["maintenance_event_id"],
                property_id=fields["property_id"],
                maintenance_title=fields.get("maintenance_title") or "",
                date=fields["date"],
                is_read=bool(fields.get("is_read", False)),
            )
            self._notifications = [*self._notifications, notification]
            self._persist()

    def mark_notification_as_read(self, notification_id: str) -> None:
        with self._lock:
            self._notifications = [
                replace(n, is_read=True) if n.id == notification_id else n for n in self._notifications
            ]
            self._persist()

    def delete_notification(self, notification_id: str) -> None:
        with self._lock:
            self._notifications = [n for n in self._notifications if n.id != notification_id]
            self._persist()
