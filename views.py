# views.py
"""
Read-only queries over the store's collections. Python's sort is stable,
so events with equal keys keep their insertion order.
"""
from datetime import date
from typing import Iterable, Optional

from entities import Category, MaintenanceEvent, Notification, Property

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"
ALL_CATEGORIES = "all"


def filter_by_property(events: Iterable[MaintenanceEvent], property_id: Optional[str]) -> list[MaintenanceEvent]:
    if property_id is None:
        return list(events)
    return [e for e in events if e.property_id == property_id]


def upcoming_events(events: Iterable[MaintenanceEvent], today: Optional[date] = None) -> list[MaintenanceEvent]:
    today = today or date.today()
    due = [e for e in events if e.next_due_date and e.next_due_date > today]
    return sorted(due, key=lambda e: e.next_due_date)


def recent_events(events: Iterable[MaintenanceEvent]) -> list[MaintenanceEvent]:
    return sort_by_date(events, SORT_NEWEST)


def search_events(events: Iterable[MaintenanceEvent], term: Optional[str]) -> list[MaintenanceEvent]:
    if not term:
        return list(events)
    needle = term.lower()
    return [
        e for e in events
        if needle in e.title.lower() or (e.notes and needle in e.notes.lower())
    ]


def filter_by_category(events: Iterable[MaintenanceEvent], category) -> list[MaintenanceEvent]:
    if not category or category == ALL_CATEGORIES:
        return list(events)
    category = Category(category)
    return [e for e in events if e.category == category]


def sort_by_date(events: Iterable[MaintenanceEvent], order: str = SORT_NEWEST) -> list[MaintenanceEvent]:
    return sorted(events, key=lambda e: e.date, reverse=(order != SORT_OLDEST))


def maintenance_history(
    events: Iterable[MaintenanceEvent],
    property_id: Optional[str] = None,
    term: Optional[str] = None,
    category=None,
    order: str = SORT_NEWEST,
) -> list[MaintenanceEvent]:
    filtered = filter_by_property(events, property_id)
    filtered = search_events(filtered, term)
    filtered = filter_by_category(filtered, category)
    return sort_by_date(filtered, order)


def sorted_notifications(notifications: Iterable[Notification]) -> list[Notification]:
    return sorted(notifications, key=lambda n: n.date, reverse=True)


def unread_count(notifications: Iterable[Notification]) -> int:
    return sum(1 for n in notifications if not n.is_read)


def event_count_for_property(events: Iterable[MaintenanceEvent], property_id: str) -> int:
    return sum(1 for e in events if e.property_id == property_id)


def property_names(properties: Iterable[Property]) -> dict[str, str]:
    return {p.id: p.name for p in properties}
