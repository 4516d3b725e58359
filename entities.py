# entities.py
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional
from zoneinfo import ZoneInfo

PLACEHOLDER_PROPERTY_NAME = "Nepojmenovaná nemovitost"

# Zone the stored timestamps were written from; UTC instants are read back as local days.
LEGACY_TIMEZONE = ZoneInfo("Europe/Prague")


class PropertyType(str, Enum):
    HOUSE = "house"
    APARTMENT = "apartment"
    COTTAGE = "cottage"
    OTHER = "other"


class Category(str, Enum):
    ELECTRICAL = "electrical"
    PLUMBING = "plumbing"
    GAS = "gas"
    GARDEN = "garden"
    HEATING = "heating"
    AIR_CONDITIONING = "air_conditioning"
    APPLIANCES = "appliances"
    STRUCTURAL = "structural"
    OTHER = "other"


class RecurringPeriod(str, Enum):
    NONE = "none"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    BIANNUALLY = "biannually"
    ANNUALLY = "annually"


def parse_date(value: Any) -> Optional[date]:
    """
    Accepts a date, a datetime or an ISO string ("2024-01-15" or a full
    timestamp such as "2024-01-14T23:00:00.000Z") and returns a date.
    Timezone-aware values are converted to LEGACY_TIMEZONE before the
    calendar day is taken.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _local_day(value)
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) <= 10:
        return date.fromisoformat(text)
    return _local_day(datetime.fromisoformat(text.replace("Z", "+00:00")))


def _local_day(value: datetime) -> date:
    if value.tzinfo is not None:
        value = value.astimezone(LEGACY_TIMEZONE)
    return value.date()


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Property:
    id: str
    name: str
    address: Optional[str] = None
    type: PropertyType = PropertyType.HOUSE

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "Property":
        return cls(
            id=raw["id"],
            name=raw.get("name") or PLACEHOLDER_PROPERTY_NAME,
            address=raw.get("address") or None,
            type=PropertyType(raw.get("type") or PropertyType.HOUSE.value),
        )


@dataclass(frozen=True)
class MaintenanceEvent:
    id: str
    property_id: str
    title: str
    category: Category
    date: date
    recurring_period: RecurringPeriod = RecurringPeriod.NONE
    notes: Optional[str] = None
    photo: Optional[str] = None
    next_due_date: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "propertyId": self.property_id,
            "title": self.title,
            "category": self.category.value,
            "date": _iso(self.date),
            "notes": self.notes,
            "photo": self.photo,
            "recurringPeriod": self.recurring_period.value,
            "nextDueDate": _iso(self.next_due_date),
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "MaintenanceEvent":
        return cls(
            id=raw["id"],
            property_id=raw["propertyId"],
            title=raw["title"],
            category=Category(raw["category"]),
            date=parse_date(raw["date"]),
            recurring_period=RecurringPeriod(raw.get("recurringPeriod") or RecurringPeriod.NONE.value),
            notes=raw.get("notes") or None,
            photo=raw.get("photo") or None,
            next_due_date=parse_date(raw.get("nextDueDate")),
        )


@dataclass(frozen=True)
class Notification:
    id: str
    maintenance_event_id: str
    property_id: str
    maintenance_title: str
    date: date
    is_read: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "maintenanceEventId": self.maintenance_event_id,
            "propertyId": self.property_id,
            "maintenanceTitle": self.maintenance_title,
            "date": _iso(self.date),
            "isRead": self.is_read,
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "Notification":
        return cls(
            id=raw["id"],
            maintenance_event_id=raw["maintenanceEventId"],
            property_id=raw["propertyId"],
            maintenance_title=raw.get("maintenanceTitle") or "",
            date=parse_date(raw["date"]),
            is_read=bool(raw.get("isRead", False)),
        )


@dataclass(frozen=True)
class StoreState:
    properties: tuple[Property, ...] = field(default_factory=tuple)
    maintenance_events: tuple[MaintenanceEvent, ...] = field(default_factory=tuple)
    notifications: tuple[Notification, ...] = field(default_factory=tuple)
    selected_property_id: Optional[str] = None
