# validation.py
"""
Form boundary: turns request JSON into the field dicts the store expects.
The store itself assumes its input has been through here.
"""
from typing import Optional

from entities import Category, PropertyType, RecurringPeriod, parse_date
from exceptions import ValidationError


def require_fields(data: Optional[dict], fields: list[str]) -> dict:
    if data is None or not isinstance(data, dict):
        raise ValidationError("invalid_json")

    missing = [f for f in fields if f not in data or data[f] in ("", None)]
    if missing:
        raise ValidationError("missing_fields", missing)

    return data


def _clean_str(value) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


def _enum(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"invalid value for {field}: {value!r}", [field]) from None


def _date(value, field: str):
    try:
        return parse_date(value)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid date for {field}: {value!r}", [field]) from None


def property_fields(data: Optional[dict], partial: bool = False) -> dict:
    if data is None or not isinstance(data, dict):
        raise ValidationError("invalid_json")

    fields = {}
    if not partial or "name" in data:
        # Empty names are allowed here; the store substitutes a placeholder.
        fields["name"] = _clean_str(data.get("name")) or ""
    if not partial or "address" in data:
        fields["address"] = _clean_str(data.get("address"))
    if not partial or "type" in data:
        fields["type"] = _enum(PropertyType, data.get("type") or PropertyType.HOUSE.value, "type")
    return fields


def maintenance_fields(data: Optional[dict], partial: bool = False) -> dict:
    if not partial:
        require_fields(data, ["propertyId", "title", "category", "date"])
    elif data is None or not isinstance(data, dict):
        raise ValidationError("invalid_json")

    fields = {}
    if "propertyId" in data:
        fields["property_id"] = str(data["propertyId"])
    if "title" in data:
        title = _clean_str(data["title"])
        if not title:
            raise ValidationError("missing_fields", ["title"])
        fields["title"] = title
    if "category" in data:
        fields["category"] = _enum(Category, data["category"], "category")
    if "date" in data:
        value = _date(data["date"], "date")
        if value is None:
            raise ValidationError("missing_fields", ["date"])
        fields["date"] = value
    if "notes" in data:
        fields["notes"] = _clean_str(data["notes"])
    if "photo" in data:
        fields["photo"] = _clean_str(data["photo"])
    if not partial or "recurringPeriod" in data:
        fields["recurring_period"] = _enum(
            RecurringPeriod, data.get("recurringPeriod") or RecurringPeriod.NONE.value, "recurringPeriod"
        )
    return fields


def credentials(data: Optional[dict]) -> tuple[str, str]:
    data = require_fields(data, ["email", "password"])
    return str(data["email"]).strip().lower(), str(data["password"])


def history_category(value: Optional[str]) -> Optional[Category]:
    if not value or value == "all":
        return None
    return _enum(Category, value, "category")


def selection(data) -> Optional[str]:
    if not isinstance(data, dict):
        raise ValidationError("invalid_json")
    property_id = data.get("propertyId")
    if property_id is not None and not isinstance(property_id, str):
        raise ValidationError(f"invalid value for propertyId: {property_id!r}", ["propertyId"])
    return property_id
