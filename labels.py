# labels.py
from datetime import date

CATEGORY_LABELS = {
    "electrical": "Elektřina",
    "plumbing": "Vodoinstalace",
    "gas": "Plyn",
    "garden": "Zahrada",
    "heating": "Topení",
    "air_conditioning": "Klimatizace",
    "appliances": "Spotřebiče",
    "structural": "Konstrukce",
    "other": "Ostatní",
}

PERIOD_LABELS = {
    "none": "Nikdy",
    "weekly": "Týdně",
    "monthly": "Měsíčně",
    "quarterly": "Čtvrtletně",
    "biannually": "Pololetně",
    "annually": "Ročně",
}


def _key(value) -> str:
    return getattr(value, "value", value)


def translate_category(category) -> str:
    key = _key(category)
    return CATEGORY_LABELS.get(key, key)


def translate_period(period) -> str:
    key = _key(period)
    return PERIOD_LABELS.get(key, key)


def format_date(value: date) -> str:
    return value.strftime("%d.%m.%Y")
