# seed.py
"""
Generates fake properties and maintenance history so you can demo the flow quickly.

Usage:
  python seed.py
"""
import random
from datetime import date, timedelta

from faker import Faker

from app import create_app, get_store
from entities import Category, PropertyType, RecurringPeriod

fake = Faker("cs_CZ")

TASKS = {
    Category.HEATING: ["Servis kotle", "Odvzdušnění radiátorů"],
    Category.PLUMBING: ["Výměna těsnění", "Kontrola vodoměru"],
    Category.ELECTRICAL: ["Revize elektroinstalace", "Výměna jističe"],
    Category.GARDEN: ["Prořez stromů", "Sekání trávníku"],
    Category.GAS: ["Revize plynu"],
    Category.STRUCTURAL: ["Kontrola střechy", "Čištění okapů"],
}


def seed_store(store, properties: int = 3, events_per_property: int = 5, today=None) -> None:
    today = today or date.today()

    for _ in range(properties):
        store.add_property({
            "name": f"{fake.street_name()} {fake.building_number()}",
            "address": fake.address().replace("\n", ", "),
            "type": random.choice(list(PropertyType)),
        })
        prop = store.properties[-1]

        for _ in range(events_per_property):
            category = random.choice(list(TASKS))
            store.add_maintenance_event({
                "property_id": prop.id,
                "title": random.choice(TASKS[category]),
                "category": category,
                "date": today - timedelta(days=random.randint(0, 365)),
                "notes": fake.sentence(),
                "recurring_period": random.choice(list(RecurringPeriod)),
            })


def run():
    app = create_app()
    with app.app_context():
        store = get_store()
        if store.properties:
            print("Store already has properties. Skipping seed.")
            return

        seed_store(store)
        print(f"Seed complete. Created {len(store.properties)} fake properties.")


if __name__ == "__main__":
    run()
