"""Seed script: reference data and staff for a local newsroom.

Creates classifications, categories, one user per staff role, a radio
station with its own login, and a few items at different stages so every
workflow action can be tried from a fresh database.

Usage:
    python -m newsroom.seed
"""

import asyncio
from datetime import datetime, timezone

from newsroom.auth import create_access_token
from newsroom.database import close_db, get_db_session, init_db
from newsroom.logging_config import configure_logging, get_logger
from newsroom.models import (
    Category,
    Classification,
    ClassificationType,
    ContentItem,
    ContentStage,
    ItemClassification,
    StaffRole,
    Station,
    User,
    UserType,
)

logger = get_logger(__name__)

NOW = datetime.now(timezone.utc)

LANGUAGES = ["English", "Afrikaans", "Xhosa"]
RELIGIONS = ["Christian", "Muslim", "Other"]
LOCALITIES = ["Western Cape", "Eastern Cape", "Gauteng"]
CATEGORIES = [("News", "news"), ("Sport", "sport"), ("Finance", "finance")]


def _slug(name: str) -> str:
    return name.lower().replace(" ", "-")


async def seed():
    configure_logging()
    await init_db()

    async with get_db_session() as db:
        classifications: dict[str, Classification] = {}
        for kind, names in (
            (ClassificationType.language, LANGUAGES),
            (ClassificationType.religion, RELIGIONS),
            (ClassificationType.locality, LOCALITIES),
        ):
            for order, name in enumerate(names):
                cls = Classification(
                    name=name,
                    slug=f"{kind.value}-{_slug(name)}",
                    type=kind.value,
                    sort_order=order,
                )
                db.add(cls)
                classifications[name] = cls

        categories = {slug: Category(name=name, slug=slug) for name, slug in CATEGORIES}
        db.add_all(categories.values())

        station = Station(
            name="Radio Kaap",
            allowed_language_names=["English", "Afrikaans"],
            allowed_religion_names=["Christian", "Other"],
            blocked_category_ids=[],
        )
        db.add(station)
        await db.flush()

        staff: dict[StaffRole, User] = {}
        for role in StaffRole:
            user = User(
                email=f"{role.value}@newsroom.local",
                display_name=role.value.replace("_", " ").title(),
                user_type=UserType.staff.value,
                staff_role=role.value,
            )
            db.add(user)
            staff[role] = user

        radio_user = User(
            email="station@newsroom.local",
            display_name="Radio Kaap",
            user_type=UserType.radio.value,
            station_id=station.id,
        )
        db.add(radio_user)
        await db.flush()

        def links(*names: str) -> list[ItemClassification]:
            return [
                ItemClassification(
                    classification_id=classifications[n].id,
                    classification=classifications[n],
                )
                for n in names
            ]

        journalist = staff[StaffRole.journalist]
        items = [
            ContentItem(
                title="Council approves new water tariffs",
                slug="council-water-tariffs",
                stage=ContentStage.draft.value,
                author_id=staff[StaffRole.intern].id,
                category_id=categories["news"].id,
                classifications=links("English", "Christian", "Western Cape"),
            ),
            ContentItem(
                title="Local side wins regional final",
                slug="regional-final",
                stage=ContentStage.needs_approver_review.value,
                author_id=journalist.id,
                assigned_approver_id=staff[StaffRole.sub_editor].id,
                category_id=categories["sport"].id,
                classifications=links("English", "Other"),
            ),
            ContentItem(
                title="Fuel price to drop next month",
                slug="fuel-price-drop",
                stage=ContentStage.approved.value,
                author_id=journalist.id,
                category_id=categories["finance"].id,
                classifications=links("English", "Christian", "Gauteng"),
            ),
            ContentItem(
                title="Harbour reopens after storm",
                slug="harbour-reopens",
                stage=ContentStage.published.value,
                author_id=journalist.id,
                category_id=categories["news"].id,
                classifications=links("English", "Christian"),
                published_at=NOW,
                published_by=staff[StaffRole.editor].id,
            ),
        ]
        db.add_all(items)
        await db.commit()

        logger.info(
            "seed_complete",
            classifications=len(classifications),
            staff=len(staff),
            items=len(items),
        )

        print("\n" + "=" * 60)
        print("SEED DATA CREATED SUCCESSFULLY")
        print("=" * 60)
        print(f"\nStation: {station.name} ({station.id})")
        print("\nAccess tokens:")
        for role, user in staff.items():
            print(f"  {role.value}: {create_access_token(str(user.id))}")
        print(f"  radio: {create_access_token(str(radio_user.id))}")
        print("=" * 60)

    await close_db()


if __name__ == "__main__":
    asyncio.run(seed())
