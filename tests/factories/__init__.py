"""Test data factories for the newsroom workflow service.

Factories build ORM objects in memory so unit tests never need a database.
"""

from tests.factories.content_factory import (
    Taxonomy,
    UserFactory,
    make_actor,
    make_item,
    make_ready_item,
    make_station,
    make_translation,
)

__all__ = [
    "Taxonomy",
    "UserFactory",
    "make_actor",
    "make_item",
    "make_ready_item",
    "make_station",
    "make_translation",
]
