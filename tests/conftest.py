"""Shared fixtures: catalog rows and an in-memory catalog store."""

from __future__ import annotations

from typing import Any

import pytest

from tests.fakes import FakeCatalogStore


@pytest.fixture
def catalog_rows() -> dict[str, list[dict[str, Any]]]:
    return {
        "cloth_accessories": [
            {"id": 1, "name": "FabIndia Blue Kurta", "price": 450.0, "rating": 4.3,
             "color": "Blue", "size": "M", "sub_category": "Kurta", "image_url": "k1.png"},
            {"id": 2, "name": "Biba Red Kurta", "price": 900.0, "rating": 4.6,
             "color": "Red", "size": "L", "sub_category": "kurta ", "image_url": "k2.png"},
            {"id": 3, "name": "Levis Jeans", "price": 1999.0, "rating": 4.1,
             "color": "Blue", "size": "32", "sub_category": "Jeans", "image_url": "j1.png"},
            {"id": 4, "name": "Plain Scarf", "price": 199.0, "rating": 3.2,
             "color": "Blue", "size": None, "sub_category": None, "image_url": "s1.png"},
        ],
        "pet": [
            {"id": 10, "name": "Pedigree Dog Food", "price": 650.0, "rating": 4.4,
             "color": "Brown", "sub_category": "Food", "image_url": "p1.png"},
            {"id": 11, "name": "Whiskas Cat Food", "price": 320.0, "rating": 4.0,
             "color": "Purple", "sub_category": "food", "image_url": "p2.png"},
            {"id": 12, "name": "Chew Toy", "price": 150.0, "rating": 3.9,
             "color": "Blue", "sub_category": "Toys", "image_url": "p3.png"},
        ],
    }


@pytest.fixture
def fake_store(catalog_rows: dict[str, list[dict[str, Any]]]) -> FakeCatalogStore:
    return FakeCatalogStore(catalog_rows)
