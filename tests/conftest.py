"""Shared fixtures: small catalogs and tracking sample helpers."""

import pytest

from src.catalog.catalog import load_catalog, load_catalog_from_dict
from src.models.models import TrackingSample, TrackingStatus
from src.utils.config import DEFAULT_CATALOG_PATH


LATTE_DOCUMENT = {
    "ingredients": [
        {"name": "coffee", "color": {"r": 51, "g": 26, "b": 0}},
        {"name": "milk", "color": {"r": 255, "g": 255, "b": 230}},
    ],
    "recipes": [
        {"name": "Latte", "ingredients": ["coffee", "milk"], "color": {"r": 194, "g": 153, "b": 107}},
    ],
}

CAFE_DOCUMENT = {
    "ingredients": [
        {"name": "Espresso", "color": {"r": 51, "g": 26, "b": 0}},
        {"name": "Milk", "color": {"r": 255, "g": 255, "b": 230}},
        {"name": "Chocolate", "color": {"r": 77, "g": 38, "b": 13}},
        {"name": "Vanilla", "color": {"r": 255, "g": 242, "b": 204}},
        {"name": "Ice", "color": {"r": 220, "g": 240, "b": 255}},
    ],
    "recipes": [
        {"name": "Latte", "ingredients": ["Espresso", "Milk"], "color": {"r": 194, "g": 153, "b": 107}},
        {"name": "Cafe au Lait", "ingredients": ["Milk", "Espresso"]},
        {"name": "Mocha", "ingredients": ["Espresso", "Chocolate"], "color": {"r": 102, "g": 64, "b": 38}},
        {"name": "Vanilla Latte", "ingredients": ["Espresso", "Milk", "Vanilla"]},
        {"name": "Mocha Latte", "ingredients": ["Espresso", "Milk", "Chocolate"]},
        {"name": "Hot Chocolate", "ingredients": ["Milk", "Chocolate"]},
    ],
}

MARKERS = {
    "espresso": "Espresso",
    "milk": "Milk",
    "milk_alt": "Milk",
    "choco_syrup": "Chocolate",
    "vanilla": "Vanilla",
    "ice": "Ice",
}


def sample(target_id, position=(0.0, 0.0, 0.0), status=TrackingStatus.TRACKED):
    """Build a TrackingSample."""
    return TrackingSample(target_id=target_id, position=position, status=status)


@pytest.fixture
def latte_catalog():
    return load_catalog_from_dict(LATTE_DOCUMENT)


@pytest.fixture
def cafe_catalog():
    return load_catalog_from_dict(CAFE_DOCUMENT)


@pytest.fixture
def bundled_catalog():
    return load_catalog(DEFAULT_CATALOG_PATH)


@pytest.fixture
def markers():
    return dict(MARKERS)


@pytest.fixture
def make_sample():
    return sample
