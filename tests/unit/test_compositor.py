"""Unit tests for liquid color composition."""

from itertools import permutations

import pytest

from src.engine.compositor import blend_colors, compose_color, side_color
from src.models.models import NEUTRAL_FALLBACK, TRANSPARENT, Color


class TestBlendColors:
    def test_mean_of_channels(self):
        blended = blend_colors([Color(r=0.0, g=0.5, b=1.0), Color(r=1.0, g=0.5, b=0.0)])

        assert blended == Color(r=0.5, g=0.5, b=0.5)

    def test_empty_returns_none(self):
        assert blend_colors([]) is None


class TestComposeColor:
    """Test recipe color lookup and averaging fallback."""

    def test_empty_cup_is_transparent(self, cafe_catalog):
        color = compose_color([], cafe_catalog)

        assert color == TRANSPARENT
        assert color.a == 0.0

    def test_exact_recipe_color_wins(self, latte_catalog):
        assert compose_color(["coffee", "milk"], latte_catalog) == Color.from_rgb255(194, 153, 107)

    def test_single_ingredient_uses_base_color(self, latte_catalog):
        assert compose_color(["coffee"], latte_catalog) == Color.from_rgb255(51, 26, 0)

    def test_exact_recipe_without_color_blends(self, cafe_catalog):
        """Milk + Chocolate matches Hot Chocolate, which has no display color."""
        color = compose_color(["Milk", "Chocolate"], cafe_catalog)

        assert color.r == pytest.approx((255 + 77) / 2 / 255)
        assert color.g == pytest.approx((255 + 38) / 2 / 255)
        assert color.b == pytest.approx((230 + 13) / 2 / 255)
        assert color.a == 1.0

    def test_partial_match_blends_instead_of_using_recipe_color(self, cafe_catalog):
        color = compose_color(["Espresso", "Milk", "Ice"], cafe_catalog)

        assert color != Color.from_rgb255(194, 153, 107)
        assert color.r == pytest.approx((51 + 255 + 220) / 3 / 255)
        assert color.g == pytest.approx((26 + 255 + 240) / 3 / 255)
        assert color.b == pytest.approx((0 + 230 + 255) / 3 / 255)

    def test_unknown_ingredients_are_skipped(self, latte_catalog):
        assert compose_color(["coffee", "cardamom"], latte_catalog) == Color.from_rgb255(51, 26, 0)

    def test_only_unknown_ingredients_use_fallback(self, latte_catalog):
        assert compose_color(["cardamom"], latte_catalog) == NEUTRAL_FALLBACK

    def test_case_and_duplicates_ignored(self, latte_catalog):
        assert compose_color(["COFFEE", "coffee", " Milk "], latte_catalog) == Color.from_rgb255(194, 153, 107)

    def test_insertion_order_does_not_matter(self, bundled_catalog):
        ingredients = ["Espresso", "Cinnamon", "Ice", "Caramel Syrup"]
        colors = {compose_color(list(order), bundled_catalog) for order in permutations(ingredients)}

        assert len(colors) == 1


class TestSideColor:
    def test_scaled_by_default_factor(self):
        side = side_color(Color(r=0.5, g=1.0, b=0.0))

        assert side.r == pytest.approx(0.4)
        assert side.g == pytest.approx(0.8)
        assert side.b == 0.0

    def test_transparent_stays_transparent(self):
        assert side_color(TRANSPARENT).is_transparent

    def test_explicit_factor(self):
        assert side_color(Color(r=1.0, g=1.0, b=1.0), factor=0.5) == Color(r=0.5, g=0.5, b=0.5)
