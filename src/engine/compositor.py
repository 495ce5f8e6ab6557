"""Liquid color for a set of ingredients.

A recipe with a fixed display color wins when the cup matches it exactly;
otherwise the color is the plain average of the known ingredients' base colors.
"""

from typing import Iterable, Optional, Sequence

from src.catalog.catalog import Catalog
from src.engine.matcher import match_exact
from src.models.models import NEUTRAL_FALLBACK, TRANSPARENT, Color, normalize_name
from src.utils.config import config


def blend_colors(colors: Sequence[Color]) -> Optional[Color]:
    """Unweighted mean of the RGB channels. Returns None for an empty sequence."""
    if not colors:
        return None
    count = len(colors)
    return Color(
        r=sum(c.r for c in colors) / count,
        g=sum(c.g for c in colors) / count,
        b=sum(c.b for c in colors) / count,
    )


def compose_color(ingredients: Iterable[str], catalog: Catalog) -> Color:
    """Compute the top color of the liquid.

    Args:
        ingredients: Ingredient names in the cup.
        catalog: Loaded catalog.

    Returns:
        TRANSPARENT for an empty cup, the exact recipe's display color when set,
        the average base color of the known ingredients otherwise, or the
        neutral fallback when no ingredient is known.
    """
    # Sorted keys keep the float sums independent of insertion order
    keys = sorted({normalize_name(name) for name in ingredients} - {""})
    if not keys:
        return TRANSPARENT

    recipe = match_exact(keys, catalog)
    if recipe is not None and recipe.display_color is not None:
        return recipe.display_color

    known = [catalog.ingredients[key].base_color for key in keys if key in catalog.ingredients]
    blended = blend_colors(known)
    return blended if blended is not None else NEUTRAL_FALLBACK


def side_color(top: Color, factor: Optional[float] = None) -> Color:
    """Shade of the cup side: the top color scaled by SIDE_SHADE_FACTOR."""
    return top.scaled(config.SIDE_SHADE_FACTOR if factor is None else factor)
