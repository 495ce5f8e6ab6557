"""Recipe matching over the current cup contents.

Two modes:

1. EXACT-FIRST (match_recipe):
   - Recipes with exactly as many ingredients as the cup, first subset in catalog order
   - Otherwise shrink k = n-1 .. 1 and take the first subset recipe ("<name> + extras")
   - Otherwise a custom mix label ("Custom Mix (n ingredients)")

2. SUGGESTION (suggest_recipes):
   - Every recipe containing all of the cup's ingredients
   - ... and sharing at least SUGGESTION_OVERLAP_THRESHOLD of them
   - Catalog order, never reduced to a single winner

Both are pure functions of (catalog, set of ingredient names): insertion order
of the cup contents never changes the result, only catalog order breaks ties.
"""

from typing import FrozenSet, Iterable, List, Optional, Tuple

from src.catalog.catalog import Catalog
from src.models.models import MatchKind, MatchResult, Recipe, normalize_name
from src.utils.config import config


def _ingredient_keys(ingredients: Iterable[str]) -> FrozenSet[str]:
    return frozenset(key for key in (normalize_name(name) for name in ingredients) if key)


def _first_subset_of_size(catalog: Catalog, keys: FrozenSet[str], size: int) -> Optional[Recipe]:
    for recipe in catalog.recipes:
        if recipe.size == size and recipe.required_ingredients <= keys:
            return recipe
    return None


def match_exact(ingredients: Iterable[str], catalog: Catalog) -> Optional[Recipe]:
    """Return the first recipe (catalog order) whose ingredients equal the given set.

    Args:
        ingredients: Ingredient names in the cup (any case, any order).
        catalog: Loaded catalog.

    Returns:
        Matching Recipe, or None when no recipe has exactly these ingredients.
    """
    keys = _ingredient_keys(ingredients)
    if not keys:
        return None
    return _first_subset_of_size(catalog, keys, len(keys))


def match_recipe(ingredients: Iterable[str], catalog: Catalog) -> MatchResult:
    """Find the best recipe for the cup contents, degrading to partial and custom matches.

    Unknown ingredient names still count toward the cup size, so a cup holding an
    unknown extra can only reach a partial match.

    Args:
        ingredients: Ingredient names in the cup.
        catalog: Loaded catalog.

    Returns:
        MatchResult with kind EXACT, PARTIAL, CUSTOM, or NONE for an empty cup.
    """
    keys = _ingredient_keys(ingredients)
    n = len(keys)
    if n == 0:
        return MatchResult(kind=MatchKind.NONE, label="None")

    exact = _first_subset_of_size(catalog, keys, n)
    if exact is not None:
        return MatchResult(kind=MatchKind.EXACT, label=exact.name, recipe=exact)

    for k in range(n - 1, 0, -1):
        partial = _first_subset_of_size(catalog, keys, k)
        if partial is not None:
            return MatchResult(kind=MatchKind.PARTIAL, label=f"{partial.name} + extras", recipe=partial)

    return MatchResult(kind=MatchKind.CUSTOM, label=f"Custom Mix ({n} ingredients)")


def suggest_recipes(
    ingredients: Iterable[str],
    catalog: Catalog,
    overlap_threshold: Optional[int] = None,
) -> List[Recipe]:
    """Return every recipe the cup could still turn into.

    A recipe qualifies when it contains every ingredient already in the cup and
    shares at least overlap_threshold ingredients with it.

    Args:
        ingredients: Ingredient names in the cup.
        catalog: Loaded catalog.
        overlap_threshold: Minimum shared ingredients. Default: SUGGESTION_OVERLAP_THRESHOLD.

    Returns:
        Recipes in catalog order (possibly empty).
    """
    threshold = config.SUGGESTION_OVERLAP_THRESHOLD if overlap_threshold is None else overlap_threshold
    keys = _ingredient_keys(ingredients)
    return [
        recipe
        for recipe in catalog.recipes
        if keys <= recipe.required_ingredients and len(recipe.required_ingredients & keys) >= threshold
    ]


def overlap_counts(ingredients: Iterable[str], catalog: Catalog) -> List[Tuple[Recipe, int]]:
    """Pair every recipe with the number of ingredients it shares with the cup (catalog order)."""
    keys = _ingredient_keys(ingredients)
    return [(recipe, len(recipe.required_ingredients & keys)) for recipe in catalog.recipes]
