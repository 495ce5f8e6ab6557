"""Recipe catalog: ingredients with base colors and recipes, loaded once per run.

The catalog document is JSON:

    {
        "ingredients": [{"name": "Milk", "color": {"r": 255, "g": 255, "b": 230}}],
        "recipes": [{"name": "Latte", "ingredients": ["Espresso", "Milk"], "color": {...}}],
        "coreIngredients": ["Espresso", "Milk"]
    }

Validation happens at load time (unknown ingredient references, duplicates,
channel ranges). A loaded Catalog is read-only and shared by every session.
Ingredient names are resolved once to normalized keys, so the per-tick code
only compares keys.
"""

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from src.models.models import CatalogDocument, Ingredient, Recipe, normalize_name
from src.utils.logger import logger


class CatalogLoadError(ValueError):
    """Raised when a catalog document cannot be read or fails validation."""


class Catalog:
    """Read-only lookup structure over ingredients and recipes.

    Recipe order is significant: it is the tie-break order for matching.
    """

    def __init__(
        self,
        ingredients: Iterable[Ingredient],
        recipes: Sequence[Recipe],
        core_ingredients: Sequence[str] = (),
    ) -> None:
        self._ingredients: Dict[str, Ingredient] = {ing.key: ing for ing in ingredients}
        self._recipes: Tuple[Recipe, ...] = tuple(recipes)
        self._core: Tuple[str, ...] = tuple(core_ingredients)

    @property
    def ingredients(self) -> Mapping[str, Ingredient]:
        return MappingProxyType(self._ingredients)

    @property
    def recipes(self) -> Tuple[Recipe, ...]:
        return self._recipes

    @property
    def core_ingredients(self) -> Tuple[str, ...]:
        return self._core

    def resolve(self, name: str) -> Optional[str]:
        """Return the normalized key for a known ingredient name, else None."""
        key = normalize_name(name)
        return key if key in self._ingredients else None

    def get_ingredient(self, name: str) -> Optional[Ingredient]:
        return self._ingredients.get(normalize_name(name))

    def get_recipe(self, name: str) -> Optional[Recipe]:
        """Look a recipe up by display name (case-insensitive)."""
        key = normalize_name(name)
        for recipe in self._recipes:
            if normalize_name(recipe.name) == key:
                return recipe
        return None

    def __len__(self) -> int:
        return len(self._recipes)

    def __repr__(self) -> str:
        return f"Catalog(ingredients={len(self._ingredients)}, recipes={len(self._recipes)})"

    @classmethod
    def from_document(cls, document: CatalogDocument) -> "Catalog":
        """Build a Catalog from an already validated document."""
        ingredients: List[Ingredient] = [
            Ingredient(name=doc.name, key=normalize_name(doc.name), base_color=doc.color.to_color())
            for doc in document.ingredients
        ]
        display_names = {ing.key: ing.name for ing in ingredients}

        recipes: List[Recipe] = []
        for doc in document.recipes:
            keys = [normalize_name(name) for name in doc.ingredients]
            recipes.append(
                Recipe(
                    name=doc.name,
                    required_ingredients=frozenset(keys),
                    ingredient_names=tuple(display_names[key] for key in keys),
                    display_color=doc.color.to_color() if doc.color else None,
                )
            )

        core = [display_names[normalize_name(name)] for name in document.core_ingredients]
        return cls(ingredients, recipes, core)


def load_catalog_from_dict(data: Any) -> Catalog:
    """Validate a parsed catalog document and build the Catalog.

    Args:
        data: Parsed JSON document (dict).

    Returns:
        Loaded Catalog.

    Raises:
        CatalogLoadError: If the document is malformed or references unknown ingredients.
    """
    if not isinstance(data, dict):
        raise CatalogLoadError(f"Catalog document must be a JSON object, got: {type(data).__name__}")

    try:
        document = CatalogDocument.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'document'}: {err['msg']}" for err in e.errors()
        )
        raise CatalogLoadError(f"Invalid catalog document: {errors}") from e

    catalog = Catalog.from_document(document)
    logger.info(f"Catalog loaded: {len(catalog.ingredients)} ingredients, {len(catalog.recipes)} recipes")
    return catalog


def load_catalog_from_json(text: str) -> Catalog:
    """Parse a JSON string and build the Catalog.

    Raises:
        CatalogLoadError: If the text is not valid JSON or fails validation.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"Catalog is not valid JSON: {e}") from e
    return load_catalog_from_dict(data)


def load_catalog(path: Union[str, Path]) -> Catalog:
    """Read a catalog JSON file.

    Args:
        path: Path to the catalog document.

    Returns:
        Loaded Catalog.

    Raises:
        CatalogLoadError: If the file cannot be read or its content is invalid.
    """
    catalog_path = Path(path)
    logger.debug(f"Loading catalog from {catalog_path}")
    try:
        text = catalog_path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogLoadError(f"Cannot read catalog file {catalog_path}: {e}") from e
    return load_catalog_from_json(text)
