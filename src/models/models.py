"""Data models and schemas for the ingredient composition engine.

Defines Pydantic models for the catalog document (wire format), the immutable
domain objects built from it, tracking samples coming from the AR runtime,
match results, and the events emitted to the host application.
All models use Pydantic v2 for strict validation.
"""

from enum import Enum
from typing import List, Optional, Annotated, Tuple
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict


def normalize_name(name: str) -> str:
    """Return the lookup key for an ingredient name (trimmed, case-folded)."""
    return name.strip().casefold()


# ============================================================================
# Colors
# ============================================================================


class Color(BaseModel):
    """RGBA color with float channels in [0, 1].

    Alpha 0 means "no liquid"; every ingredient and recipe color is opaque.
    """

    model_config = ConfigDict(frozen=True)

    r: Annotated[float, Field(ge=0.0, le=1.0, description="Red channel (0-1)")]
    g: Annotated[float, Field(ge=0.0, le=1.0, description="Green channel (0-1)")]
    b: Annotated[float, Field(ge=0.0, le=1.0, description="Blue channel (0-1)")]
    a: Annotated[float, Field(ge=0.0, le=1.0, description="Alpha channel (0-1)")] = 1.0

    @classmethod
    def from_rgb255(cls, r: int, g: int, b: int) -> "Color":
        """Build an opaque color from 0-255 integer channels."""
        return cls(r=r / 255.0, g=g / 255.0, b=b / 255.0)

    def scaled(self, factor: float) -> "Color":
        """Return the color with RGB multiplied by factor (alpha unchanged)."""
        return Color(
            r=min(1.0, max(0.0, self.r * factor)),
            g=min(1.0, max(0.0, self.g * factor)),
            b=min(1.0, max(0.0, self.b * factor)),
            a=self.a,
        )

    def to_rgb255(self) -> Tuple[int, int, int]:
        """Return RGB as rounded 0-255 integers (for display and logs)."""
        return (round(self.r * 255), round(self.g * 255), round(self.b * 255))

    @property
    def is_transparent(self) -> bool:
        return self.a == 0.0


TRANSPARENT = Color(r=0.0, g=0.0, b=0.0, a=0.0)
NEUTRAL_FALLBACK = Color(r=0.8, g=0.7, b=0.6)


# ============================================================================
# Catalog document (wire format)
# ============================================================================


class ColorData(BaseModel):
    """Color as written in the catalog document: integer channels 0-255."""

    r: Annotated[int, Field(ge=0, le=255)]
    g: Annotated[int, Field(ge=0, le=255)]
    b: Annotated[int, Field(ge=0, le=255)]

    def to_color(self) -> Color:
        return Color.from_rgb255(self.r, self.g, self.b)


class IngredientDocument(BaseModel):
    """One ingredient entry of the catalog document."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1, max_length=100, description="Ingredient display name")]
    color: Annotated[ColorData, Field(description="Base color of the ingredient (0-255 channels)")]


class RecipeDocument(BaseModel):
    """One recipe entry of the catalog document."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Annotated[str, Field(min_length=1, max_length=100, description="Recipe display name")]
    ingredients: Annotated[
        List[str], Field(min_length=1, description="Names of the required ingredients (no duplicates)")
    ]
    color: Annotated[
        Optional[ColorData],
        Field(description="Fixed display color; derived from the ingredients when absent"),
    ] = None

    @field_validator("ingredients")
    @classmethod
    def validate_unique_ingredients(cls, v: List[str]) -> List[str]:
        """Reject empty names and duplicates (case-insensitive)."""
        seen = set()
        for name in v:
            key = normalize_name(name)
            if not key:
                raise ValueError("Recipe ingredient names must not be empty")
            if key in seen:
                raise ValueError(f"Duplicate ingredient in recipe: {name}")
            seen.add(key)
        return [name.strip() for name in v]


class CatalogDocument(BaseModel):
    """Top-level catalog document.

    `coreIngredients` is optional and lists the ingredients offered to the user
    in the picker; every entry must exist in `ingredients`.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    ingredients: Annotated[List[IngredientDocument], Field(min_length=1)]
    recipes: Annotated[List[RecipeDocument], Field(default_factory=list)]
    core_ingredients: Annotated[
        List[str], Field(default_factory=list, alias="coreIngredients")
    ]

    @model_validator(mode="after")
    def validate_references(self) -> "CatalogDocument":
        """Ensure ingredient names are unique and every reference resolves."""
        known = set()
        for ingredient in self.ingredients:
            key = normalize_name(ingredient.name)
            if key in known:
                raise ValueError(f"Duplicate ingredient name: {ingredient.name}")
            known.add(key)

        for recipe in self.recipes:
            missing = [name for name in recipe.ingredients if normalize_name(name) not in known]
            if missing:
                raise ValueError(f"Recipe '{recipe.name}' references unknown ingredients: {missing}")

        missing_core = [name for name in self.core_ingredients if normalize_name(name) not in known]
        if missing_core:
            raise ValueError(f"coreIngredients references unknown ingredients: {missing_core}")

        return self


# ============================================================================
# Domain objects
# ============================================================================


class Ingredient(BaseModel):
    """Domain model for a catalog ingredient. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    name: str
    key: str
    base_color: Color


class Recipe(BaseModel):
    """Domain model for a recipe.

    `required_ingredients` holds normalized ingredient keys; `ingredient_names`
    keeps the display names in document order for presentation.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    required_ingredients: frozenset[str]
    ingredient_names: Tuple[str, ...]
    display_color: Optional[Color] = None

    @property
    def size(self) -> int:
        return len(self.required_ingredients)


class MatchKind(str, Enum):
    """How a recipe match was reached."""

    NONE = "none"
    EXACT = "exact"
    PARTIAL = "partial"
    CUSTOM = "custom"


class MatchResult(BaseModel):
    """Result of exact-first recipe matching."""

    model_config = ConfigDict(frozen=True)

    kind: MatchKind
    label: Annotated[str, Field(description="Display label (recipe name, '+ extras' or custom mix)")]
    recipe: Annotated[Optional[Recipe], Field(description="Matched recipe, None for custom/none")] = None


# ============================================================================
# Tracking input
# ============================================================================


class TrackingStatus(str, Enum):
    """Confidence state reported by the AR runtime for a target."""

    TRACKED = "TRACKED"
    EXTENDED_TRACKED = "EXTENDED_TRACKED"
    NOT_TRACKED = "NOT_TRACKED"

    @property
    def is_present(self) -> bool:
        return self in (TrackingStatus.TRACKED, TrackingStatus.EXTENDED_TRACKED)


class TrackingSample(BaseModel):
    """One per-tick observation of a tracking target."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    target_id: Annotated[str, Field(description="Target (marker) name from the AR runtime")]
    position: Annotated[Tuple[float, float, float], Field(description="World position (x, y, z)")]
    status: Annotated[TrackingStatus, Field(description="Tracking confidence")] = TrackingStatus.NOT_TRACKED

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v):
        """Accept status names in any case ("tracked", "Extended_Tracked")."""
        if isinstance(v, str):
            return v.strip().upper()
        return v


# ============================================================================
# Outbound events
# ============================================================================


class CupFound(BaseModel):
    """The cup target became visible."""


class CupLost(BaseModel):
    """The cup target stopped being visible."""


class IngredientAdded(BaseModel):
    """An ingredient was accepted into the cup."""

    name: str


class GatingIngredientAdded(BaseModel):
    """The gating ingredient (first of every drink) was accepted."""

    name: str


class RecipeSuggestions(BaseModel):
    """Recipes the current cup contents could still turn into."""

    recipes: List[Recipe] = Field(default_factory=list)
