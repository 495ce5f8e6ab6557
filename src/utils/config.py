"""Configuration management for the Coffee Composer engine.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import json
import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()

# Bundled catalog shipped with the repository
DEFAULT_CATALOG_PATH = str(Path(__file__).resolve().parent.parent.parent / "data" / "recipes.json")

# Marker name -> ingredient display name, as printed on the physical AR markers
DEFAULT_MARKER_MAP: Dict[str, str] = {
    "espresso": "Espresso",
    "cinnamon": "Cinnamon",
    "whipped_cream": "Whipped Cream",
    "pumpkin": "Pumpkin Spice Syrup",
    "choco_syrup": "Chocolate Syrup",
    "caramel": "Caramel Syrup",
    "vanilla": "Vanilla Syrup",
    "ice": "Ice",
    "milk": "Milk",
    "steamed_milk": "Steamed Milk",
    "hot_water": "Hot Water",
}


class Config:
    """Engine configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Add Ingredient Threshold: max cup-to-marker distance (sensor units, meters) that counts as "poured"
        # Default: 0.08 - markers need to almost touch the cup
        self.ADD_INGREDIENT_THRESHOLD: float = float(os.getenv("ADD_INGREDIENT_THRESHOLD", "0.08"))
        # Fill Speed: animation speed multiplier, one fill step takes 0.5 / FILL_SPEED seconds
        self.FILL_SPEED: float = float(os.getenv("FILL_SPEED", "1.0"))
        # Fill Step: how much of the cup one ingredient fills (0.25 = four ingredients fill the cup)
        self.FILL_STEP: float = float(os.getenv("FILL_STEP", "0.25"))
        # Cooldown Duration: seconds during which marker adds are ignored after a reset
        # Absorbs stale detections of markers still sitting next to the cup
        self.COOLDOWN_DURATION: float = float(os.getenv("COOLDOWN_DURATION", "1.5"))
        # Suggestion Overlap Threshold: shared ingredients needed before a recipe is suggested
        # Default: 2 - a single shared ingredient (e.g. espresso) is not a meaningful suggestion
        self.SUGGESTION_OVERLAP_THRESHOLD: int = int(os.getenv("SUGGESTION_OVERLAP_THRESHOLD", "2"))
        # Gating Ingredient: the first ingredient of every drink, added by any marker reaching an empty cup
        # Set to an empty string to disable gating (first marker adds its own ingredient)
        self.GATING_INGREDIENT: Optional[str] = os.getenv("GATING_INGREDIENT", "Espresso").strip() or None
        # Cup Target ID: tracking target name of the cup marker
        self.CUP_TARGET_ID: str = os.getenv("CUP_TARGET_ID", "coffee_cup")
        # Reserved Target IDs: comma-separated runtime targets that are never ingredients
        self.RESERVED_TARGET_IDS: List[str] = [
            target.strip()
            for target in os.getenv("RESERVED_TARGET_IDS", "ARCamera,DeviceObserver").split(",")
            if target.strip()
        ]
        # Catalog Path: JSON document with ingredients and recipes
        self.CATALOG_PATH: str = os.getenv("CATALOG_PATH", DEFAULT_CATALOG_PATH)
        # Marker Map Path: optional JSON object {marker_id: ingredient_name} replacing the built-in table
        self.MARKER_MAP_PATH: Optional[str] = os.getenv("MARKER_MAP_PATH")
        # Side Shade Factor: the cup side is drawn as the top color scaled by this factor
        self.SIDE_SHADE_FACTOR: float = float(os.getenv("SIDE_SHADE_FACTOR", "0.8"))

    def get_marker_map(self) -> Dict[str, str]:
        """Return the marker -> ingredient table.

        Returns:
            Contents of MARKER_MAP_PATH when set, otherwise the built-in table.

        Raises:
            ValueError: If the marker map file is not a JSON object of strings.
        """
        if not self.MARKER_MAP_PATH:
            return dict(DEFAULT_MARKER_MAP)

        with open(self.MARKER_MAP_PATH, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise ValueError(f"MARKER_MAP_PATH must contain a JSON object of strings: {self.MARKER_MAP_PATH}")
        return data

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any value is out of range.
        """
        if self.ADD_INGREDIENT_THRESHOLD <= 0:
            raise ValueError(
                f"ADD_INGREDIENT_THRESHOLD must be positive, got: {self.ADD_INGREDIENT_THRESHOLD}"
            )
        if self.FILL_SPEED <= 0:
            raise ValueError(f"FILL_SPEED must be positive, got: {self.FILL_SPEED}")
        if not (0.0 < self.FILL_STEP <= 1.0):
            raise ValueError(f"FILL_STEP must be between 0.0 (exclusive) and 1.0, got: {self.FILL_STEP}")
        if self.COOLDOWN_DURATION < 0:
            raise ValueError(f"COOLDOWN_DURATION must be at least 0, got: {self.COOLDOWN_DURATION}")
        if self.SUGGESTION_OVERLAP_THRESHOLD < 1:
            raise ValueError(
                f"SUGGESTION_OVERLAP_THRESHOLD must be at least 1, got: {self.SUGGESTION_OVERLAP_THRESHOLD}"
            )
        if not (0.0 <= self.SIDE_SHADE_FACTOR <= 1.0):
            raise ValueError(
                f"SIDE_SHADE_FACTOR must be between 0.0 and 1.0, got: {self.SIDE_SHADE_FACTOR}"
            )
        if not self.CUP_TARGET_ID:
            raise ValueError("CUP_TARGET_ID environment variable must not be empty")


# Create module-level config instance and validate immediately
config = Config()
config.validate()
