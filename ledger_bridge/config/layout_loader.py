"""Load and manage heuristic CSV layout profiles."""
import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional
import yaml

from .csv_layout import DEFAULT_LAYOUT, HeuristicLayout
from .settings import CSV_LAYOUTS_DIR

logger = logging.getLogger(__name__)


class LayoutLoader:
    """Loads heuristic layout profiles from YAML files."""

    def __init__(self, layouts_dir: Path = CSV_LAYOUTS_DIR):
        """
        Initialize layout loader.

        Args:
            layouts_dir: Directory containing layout YAML files
        """
        self.layouts_dir = Path(layouts_dir)
        self._layouts: Dict[str, HeuristicLayout] = {DEFAULT_LAYOUT.name: DEFAULT_LAYOUT}
        self._load_all_layouts()

    def _load_all_layouts(self) -> None:
        """Load all layout profile files."""
        if not self.layouts_dir.exists():
            logger.warning(f"Layout directory not found: {self.layouts_dir}")
            return

        yaml_files = sorted(self.layouts_dir.glob("*.yaml")) + sorted(self.layouts_dir.glob("*.yml"))

        for yaml_file in yaml_files:
            try:
                self._load_layout_file(yaml_file)
            except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
                logger.error(f"Failed to load layout {yaml_file}: {e}")

        logger.debug(f"Loaded {len(self._layouts)} CSV layouts")

    def _load_layout_file(self, yaml_file: Path) -> None:
        """
        Load a single layout file.

        Each top-level key is a profile name, e.g.::

            sberbank_usd:
              currency_row: 8
              default_currency: USD

        Args:
            yaml_file: Path to YAML layout file
        """
        with open(yaml_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            logger.warning(f"Layout file {yaml_file} has no profiles")
            return

        for profile_name, overrides in data.items():
            if not isinstance(overrides, dict):
                logger.warning(f"Skipping profile {profile_name}: expected a mapping")
                continue
            layout = build_layout(str(profile_name), overrides)
            self._layouts[layout.name] = layout
            logger.debug(f"Loaded layout profile {layout.name}")

    def get_layout(self, name: str) -> Optional[HeuristicLayout]:
        """
        Get a layout profile by name.

        Args:
            name: Profile name (case-insensitive)

        Returns:
            HeuristicLayout or None if not found
        """
        return self._layouts.get(name.lower())

    def get_all_layouts(self) -> List[str]:
        """Get list of all profile names."""
        return list(self._layouts.keys())

    @property
    def layouts_count(self) -> int:
        """Get count of loaded profiles."""
        return len(self._layouts)


def build_layout(name: str, overrides: dict) -> HeuristicLayout:
    """
    Build a layout from the default profile and a mapping of overrides.

    Unknown keys are ignored with a warning.

    Raises:
        TypeError, ValueError: If an override has the wrong shape
    """
    known = set(HeuristicLayout.field_names())
    values = {}

    for key, value in overrides.items():
        if key not in known or key == "name":
            logger.warning(f"Layout {name}: ignoring unknown key '{key}'")
            continue
        values[key] = _coerce(key, value)

    return replace(DEFAULT_LAYOUT, name=name.lower(), **values)


def _coerce(key: str, value):
    """Convert YAML values to the types the layout expects."""
    if key == "currency_keywords":
        if isinstance(value, dict):
            pairs = value.items()
        else:
            pairs = value
        return tuple((str(keyword).lower(), str(code).upper()) for keyword, code in pairs)
    if key in ("column_headers", "sub_headers"):
        return {int(column): str(text) for column, text in value.items()}
    if key == "currency_labels":
        return {str(code).upper(): str(label) for code, label in value.items()}
    if key == "min_balance_amount":
        return float(value)

    default = getattr(DEFAULT_LAYOUT, key)
    if isinstance(default, int):
        number = int(value)
        if number < 0:
            raise ValueError(f"{key} must not be negative: {value}")
        return number
    return str(value)


# Singleton instance
_loader: Optional[LayoutLoader] = None


def get_layout_loader() -> LayoutLoader:
    """Get singleton instance of LayoutLoader."""
    global _loader
    if _loader is None:
        _loader = LayoutLoader()
    return _loader
