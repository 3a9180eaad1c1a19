"""Background theme selection from the weather category."""

import logging
from enum import Enum
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class Theme(str, Enum):
    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    SNOWY = "snowy"
    DEFAULT = "default"

    @property
    def css_class(self) -> str:
        return f"bg-{self.value}"


CATEGORY_THEMES: Dict[str, Theme] = {
    "clear": Theme.SUNNY,
    "clouds": Theme.CLOUDY,
    "rain": Theme.RAINY,
    "drizzle": Theme.RAINY,
    "thunderstorm": Theme.RAINY,
    "snow": Theme.SNOWY,
}


def theme_for_category(category: Optional[str]) -> Theme:
    """Map a weather category such as "Rain" to a theme, ignoring case.

    Unknown categories are logged and get the default theme.
    """
    if not category:
        return Theme.DEFAULT

    theme = CATEGORY_THEMES.get(category.lower())
    if theme is None:
        logger.warning(f"Unknown weather condition: {category}")
        return Theme.DEFAULT
    return theme
