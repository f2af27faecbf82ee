from __future__ import annotations

OTHER = "Other"
CATEGORY_SEPARATOR = ">"

CATEGORIES: dict[str, list[str]] = {
    "Cakes & Desserts": ["Custom Cakes", "Cupcakes", "Cookies", "Dessert Tables"],
    "Catering & Food": ["Full Service", "Finger Food", "Grazing Table", "Private Chef", "Food Trucks"],
    "Balloons & Decor": ["Balloon Arches", "Backdrops", "Table Decor", "Themed Styling"],
    "Entertainment": ["DJs", "Magicians", "Clowns", "Face Painters", "Dancers", "Mascots"],
    "Photography & Video": ["Photographer", "Videographer", "360 Booth", "Photobooth"],
    "Venue Hire": ["Indoor", "Outdoor", "Rooftops", "Private Rooms"],
    "Kids Activities": ["Soft Play", "Bouncy Castle", "Craft Stations", "Puppet Shows"],
    "Transport": ["Party Buses", "Limos", "Shuttle Vans", "Vintage Cars"],
    "Games & Rentals": ["Giant Games", "Arcade Machines", "Lawn Games", "Karaoke Machine"],
}

CATEGORY_COLORS: dict[str, str] = {
    "Cakes & Desserts": "#FFF9C4",
    "Catering & Food": "#C8E6C9",
    "Balloons & Decor": "#F8BBD0",
    "Entertainment": "#FFCDD2",
    "Photography & Video": "#FFE0B2",
    "Venue Hire": "#BBDEFB",
    "Kids Activities": "#F8BBD0",
    "Transport": "#D7CCC8",
    "Games & Rentals": "#B2DFDB",
    OTHER: "#D7CCC8",
}
_DEFAULT_COLOR = "#D7CCC8"


def normalize_category(value: object) -> str:
    """Return the stripped category, or ``Other`` for empty/missing values."""
    if not isinstance(value, str) or not value.strip():
        return OTHER
    return value.strip()


def top_level(category: str) -> str:
    """``"Cakes & Desserts > Cupcakes"`` -> ``"Cakes & Desserts"``."""
    head = normalize_category(category).split(CATEGORY_SEPARATOR, 1)[0].strip()
    return head or OTHER


def sub_category(category: str) -> str | None:
    parts = normalize_category(category).split(CATEGORY_SEPARATOR, 1)
    if len(parts) < 2:
        return None
    return parts[1].strip() or None


def category_color(category: str) -> str:
    return CATEGORY_COLORS.get(top_level(category), _DEFAULT_COLOR)
