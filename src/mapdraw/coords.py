"""Coordinate input -- validation of typed latitude/longitude text.

Latitude accepts -90..90 and longitude -180..180, optionally signed, with
up to 9 decimal places (the extreme values only with zero decimals).
Failures raise ValidationError naming the field; they never reach the
registry.
"""

from __future__ import annotations

import re

from mapdraw.errors import ValidationError

LATITUDE_PATTERN = re.compile(r"([+-])?(?:90(?:\.0{1,6})?|((?:|[1-8])[0-9])(?:\.[0-9]{1,9})?)")
LONGITUDE_PATTERN = re.compile(r"([+-])?(?:180(?:\.0{1,6})?|((?:|[1-9]|1[0-7])[0-9])(?:\.[0-9]{1,9})?)")


def _validate(field: str, pattern: re.Pattern, value: object) -> float:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(field, "required")
    if pattern.fullmatch(text) is None:
        raise ValidationError(field, f"{text!r} is not a valid {field}")
    return float(text)


def validate_latitude(value: object) -> float:
    return _validate("latitude", LATITUDE_PATTERN, value)


def validate_longitude(value: object) -> float:
    return _validate("longitude", LONGITUDE_PATTERN, value)


def format_coordinate(value: float) -> str:
    """Render a coordinate for display, trimmed to 9 decimals."""
    text = f"{value:.9f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def parse_pasted(text: str) -> tuple[str, str] | None:
    """Split pasted "lng lat" text.

    Returns:
        ``(lng_text, lat_text)``, or None if the text doesn't hold two
        numeric tokens.
    """
    parts = text.strip().split()
    if len(parts) < 2:
        return None
    lng_text, lat_text = parts[0], parts[1]
    try:
        float(lng_text)
        float(lat_text)
    except ValueError:
        return None
    return (lng_text, lat_text)


class CoordinateInput:
    """Display state of the latitude/longitude input fields."""

    def __init__(self) -> None:
        self.latitude = ""
        self.longitude = ""

    def show(self, lat: float, lng: float) -> None:
        """Mirror a marker's position into the fields (click or drag)."""
        self.latitude = format_coordinate(lat)
        self.longitude = format_coordinate(lng)

    def reset(self) -> None:
        self.latitude = ""
        self.longitude = ""

    def paste(self, text: str) -> bool:
        """Fill both fields from pasted "lng lat" text.

        Returns:
            True if the paste was recognised.
        """
        parsed = parse_pasted(text)
        if parsed is None:
            return False
        self.longitude, self.latitude = parsed
        return True

    def validated(self) -> tuple[float, float]:
        """Return ``(lat, lng)`` or raise ValidationError."""
        return (validate_latitude(self.latitude), validate_longitude(self.longitude))
