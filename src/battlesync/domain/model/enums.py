"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SideId(StrEnum):
    P1 = "p1"
    P2 = "p2"


class GameType(StrEnum):
    """Battle-mode discriminator understood by downstream damage calculation."""

    SINGLES = "Singles"
    DOUBLES = "Doubles"


class Weather(StrEnum):
    SUN = "Sun"
    RAIN = "Rain"
    SAND = "Sand"
    HAIL = "Hail"
    SNOW = "Snow"
    HARSH_SUNSHINE = "Harsh Sunshine"
    HEAVY_RAIN = "Heavy Rain"
    STRONG_WINDS = "Strong Winds"


class Terrain(StrEnum):
    ELECTRIC = "Electric"
    GRASSY = "Grassy"
    MISTY = "Misty"
    PSYCHIC = "Psychic"


class PresetSource(StrEnum):
    SERVER = "server"
    SHEET = "sheet"
    SMOGON = "smogon"
    USAGE = "usage"
    USER = "user"
