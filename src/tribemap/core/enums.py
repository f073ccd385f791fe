"""
Enumerations shared by the report parser and the hex engine.

Values are the spellings used in TribeNet turn reports so that an enum
member can be round-tripped through report text without a lookup table.
"""

from __future__ import annotations

from enum import Enum


class Direction(str, Enum):
    """Hex directions on the flat-top TribeNet map."""

    UNKNOWN = "?"
    NORTH = "N"
    NORTH_EAST = "NE"
    SOUTH_EAST = "SE"
    SOUTH = "S"
    SOUTH_WEST = "SW"
    NORTH_WEST = "NW"

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]

    @classmethod
    def from_code(cls, code: str) -> Direction | None:
        """Return the direction for a report code such as ``"NE"``, or None."""
        return _DIRECTION_CODES.get(code.strip().upper())


# Order of the six real directions; used to index the offset-vector tables.
DIRECTIONS: tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.NORTH_EAST,
    Direction.SOUTH_EAST,
    Direction.SOUTH,
    Direction.SOUTH_WEST,
    Direction.NORTH_WEST,
)

_DIRECTION_CODES: dict[str, Direction] = {d.value: d for d in DIRECTIONS}

_OPPOSITES: dict[Direction, Direction] = {
    Direction.UNKNOWN: Direction.UNKNOWN,
    Direction.NORTH: Direction.SOUTH,
    Direction.NORTH_EAST: Direction.SOUTH_WEST,
    Direction.SOUTH_EAST: Direction.NORTH_WEST,
    Direction.SOUTH: Direction.NORTH,
    Direction.SOUTH_WEST: Direction.NORTH_EAST,
    Direction.NORTH_WEST: Direction.SOUTH_EAST,
}


class Terrain(str, Enum):
    """Terrain classifications, valued by their short report code."""

    BLANK = ""
    ALPS = "ALPS"
    ARID_HILLS = "AH"
    ARID_TUNDRA = "AR"
    BRUSH = "BR"
    BRUSH_HILLS = "BH"
    CONIFER_HILLS = "CH"
    DECIDUOUS = "D"
    DECIDUOUS_HILLS = "DH"
    DESERT = "DE"
    GRASSY_HILLS = "GH"
    GRASSY_HILLS_PLATEAU = "GHP"
    HIGH_SNOWY_MOUNTAINS = "HSM"
    JUNGLE = "JG"
    JUNGLE_HILLS = "JH"
    LAKE = "L"
    LOW_ARID_MOUNTAINS = "LAM"
    LOW_CONIFER_MOUNTAINS = "LCM"
    LOW_JUNGLE_MOUNTAINS = "LJM"
    LOW_SNOWY_MOUNTAINS = "LSM"
    LOW_VOLCANIC_MOUNTAINS = "LVM"
    OCEAN = "O"
    POLAR_ICE = "PI"
    PRAIRIE = "PR"
    PRAIRIE_PLATEAU = "PPR"
    ROCKY_HILLS = "RH"
    SNOWY_HILLS = "SH"
    SWAMP = "SW"
    TUNDRA = "TU"

    @property
    def long_name(self) -> str:
        return TERRAIN_LONG_NAMES[self]

    @classmethod
    def from_code(cls, code: str) -> Terrain | None:
        """Look up a short code, case-insensitively (``"Lcm"`` is LCM)."""
        code = code.strip().upper()
        if not code:
            return None
        try:
            return cls(code)
        except ValueError:
            return None

    @classmethod
    def from_long_name(cls, name: str) -> Terrain | None:
        """Look up a long name such as ``"CONIFER HILLS"`` or ``"Ocean"``."""
        return _TERRAIN_BY_LONG_NAME.get(" ".join(name.split()).upper())


# Long names as printed on status lines and in movement failures.
TERRAIN_LONG_NAMES: dict[Terrain, str] = {
    Terrain.BLANK: "",
    Terrain.ALPS: "ALPS",
    Terrain.ARID_HILLS: "ARID HILLS",
    Terrain.ARID_TUNDRA: "ARID TUNDRA",
    Terrain.BRUSH: "BRUSH",
    Terrain.BRUSH_HILLS: "BRUSH HILLS",
    Terrain.CONIFER_HILLS: "CONIFER HILLS",
    Terrain.DECIDUOUS: "DECIDUOUS",
    Terrain.DECIDUOUS_HILLS: "DECIDUOUS HILLS",
    Terrain.DESERT: "DESERT",
    Terrain.GRASSY_HILLS: "GRASSY HILLS",
    Terrain.GRASSY_HILLS_PLATEAU: "GRASSY HILLS PLATEAU",
    Terrain.HIGH_SNOWY_MOUNTAINS: "HIGH SNOWY MOUNTAINS",
    Terrain.JUNGLE: "JUNGLE",
    Terrain.JUNGLE_HILLS: "JUNGLE HILLS",
    Terrain.LAKE: "LAKE",
    Terrain.LOW_ARID_MOUNTAINS: "LOW ARID MOUNTAINS",
    Terrain.LOW_CONIFER_MOUNTAINS: "LOW CONIFER MOUNTAINS",
    Terrain.LOW_JUNGLE_MOUNTAINS: "LOW JUNGLE MOUNTAINS",
    Terrain.LOW_SNOWY_MOUNTAINS: "LOW SNOWY MOUNTAINS",
    Terrain.LOW_VOLCANIC_MOUNTAINS: "LOW VOLCANIC MOUNTAINS",
    Terrain.OCEAN: "OCEAN",
    Terrain.POLAR_ICE: "POLAR ICE",
    Terrain.PRAIRIE: "PRAIRIE",
    Terrain.PRAIRIE_PLATEAU: "PRAIRIE PLATEAU",
    Terrain.ROCKY_HILLS: "ROCKY HILLS",
    Terrain.SNOWY_HILLS: "SNOWY HILLS",
    Terrain.SWAMP: "SWAMP",
    Terrain.TUNDRA: "TUNDRA",
}

_TERRAIN_BY_LONG_NAME: dict[str, Terrain] = {
    name: terrain for terrain, name in TERRAIN_LONG_NAMES.items() if name
}


class Edge(str, Enum):
    """Features that sit on the border between two hexes."""

    NONE = ""
    FORD = "Ford"
    PASS = "Pass"
    RIVER = "River"
    STONE_ROAD = "Stone Road"


class Resource(str, Enum):
    """Natural resources a unit can report finding in a hex."""

    COAL = "Coal"
    COPPER_ORE = "Copper Ore"
    DIAMOND = "Diamond"
    FRANKINCENSE = "Frankincense"
    GOLD = "Gold"
    IRON_ORE = "Iron Ore"
    JADE = "Jade"
    KAOLIN = "Kaolin"
    LEAD_ORE = "Lead Ore"
    LIMESTONE = "Limestone"
    NICKEL_ORE = "Nickel Ore"
    PEARLS = "Pearls"
    PYRITE = "Pyrite"
    RUBIES = "Rubies"
    SALT = "Salt"
    SILVER = "Silver"
    SULPHUR = "Sulphur"
    TIN_ORE = "Tin Ore"
    VANADIUM_ORE = "Vanadium Ore"
    ZINC_ORE = "Zinc Ore"

    @classmethod
    def from_name(cls, name: str) -> Resource | None:
        return _RESOURCE_BY_NAME.get(" ".join(name.split()).lower())


_RESOURCE_BY_NAME: dict[str, Resource] = {r.value.lower(): r for r in Resource}


class StepResult(str, Enum):
    """Outcome of one movement step."""

    SUCCEEDED = "Succeeded"
    BLOCKED = "Blocked"
    PROHIBITED = "Prohibited"
    EXHAUSTED_MOVEMENT_POINTS = "Exhausted MPs"
    STATUS_LINE = "Status"
    STAYED_IN_PLACE = "N/A"
    FOLLOWS = "Follows"
    VANISHED = "Vanished"

    @property
    def has_direction(self) -> bool:
        """Whether a step with this result carries an attempted direction."""
        return self in _DIRECTIONAL_RESULTS


_DIRECTIONAL_RESULTS = frozenset({
    StepResult.SUCCEEDED,
    StepResult.BLOCKED,
    StepResult.PROHIBITED,
    StepResult.EXHAUSTED_MOVEMENT_POINTS,
})


class MovementType(str, Enum):
    """Kind of report line a movement result was parsed from."""

    TRIBE = "tribe"
    FLEET = "fleet"
    SCOUT = "scout"
    FOLLOWS = "follows"
    GOES_TO = "goes_to"
    STATUS = "status"


class WindStrength(str, Enum):
    CALM = "CALM"
    MILD = "MILD"
    STRONG = "STRONG"
    GALE = "GALE"


class Sighted(str, Enum):
    """What a fleet's crow's nest reports seeing on the outer ring."""

    LAND = "Land"
    WATER = "Water"


class CompassPoint(str, Enum):
    """The twelve hexes two steps away, named by the pair of moves to reach them."""

    NORTH = "N/N"
    NORTH_NORTH_EAST = "N/NE"
    NORTH_EAST = "NE/NE"
    EAST = "NE/SE"
    SOUTH_EAST = "SE/SE"
    SOUTH_SOUTH_EAST = "S/SE"
    SOUTH = "S/S"
    SOUTH_SOUTH_WEST = "S/SW"
    SOUTH_WEST = "SW/SW"
    WEST = "SW/NW"
    NORTH_WEST = "NW/NW"
    NORTH_NORTH_WEST = "N/NW"

    @property
    def steps(self) -> tuple[Direction, Direction]:
        """The two moves that lead from the observer to this hex."""
        first, second = self.value.split("/")
        return Direction(first), Direction(second)

    @classmethod
    def from_text(cls, text: str) -> CompassPoint | None:
        """Accept either order of the pair (``"NE/N"`` is ``"N/NE"``)."""
        parts = text.strip().upper().split("/")
        if len(parts) != 2:
            return None
        for candidate in ("/".join(parts), "/".join(reversed(parts))):
            try:
                return cls(candidate)
            except ValueError:
                continue
        return None
