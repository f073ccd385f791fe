"""
Configuration for a mapping run.

Every policy switch the parser and the hex engine consult lives here.
Use ``to_dict()`` / ``from_dict()`` for serialization and comparison.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

FINAL_DESTINATION_POLICIES = ("fatal", "warn")


@dataclass
class MapperConfig:
    """
    Mapping run configuration.

    Defaults match how the game's reports are normally processed: bad
    grids and final-destination mismatches stop the run.
    """

    # === Identity ===
    clan_id: str = ""

    # === Origin ===
    # Big-map grid assumed for a hidden ("##") location that cannot be
    # derived from earlier turns or from a parent unit.
    origin_grid: str = "RR"

    # === Invalid / obscured grid policy ===
    quit_on_invalid_grid: bool = True
    warn_on_invalid_grid: bool = True
    # After this turn the report must show a tribe's real current hex.
    last_obscured_turn: str = "0902-01"

    # === Follow resolution ===
    max_follow_passes: int = 9

    # === Continuity ===
    final_destination_policy: str = "fatal"  # 'fatal' | 'warn'

    # === Parsing ===
    ignore_scouts: bool = False
    max_scouts: int = 8

    # === Debug switches ===
    debug: dict[str, bool] = field(default_factory=lambda: {
        "sections": False,
        "steps": False,
        "walk": False,
    })

    def __post_init__(self) -> None:
        if self.final_destination_policy not in FINAL_DESTINATION_POLICIES:
            raise ValueError(
                f"final_destination_policy must be one of {FINAL_DESTINATION_POLICIES}, "
                f"got {self.final_destination_policy!r}"
            )
        if len(self.origin_grid) != 2 or not all("A" <= c <= "Z" for c in self.origin_grid):
            raise ValueError(f"origin_grid must be two letters A-Z, got {self.origin_grid!r}")
        if self.max_follow_passes < 1:
            raise ValueError("max_follow_passes must be at least 1")

    def debug_enabled(self, switch: str) -> bool:
        return bool(self.debug.get(switch, False))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        d: dict[str, Any] = {}
        for k, v in self.__dict__.items():
            if k.startswith("_"):
                continue
            d[k] = dict(v) if isinstance(v, dict) else v
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> MapperConfig:
        """Deserialize from a dict."""
        return cls(**{k: v for k, v in d.items() if not k.startswith("_")})

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)

    @classmethod
    def from_json(cls, s: str) -> MapperConfig:
        return cls.from_dict(json.loads(s))

    def diff(self, other: MapperConfig) -> dict[str, tuple[Any, Any]]:
        """Return parameters that differ between two configs."""
        diffs: dict[str, tuple[Any, Any]] = {}
        for k in self.to_dict():
            v1 = getattr(self, k)
            v2 = getattr(other, k)
            if v1 != v2:
                diffs[k] = (v1, v2)
        return diffs
