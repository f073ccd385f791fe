"""
End-to-end mapping pipeline: report text in, resolved turns and hex map out.

The grammar, tokenizer and parsers are built once per pipeline and shared
by every report it parses.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from tribemap.core.config import MapperConfig
from tribemap.core.coords import is_known, parse_grid
from tribemap.core.errors import GrammarError, InvariantViolation, MappingError
from tribemap.core.hex_map import HexMap
from tribemap.core.models import Turn, is_clan
from tribemap.engine.continuity import TurnResolver
from tribemap.engine.walker import HexWalker
from tribemap.parsing.assembler import StepAssembler
from tribemap.parsing.grammar import StepGrammar
from tribemap.parsing.movement import MovementParser
from tribemap.parsing.report import ReportParser
from tribemap.parsing.tokenizer import ClauseTokenizer

logger = logging.getLogger(__name__)


@dataclass
class ReportFailure:
    """A report that could not be parsed, with the error that stopped it."""

    report_id: str
    error: MappingError

    def to_dict(self) -> dict[str, Any]:
        return {"report_id": self.report_id, **self.error.to_dict()}


@dataclass
class MappingResult:
    turns: list[Turn] = field(default_factory=list)
    hex_map: HexMap = field(default_factory=HexMap)
    failures: list[ReportFailure] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "turns": [t.to_dict() for t in self.turns],
            "hex_map": self.hex_map.to_dict(),
            "failures": [f.to_dict() for f in self.failures],
        }


class MapPipeline:
    """Parses turn reports and resolves them onto one hex map.

    Example::

        pipeline = MapPipeline(MapperConfig(origin_grid="OO"))
        pipeline.add_report("0900-01.0138", text)
        result = pipeline.run()
    """

    def __init__(self, config: MapperConfig | None = None) -> None:
        self.config = config or MapperConfig()
        self.grammar = StepGrammar()
        self.tokenizer = ClauseTokenizer()
        self.assembler = StepAssembler(self.grammar, self.tokenizer)
        self.movement_parser = MovementParser(self.assembler)
        self.report_parser = ReportParser(self.movement_parser, self.config)
        self.turns: dict[str, Turn] = {}
        self.failures: list[ReportFailure] = []
        self.report_ids: list[str] = []

    # ---- Parsing ----

    def parse_report(self, text: str, report_id: str = "") -> Turn:
        """Parse one report without adding it to the pipeline."""
        return self.report_parser.parse(text, report_id)

    def add_report(self, report_id: str, text: str) -> Turn | None:
        """Parse a report and merge it into the turn it reports on.

        Parse errors are logged and recorded in ``failures``; they stop
        only this report. Returns the parsed turn, or None on failure.
        """
        try:
            parsed = self.parse_report(text, report_id)
            self._merge(parsed)
        except (GrammarError, InvariantViolation) as exc:
            logger.error("report %s: %s", report_id, exc)
            self.failures.append(ReportFailure(report_id=report_id, error=exc))
            return None
        self.report_ids.append(report_id)
        return parsed

    def add_reports(self, reports: Iterable[tuple[str, str]]) -> None:
        for report_id, text in reports:
            self.add_report(report_id, text)

    def add_directory(self, path: str | Path, pattern: str = "*.txt") -> int:
        """Add every report file in ``path`` matching ``pattern``, in name order."""
        files = sorted(Path(path).glob(pattern))
        for file in files:
            self.add_report(file.stem, file.read_text(encoding="utf-8"))
        return len(files)

    def _merge(self, parsed: Turn) -> None:
        turn = self.turns.setdefault(parsed.id, Turn(id=parsed.id))
        duplicates = sorted(set(turn.movements) & set(parsed.movements))
        if duplicates:
            raise InvariantViolation(
                f"units already reported for this turn: {', '.join(duplicates)}",
                turn_id=parsed.id,
            )
        turn.movements.update(parsed.movements)

    # ---- Resolution ----

    def run(self) -> MappingResult:
        """Resolve all parsed turns onto a fresh hex map.

        Raises:
            ContinuityError: Locations that cannot be reconciled across turns.
            InvariantViolation: Observations that contradict the map.
        """
        hex_map = HexMap()
        walker = HexWalker(hex_map, self.config)
        resolver = TurnResolver(walker, self.config)
        # Resolution mutates movements in place.
        turns = [copy.deepcopy(self.turns[turn_id]) for turn_id in sorted(self.turns)]
        resolver.resolve(turns)
        self._mark_origin(turns, hex_map)
        logger.info(
            "mapped %d turns, %d hexes, %d failed reports",
            len(turns), len(hex_map), len(self.failures),
        )
        return MappingResult(turns=turns, hex_map=hex_map, failures=list(self.failures))

    def _mark_origin(self, turns: list[Turn], hex_map: HexMap) -> None:
        for turn in turns:
            for movement in turn.ordered_units():
                if is_clan(movement.unit_id) and is_known(movement.starting_coords):
                    hex_map.fetch(parse_grid(movement.starting_coords), turn.id).is_origin = True
                    return
