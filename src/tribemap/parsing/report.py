"""
Turn report parser.

Splits the text of one turn report into unit sections and hands each
section's movement, scout and status lines to the ``MovementParser``.

A section starts with a header that names the unit and its location,
followed by the turn line::

    Tribe 0138, , Current Hex = ## 1108, (Previous Hex = OO 1615)
    Current Turn 900-01 (#1), Spring, FINE	Next Turn 900-02 (#2), 12/11/2023

Lines that are not headers, turn lines, movement, scout or status lines
are not part of the movement grammar and are skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from tribemap.core.config import MapperConfig
from tribemap.core.coords import NOT_AVAILABLE, is_obscured, parse_grid, with_grid
from tribemap.core.errors import GrammarError, InvalidGridCoordinates, InvariantViolation
from tribemap.core.models import MovementResult, ScoutReport, Turn, scout_id
from tribemap.parsing.movement import MovementParser, ParsedLine

logger = logging.getLogger(__name__)

_UNIT = r"[0-9]{4}(?:[cefg][0-9])?"


@dataclass
class UnitSection:
    """Raw lines of one unit's section of a report."""

    unit_id: str
    kind: str
    line_no: int
    current_hex: str
    previous_hex: str
    turn_id: str = ""
    movement: tuple[int, str] | None = None
    scouts: list[tuple[int, str]] = field(default_factory=list)
    status: tuple[int, str] | None = None


def format_turn_id(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


class ReportParser:
    """Parses whole turn reports into ``Turn`` objects.

    Args:
        movement_parser: Shared movement line parser.
        config: Mapping run configuration.
    """

    def __init__(self, movement_parser: MovementParser, config: MapperConfig | None = None) -> None:
        self.movement_parser = movement_parser
        self.config = config or MapperConfig()
        self._header = re.compile(
            rf"^(Tribe|Courier|Element|Fleet|Garrison) ({_UNIT}),[^,]*, "
            r"Current Hex = ([^,]+), \(Previous Hex = ([^)]+)\)"
        )
        self._turn = re.compile(r"^Current Turn ([0-9]{1,4})-([0-9]{1,2}) \(#[0-9]+\)")

    # ---- Single lines ----

    def parse_location(self, line: str, line_no: int = 0) -> UnitSection | None:
        """Parse a section header; None if ``line`` is not one.

        Raises:
            GrammarError: If the header names a malformed hex.
        """
        m = self._header.match(line)
        if not m:
            return None
        kind, unit_id, current, previous = m.groups()
        for text in (current, previous):
            self._check_hex(text, unit_id=unit_id, line_no=line_no)
        return UnitSection(
            unit_id=unit_id, kind=kind, line_no=line_no,
            current_hex=current.strip(), previous_hex=previous.strip(),
        )

    def parse_turn_info(self, line: str) -> str | None:
        """Turn id from a ``Current Turn`` line (``"900-01"`` -> ``"0900-01"``)."""
        m = self._turn.match(line)
        if not m:
            return None
        year, month = int(m.group(1)), int(m.group(2))
        if not 1 <= month <= 12:
            raise GrammarError("turn month out of range", clause=line[:40])
        return format_turn_id(year, month)

    def _check_hex(self, text: str, *, unit_id: str, line_no: int) -> None:
        text = text.strip()
        if text == NOT_AVAILABLE:
            return
        if is_obscured(text):
            text = with_grid("AA", text)
        try:
            parse_grid(text)
        except InvalidGridCoordinates as exc:
            raise GrammarError(
                f"location: {exc.message}", unit_id=unit_id, line_no=line_no, clause=exc.text,
            ) from exc

    # ---- Sections ----

    def split_sections(self, text: str) -> list[UnitSection]:
        """Group report lines by unit section.

        Raises:
            GrammarError: Malformed headers or a section without a turn line.
            InvariantViolation: Repeated units or repeated lines in a section.
        """
        sections: list[UnitSection] = []
        seen: set[str] = set()
        current: UnitSection | None = None
        for line_no, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()
            if not line:
                continue
            section = self.parse_location(line, line_no)
            if section is not None:
                if section.unit_id in seen:
                    raise InvariantViolation(
                        "unit appears twice in report", unit_id=section.unit_id, line_no=line_no,
                    )
                seen.add(section.unit_id)
                sections.append(section)
                current = section
                continue
            if current is None:
                continue
            turn_id = self.parse_turn_info(line)
            if turn_id is not None:
                if not current.turn_id:
                    current.turn_id = turn_id
                continue
            self._assign_line(current, line, line_no)
        for section in sections:
            if not section.turn_id:
                raise GrammarError(
                    "section has no Current Turn line",
                    unit_id=section.unit_id, line_no=section.line_no,
                )
        if self.config.debug_enabled("sections"):
            for section in sections:
                logger.debug(
                    "section %s %s line %d: current %s previous %s",
                    section.turn_id, section.unit_id, section.line_no,
                    section.current_hex, section.previous_hex,
                )
        return sections

    def _assign_line(self, section: UnitSection, line: str, line_no: int) -> None:
        mp = self.movement_parser
        context = {"turn_id": section.turn_id, "unit_id": section.unit_id, "line_no": line_no}
        if mp.is_movement_line(line):
            if section.movement is not None:
                raise InvariantViolation("unit has more than one movement line", **context)
            section.movement = (line_no, line)
        elif mp.is_scout_line(line):
            if self.config.ignore_scouts:
                return
            if len(section.scouts) >= self.config.max_scouts:
                raise InvariantViolation("too many scout lines", **context)
            section.scouts.append((line_no, line))
        elif mp.is_status_line(line, section.unit_id):
            if section.status is not None:
                raise InvariantViolation("unit has more than one status line", **context)
            section.status = (line_no, line)

    # ---- Whole reports ----

    def parse(self, text: str, report_id: str = "") -> Turn:
        """Parse one turn report.

        Args:
            text: Full report text.
            report_id: Name of the report, used in log messages.

        Raises:
            GrammarError: Report text that does not fit the grammar.
            InvariantViolation: Report text that contradicts itself.
        """
        sections = self.split_sections(text)
        if not sections:
            raise GrammarError(f"report {report_id or '<unnamed>'} has no unit sections")
        turn_id = sections[0].turn_id
        turn = Turn(id=turn_id)
        for section in sections:
            if section.turn_id != turn_id:
                raise InvariantViolation(
                    f"section turn {section.turn_id} does not match report turn {turn_id}",
                    unit_id=section.unit_id, line_no=section.line_no,
                )
            if turn_id > self.config.last_obscured_turn and is_obscured(section.current_hex):
                raise InvariantViolation(
                    f"current hex is obscured after turn {self.config.last_obscured_turn}",
                    turn_id=turn_id, unit_id=section.unit_id, line_no=section.line_no,
                )
            turn.movements[section.unit_id] = self.build_movement(section)
        logger.info("report %s: turn %s, %d units", report_id, turn_id, len(turn.movements))
        return turn

    def build_movement(self, section: UnitSection) -> MovementResult:
        """Parse a section's lines into its ``MovementResult``."""
        result = MovementResult(
            turn_id=section.turn_id,
            unit_id=section.unit_id,
            line_no=section.line_no,
            starting_coords=section.previous_hex,
            ending_coords=section.current_hex,
            reported_ending=section.current_hex,
        )
        context = {"turn_id": section.turn_id, "unit_id": section.unit_id}
        if section.movement is not None:
            line_no, line = section.movement
            parsed = self.movement_parser.parse_line(line, line_no=line_no, **context)
            result.movement_type = parsed.movement_type
            result.line_no = line_no
            result.steps = parsed.steps
            result.follows = parsed.follows
            result.goes_to = parsed.goes_to
            result.winds = parsed.winds
        seen_scouts: set[int] = set()
        for line_no, line in section.scouts:
            parsed = self._parse_scout(line, line_no, section)
            if parsed.scout_no in seen_scouts:
                raise InvariantViolation(
                    f"scout {parsed.scout_no} reported twice", line_no=line_no, **context,
                )
            seen_scouts.add(parsed.scout_no)
            result.scout_reports.append(
                ScoutReport(scout_no=parsed.scout_no, line_no=line_no, steps=parsed.steps)
            )
        if section.status is None:
            raise GrammarError("missing status line", line_no=section.line_no, **context)
        line_no, line = section.status
        parsed = self.movement_parser.parse_line(line, line_no=line_no, **context)
        if parsed.status_unit != section.unit_id:
            raise InvariantViolation(
                f"status line is for unit {parsed.status_unit}", line_no=line_no, **context,
            )
        result.status_step = parsed.steps[0]
        return result

    def _parse_scout(self, line: str, line_no: int, section: UnitSection) -> ParsedLine:
        parsed = self.movement_parser.parse_line(
            line, turn_id=section.turn_id, unit_id=section.unit_id, line_no=line_no,
        )
        for step in parsed.steps:
            step.unit_id = scout_id(section.unit_id, parsed.scout_no)
        return parsed
