"""
Movement line parser.

Each unit section of a turn report carries at most one line describing
how the unit moved, optional scout lines, and a status line. This module
recognizes those lines by their prefix and turns their bodies into steps.

Line forms::

    Tribe Movement: Move NW-GH, River S\\N-PR, O NW
    Tribe Follows 1812
    Tribe Goes to OO 1615
    CALM NE Fleet Movement: Move NE-O,-(NE O, SE O)(Sight Land - N/N)\\...
    Scout 1:Scout N-PR, \\N-GH, Find Iron Ore
    0138 Status: PRAIRIE, O S, Ford SE, 2138, 0138
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from tribemap.core.coords import NOT_AVAILABLE, is_obscured, parse_grid
from tribemap.core.enums import Direction, MovementType, StepResult, WindStrength
from tribemap.core.errors import GrammarError, InvalidGridCoordinates, MappingError
from tribemap.core.models import Step, Winds
from tribemap.parsing.assembler import StepAssembler

logger = logging.getLogger(__name__)

_UNIT = r"[0-9]{4}(?:[cefg][0-9])?"


@dataclass
class ParsedLine:
    """The result of parsing one movement, scout or status line.

    Attributes:
        movement_type: Which kind of line it was.
        steps: Steps in line order.
        follows: Leader's unit id for a follows line.
        goes_to: Target grid text for a goes-to line.
        winds: Wind reported on a fleet line.
        scout_no: Scout number for a scout line.
        status_unit: Unit id printed at the start of a status line.
    """

    movement_type: MovementType
    steps: list[Step] = field(default_factory=list)
    follows: str = ""
    goes_to: str = ""
    winds: Winds | None = None
    scout_no: int = 0
    status_unit: str = ""


class MovementParser:
    """Dispatches report lines to the step assembler.

    Args:
        assembler: Shared step assembler (carries the grammar and tokenizer).
    """

    def __init__(self, assembler: StepAssembler) -> None:
        self.assembler = assembler
        self.grammar = assembler.grammar
        self._tribe = re.compile(r"^Tribe Movement: Move\s*(.*)$")
        self._follows = re.compile(r"^Tribe Follows\s+(.*?)\s*$")
        self._goes_to = re.compile(r"^Tribe Goes to\s+(.*?)\s*$")
        self._fleet = re.compile(
            r"^(CALM|MILD|STRONG|GALE)\s(NE|SE|SW|NW|N|S)\sFleet\sMovement:\sMove\s*(.*)$"
        )
        self._scout = re.compile(r"^Scout ([0-9]):Scout\s*(.*)$")
        self._status = re.compile(rf"^({_UNIT}) Status:\s*(.*)$")
        self._unit = re.compile(rf"^{_UNIT}$")

    def is_movement_line(self, line: str) -> bool:
        return any(
            p.match(line) for p in (self._tribe, self._follows, self._goes_to, self._fleet)
        )

    def is_scout_line(self, line: str) -> bool:
        return self._scout.match(line) is not None

    def is_status_line(self, line: str, unit_id: str) -> bool:
        return line.startswith(f"{unit_id} Status:")

    def parse_line(self, line: str, *, turn_id: str, unit_id: str, line_no: int = 0) -> ParsedLine:
        """Parse one line of a unit section.

        Raises:
            GrammarError: If the line is not a recognized movement, scout or
                status line, or one of its steps fails to parse.
            InvariantViolation: If a step contradicts itself.
        """
        context = {"turn_id": turn_id, "unit_id": unit_id, "line_no": line_no}
        try:
            m = self._tribe.match(line)
            if m:
                return ParsedLine(
                    movement_type=MovementType.TRIBE,
                    steps=self._parse_steps(m.group(1), **context),
                )
            m = self._follows.match(line)
            if m:
                return self._parse_follows(m.group(1), **context)
            m = self._goes_to.match(line)
            if m:
                return self._parse_goes_to(m.group(1), **context)
            m = self._fleet.match(line)
            if m:
                return ParsedLine(
                    movement_type=MovementType.FLEET,
                    steps=self._parse_steps(m.group(3), fleet=True, **context),
                    winds=Winds(
                        strength=WindStrength(m.group(1)),
                        from_direction=Direction(m.group(2)),
                    ),
                )
            m = self._scout.match(line)
            if m:
                return ParsedLine(
                    movement_type=MovementType.SCOUT,
                    steps=self._parse_steps(m.group(2), **context),
                    scout_no=int(m.group(1)),
                )
            m = self._status.match(line)
            if m:
                step = self.assembler.assemble(
                    m.group(2), status=True, step_no=1, **context,
                )
                return ParsedLine(
                    movement_type=MovementType.STATUS, steps=[step], status_unit=m.group(1),
                )
        except MappingError as exc:
            raise exc.add_context(**context)
        raise GrammarError("unrecognized movement line", clause=line[:60], **context)

    # ---- Line bodies ----

    def _parse_follows(self, target: str, *, turn_id: str, unit_id: str, line_no: int) -> ParsedLine:
        if not self._unit.match(target):
            raise GrammarError("follows target is not a unit id", clause=target)
        step = Step(
            turn_id=turn_id, unit_id=unit_id, line_no=line_no, step_no=1,
            result=StepResult.FOLLOWS, follows=target, text=target,
        )
        return ParsedLine(movement_type=MovementType.FOLLOWS, steps=[step], follows=target)

    def _parse_goes_to(self, target: str, *, turn_id: str, unit_id: str, line_no: int) -> ParsedLine:
        if target != NOT_AVAILABLE and not (is_obscured(target) and len(target) == 7):
            try:
                parse_grid(target)
            except InvalidGridCoordinates as exc:
                raise GrammarError(f"goes to: {exc.message}", clause=target) from exc
        step = Step(
            turn_id=turn_id, unit_id=unit_id, line_no=line_no, step_no=1,
            result=StepResult.STAYED_IN_PLACE, goes_to=target, text=target,
        )
        return ParsedLine(movement_type=MovementType.GOES_TO, steps=[step], goes_to=target)

    def _parse_steps(
        self, body: str, *, turn_id: str, unit_id: str, line_no: int, fleet: bool = False,
    ) -> list[Step]:
        steps: list[Step] = []
        for step_no, text in enumerate(body.split("\\"), start=1):
            if not text.strip():
                continue
            if fleet:
                steps.append(self._parse_fleet_step(
                    text, turn_id=turn_id, unit_id=unit_id, line_no=line_no, step_no=step_no,
                ))
            else:
                steps.append(self.assembler.assemble(
                    text, turn_id=turn_id, unit_id=unit_id, line_no=line_no, step_no=step_no,
                ))
        if not steps:
            # "Move \" with nothing after it: the unit did not leave its hex.
            steps.append(Step(turn_id=turn_id, unit_id=unit_id, line_no=line_no, step_no=1))
        return steps

    def _parse_fleet_step(
        self, text: str, *, turn_id: str, unit_id: str, line_no: int, step_no: int,
    ) -> Step:
        land, inner, outer = self.split_rings(text)
        step = self.assembler.assemble(
            land, turn_id=turn_id, unit_id=unit_id, line_no=line_no, step_no=step_no,
        )
        step.text = text
        try:
            self.assembler.add_ring_neighbors(step, [
                self.grammar.parse_deck_observation(clause)
                for clause in self.assembler.tokenizer.split(inner)
            ])
            sightings = []
            for clause in self.assembler.tokenizer.split(outer):
                sighting = self.grammar.parse_crows_nest(clause)
                if sighting is None:
                    raise GrammarError("expected crow's nest sighting", clause=clause)
                sightings.append(sighting)
            self.assembler.add_crows_nest(step, sightings)
        except MappingError as exc:
            raise exc.add_context(step_no=step_no)
        return step

    @staticmethod
    def split_rings(text: str) -> tuple[str, str, str]:
        """Split a fleet step into (this hex, inner ring, outer ring) text.

        A step without rings returns empty ring text.

        Raises:
            GrammarError: If the rings are malformed.
        """
        start = text.find("-(")
        if start == -1:
            return text, "", ""
        land, rest = text[:start], text[start + 2:]
        middle = rest.find(")(")
        if middle == -1:
            raise GrammarError("fleet step is missing its outer ring", clause=text)
        inner, outer = rest[:middle], rest[middle + 2:].rstrip()
        if not outer.endswith(")"):
            raise GrammarError("fleet step outer ring is not closed", clause=text)
        return land, inner, outer[:-1]
