"""Tests for movement, fleet, scout, follows, goes-to and status lines."""

import pytest

from tribemap.core.enums import (
    CompassPoint,
    Direction,
    MovementType,
    Resource,
    Sighted,
    StepResult,
    Terrain,
    WindStrength,
)
from tribemap.core.errors import GrammarError, InvariantViolation
from tribemap.parsing.movement import MovementParser


def _parse(movement_parser, line, **kwargs):
    kwargs.setdefault("turn_id", "0900-01")
    kwargs.setdefault("unit_id", "0138")
    kwargs.setdefault("line_no", 7)
    return movement_parser.parse_line(line, **kwargs)


class TestTribeMovement:
    def test_steps_in_order(self, movement_parser):
        parsed = _parse(movement_parser, "Tribe Movement: Move NW-GH, River S\\N-PR, O NW, N")
        assert parsed.movement_type is MovementType.TRIBE
        assert [s.step_no for s in parsed.steps] == [1, 2]
        assert [s.attempted for s in parsed.steps] == [Direction.NORTH_WEST, Direction.NORTH]
        assert len(parsed.steps[1].neighbors) == 2
        assert all(s.line_no == 7 for s in parsed.steps)

    def test_move_with_nothing_stays_in_place(self, movement_parser):
        parsed = _parse(movement_parser, "Tribe Movement: Move \\")
        assert len(parsed.steps) == 1
        assert parsed.steps[0].result is StepResult.STAYED_IN_PLACE

    def test_empty_steps_keep_numbering(self, movement_parser):
        parsed = _parse(movement_parser, "Tribe Movement: Move \\N-PR")
        assert [s.step_no for s in parsed.steps] == [2]

    def test_failed_step_reports_position(self, movement_parser):
        with pytest.raises(GrammarError) as excinfo:
            _parse(movement_parser, "Tribe Movement: Move N-PR\\S-PR, xyzzy")
        assert excinfo.value.step_no == 2
        assert excinfo.value.line_no == 7
        assert excinfo.value.unit_id == "0138"


class TestFollowsAndGoesTo:
    def test_follows(self, movement_parser):
        parsed = _parse(movement_parser, "Tribe Follows 1812", unit_id="0138e1")
        assert parsed.movement_type is MovementType.FOLLOWS
        assert parsed.follows == "1812"
        assert parsed.steps[0].result is StepResult.FOLLOWS
        assert parsed.steps[0].attempted is Direction.UNKNOWN

    def test_follows_needs_unit_id(self, movement_parser):
        with pytest.raises(GrammarError):
            _parse(movement_parser, "Tribe Follows somebody")

    @pytest.mark.parametrize("target", ["OO 1615", "N/A", "## 1615"])
    def test_goes_to(self, movement_parser, target):
        parsed = _parse(movement_parser, f"Tribe Goes to {target}")
        assert parsed.movement_type is MovementType.GOES_TO
        assert parsed.goes_to == target
        assert parsed.steps[0].result is StepResult.STAYED_IN_PLACE

    def test_goes_to_bad_grid(self, movement_parser):
        with pytest.raises(GrammarError):
            _parse(movement_parser, "Tribe Goes to OO 9999")


class TestFleetMovement:
    LINE = (
        "CALM NE Fleet Movement: Move NE-LCM,  Lcm NE, SE, S,"
        "-(NE LCM, N O, NW O)(Sight Land - N/N, Sight Water - NE/NE)"
        "\\SE-O,-(NE O)(Sight Water - S/S)"
    )

    def test_winds(self, movement_parser):
        parsed = _parse(movement_parser, self.LINE, unit_id="0138f1")
        assert parsed.movement_type is MovementType.FLEET
        assert parsed.winds.strength is WindStrength.CALM
        assert parsed.winds.from_direction is Direction.NORTH_EAST

    def test_single_step_without_rings(self, movement_parser):
        parsed = _parse(movement_parser, "STRONG S Fleet Movement: Move NW-GH,", unit_id="0138f1")
        assert parsed.winds.strength is WindStrength.STRONG
        assert parsed.winds.from_direction is Direction.SOUTH
        [step] = parsed.steps
        assert step.result is StepResult.SUCCEEDED
        assert step.attempted is Direction.NORTH_WEST
        assert step.terrain is Terrain.GRASSY_HILLS
        assert step.neighbors == []
        assert step.crows_nest == []

    def test_rings_merge_into_step(self, movement_parser):
        first, second = _parse(movement_parser, self.LINE, unit_id="0138f1").steps
        assert first.terrain is Terrain.LOW_CONIFER_MOUNTAINS
        assert [n.direction for n in first.neighbors] == [
            Direction.NORTH_EAST, Direction.SOUTH_EAST, Direction.SOUTH,
            Direction.NORTH, Direction.NORTH_WEST,
        ]
        assert [(c.point, c.sighted) for c in first.crows_nest] == [
            (CompassPoint.NORTH, Sighted.LAND),
            (CompassPoint.NORTH_EAST, Sighted.WATER),
        ]
        assert second.attempted is Direction.SOUTH_EAST
        assert second.terrain is Terrain.OCEAN
        assert [c.point for c in second.crows_nest] == [CompassPoint.SOUTH]

    def test_ring_contradiction(self, movement_parser):
        line = "MILD N Fleet Movement: Move N-O,  Lcm NE,-(NE O)()"
        with pytest.raises(InvariantViolation):
            _parse(movement_parser, line, unit_id="0138f1")

    def test_missing_outer_ring(self, movement_parser):
        with pytest.raises(GrammarError):
            _parse(movement_parser, "GALE S Fleet Movement: Move N-O,-(NE O", unit_id="0138f1")

    def test_unclosed_outer_ring(self, movement_parser):
        with pytest.raises(GrammarError):
            _parse(movement_parser, "GALE S Fleet Movement: Move N-O,-(NE O)(Sight Land - N/N",
                   unit_id="0138f1")

    def test_split_rings(self):
        assert MovementParser.split_rings("N-O,-(NE O)(Sight Land - N/N)") == (
            "N-O,", "NE O", "Sight Land - N/N",
        )
        assert MovementParser.split_rings("N-O") == ("N-O", "", "")


class TestScoutLines:
    def test_scout_steps(self, movement_parser):
        line = (
            "Scout 1:Scout N-PR,  \\N-GH,  \\N-RH,  O NW,  N, Find Iron Ore, 1190,  0138c2,  0138c3"
            "\\ Can't Move on Ocean to N of HEX,  Patrolled and found 1190,  0138c2,  0138c3"
        )
        parsed = _parse(movement_parser, line)
        assert parsed.movement_type is MovementType.SCOUT
        assert parsed.scout_no == 1
        assert len(parsed.steps) == 4
        third, fourth = parsed.steps[2], parsed.steps[3]
        assert len(third.neighbors) == 2
        assert third.resources == [Resource.IRON_ORE]
        assert third.found_units == ["1190", "0138c2", "0138c3"]
        assert fourth.result is StepResult.PROHIBITED
        assert fourth.terrain is Terrain.OCEAN
        assert fourth.found_units == ["1190", "0138c2", "0138c3"]


class TestStatusLine:
    def test_status(self, movement_parser):
        parsed = _parse(movement_parser, "0138 Status: PRAIRIE, O S,Ford SE, 2138, 0138")
        assert parsed.movement_type is MovementType.STATUS
        assert parsed.status_unit == "0138"
        assert parsed.steps[0].result is StepResult.STATUS_LINE

    def test_status_reporting_itself(self, movement_parser):
        step = _parse(movement_parser, "0138 Status: PRAIRIE, 0138").steps[0]
        assert step.terrain is Terrain.PRAIRIE
        assert step.attempted is Direction.UNKNOWN
        assert step.found_units == ["0138"]


class TestDispatch:
    def test_line_kinds(self, movement_parser):
        assert movement_parser.is_movement_line("Tribe Movement: Move N-PR")
        assert movement_parser.is_movement_line("Tribe Follows 0138")
        assert movement_parser.is_movement_line("STRONG SW Fleet Movement: Move N-O")
        assert movement_parser.is_scout_line("Scout 8:Scout N-PR")
        assert movement_parser.is_status_line("0138e1 Status: PRAIRIE", "0138e1")
        assert not movement_parser.is_movement_line("Humans 1200")

    def test_unrecognized_line(self, movement_parser):
        with pytest.raises(GrammarError) as excinfo:
            _parse(movement_parser, "Humans 1200")
        assert excinfo.value.line_no == 7
