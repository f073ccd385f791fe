"""Tests for splitting turn reports into unit sections and movements."""

import pytest

from tribemap.core.config import MapperConfig
from tribemap.core.enums import MovementType, StepResult
from tribemap.core.errors import GrammarError, InvariantViolation
from tribemap.parsing.report import ReportParser, format_turn_id

HEADER = "Tribe 0138, , Current Hex = {current}, (Previous Hex = {previous})"
TURN_LINE = "Current Turn {turn} (#1), Spring, FINE\tNext Turn 900-02 (#2), 12/11/2023"


def _make_report(*lines, current="## 1514", previous="OO 1615", turn="900-01"):
    """Build a one-section report for clan 0138."""
    head = [HEADER.format(current=current, previous=previous), TURN_LINE.format(turn=turn)]
    return "\n".join(head + list(lines)) + "\n"


class TestTurnInfo:
    def test_pads_year_and_month(self, report_parser):
        assert report_parser.parse_turn_info(TURN_LINE.format(turn="900-01")) == "0900-01"

    def test_not_a_turn_line(self, report_parser):
        assert report_parser.parse_turn_info("Tribe Movement: Move N-PR") is None

    def test_month_out_of_range(self, report_parser):
        with pytest.raises(GrammarError):
            report_parser.parse_turn_info(TURN_LINE.format(turn="900-13"))

    def test_format_turn_id(self):
        assert format_turn_id(901, 2) == "0901-02"


class TestLocation:
    def test_header(self, report_parser):
        section = report_parser.parse_location(
            HEADER.format(current="## 1514", previous="OO 1615"), line_no=4,
        )
        assert section.unit_id == "0138"
        assert section.kind == "Tribe"
        assert section.line_no == 4
        assert section.current_hex == "## 1514"
        assert section.previous_hex == "OO 1615"

    def test_new_unit(self, report_parser):
        section = report_parser.parse_location(
            "Courier 0138c1, , Current Hex = OO 1514, (Previous Hex = N/A)",
        )
        assert section.kind == "Courier"
        assert section.previous_hex == "N/A"

    def test_not_a_header(self, report_parser):
        assert report_parser.parse_location("0138 Status: PRAIRIE") is None

    def test_malformed_hex(self, report_parser):
        with pytest.raises(GrammarError) as excinfo:
            report_parser.parse_location(
                HEADER.format(current="## 3199", previous="OO 1615"), line_no=9,
            )
        assert excinfo.value.unit_id == "0138"
        assert excinfo.value.line_no == 9


class TestParseReport:
    def test_turn_one(self, report_parser, turn_one_report):
        turn = report_parser.parse(turn_one_report, "0900-01.0138")
        assert turn.id == "0900-01"
        assert sorted(turn.movements) == ["0138", "0138e1"]

        clan = turn.movements["0138"]
        assert clan.movement_type is MovementType.TRIBE
        assert clan.starting_coords == "OO 1615"
        assert clan.reported_ending == "## 1514"
        assert len(clan.steps) == 2
        assert clan.status_step.result is StepResult.STATUS_LINE
        assert len(clan.scout_reports) == 1
        scout = clan.scout_reports[0]
        assert scout.scout_no == 1
        assert [s.unit_id for s in scout.steps] == ["0138s1", "0138s1"]

        element = turn.movements["0138e1"]
        assert element.movement_type is MovementType.FOLLOWS
        assert element.follows == "0138"

    def test_unrelated_lines_are_skipped(self, report_parser):
        text = "Some preamble\n" + _make_report(
            "Humans 1200", "Tribe Movement: Move N-PR", "Warriors 40", "0138 Status: PRAIRIE",
        )
        turn = report_parser.parse(text)
        assert len(turn.movements["0138"].steps) == 1

    def test_unit_without_movement_line(self, report_parser):
        turn = report_parser.parse(_make_report("0138 Status: PRAIRIE"))
        movement = turn.movements["0138"]
        assert movement.movement_type is MovementType.STATUS
        assert movement.steps == []

    def test_empty_report(self, report_parser):
        with pytest.raises(GrammarError):
            report_parser.parse("nothing here\n", "empty")


class TestReportErrors:
    def test_missing_status_line(self, report_parser):
        with pytest.raises(GrammarError, match="missing status line"):
            report_parser.parse(_make_report("Tribe Movement: Move N-PR"))

    def test_missing_turn_line(self, report_parser):
        text = HEADER.format(current="## 1514", previous="OO 1615") + "\n0138 Status: PRAIRIE\n"
        with pytest.raises(GrammarError):
            report_parser.parse(text)

    def test_second_movement_line(self, report_parser):
        text = _make_report(
            "Tribe Movement: Move N-PR", "Tribe Movement: Move S-PR", "0138 Status: PRAIRIE",
        )
        with pytest.raises(InvariantViolation) as excinfo:
            report_parser.parse(text)
        assert excinfo.value.line_no == 4

    def test_second_status_line(self, report_parser):
        with pytest.raises(InvariantViolation):
            report_parser.parse(_make_report("0138 Status: PRAIRIE", "0138 Status: PRAIRIE"))

    def test_unit_repeated(self, report_parser):
        text = _make_report("0138 Status: PRAIRIE") + _make_report("0138 Status: PRAIRIE")
        with pytest.raises(InvariantViolation, match="twice"):
            report_parser.parse(text)

    def test_duplicate_scout_number(self, report_parser):
        text = _make_report("Scout 1:Scout N-PR", "Scout 1:Scout S-PR", "0138 Status: PRAIRIE")
        with pytest.raises(InvariantViolation, match="scout 1"):
            report_parser.parse(text)

    def test_sections_from_different_turns(self, report_parser):
        second = (
            "Element 0138e1, , Current Hex = ## 1514, (Previous Hex = ## 1514)\n"
            + TURN_LINE.format(turn="900-02") + "\n0138e1 Status: PRAIRIE\n"
        )
        with pytest.raises(InvariantViolation, match="does not match"):
            report_parser.parse(_make_report("0138 Status: PRAIRIE") + second)

    def test_obscured_after_last_obscured_turn(self, report_parser):
        text = _make_report("0138 Status: PRAIRIE", turn="902-02")
        with pytest.raises(InvariantViolation, match="obscured"):
            report_parser.parse(text)

    def test_bad_step_points_at_line(self, report_parser):
        text = _make_report("Tribe Movement: Move N-PR\\N-XYZ", "0138 Status: PRAIRIE")
        with pytest.raises(GrammarError) as excinfo:
            report_parser.parse(text)
        err = excinfo.value
        assert (err.turn_id, err.unit_id, err.line_no, err.step_no) == ("0900-01", "0138", 3, 2)


class TestScoutPolicy:
    def test_too_many_scouts(self, movement_parser):
        parser = ReportParser(movement_parser, MapperConfig(max_scouts=1))
        text = _make_report("Scout 1:Scout N-PR", "Scout 2:Scout S-PR", "0138 Status: PRAIRIE")
        with pytest.raises(InvariantViolation, match="too many scout"):
            parser.parse(text)

    def test_ignore_scouts(self, movement_parser, turn_one_report):
        parser = ReportParser(movement_parser, MapperConfig(ignore_scouts=True))
        turn = parser.parse(turn_one_report)
        assert turn.movements["0138"].scout_reports == []
