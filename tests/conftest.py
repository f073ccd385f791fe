"""
Shared test configuration.

Provides one set of parser objects per test and two consecutive turn
reports for clan 0138 that walk cleanly from OO 1615:

* turn 0900-01: the clan moves NW then N to OO 1514 and sends a scout
  north; element 0138e1 follows the clan.
* turn 0900-02: the clan moves SW to OO 1414 (a settlement) and is
  stopped by a river to the south.
"""

import os

import pytest

from tribemap.core.config import MapperConfig
from tribemap.parsing.assembler import StepAssembler
from tribemap.parsing.grammar import StepGrammar
from tribemap.parsing.movement import MovementParser
from tribemap.parsing.report import ReportParser
from tribemap.parsing.tokenizer import ClauseTokenizer

TURN_ONE_REPORT = (
    "Tribe 0138, , Current Hex = ## 1514, (Previous Hex = OO 1615)\n"
    "Current Turn 900-01 (#1), Spring, FINE\tNext Turn 900-02 (#2), 12/11/2023\n"
    "Tribe Movement: Move NW-GH, River S\\N-PR\n"
    "Scout 1:Scout N-PR, \\N-GH\n"
    "0138 Status: PRAIRIE, O NW\n"
    "\n"
    "Element 0138e1, , Current Hex = ## 1514, (Previous Hex = ## 1615)\n"
    "Current Turn 900-01 (#1), Spring, FINE\tNext Turn 900-02 (#2), 12/11/2023\n"
    "Tribe Follows 0138\n"
    "0138e1 Status: PRAIRIE\n"
)

TURN_TWO_REPORT = (
    "Tribe 0138, , Current Hex = ## 1414, (Previous Hex = ## 1514)\n"
    "Current Turn 900-02 (#2), Spring, FINE\tNext Turn 900-03 (#3), 12/18/2023\n"
    "Tribe Movement: Move SW-PR The Dirty Squirrel\\ No Ford on River to S of HEX\n"
    "0138 Status: PRAIRIE\n"
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep a developer's .env origin grid out of the tests."""
    monkeypatch.delenv("TRIBEMAP_ORIGIN_GRID", raising=False)


@pytest.fixture
def grammar():
    return StepGrammar()


@pytest.fixture
def tokenizer():
    return ClauseTokenizer()


@pytest.fixture
def assembler(grammar, tokenizer):
    return StepAssembler(grammar, tokenizer)


@pytest.fixture
def movement_parser(assembler):
    return MovementParser(assembler)


@pytest.fixture
def report_parser(movement_parser):
    return ReportParser(movement_parser, MapperConfig())


@pytest.fixture
def turn_one_report():
    return TURN_ONE_REPORT


@pytest.fixture
def turn_two_report():
    return TURN_TWO_REPORT
