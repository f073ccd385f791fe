"""Turn report parsing: clauses, steps, movement lines and report sections."""

from tribemap.parsing.assembler import StepAssembler
from tribemap.parsing.grammar import StepGrammar
from tribemap.parsing.movement import MovementParser, ParsedLine
from tribemap.parsing.report import ReportParser, UnitSection
from tribemap.parsing.tokenizer import ClauseTokenizer

__all__ = [
    "ClauseTokenizer",
    "StepGrammar",
    "StepAssembler",
    "MovementParser",
    "ParsedLine",
    "ReportParser",
    "UnitSection",
]
