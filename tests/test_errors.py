"""
Error Hierarchy Tests
=====================

Tests for error formatting, the hierarchy and error collection.
"""

import pytest

from kijo.errors import (
    ArityMismatchError,
    AssemblerError,
    CodecError,
    ErrorCollector,
    InvalidEncodingError,
    InvalidRegisterError,
    KijoError,
    MachineError,
    MachineHaltedError,
    OutOfProgramError,
    ParseError,
    SourceLocation,
    TooManyErrors,
    UnknownInstructionError,
    UnresolvedLabelError,
)


class TestSourceLocation:

    def test_str_with_column(self):
        assert str(SourceLocation("a.asm", 3, 5)) == "a.asm:3:5"

    def test_str_without_column(self):
        assert str(SourceLocation("a.asm", 3)) == "a.asm:3"


class TestHierarchy:
    """Every error is a KijoError under the right branch."""

    @pytest.mark.parametrize("error,base", [
        (InvalidRegisterError("r9"), ParseError),
        (ArityMismatchError("inc", 1, 0), ParseError),
        (UnresolvedLabelError("x"), AssemblerError),
        (InvalidEncodingError("0"), CodecError),
        (OutOfProgramError(5, 5), MachineError),
        (MachineHaltedError(), MachineError),
    ])
    def test_bases(self, error, base):
        assert isinstance(error, base)
        assert isinstance(error, KijoError)

    def test_unresolved_label_is_not_parse_error(self):
        assert not isinstance(UnresolvedLabelError("x"), ParseError)


class TestFormatting:
    """Message layout."""

    def test_plain_message(self):
        assert str(UnknownInstructionError("mul")) == "error: unknown instruction 'mul'"

    def test_location_source_and_column(self):
        error = AssemblerError(
            "bad thing",
            location=SourceLocation("p.asm", 2, 5),
            source_line="inc r9",
            hint="try harder",
        )
        assert str(error).splitlines() == [
            "p.asm:2:5: error: bad thing",
            "    inc r9",
            "        ^",
            "hint: try harder",
        ]

    def test_with_location_rebuilds_args(self):
        error = InvalidRegisterError("r9")
        error.with_location(SourceLocation("p.asm", 4), "out r9")
        assert error.args[0].startswith("p.asm:4: error: invalid register 'r9'")

    def test_arity_message(self):
        assert "'inc' takes 1 operand, got 0" in str(ArityMismatchError("inc", 1, 0))
        assert "'mv' takes 2 operands, got 3" in str(ArityMismatchError("mv", 2, 3))

    def test_unresolved_suggestions(self):
        error = UnresolvedLabelError.for_table("strat", {"start": 0, "end": 4})
        assert error.similar_labels == ["start"]
        assert "did you mean 'start'?" in str(error)

    def test_unresolved_no_suggestions(self):
        error = UnresolvedLabelError.for_table("zzz", {"start": 0})
        assert error.hint is None

    def test_halted_with_cause(self):
        cause = OutOfProgramError(3, 3)
        error = MachineHaltedError(cause)
        assert error.cause is cause
        assert "out of program: pc=3 but program has 3 words" in str(error)


class TestErrorCollector:
    """Batch error collection."""

    def test_collect_and_report(self):
        collector = ErrorCollector()
        collector.add(UnknownInstructionError("mul"))
        collector.add_warning("label 'x' redefined")
        assert collector.has_errors()
        assert collector.error_count() == 1
        assert collector.warning_count() == 1
        report = collector.report()
        assert "unknown instruction 'mul'" in report
        assert "Warnings:" in report
        assert report.endswith("1 error, 1 warning")

    def test_too_many_errors(self):
        collector = ErrorCollector(max_errors=2)
        collector.add(UnknownInstructionError("a"))
        with pytest.raises(TooManyErrors):
            collector.add(UnknownInstructionError("b"))

    def test_clear(self):
        collector = ErrorCollector()
        collector.add(UnknownInstructionError("a"))
        collector.clear()
        assert not collector.has_errors()
        assert collector.report() == "0 errors, 0 warnings"
