"""
Kijo Test Configuration
=======================

Shared fixtures for the simulator test suite:
- a fresh Machine per test
- a loader that assembles source text straight into that machine
- the echo program used throughout the machine and CLI tests
"""

import pytest

from kijo.assembler import assemble_source
from kijo.emulator import Machine


ECHO_SOURCE = """\
; echo every input byte back to the output
set r0, 0
in r1
out r1
j r0
"""


# =============================================================================
# Machine Fixtures
# =============================================================================


@pytest.fixture
def machine() -> Machine:
    """Fixture: a Machine that has never been reset."""
    return Machine()


@pytest.fixture
def load(machine: Machine):
    """
    Fixture: assemble source text and reset the machine with it.

    Usage:
        def test_something(load):
            m = load("inc r0", input_text="")
            m.step()
    """
    def _load(source: str, input_text: str = "") -> Machine:
        machine.reset(assemble_source(source), input_text)
        return machine
    return _load


@pytest.fixture
def echo_source() -> str:
    return ECHO_SOURCE
