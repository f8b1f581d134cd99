"""
Pytest configuration for gatelab tests.

Ensures the src directory is importable and provides small circuit
builders shared across test modules.
"""

import sys
from pathlib import Path

import pytest

# Ensure src directory is in path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from gatelab.circuit import edits
from gatelab.circuit.library import LibraryStore
from gatelab.circuit.model import Circuit, Endpoint, GateKind, Position


def _two_input(kind, a=False, b=False, wire_b=True):
    """INPUT a, INPUT b -> <kind> g -> OUTPUT y"""
    c = Circuit()
    c = edits.add_gate(c, GateKind.INPUT, Position(0, 0), gate_id="a")
    c = edits.add_gate(c, GateKind.INPUT, Position(0, 100), gate_id="b")
    c = edits.add_gate(c, kind, Position(100, 50), gate_id="g")
    c = edits.add_gate(c, GateKind.OUTPUT, Position(200, 50), gate_id="y")
    c = edits.connect(c, Endpoint("a"), Endpoint("g", 0), wire_id="w-a")
    if wire_b:
        c = edits.connect(c, Endpoint("b"), Endpoint("g", 1), wire_id="w-b")
    c = edits.connect(c, Endpoint("g"), Endpoint("y"), wire_id="w-y")
    c = edits.set_input(c, "a", a)
    c = edits.set_input(c, "b", b)
    return c


def _nand_source():
    """a, b -> AND -> NOT -> y, laid out for promotion"""
    c = Circuit()
    c = edits.add_gate(c, GateKind.INPUT, Position(10, 20), gate_id="a", name="A")
    c = edits.add_gate(c, GateKind.INPUT, Position(10, 120), gate_id="b", name="B")
    c = edits.add_gate(c, GateKind.AND, Position(120, 60), gate_id="and")
    c = edits.add_gate(c, GateKind.NOT, Position(220, 80), gate_id="not")
    c = edits.add_gate(c, GateKind.OUTPUT, Position(320, 80), gate_id="y", name="Y")
    c = edits.connect(c, Endpoint("a"), Endpoint("and", 0), wire_id="w1")
    c = edits.connect(c, Endpoint("b"), Endpoint("and", 1), wire_id="w2")
    c = edits.connect(c, Endpoint("and"), Endpoint("not"), wire_id="w3")
    c = edits.connect(c, Endpoint("not"), Endpoint("y"), wire_id="w4")
    return c


def _demorgan_source():
    """a, b -> NOT, NOT -> OR -> y (same function as NAND)"""
    c = Circuit()
    c = edits.add_gate(c, GateKind.INPUT, Position(0, 0), gate_id="a")
    c = edits.add_gate(c, GateKind.INPUT, Position(0, 100), gate_id="b")
    c = edits.add_gate(c, GateKind.NOT, Position(100, 0), gate_id="na")
    c = edits.add_gate(c, GateKind.NOT, Position(100, 100), gate_id="nb")
    c = edits.add_gate(c, GateKind.OR, Position(200, 50), gate_id="or")
    c = edits.add_gate(c, GateKind.OUTPUT, Position(300, 50), gate_id="y")
    c = edits.connect(c, Endpoint("a"), Endpoint("na"), wire_id="w1")
    c = edits.connect(c, Endpoint("b"), Endpoint("nb"), wire_id="w2")
    c = edits.connect(c, Endpoint("na"), Endpoint("or", 0), wire_id="w3")
    c = edits.connect(c, Endpoint("nb"), Endpoint("or", 1), wire_id="w4")
    c = edits.connect(c, Endpoint("or"), Endpoint("y"), wire_id="w5")
    return c


def _instance_circuit(library, name, x1=False, x2=False):
    """INPUT x1, x2 -> <name> instance u -> OUTPUT out"""
    c = Circuit()
    c = edits.add_gate(c, GateKind.INPUT, Position(0, 0), gate_id="x1")
    c = edits.add_gate(c, GateKind.INPUT, Position(0, 100), gate_id="x2")
    c = edits.instantiate(c, library, name, Position(100, 50), gate_id="u")
    c = edits.add_gate(c, GateKind.OUTPUT, Position(300, 50), gate_id="out")
    c = edits.connect(c, Endpoint("x1"), Endpoint("u", 0), wire_id="w1", library=library)
    c = edits.connect(c, Endpoint("x2"), Endpoint("u", 1), wire_id="w2", library=library)
    c = edits.connect(c, Endpoint("u", 0), Endpoint("out"), wire_id="w3", library=library)
    c = edits.set_input(c, "x1", x1)
    c = edits.set_input(c, "x2", x2)
    return c


@pytest.fixture
def two_input():
    return _two_input


@pytest.fixture
def nand_source():
    return _nand_source()


@pytest.fixture
def nand_library():
    source = _nand_source()
    return edits.promote_selection(
        source, [g.id for g in source.gates], "nand", LibraryStore())


@pytest.fixture
def gate_library(nand_library):
    """NAND plus an equivalent De Morgan form and a plain AND"""
    library = nand_library
    alt = _demorgan_source()
    library = edits.promote_selection(alt, [g.id for g in alt.gates], "NAND2", library)
    conj = _two_input(GateKind.AND)
    library = edits.promote_selection(conj, [g.id for g in conj.gates], "AND2", library)
    return library


@pytest.fixture
def instance_circuit():
    return _instance_circuit
