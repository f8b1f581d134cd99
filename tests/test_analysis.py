"""
Truth table and symbolic verification tests.
"""

from itertools import product

import numpy as np
import pytest
import z3

from gatelab import EngineConfig, simulate_template
from gatelab.analysis import (
    counterexample,
    symbolic_outputs,
    templates_equivalent,
    topological_order,
    truth_table,
    verify_truth_table,
)
from gatelab.circuit import edits
from gatelab.circuit.errors import TemplateError, VerificationError
from gatelab.circuit.library import LibraryStore
from gatelab.circuit.model import (
    Circuit,
    CompositeTemplate,
    Endpoint,
    Gate,
    GateKind,
    PortDecl,
    Wire,
)


def _proved(claim) -> bool:
    solver = z3.Solver()
    solver.add(z3.Not(claim))
    return solver.check() == z3.unsat


@pytest.fixture
def wrapped_library(nand_library, instance_circuit):
    """NAND plus WRAP, a template holding a single NAND instance"""
    source = instance_circuit(nand_library, "NAND")
    return edits.promote_selection(
        source, [g.id for g in source.gates], "WRAP", nand_library)


# =============================================================================
# Truth tables
# =============================================================================

class TestTruthTable:

    def test_nand(self, nand_library):
        table = truth_table("NAND", nand_library)
        assert table.num_rows == 4
        assert table.inputs.dtype == np.bool_
        assert table.column(0).tolist() == [True, True, True, False]
        assert table.input_names == ["A", "B"]
        assert table.output_names == ["Y"]

    def test_row_order(self, nand_library):
        table = truth_table("NAND", nand_library)
        assert table.rows()[0] == ((False, False), (True,))
        assert table.rows()[-1] == ((True, True), (False,))
        assert table.lookup([True, False]) == (True,)
        assert table.lookup([True, True]) == (False,)

    def test_default_port_names(self, gate_library):
        table = truth_table("AND2", gate_library)
        assert table.input_names == ["in0", "in1"]
        assert table.output_names == ["out0"]
        assert table.column(0).tolist() == [False, False, False, True]

    def test_format(self, nand_library):
        lines = truth_table("NAND", nand_library).format().splitlines()
        assert lines[0] == "A B | Y"
        assert lines[2] == "0 0 | 1"
        assert lines[-1] == "1 1 | 0"
        assert len(lines) == 6

    def test_nested(self, wrapped_library):
        table = truth_table("WRAP", wrapped_library)
        assert table.column(0).tolist() == [True, True, True, False]

    def test_depth_limited(self, wrapped_library):
        table = truth_table("WRAP", wrapped_library, EngineConfig(max_depth=1))
        assert not table.outputs.any()

    def test_unknown(self, nand_library):
        with pytest.raises(TemplateError):
            truth_table("XOR", nand_library)


# =============================================================================
# Symbolic evaluation
# =============================================================================

class TestSymbolic:

    def test_nand_expression(self, nand_library):
        a, b = z3.Bools("a b")
        (y,) = symbolic_outputs("NAND", nand_library, [a, b])
        assert _proved(y == z3.Not(z3.And(a, b)))

    def test_nested_expression(self, wrapped_library):
        a, b = z3.Bools("a b")
        (y,) = symbolic_outputs("WRAP", wrapped_library, [a, b])
        assert _proved(y == z3.Not(z3.And(a, b)))

    def test_depth_limited_is_false(self, wrapped_library):
        (y,) = symbolic_outputs("WRAP", wrapped_library, max_depth=1)
        assert _proved(y == False)  # noqa: E712

    def test_missing_nested_is_false(self, wrapped_library):
        library = edits.delete_template(wrapped_library, "NAND")
        (y,) = symbolic_outputs("WRAP", library)
        assert _proved(y == False)  # noqa: E712

    def test_matches_truth_table(self, gate_library):
        for name in gate_library:
            table = truth_table(name, gate_library)
            assert verify_truth_table(name, gate_library, table)

    def test_aliased_input_ports_follow_evaluator(self):
        """Two ports seeding one inner gate: the later port wins in both engines"""
        alias = CompositeTemplate(
            name="ALIAS",
            gates=(Gate("i", GateKind.INPUT), Gate("n", GateKind.NOT),
                   Gate("o", GateKind.OUTPUT)),
            wires=(Wire("w1", Endpoint("i"), Endpoint("n")),
                   Wire("w2", Endpoint("n"), Endpoint("o"))),
            inputs=(PortDecl("i"), PortDecl("i")),
            outputs=(PortDecl("o"),),
        )
        library = LibraryStore([alias])

        for a, b in product([False, True], repeat=2):
            (y,) = symbolic_outputs("ALIAS", library, [z3.BoolVal(a), z3.BoolVal(b)])
            assert simulate_template("ALIAS", [a, b], library) == (not b,)
            assert _proved(y == z3.BoolVal(not b))
        assert verify_truth_table("ALIAS", library, truth_table("ALIAS", library))

    def test_detects_wrong_table(self, nand_library):
        table = truth_table("NAND", nand_library)
        table.outputs[3, 0] = True
        assert not verify_truth_table("NAND", nand_library, table)

    def test_table_shape_mismatch(self, gate_library):
        table = truth_table("AND2", gate_library)
        table.outputs = np.zeros((4, 2), dtype=bool)
        assert not verify_truth_table("AND2", gate_library, table)


class TestSolverTimeout:

    @pytest.fixture
    def undecided(self, monkeypatch):
        monkeypatch.setattr(z3.Solver, "check", lambda self, *args: z3.unknown)

    def test_counterexample(self, gate_library, undecided):
        with pytest.raises(VerificationError):
            counterexample("NAND", "NAND2", gate_library)

    def test_truth_table(self, nand_library, undecided):
        table = truth_table("NAND", nand_library)
        with pytest.raises(VerificationError):
            verify_truth_table("NAND", nand_library, table)


class TestEquivalence:

    def test_de_morgan(self, gate_library):
        assert templates_equivalent("NAND", "NAND2", gate_library)
        assert counterexample("NAND", "NAND2", gate_library) is None

    def test_counterexample(self, gate_library):
        witness = counterexample("AND2", "NAND", gate_library)
        assert witness is not None and len(witness) == 2

        table_a = truth_table("AND2", gate_library)
        table_b = truth_table("NAND", gate_library)
        assert table_a.lookup(witness) != table_b.lookup(witness)
        assert not templates_equivalent("AND2", "NAND", gate_library)

    def test_port_mismatch(self, wrapped_library, nand_source):
        library = edits.promote_selection(
            nand_source, ["a", "and", "y"], "PARTIAL", wrapped_library)
        assert not templates_equivalent("NAND", "PARTIAL", library)
        with pytest.raises(TemplateError):
            counterexample("NAND", "PARTIAL", library)


class TestTopologicalOrder:

    def test_drivers_first(self, nand_source):
        order = topological_order(nand_source.gates, nand_source.wires)
        assert order.index("a") < order.index("and") < order.index("not") < order.index("y")

    def test_cycle(self):
        c = edits.add_gate(Circuit(), GateKind.NOT, gate_id="n1")
        c = edits.add_gate(c, GateKind.NOT, gate_id="n2")
        c = edits.connect(c, Endpoint("n1"), Endpoint("n2"), wire_id="w1")
        c = edits.connect(c, Endpoint("n2"), Endpoint("n1"), wire_id="w2")
        with pytest.raises(ValueError, match="Cycle"):
            topological_order(c.gates, c.wires)

    def test_latch_template_rejected(self):
        c = edits.add_gate(Circuit(), GateKind.INPUT, gate_id="s")
        c = edits.add_gate(c, GateKind.OR, gate_id="or")
        c = edits.add_gate(c, GateKind.OUTPUT, gate_id="q")
        c = edits.connect(c, Endpoint("s"), Endpoint("or", 0), wire_id="w1")
        c = edits.connect(c, Endpoint("or"), Endpoint("or", 1), wire_id="w2")
        c = edits.connect(c, Endpoint("or"), Endpoint("q"), wire_id="w3")
        library = edits.promote_selection(c, ["s", "or", "q"], "LATCH", LibraryStore())
        with pytest.raises(ValueError):
            symbolic_outputs("LATCH", library)
