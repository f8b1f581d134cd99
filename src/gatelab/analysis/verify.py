"""
Symbolic Verification

Builds Z3 Boolean expressions for acyclic composite templates and uses the
solver to check them against truth tables or against each other.

The expressions follow the evaluator's semantics exactly: partially wired
AND/OR gates are constant false, an unconnected NOT is constant true, an
unwired OUTPUT is false, and a missing (or too deeply nested) template
contributes false outputs. Templates with feedback have no combinational
meaning and are rejected.
"""

from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import z3

from ..circuit.errors import TemplateError, VerificationError
from ..circuit.model import CompositeTemplate, Gate, GateKind, Wire
from ..circuit.topology import TopologyIndex
from ..engine.config import DEFAULT_CONFIG
from .truth_table import TruthTable


FALSE = z3.BoolVal(False)
TRUE = z3.BoolVal(True)


def topological_order(gates: Sequence[Gate], wires: Sequence[Wire]) -> List[str]:
    """
    Gate ids ordered so every gate follows its drivers.

    Raises:
        ValueError: the wiring contains a cycle
    """
    ids = [g.id for g in gates]
    known = set(ids)
    in_degree = {gid: 0 for gid in ids}
    adj = defaultdict(list)

    for wire in wires:
        src, dst = wire.source.gate_id, wire.target.gate_id
        if src in known and dst in known:
            in_degree[dst] += 1
            adj[src].append(dst)

    # Kahn's algorithm, seeded in gate order
    queue = [gid for gid in ids if in_degree[gid] == 0]
    order = []
    while queue:
        gid = queue.pop(0)
        order.append(gid)
        for neighbor in adj.get(gid, []):
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    if len(order) != len(in_degree):
        raise ValueError(
            f"Cycle detected in wiring: sorted {len(order)} "
            f"of {len(in_degree)} gates")
    return order


def _template_exprs(template: CompositeTemplate,
                    inputs: Sequence[z3.BoolRef],
                    library: Mapping[str, CompositeTemplate],
                    depth: int,
                    max_depth: int) -> List[z3.BoolRef]:
    gates: Dict[str, Gate] = {}
    for g in template.gates:
        gates.setdefault(g.id, g)
    index = TopologyIndex(list(gates.values()), template.wires)

    seeds = {}
    for port, decl in enumerate(template.inputs):
        seeds[decl.gate_id] = inputs[port] if port < len(inputs) else FALSE

    # gate id -> expression (primitive) or list of expressions (composite)
    values: Dict[str, object] = {}

    def read(gate_id: str, port: int) -> Optional[z3.BoolRef]:
        source = index.driver(gate_id, port)
        if source is None:
            return None
        value = values.get(source.gate_id)
        if value is None:
            return FALSE
        if isinstance(value, list):
            return value[source.port] if source.port < len(value) else FALSE
        return value

    for gid in topological_order(list(gates.values()), template.wires):
        gate = gates[gid]
        kind = gate.kind

        if kind is GateKind.INPUT:
            values[gid] = seeds.get(gid, FALSE)
        elif kind is GateKind.OUTPUT:
            a = read(gid, 0)
            values[gid] = FALSE if a is None else a
        elif kind is GateKind.NOT:
            a = read(gid, 0)
            values[gid] = TRUE if a is None else z3.Not(a)
        elif kind in (GateKind.AND, GateKind.OR):
            a, b = read(gid, 0), read(gid, 1)
            if a is None or b is None:
                values[gid] = FALSE
            elif kind is GateKind.AND:
                values[gid] = z3.And(a, b)
            else:
                values[gid] = z3.Or(a, b)
        else:
            inner = library.get(gate.template) if gate.template else None
            if inner is None or depth >= max_depth:
                values[gid] = [FALSE] * len(gate.output_values)
            else:
                ins = []
                for port in range(inner.num_inputs):
                    v = read(gid, port)
                    ins.append(FALSE if v is None else v)
                values[gid] = _template_exprs(inner, ins, library, depth + 1, max_depth)

    outputs = []
    for decl in template.outputs:
        value = values.get(decl.gate_id)
        outputs.append(value if isinstance(value, z3.BoolRef) else FALSE)
    return outputs


def _template(name: str, library: Mapping[str, CompositeTemplate]) -> CompositeTemplate:
    template = library.get(name)
    if template is None:
        raise TemplateError(f"unknown template '{name}'")
    return template


def input_variables(template: CompositeTemplate, prefix: str = "") -> List[z3.BoolRef]:
    return [
        z3.Bool(f"{prefix}{p.name or f'in{i}'}_{i}")
        for i, p in enumerate(template.inputs)
    ]


def symbolic_outputs(name: str,
                     library: Mapping[str, CompositeTemplate],
                     inputs: Optional[Sequence[z3.BoolRef]] = None,
                     max_depth: int = DEFAULT_CONFIG.max_depth) -> List[z3.BoolRef]:
    """
    Z3 expression for every output port of a template.

    Args:
        name: Template name
        library: Templates, including nested ones
        inputs: One expression per input port (fresh variables by default)
        max_depth: Nesting depth beyond which instances output false

    Raises:
        TemplateError: unknown template
        ValueError: the template (or a nested one) contains a cycle
    """
    template = _template(name, library)
    if inputs is None:
        inputs = input_variables(template)
    return _template_exprs(template, inputs, library, 1, max_depth)


def verify_truth_table(name: str,
                       library: Mapping[str, CompositeTemplate],
                       table: TruthTable,
                       timeout_ms: int = 5000) -> bool:
    """
    Check that a truth table matches the template's symbolic function.

    Returns True if Z3 proves there is no row where they disagree.

    Raises:
        VerificationError: the solver gave up (timeout)
    """
    template = _template(name, library)
    variables = input_variables(template)
    exprs = symbolic_outputs(name, library, variables)

    if table.inputs.shape[1] != len(variables) or table.outputs.shape[1] != len(exprs):
        return False

    disagreements = []
    for ins, outs in table.rows():
        assignment = z3.And(*[v == z3.BoolVal(b) for v, b in zip(variables, ins)]) \
            if variables else TRUE
        for expr, expected in zip(exprs, outs):
            disagreements.append(z3.And(assignment, expr != z3.BoolVal(expected)))

    if not disagreements:
        return True

    solver = z3.Solver()
    solver.set("timeout", timeout_ms)
    solver.add(z3.Or(*disagreements))
    result = solver.check()
    if result == z3.unknown:
        raise VerificationError("Z3 timeout -- truth table check inconclusive")
    return result == z3.unsat


def counterexample(a: str, b: str,
                   library: Mapping[str, CompositeTemplate],
                   timeout_ms: int = 5000) -> Optional[Tuple[bool, ...]]:
    """
    An input vector on which two templates differ, or None if equivalent.

    Raises:
        TemplateError: unknown template or mismatched port counts
        VerificationError: the solver gave up (timeout)
    """
    ta, tb = _template(a, library), _template(b, library)
    if ta.num_inputs != tb.num_inputs or ta.num_outputs != tb.num_outputs:
        raise TemplateError(
            f"'{a}' ({ta.num_inputs}->{ta.num_outputs}) and "
            f"'{b}' ({tb.num_inputs}->{tb.num_outputs}) have different ports")

    variables = input_variables(ta, prefix="x_")
    exprs_a = symbolic_outputs(a, library, variables)
    exprs_b = symbolic_outputs(b, library, variables)
    if not exprs_a:
        return None

    solver = z3.Solver()
    solver.set("timeout", timeout_ms)
    solver.add(z3.Or(*[ea != eb for ea, eb in zip(exprs_a, exprs_b)]))

    result = solver.check()
    if result == z3.unsat:
        return None
    if result == z3.sat:
        model = solver.model()
        return tuple(
            z3.is_true(model.eval(v, model_completion=True)) for v in variables
        )
    raise VerificationError("Z3 timeout -- equivalence check inconclusive")


def templates_equivalent(a: str, b: str,
                         library: Mapping[str, CompositeTemplate],
                         timeout_ms: int = 5000) -> bool:
    """True if two templates compute the same function on every input"""
    ta, tb = _template(a, library), _template(b, library)
    if ta.num_inputs != tb.num_inputs or ta.num_outputs != tb.num_outputs:
        return False
    return counterexample(a, b, library, timeout_ms) is None
