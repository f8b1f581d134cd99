"""
Circuit Model

Value types for gates, wires, circuits and composite templates.

Everything here is immutable. Edits and evaluation produce new values with
dataclasses.replace, so a Circuit handed to the engine can never be observed
half-updated. Gates and wires refer to each other only by id.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple


class GateKind(Enum):
    """Kind of a gate. COMPOSITE gates are instances of a template."""
    INPUT = "INPUT"
    OUTPUT = "OUTPUT"
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    COMPOSITE = "CUSTOM"

    @property
    def is_primitive(self) -> bool:
        return self is not GateKind.COMPOSITE


# (input ports, output ports) per primitive kind
PRIMITIVE_PORTS: Dict[GateKind, Tuple[int, int]] = {
    GateKind.INPUT: (0, 1),
    GateKind.OUTPUT: (1, 0),
    GateKind.AND: (2, 1),
    GateKind.OR: (2, 1),
    GateKind.NOT: (1, 1),
}


@dataclass(frozen=True)
class Position:
    """Presentation position. The engine never looks at it."""
    x: float = 0
    y: float = 0

    def moved(self, dx: float, dy: float) -> "Position":
        return Position(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Endpoint:
    """A port on a gate: (gate id, port index)"""
    gate_id: str
    port: int = 0


@dataclass(frozen=True)
class Wire:
    """A single-bit connection from an output port to an input port"""
    id: str
    source: Endpoint
    target: Endpoint


@dataclass(frozen=True)
class Gate:
    """
    A node in the circuit graph.

    `value` is the primary signal of a primitive gate. For INPUT gates it is
    the caller's stimulus. COMPOSITE gates name their template and carry one
    value per declared port in `input_values` / `output_values`; their
    scalar `value` stays false.
    """
    id: str
    kind: GateKind
    position: Position = field(default_factory=Position)
    value: bool = False
    name: Optional[str] = None
    template: Optional[str] = None
    input_values: Tuple[bool, ...] = ()
    output_values: Tuple[bool, ...] = ()

    @property
    def is_composite(self) -> bool:
        return self.kind is GateKind.COMPOSITE

    def output(self, port: int = 0) -> bool:
        """Signal driven onto a wire leaving `port`"""
        if self.is_composite:
            if 0 <= port < len(self.output_values):
                return self.output_values[port]
            return False
        return self.value

    def shape(self) -> "Gate":
        """Copy with every runtime value cleared"""
        return replace(
            self,
            value=False,
            input_values=tuple(False for _ in self.input_values),
            output_values=tuple(False for _ in self.output_values),
        )


@dataclass(frozen=True)
class Circuit:
    """
    An ordered collection of gates plus the wires between them.

    Gate order is significant: it is the sequence the fixpoint engine
    sweeps, and therefore part of what makes evaluation deterministic.
    """
    gates: Tuple[Gate, ...] = ()
    wires: Tuple[Wire, ...] = ()

    def __iter__(self) -> Iterator[Gate]:
        return iter(self.gates)

    def __len__(self) -> int:
        return len(self.gates)

    def has_gate(self, gate_id: str) -> bool:
        return any(g.id == gate_id for g in self.gates)

    def gate(self, gate_id: str) -> Gate:
        for g in self.gates:
            if g.id == gate_id:
                return g
        raise KeyError(gate_id)

    def wire_into(self, gate_id: str, port: int) -> Optional[Wire]:
        """The wire driving an input port, if any"""
        for w in self.wires:
            if w.target.gate_id == gate_id and w.target.port == port:
                return w
        return None

    def wires_touching(self, gate_id: str) -> List[Wire]:
        return [
            w for w in self.wires
            if w.source.gate_id == gate_id or w.target.gate_id == gate_id
        ]

    def inputs(self) -> List[Gate]:
        return [g for g in self.gates if g.kind is GateKind.INPUT]

    def outputs(self) -> List[Gate]:
        return [g for g in self.gates if g.kind is GateKind.OUTPUT]

    def with_gates(self, gates) -> "Circuit":
        return replace(self, gates=tuple(gates))

    def with_wires(self, wires) -> "Circuit":
        return replace(self, wires=tuple(wires))


@dataclass(frozen=True)
class PortDecl:
    """A template port, aliasing one inner INPUT or OUTPUT gate"""
    gate_id: str
    name: Optional[str] = None


@dataclass(frozen=True)
class CompositeTemplate:
    """
    A named, reusable sub-circuit.

    Inner gates hold shape only (all values false). Port order is fixed at
    creation time and determines the index of each port on instances.
    """
    name: str
    gates: Tuple[Gate, ...] = ()
    wires: Tuple[Wire, ...] = ()
    inputs: Tuple[PortDecl, ...] = ()
    outputs: Tuple[PortDecl, ...] = ()

    @property
    def num_inputs(self) -> int:
        return len(self.inputs)

    @property
    def num_outputs(self) -> int:
        return len(self.outputs)


def port_counts(gate: Gate, template: Optional[CompositeTemplate] = None) -> Tuple[int, int]:
    """
    Number of (input, output) ports of a gate.

    Composite gates take their counts from the template when it is known,
    otherwise from the size of their cached port arrays.
    """
    if gate.kind.is_primitive:
        return PRIMITIVE_PORTS[gate.kind]
    if template is not None:
        return template.num_inputs, template.num_outputs
    return len(gate.input_values), len(gate.output_values)
