"""
Composite Expander

Computes the port values of composite gates. For each instance the
template's inner graph is rebuilt from scratch, its INPUT gates are seeded
with the values arriving on the instance's input ports, the inner graph is
settled (expanding any nested composites the same way) and the inner
OUTPUT gates are read back in declared port order.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, List, Mapping, Sequence, Set, Tuple

from ..circuit.model import CompositeTemplate, Gate, Wire
from ..circuit.topology import TopologyIndex
from .config import EngineConfig


logger = logging.getLogger(__name__)

# (gates, wires, depth) -> settled gates
SettleFn = Callable[[Sequence[Gate], Sequence[Wire], int], Tuple[Gate, ...]]


class CompositeExpander:
    """
    Expands composite instances against a template library.

    Expansion is a pure function of (template, input vector, depth), so
    results are memoised for the lifetime of the expander. One expander
    serves a single evaluation; a new evaluation gets a new cache and
    therefore always sees the library it was given.
    """

    def __init__(self,
                 library: Mapping[str, CompositeTemplate],
                 config: EngineConfig,
                 settle: SettleFn):
        self.library = library
        self.config = config
        self._settle = settle
        self._cache: Dict[Tuple[str, Tuple[bool, ...], int], Tuple[bool, ...]] = {}

        # Diagnostics
        self.expansions = 0
        self.cache_hits = 0
        self.depth_limited = 0
        self.missing: Set[str] = set()

    def sweep(self, gates: Sequence[Gate], index: TopologyIndex,
              depth: int) -> List[Gate]:
        """
        Recompute every composite gate in sweep order.

        Instances read the working state, so one placed after its driver
        sees the driver's outputs from this same sweep.
        """
        state = list(gates)
        for i, gate in enumerate(state):
            if gate.is_composite:
                state[i] = self.expand(gate, index, state, depth)
        return state

    def expand(self, gate: Gate, index: TopologyIndex,
               gates: Sequence[Gate], depth: int) -> Gate:
        """New port values for one composite gate living at `depth`"""
        template = self.library.get(gate.template) if gate.template else None
        if template is None:
            if gate.template not in self.missing:
                logger.debug(f"Composite {gate.id}: template {gate.template!r} not found")
            self.missing.add(gate.template or "")
            return self._inert(gate)
        if depth >= self.config.max_depth:
            self.depth_limited += 1
            return self._inert(gate)

        inputs = tuple(
            bool(index.read(gates, gate.id, port))
            for port in range(template.num_inputs)
        )
        outputs = self.simulate(template, inputs, depth + 1)
        return replace(gate, input_values=inputs, output_values=outputs)

    def simulate(self, template: CompositeTemplate,
                 inputs: Tuple[bool, ...], depth: int) -> Tuple[bool, ...]:
        """
        Run a template's inner graph on an input vector.

        Args:
            template: Template to instantiate
            inputs: One value per declared input port (missing ports read false)
            depth: Nesting depth of the inner graph

        Returns:
            One value per declared output port
        """
        key = (template.name, inputs, depth)
        if key in self._cache:
            self.cache_hits += 1
            return self._cache[key]
        self.expansions += 1

        gates = [g.shape() for g in template.gates]
        positions: Dict[str, int] = {}
        for i, g in enumerate(gates):
            positions.setdefault(g.id, i)

        for port, decl in enumerate(template.inputs):
            i = positions.get(decl.gate_id)
            if i is not None:
                value = inputs[port] if port < len(inputs) else False
                gates[i] = replace(gates[i], value=value)

        settled = self._settle(gates, template.wires, depth)

        outputs = tuple(
            settled[positions[decl.gate_id]].value if decl.gate_id in positions else False
            for decl in template.outputs
        )
        self._cache[key] = outputs
        return outputs

    def _inert(self, gate: Gate) -> Gate:
        if self.config.missing_template == "freeze":
            return gate
        return replace(gate, output_values=(False,) * len(gate.output_values))
