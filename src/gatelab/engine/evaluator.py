"""
Circuit Evaluator

The entry point of the engine. Alternates one expander sweep (recomputing
every composite gate's port values) with one fixpoint run over the flat
graph, until a round leaves the gate collection unchanged or the round
budget runs out. The same loop settles the inner graph of every composite
instance, one level deeper each time.

Usage:
    from gatelab import evaluate

    settled = evaluate(circuit, library)
    settled.gate("out-1").value
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional, Sequence, Set, Tuple

from ..circuit.errors import TemplateError
from ..circuit.library import LibraryStore
from ..circuit.model import Circuit, CompositeTemplate, Gate, Wire
from ..circuit.topology import TopologyIndex
from .config import DEFAULT_CONFIG, EngineConfig
from .expander import CompositeExpander
from .fixpoint import run_fixpoint


logger = logging.getLogger(__name__)


@dataclass
class EvaluationReport:
    """
    Diagnostics for one evaluation.

    None of these are failures: the evaluated circuit is always usable.
    `converged` is False when any fixpoint run or round loop, at any depth,
    stopped on its budget while values were still changing.
    """
    rounds: int = 0
    passes: int = 0
    converged: bool = True
    non_converged_runs: int = 0
    missing_templates: Set[str] = field(default_factory=set)
    depth_limited: int = 0
    expansions: int = 0
    cache_hits: int = 0

    def summary(self) -> str:
        status = "CONVERGED" if self.converged else "BUDGET EXHAUSTED"
        lines = [
            f"Evaluation [{status}]",
            f"  Rounds: {self.rounds}",
            f"  Passes: {self.passes}",
            f"  Expansions: {self.expansions} ({self.cache_hits} cached)",
        ]
        if self.non_converged_runs:
            lines.append(f"  Non-converged runs: {self.non_converged_runs}")
        if self.missing_templates:
            lines.append(f"  Missing templates: {sorted(self.missing_templates)}")
        if self.depth_limited:
            lines.append(f"  Depth-limited instances: {self.depth_limited}")
        return "\n".join(lines)


@dataclass(frozen=True)
class EvaluationResult:
    circuit: Circuit
    report: EvaluationReport


class Evaluator:
    """
    Settles gate sets against one library.

    An Evaluator holds the per-evaluation expansion cache and diagnostics,
    so use a fresh one for every evaluation.
    """

    def __init__(self,
                 library: Optional[Mapping[str, CompositeTemplate]] = None,
                 config: Optional[EngineConfig] = None):
        self.library = library if library is not None else LibraryStore()
        self.config = config or DEFAULT_CONFIG
        self.report = EvaluationReport()
        self.expander = CompositeExpander(self.library, self.config, self.settle)

    def settle(self, gates: Sequence[Gate], wires: Sequence[Wire],
               depth: int = 0) -> Tuple[Gate, ...]:
        """Run the expander/fixpoint alternation on one level of the graph"""
        index = TopologyIndex(gates, wires)
        current = tuple(gates)

        for round_no in range(1, self.config.max_rounds + 1):
            swept = self.expander.sweep(current, index, depth)
            result = run_fixpoint(swept, wires, self.config.max_passes, index)

            if not result.converged:
                self._not_converged(f"fixpoint at depth {depth} "
                                    f"after {result.passes} passes")
            if depth == 0:
                self.report.rounds = round_no
                self.report.passes += result.passes
                logger.debug(f"Round {round_no}: {result.passes} passes")

            if result.gates == current:
                return current
            current = result.gates

        self._not_converged(f"round loop at depth {depth} "
                            f"after {self.config.max_rounds} rounds")
        return current

    def _not_converged(self, what: str):
        self.report.converged = False
        self.report.non_converged_runs += 1
        logger.debug(f"Budget exhausted: {what}")

    def evaluate(self, circuit: Circuit) -> EvaluationResult:
        gates = self.settle(circuit.gates, circuit.wires)

        report = self.report
        report.missing_templates = set(self.expander.missing)
        report.depth_limited = self.expander.depth_limited
        report.expansions = self.expander.expansions
        report.cache_hits = self.expander.cache_hits

        if not report.converged:
            logger.info(f"Evaluation stopped on its iteration budget "
                        f"({report.non_converged_runs} runs still changing)")
        if report.missing_templates:
            logger.info(f"Missing templates: {sorted(report.missing_templates)}")

        return EvaluationResult(replace(circuit, gates=gates), report)


def evaluate_with_report(circuit: Circuit,
                         library: Optional[Mapping[str, CompositeTemplate]] = None,
                         config: Optional[EngineConfig] = None) -> EvaluationResult:
    """Evaluate a circuit and return it together with its diagnostics"""
    return Evaluator(library, config).evaluate(circuit)


def evaluate(circuit: Circuit,
             library: Optional[Mapping[str, CompositeTemplate]] = None,
             config: Optional[EngineConfig] = None) -> Circuit:
    """
    Compute the steady-state values of a circuit.

    Pure and total: the arguments are never modified, and cyclic,
    under-wired or dangling circuits still produce a usable snapshot.

    Args:
        circuit: Circuit with current INPUT stimuli
        library: Composite templates referenced by the circuit
        config: Iteration budgets and policies

    Returns:
        A new Circuit with updated gate values and composite port arrays
    """
    return evaluate_with_report(circuit, library, config).circuit


def simulate_template(name: str,
                      inputs: Sequence[bool],
                      library: Mapping[str, CompositeTemplate],
                      config: Optional[EngineConfig] = None) -> Tuple[bool, ...]:
    """
    Evaluate one template in isolation.

    Behaves exactly like a single instance whose input ports are driven
    with `inputs`.

    Raises:
        TemplateError: unknown template or wrong number of inputs
    """
    template = library.get(name)
    if template is None:
        raise TemplateError(f"unknown template '{name}'")
    if len(inputs) != template.num_inputs:
        raise TemplateError(
            f"template '{name}' has {template.num_inputs} inputs, "
            f"got {len(inputs)} values")
    evaluator = Evaluator(library, config)
    return evaluator.expander.simulate(template, tuple(bool(v) for v in inputs), 1)
