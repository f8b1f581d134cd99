"""
Truth Tables

Exhaustive input enumeration for composite templates. Rows follow
itertools.product order over (False, True), so the first input port is the
most significant bit: row 0 is all-false and the last row is all-true.
"""

from dataclasses import dataclass
from itertools import product
from typing import List, Mapping, Optional, Tuple

import numpy as np

from ..circuit.errors import TemplateError
from ..circuit.model import CompositeTemplate
from ..engine.config import EngineConfig
from ..engine.evaluator import Evaluator


# Enumeration above this many inputs is refused
MAX_TABLE_INPUTS = 16


@dataclass
class TruthTable:
    """Inputs and outputs as boolean arrays, one row per input vector"""
    name: str
    inputs: np.ndarray   # Shape: (2**n_in, n_in)
    outputs: np.ndarray  # Shape: (2**n_in, n_out)
    input_names: List[str]
    output_names: List[str]

    @property
    def num_rows(self) -> int:
        return self.inputs.shape[0]

    def rows(self) -> List[Tuple[Tuple[bool, ...], Tuple[bool, ...]]]:
        return [
            (tuple(bool(v) for v in i), tuple(bool(v) for v in o))
            for i, o in zip(self.inputs, self.outputs)
        ]

    def lookup(self, inputs) -> Tuple[bool, ...]:
        """Output row for an input vector"""
        index = 0
        for v in inputs:
            index = (index << 1) | int(bool(v))
        return tuple(bool(v) for v in self.outputs[index])

    def column(self, output: int) -> np.ndarray:
        return self.outputs[:, output]

    def format(self) -> str:
        """Plain-text table, 0/1 cells"""
        header = " ".join(self.input_names) + " | " + " ".join(self.output_names)
        lines = [header, "-" * len(header)]
        for ins, outs in self.rows():
            left = " ".join(str(int(v)).rjust(len(n)) for v, n in zip(ins, self.input_names))
            right = " ".join(str(int(v)).rjust(len(n)) for v, n in zip(outs, self.output_names))
            lines.append(f"{left} | {right}")
        return "\n".join(lines)


def _port_names(ports, prefix: str) -> List[str]:
    return [p.name or f"{prefix}{i}" for i, p in enumerate(ports)]


def truth_table(name: str,
                library: Mapping[str, CompositeTemplate],
                config: Optional[EngineConfig] = None) -> TruthTable:
    """
    Build the truth table of a template.

    Each row is computed exactly as an instance driven with that input
    vector would be, so feedback inside the template gives the same
    best-effort values the evaluator reports.

    Raises:
        TemplateError: unknown template or too many inputs to enumerate
    """
    template = library.get(name)
    if template is None:
        raise TemplateError(f"unknown template '{name}'")
    n_in = template.num_inputs
    if n_in > MAX_TABLE_INPUTS:
        raise TemplateError(
            f"template '{name}' has {n_in} inputs; at most {MAX_TABLE_INPUTS} "
            f"can be enumerated")

    evaluator = Evaluator(library, config)
    vectors = list(product((False, True), repeat=n_in))
    outputs = [evaluator.expander.simulate(template, v, 1) for v in vectors]

    return TruthTable(
        name=name,
        inputs=np.array(vectors, dtype=bool).reshape(len(vectors), n_in),
        outputs=np.array(outputs, dtype=bool).reshape(len(vectors), template.num_outputs),
        input_names=_port_names(template.inputs, "in"),
        output_names=_port_names(template.outputs, "out"),
    )
