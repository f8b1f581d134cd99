"""
gatelab command line

Usage:
    gatelab evaluate circuit.json --library gates.json --set a=1 --set b=0
    gatelab table gates.json NAND
    gatelab verify gates.json NAND NAND2
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .circuit import edits
from .circuit.codec import dumps, load_circuit
from .circuit.errors import GateLabError
from .circuit.library import LibraryStore
from .engine.config import EngineConfig
from .engine.evaluator import evaluate_with_report


logger = logging.getLogger("gatelab")


def _parse_assignment(text: str):
    gate_id, sep, value = text.partition("=")
    if not sep or value not in ("0", "1", "true", "false"):
        raise argparse.ArgumentTypeError(
            f"expected ID=0|1, got {text!r}")
    return gate_id, value in ("1", "true")


def _load_library(path: Optional[str]) -> LibraryStore:
    return LibraryStore.load(Path(path)) if path else LibraryStore()


def _load_config(path: Optional[str]) -> EngineConfig:
    return EngineConfig.from_yaml(path) if path else EngineConfig()


def cmd_evaluate(args) -> int:
    circuit = load_circuit(Path(args.circuit))
    for gate_id, value in args.set or []:
        if not circuit.has_gate(gate_id):
            logger.error(f"No gate '{gate_id}' in {args.circuit}")
            return 2
        circuit = edits.set_input(circuit, gate_id, value)

    result = evaluate_with_report(circuit, _load_library(args.library),
                                  _load_config(args.config))
    logger.info(result.report.summary())

    text = dumps(result.circuit)
    if args.output:
        Path(args.output).write_text(text)
    else:
        print(text)

    if args.values:
        values = {g.id: g.value for g in result.circuit.outputs()}
        print(json.dumps(values, indent=2))
    return 0


def cmd_table(args) -> int:
    from .analysis.truth_table import truth_table

    table = truth_table(args.name, _load_library(args.library),
                        _load_config(args.config))
    print(table.format())
    return 0


def cmd_verify(args) -> int:
    from .analysis.verify import counterexample

    library = _load_library(args.library)
    witness = counterexample(args.a, args.b, library)
    if witness is None:
        print(f"{args.a} == {args.b}")
        return 0
    bits = "".join(str(int(v)) for v in witness)
    print(f"{args.a} != {args.b} on input {bits}")
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gatelab", description="Evaluate logic circuits")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("evaluate", help="evaluate a saved circuit")
    p.add_argument("circuit", help="circuit JSON file")
    p.add_argument("--library", help="template library JSON file")
    p.add_argument("--config", help="engine config YAML file")
    p.add_argument("--set", action="append", type=_parse_assignment,
                   metavar="ID=0|1", help="set an INPUT gate before evaluating")
    p.add_argument("--output", help="write the evaluated circuit here")
    p.add_argument("--values", action="store_true",
                   help="also print OUTPUT gate values")
    p.set_defaults(func=cmd_evaluate)

    p = sub.add_parser("table", help="print a template's truth table")
    p.add_argument("library", help="template library JSON file")
    p.add_argument("name", help="template name")
    p.add_argument("--config", help="engine config YAML file")
    p.set_defaults(func=cmd_table)

    p = sub.add_parser("verify", help="check two templates for equivalence")
    p.add_argument("library", help="template library JSON file")
    p.add_argument("a")
    p.add_argument("b")
    p.set_defaults(func=cmd_verify)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s | %(levelname)s | %(message)s',
    )
    try:
        return args.func(args)
    except (GateLabError, ValueError, OSError) as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
