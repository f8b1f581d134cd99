"""
Engine configuration tests.
"""

import pytest

from gatelab import EngineConfig, evaluate_with_report
from gatelab.circuit import edits
from gatelab.circuit.model import Circuit, Endpoint, GateKind
from gatelab.engine.config import DEFAULT_CONFIG, MAX_DEPTH_LIMIT


class TestDefaults:

    def test_values(self):
        config = EngineConfig()
        assert config.max_passes == 50
        assert config.max_rounds == 10
        assert config.max_depth == 32
        assert config.missing_template == "zero"
        assert DEFAULT_CONFIG == config

    def test_to_dict(self):
        data = EngineConfig(max_passes=7).to_dict()
        assert data["max_passes"] == 7
        assert EngineConfig.from_dict(data) == EngineConfig(max_passes=7)


class TestValidation:

    @pytest.mark.parametrize("kwargs", [
        {"max_passes": 0},
        {"max_rounds": -1},
        {"max_depth": True},
        {"max_passes": 2.5},
        {"max_depth": MAX_DEPTH_LIMIT + 1},
        {"missing_template": "explode"},
    ])
    def test_rejects(self, kwargs):
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)

    def test_depth_limit_allowed(self):
        assert EngineConfig(max_depth=MAX_DEPTH_LIMIT).max_depth == MAX_DEPTH_LIMIT


class TestLoading:

    def test_flat_dict_ignores_unknown(self):
        config = EngineConfig.from_dict({"max_rounds": 3, "theme": "dark"})
        assert config.max_rounds == 3

    def test_empty(self):
        assert EngineConfig.from_dict(None) == EngineConfig()

    def test_yaml_engine_section(self, tmp_path):
        path = tmp_path / "gatelab.yaml"
        path.write_text(
            "engine:\n"
            "  max_passes: 12\n"
            "  missing_template: freeze\n"
            "ui:\n"
            "  grid: 20\n"
        )
        config = EngineConfig.from_yaml(str(path))
        assert config.max_passes == 12
        assert config.missing_template == "freeze"
        assert config.max_rounds == 10

    def test_yaml_invalid_value(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("max_depth: 0\n")
        with pytest.raises(ValueError):
            EngineConfig.from_yaml(str(path))


class TestPassBudget:

    def test_ring_uses_configured_budget(self):
        """A NOT gate feeding itself runs the whole pass budget"""
        c = edits.add_gate(Circuit(), GateKind.NOT, gate_id="n")
        c = edits.connect(c, Endpoint("n"), Endpoint("n"), wire_id="loop")

        report = evaluate_with_report(c, config=EngineConfig(max_passes=5, max_rounds=2)).report
        assert not report.converged
        assert report.passes == 10
        assert report.rounds == 2
