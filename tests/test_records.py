"""
Test Suite for Scenario Records
===============================
Record models, aliases, scenario loading and simulator construction.
"""

import json
import math

import pytest
import numpy as np
import yaml
from loguru import logger
from pydantic import ValidationError

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mechanics import SimulationConfig, Vector3
from records import (
    BodyRecord,
    OrbitalBodyRecord,
    VectorFieldSettings,
    ScenarioRecord,
    SystemSnapshot,
    load_scenario,
    build_simulator,
    demo_scenario,
)

SCENARIO_DIR = Path(__file__).parent.parent / "data" / "scenarios"


class TestRecordModels:
    """Tests for structural validation and key aliases."""

    def test_body_record(self):
        record = BodyRecord.model_validate({
            "name": "Sun",
            "mass": 2.0,
            "position": [1, 2, 3],
            "velocity": [0, 1, 0],
            "showTrail": False,
        })
        assert record.show_trail is False

        body = record.to_body()
        assert body.mass == 2.0
        assert body.position == Vector3(1, 2, 3)
        assert body.velocity == Vector3(0, 1, 0)

    def test_body_record_defaults(self):
        record = BodyRecord(mass=1.0)
        assert record.position == (0.0, 0.0, 0.0)
        assert record.show_trail is True

    def test_vector_arity_enforced(self):
        with pytest.raises(ValidationError):
            BodyRecord.model_validate({"mass": 1.0, "position": [1, 2]})

    def test_mass_required(self):
        with pytest.raises(ValidationError):
            BodyRecord.model_validate({"name": "massless"})

    def test_orbital_record_greek_keys(self):
        record = OrbitalBodyRecord.model_validate({
            "mass": 1e-3, "e": 0.1, "a": 2.0, "i": 0.2,
            "Ω": 0.3, "ω": 0.4, "Tp": 1.5, "T": 10.0,
        })
        elements = record.to_elements()
        assert elements.longitude_of_ascending_node == 0.3
        assert elements.argument_of_periapsis == 0.4
        assert elements.pericenter_epoch == 1.5
        assert elements.period == 10.0

    def test_orbital_record_ascii_keys(self):
        record = OrbitalBodyRecord.model_validate({
            "mass": 1e-3, "e": 0.0, "a": 1.0, "Omega": 0.3, "omega": 0.4, "T": 5.0,
        })
        assert record.longitude_of_ascending_node == 0.3
        assert record.argument_of_periapsis == 0.4
        assert record.pericenter_epoch == 0.0

    def test_orbital_record_serializes_greek_keys(self):
        record = OrbitalBodyRecord.model_validate({
            "mass": 1.0, "e": 0.0, "a": 1.0, "Ω": 0.3, "ω": 0.4, "T": 5.0,
        })
        data = record.model_dump(by_alias=True)
        assert data["Ω"] == 0.3
        assert data["ω"] == 0.4
        assert data["T"] == 5.0

    def test_orbital_record_to_body(self):
        record = OrbitalBodyRecord.model_validate({
            "mass": 1e-3, "e": 0.0, "a": 1.0, "T": 2 * math.pi,
        })
        body = record.to_body(0.0)
        np.testing.assert_array_almost_equal(body.position.to_array(), [1.0, 0.0, 0.0])
        np.testing.assert_array_almost_equal(body.velocity.to_array(), [0.0, 1.0, 0.0])

    def test_physically_meaningless_values_pass(self):
        record = OrbitalBodyRecord.model_validate({"mass": -1.0, "e": 1.5, "a": 1.0, "T": 1.0})
        assert record.e == 1.5

    def test_vector_field_settings(self):
        settings = VectorFieldSettings.model_validate({
            "xMin": -2, "xMax": 2, "yMin": -1, "yMax": 1, "zMin": 0, "zMax": 0, "spacing": 0.5,
        })
        assert settings.bounds == (-2, 2, -1, 1, 0, 0)

    def test_vector_field_spacing_must_be_positive(self):
        with pytest.raises(ValidationError):
            VectorFieldSettings.model_validate({"spacing": 0})

    def test_scenario_record(self):
        scenario = ScenarioRecord.model_validate(sample_scenario_dict())
        assert scenario.initial_time == 0.0
        assert scenario.time_step == 0.005
        assert scenario.gravitational_constant == 2.0
        assert scenario.body_count == 3
        assert scenario.vector_field is None


class TestLoadScenario:
    """Tests for reading scenario files."""

    def test_load_json(self, tmp_path):
        path = tmp_path / "system.json"
        path.write_text(json.dumps(sample_scenario_dict()), encoding="utf-8")

        scenario = load_scenario(path)

        assert scenario.name == "sample"
        assert len(scenario.bodies) == 2
        assert len(scenario.orbital_bodies) == 1

    def test_load_yaml(self, tmp_path):
        data = sample_scenario_dict()
        del data["name"]
        path = tmp_path / "unnamed.yaml"
        path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")

        scenario = load_scenario(path)

        assert scenario.name == "unnamed"
        assert scenario.orbital_bodies[0].longitude_of_ascending_node == 0.25

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_scenario(tmp_path / "missing.json")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "system.txt"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(ValueError):
            load_scenario(path)

    def test_invalid_content(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text(json.dumps({"bodies": [{"position": [0, 0, 0]}]}), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_scenario(path)

    @pytest.mark.parametrize("filename", [
        "sun_earth.json",
        "circular_orbits.json",
        "three_body.yaml",
    ])
    def test_bundled_scenarios(self, filename):
        scenario = load_scenario(SCENARIO_DIR / filename)
        simulator = build_simulator(scenario)
        assert len(simulator.bodies) == scenario.body_count
        assert all(b.position.is_finite() and b.velocity.is_finite() for b in simulator.bodies)


class TestBuildSimulator:
    """Tests for turning a scenario into a simulator."""

    def test_body_order_and_overrides(self):
        scenario = ScenarioRecord.model_validate(sample_scenario_dict())

        sim = build_simulator(scenario)

        assert [label.name for label in sim.labels] == ["A", "B", "Orbiter"]
        assert sim.config.time_step == 0.005
        assert sim.config.gravitational_constant == 2.0
        assert sim.labels[1].show_trail is False

    def test_base_config_is_not_mutated(self):
        scenario = ScenarioRecord.model_validate(sample_scenario_dict())
        base = SimulationConfig(steps_per_tick=5)

        sim = build_simulator(scenario, base)

        assert sim.config.steps_per_tick == 5
        assert sim.config.time_step == 0.005
        assert base.time_step != 0.005

    def test_missing_gravitational_constant_keeps_config(self):
        data = sample_scenario_dict()
        del data["gravitationalConstant"]
        scenario = ScenarioRecord.model_validate(data)

        sim = build_simulator(scenario, SimulationConfig(gravitational_constant=3.0))

        assert sim.config.gravitational_constant == 3.0

    def test_missing_time_step_keeps_config(self):
        scenario = ScenarioRecord.model_validate({"bodies": [{"mass": 1.0}]})
        assert scenario.time_step is None

        sim = build_simulator(scenario, SimulationConfig(time_step=0.5))

        assert sim.config.time_step == 0.5

    def test_missing_time_step_uses_default(self):
        scenario = ScenarioRecord.model_validate({"bodies": [{"mass": 1.0}]})
        sim = build_simulator(scenario)
        assert sim.config.time_step == SimulationConfig().time_step

    def test_vector_field_settings_applied(self):
        data = sample_scenario_dict()
        data["vectorField"] = {
            "xMin": 0, "xMax": 1, "yMin": 0, "yMax": 1, "zMin": 0, "zMax": 0, "spacing": 0.5,
        }
        scenario = ScenarioRecord.model_validate(data)

        sim = build_simulator(scenario)

        assert sim.config.field_bounds == (0, 1, 0, 1, 0, 0)
        assert len(sim.regenerate_acceleration_field()) == 9

    def test_orbital_body_uses_initial_time(self):
        data = sample_scenario_dict()
        data["initialTime"] = math.pi / 2
        scenario = ScenarioRecord.model_validate(data)

        sim = build_simulator(scenario)

        # Quarter period past pericenter, rotated by the node longitude
        angle = 0.25 + math.pi / 2
        np.testing.assert_array_almost_equal(
            sim.bodies[2].position.to_array(), [math.cos(angle), math.sin(angle), 0.0]
        )

    def test_demo_scenario(self):
        sim = build_simulator(demo_scenario())

        assert len(sim.bodies) == 2
        assert sim.config.time_step == 0.01
        assert sim.config.gravitational_constant == 1.0
        assert sim.bodies[0].mass == 1.0
        assert sim.bodies[1].position == Vector3(0, 1, 0)
        assert sim.bodies[1].velocity == Vector3(1, 0, 0)

    def test_warns_away_from_pericenter(self, log_messages):
        data = sample_scenario_dict()
        data["orbitalBodies"][0]["e"] = 0.5
        data["initialTime"] = 1.0

        build_simulator(ScenarioRecord.model_validate(data))

        assert any("away from pericenter" in m for m in log_messages)

    def test_warns_on_unbound_orbit(self, log_messages):
        data = sample_scenario_dict()
        data["orbitalBodies"][0]["e"] = 1.2

        build_simulator(ScenarioRecord.model_validate(data))

        assert any("e=1.2" in m for m in log_messages)

    def test_no_warning_at_pericenter(self, log_messages):
        data = sample_scenario_dict()
        data["orbitalBodies"][0]["e"] = 0.5

        build_simulator(ScenarioRecord.model_validate(data))

        assert log_messages == []


class TestSystemSnapshot:
    """Tests for snapshot capture."""

    def test_capture(self):
        sim = build_simulator(demo_scenario())
        sim.tick()

        snapshot = SystemSnapshot.capture(sim)

        assert snapshot.tick == 1
        assert snapshot.time == pytest.approx(0.01)
        assert [b.name for b in snapshot.bodies] == ["Primary", "Companion"]
        assert snapshot.total_energy == pytest.approx(sim.total_energy())
        assert snapshot.bodies[1].speed == pytest.approx(sim.bodies[1].velocity.length)

    def test_to_dict(self):
        snapshot = SystemSnapshot.capture(build_simulator(demo_scenario()))
        data = snapshot.to_dict()
        assert data["tick"] == 0
        assert len(data["bodies"]) == 2
        assert data["center_of_mass"] == pytest.approx((0.0, 0.01 / 1.01, 0.0))


# Helpers and fixtures

def sample_scenario_dict():
    return {
        "name": "sample",
        "scale": 1.0,
        "initialTime": 0.0,
        "timeStep": 0.005,
        "gravitationalConstant": 2.0,
        "bodies": [
            {"name": "A", "mass": 1.0, "position": [0, 0, 0], "velocity": [0, 0, 0]},
            {"name": "B", "mass": 0.5, "position": [3, 0, 0], "velocity": [0, 0.5, 0],
             "showTrail": False},
        ],
        "orbitalBodies": [
            {"name": "Orbiter", "mass": 1e-3, "e": 0.0, "a": 1.0, "i": 0.0,
             "Ω": 0.25, "ω": 0.0, "Tp": 0.0, "T": 2 * math.pi},
        ],
    }


@pytest.fixture
def log_messages():
    """Collect warning-level log messages emitted during a test."""
    messages = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
