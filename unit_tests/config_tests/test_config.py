import pytest

from warp_reliability.config import (
    ReliabilityParameters,
    SchedulerKind,
    load_yaml,
    schedule_from_mapping,
    workload_from_mapping,
)
from warp_reliability.schedule.instruction import Push

EXAMPLE_YAML = """
parameters:
  min_packet_reception_rate: 0.9
  e2e: 0.99
  scheduler: rtHART
workload:
  name: Example
  flows:
    - {name: F0, nodes: [A, B, C], priority: 1, period: 20, deadline: 15, phase: 2}
    - {name: F1, nodes: [C, B, A]}
schedule:
  columns: [A, B, C]
  rows:
    - ["push(F0: A -> B, #1)", "", ""]
"""


def test_parameters_defaults():
    params = ReliabilityParameters.from_mapping(None)
    assert params.min_packet_reception_rate == 0.9
    assert params.e2e == 0.99
    assert params.num_faults == 0
    assert params.scheduler == SchedulerKind.PRIORITY
    assert params.num_channels == 16


@pytest.mark.parametrize(
    "mapping",
    [
        {"min_packet_reception_rate": 0.0},
        {"min_packet_reception_rate": 1.2},
        {"e2e": 0},
        {"num_faults": -1},
        {"num_channels": 0},
        {"scheduler": "edf"},
        {"scheduler": 3},
    ],
)
def test_parameters_reject_invalid_values(mapping):
    with pytest.raises(ValueError):
        ReliabilityParameters.from_mapping(mapping)


def test_load_yaml_and_build(tmp_path):
    path = tmp_path / "example.yaml"
    path.write_text(EXAMPLE_YAML, encoding="utf-8")
    cfg = load_yaml(str(path))

    params = ReliabilityParameters.from_mapping(cfg["parameters"])
    assert params.scheduler == SchedulerKind.REAL_TIME_HART

    workload = workload_from_mapping(cfg["workload"], params)
    assert workload.name == "Example"
    assert workload.get_nodes_in_flow("F1") == ["C", "B", "A"]
    assert workload.get_flow_priority("F0") == 1
    assert workload.get_flow_deadline("F0") == 15
    assert workload.get_flow_phase("F0") == 2
    assert workload.get_flow_period("F1") == 100

    schedule = schedule_from_mapping(cfg["schedule"])
    assert schedule.cell(0, 0) == (Push("F0", "A", "B", 1),)


def test_empty_yaml_is_empty_mapping(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_yaml(str(path)) == {}


def test_workload_flow_without_name_is_rejected():
    with pytest.raises(ValueError, match="workload.flows\\[0\\].name"):
        workload_from_mapping({"flows": [{"nodes": ["A"]}]}, ReliabilityParameters())


def test_schedule_rows_must_be_lists():
    with pytest.raises(ValueError):
        schedule_from_mapping({"columns": ["A"], "rows": ["push(F0: A -> B)"]})


@pytest.mark.parametrize(
    "kind,name",
    [
        (SchedulerKind.PRIORITY, "Priority"),
        (SchedulerKind.DEADLINE_MONOTONIC, "DM"),
        (SchedulerKind.REAL_TIME_HART, "RTHART"),
    ],
)
def test_scheduler_display_name(kind, name):
    assert kind.display_name == name


def test_load_yaml_rejects_non_mapping_document(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must be a mapping"):
        load_yaml(str(path))
