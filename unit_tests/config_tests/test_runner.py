import logging
import os

import pytest
import yaml

from warp_reliability.runner import run_analysis, run_from_yaml

EXAMPLE_CONFIG = {
    "parameters": {"min_packet_reception_rate": 0.9, "e2e": 0.99, "scheduler": "priority"},
    "workload": {
        "name": "Example",
        "flows": [
            {"name": "F0", "nodes": ["A", "B", "C"]},
            {"name": "F1", "nodes": ["C", "B", "A"]},
        ],
    },
    "schedule": {
        "columns": ["A", "B", "C"],
        "rows": [
            ["push(F0: A -> B, #1)", "", ""],
            ["push(F0: A -> B, #1)", "push(F0: B -> C, #2)", ""],
            ["push(F0: A -> B, #1)", "push(F0: B -> C, #2)", ""],
            ["", "push(F0: B -> C, #2)", ""],
            ["", "", "push(F1: C -> B, #1)"],
            ["", "push(F1: B -> A, #2)", "push(F1: C -> B, #1)"],
            ["", "push(F1: B -> A, #2)", "push(F1: C -> B, #1)"],
            ["", "push(F1: B -> A, #2)", ""],
        ],
    },
}


def test_run_analysis_example():
    run = run_analysis(EXAMPLE_CONFIG)
    assert run.verified
    assert run.budgets["F0"].as_list() == [3, 3, 4]
    assert run.view.flow_names == ["F0", "F1"]
    assert run.table.num_rows == 8
    assert run.table.final_reliability("F1", "A") == pytest.approx(0.9963)
    assert run.table.to_tsv().splitlines()[-1] == "1.0\t0.999\t0.9963\t1.0\t0.999\t0.9963"


def test_run_analysis_fixed_fault_model():
    cfg = dict(EXAMPLE_CONFIG)
    cfg["parameters"] = {"min_packet_reception_rate": 0.9, "e2e": 0.99, "num_faults": 1}
    run = run_analysis(cfg)
    assert run.budgets["F1"].as_list() == [2, 2, 4]
    assert run.workload.get_flow("F1").link_tx_and_total_cost == [2, 2, 4]


def test_run_analysis_flags_unmet_target():
    cfg = dict(EXAMPLE_CONFIG)
    cfg["schedule"] = {"columns": ["A", "B", "C"], "rows": EXAMPLE_CONFIG["schedule"]["rows"][:4]}
    assert not run_analysis(cfg).verified


def test_run_from_yaml_writes_run_log(tmp_path):
    config_path = tmp_path / "example.yaml"
    config_path.write_text(yaml.safe_dump(EXAMPLE_CONFIG), encoding="utf-8")
    log_dir = tmp_path / "logs"

    root = logging.getLogger()
    handlers_before = list(root.handlers)
    level_before = root.level
    try:
        run = run_from_yaml(str(config_path), log_dir=str(log_dir))
        assert run.verified
        assert run.log_path is not None
        assert os.path.dirname(run.log_path) == str(log_dir)
        assert os.path.basename(run.log_path).startswith("example.priority_")
        for h in root.handlers:
            h.flush()
        with open(run.log_path, encoding="utf-8") as f:
            assert "Analyzing graph Example" in f.read()
    finally:
        for h in list(root.handlers):
            if h not in handlers_before:
                root.removeHandler(h)
                h.close()
        root.setLevel(level_before)


def test_run_description_lists_parameters():
    run = run_analysis(EXAMPLE_CONFIG)
    assert run.describe() == (
        "Reliability Analysis for graph Example created with the following parameters:\n"
        "Scheduler Name:\tPriority\n"
        "M:\t0.9\n"
        "E2E:\t0.99\n"
        "nChannels:\t16\n"
    )
    report = run.to_report().splitlines()
    assert report[5] == "F0:A\tF0:B\tF0:C\tF1:C\tF1:B\tF1:A"
    assert report[7] == "1.0\t0.99\t0.81\t1.0\t0.0\t0.0"


def test_run_description_includes_fault_count_and_channels():
    cfg = dict(EXAMPLE_CONFIG)
    cfg["parameters"] = {"num_faults": 2, "scheduler": "rm", "num_channels": 4}
    lines = run_analysis(cfg).describe().splitlines()
    assert lines[1:] == ["Scheduler Name:\tRM", "numFaults:\t2", "M:\t0.9", "E2E:\t0.99", "nChannels:\t4"]
