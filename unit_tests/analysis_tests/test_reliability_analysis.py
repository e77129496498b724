import pytest

from warp_reliability.analysis.budget import E2eBudget, FixedFaultBudget
from warp_reliability.analysis.reliability_analysis import ReliabilityAnalysis
from warp_reliability.analysis.table import ReliabilityRow, ReliabilityTable
from warp_reliability.schedule.program import ProgramSchedule
from warp_reliability.workload.workload import WorkLoad


def _workload() -> WorkLoad:
    workload = WorkLoad("Pair")
    for flow_name, nodes in (("F0", ["A", "B"]), ("F1", ["B", "C"])):
        workload.add_flow(flow_name)
        for node in nodes:
            workload.add_node_to_flow(flow_name, node)
    return workload


def test_policy_is_selected_by_parameters():
    assert isinstance(ReliabilityAnalysis().policy, E2eBudget)
    assert isinstance(ReliabilityAnalysis(num_faults=0).policy, FixedFaultBudget)
    assert ReliabilityAnalysis(num_faults=2).uses_fixed_faults


def test_defaults():
    analysis = ReliabilityAnalysis()
    assert analysis.e2e == 0.99
    assert analysis.min_packet_reception_rate == 0.9


def test_num_tx_per_link_and_total_tx_cost():
    flow = _workload().get_flow("F0")
    assert ReliabilityAnalysis(e2e=0.99, min_packet_reception_rate=0.9).num_tx_per_link_and_total_tx_cost(flow) == [2, 2]
    assert ReliabilityAnalysis(num_faults=1).num_tx_per_link_and_total_tx_cost(flow) == [2, 2]


def test_verify_reliabilities():
    analysis = ReliabilityAnalysis(e2e=0.99, min_packet_reception_rate=0.9)
    view = _workload().view()
    rows = [
        ["push(F0: A -> B)", "push(F1: B -> C)"],
        ["push(F0: A -> B)", "push(F1: B -> C)"],
    ]
    table = analysis.get_reliabilities(view, ProgramSchedule.from_text_rows(["A", "B"], rows))
    assert table.final_reliability("F0", "B") == pytest.approx(0.99)
    assert analysis.verify_reliabilities(view, table)

    short = analysis.get_reliabilities(view, ProgramSchedule.from_text_rows(["A", "B"], rows[:1]))
    assert not analysis.verify_reliabilities(view, short)


def test_verify_empty_table_fails_when_flows_exist():
    analysis = ReliabilityAnalysis()
    view = _workload().view()
    table = analysis.get_reliabilities(view, ProgramSchedule.from_text_rows(["A"], []))
    assert not analysis.verify_reliabilities(view, table)


def test_verify_ignores_floating_point_noise_below_target():
    analysis = ReliabilityAnalysis(e2e=0.99, min_packet_reception_rate=0.9)
    view = _workload().view()
    table = ReliabilityTable(view.column_names())
    table.append(ReliabilityRow([1.0, 0.9899999999999999, 1.0, 0.9899999999999999]))
    assert analysis.verify_reliabilities(view, table)

    table.append(ReliabilityRow([1.0, 0.9899999, 1.0, 0.99]))
    assert not analysis.verify_reliabilities(view, table)
