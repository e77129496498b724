"""Nodes and flows of a WARP workload.

The graph builder creates flows with `add_flow`, appends their nodes with
`add_node_to_flow` and calls `finalize_current_flow` once per flow, which sizes the
flow's transmission budget. Scheduling attributes are set through the `set_flow_*`
methods and the flows are ordered by one of the `set_flows_in_*_order` methods.
Analysis code works on the frozen snapshot returned by `view()`.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from warp_reliability.analysis.budget import (
    DEFAULT_E2E,
    DEFAULT_MIN_PACKET_RECEPTION_RATE,
    E2eBudget,
    FixedFaultBudget,
    TransmissionBudget,
)
from warp_reliability.workload.flow import Flow
from warp_reliability.workload.node import Node
from warp_reliability.workload.view import WorkloadView

_logger = logging.getLogger(__name__)

DEFAULT_TX_NUM = 0


@dataclass(frozen=True)
class WorkloadWarning:
    flow_name: str
    action: str
    message: str


def _is_integer(name: str) -> bool:
    try:
        int(name)
    except (TypeError, ValueError):
        return False
    return True


class WorkLoad:
    def __init__(
        self,
        name: str = "",
        *,
        min_packet_reception_rate: float = DEFAULT_MIN_PACKET_RECEPTION_RATE,
        e2e: float = DEFAULT_E2E,
        num_faults: int = 0,
    ):
        """
        Parameters:
        name: name of the WARP graph defining the workload
        min_packet_reception_rate: minimum link quality M
        e2e: end-to-end reliability target of every flow
        num_faults: faults tolerated per link; > 0 selects the fixed-fault budget model
        """
        self.name = name
        self.min_packet_reception_rate = float(min_packet_reception_rate)
        self.e2e = float(e2e)
        self.num_faults = int(num_faults)
        self.flows: dict[str, Flow] = {}
        self.nodes: dict[str, Node] = {}
        self.flow_names_in_original_order: list[str] = []
        self.flow_names_in_priority_order: list[str] = []
        self.int_for_node_names = True
        self.int_for_flow_names = True
        self.warnings: list[WorkloadWarning] = []
        self._flows_added = 0

    @property
    def num_fault_model(self) -> bool:
        return self.num_faults > 0

    # ------------------------------------------------------------------ building

    def add_flow(self, flow_name: str) -> Flow:
        """Add a flow whose default priority and index are the number of flows already added."""
        if flow_name in self.flows:
            self._warn(flow_name, "add", f"A flow with name {flow_name} already exists. It has been replaced with a new flow")
            self.flow_names_in_original_order.remove(flow_name)
            self.flow_names_in_priority_order.remove(flow_name)
            del self.flows[flow_name]
        index = self._flows_added
        self._flows_added += 1
        flow = Flow(name=flow_name, priority=index, index=index)
        self.flows[flow_name] = flow
        if not _is_integer(flow_name):
            self.int_for_flow_names = False
        self.flow_names_in_original_order.append(flow_name)
        self.flow_names_in_priority_order.append(flow_name)
        return flow

    def add_node_to_flow(self, flow_name: str, node_name: str) -> None:
        if not _is_integer(node_name):
            self.int_for_node_names = False
        if node_name not in self.nodes:
            self.nodes[node_name] = Node(node_name, priority=0, index=len(self.nodes))
        flow = self.get_flow(flow_name, action="add a node to it")
        # A flow member's priority is its position in the flow.
        flow.add_node(Node(node_name, priority=len(flow.nodes), index=0))
        flow.link_tx_and_total_cost.append(DEFAULT_TX_NUM)

    def finalize_current_flow(self, flow_name: str) -> TransmissionBudget | None:
        flow = self.flows.get(flow_name)
        if flow is None:
            self._warn(flow_name, "finalize", f"Flow {flow_name} doesn't exist but trying to get its numTxPerLink property")
            return None
        if self.num_fault_model:
            budget = FixedFaultBudget(num_faults=self.num_faults).compute(flow)
            flow.num_tx_per_link = self.num_faults + 1
        else:
            budget = E2eBudget(e2e=self.e2e, min_packet_reception_rate=self.min_packet_reception_rate).compute(flow)
            flow.num_tx_per_link = self._uniform_tx_per_link(flow, budget)
        flow.link_tx_and_total_cost = budget.as_list()
        _logger.debug(
            f"Finalized flow {flow_name}: num_tx_per_link={flow.num_tx_per_link} "
            f"link_tx_and_total_cost={flow.link_tx_and_total_cost}"
        )
        return budget

    def finalize_all_flows(self) -> dict[str, TransmissionBudget]:
        budgets: dict[str, TransmissionBudget] = {}
        for flow_name in self.flow_names_in_original_order:
            budget = self.finalize_current_flow(flow_name)
            if budget is not None:
                budgets[flow_name] = budget
        return budgets

    def _uniform_tx_per_link(self, flow: Flow, budget: TransmissionBudget) -> int:
        """log(1 - e2e^(1/hops)) / log(1 - M) transmissions per hop, rounded up.

        `hops` is the flow's node count, which sizes the estimate one hop larger than
        the chain; an empty flow is sized as two hops.
        """
        m = self.min_packet_reception_rate
        if m >= 1.0:
            return 1
        if self.e2e >= 1.0:
            return max(budget.max_link_tx, 1)
        n_hops = len(flow.nodes)
        if n_hops < 1:
            n_hops = 2
        n_tx = math.log(1.0 - self.e2e ** (1.0 / n_hops)) / math.log(1.0 - m)
        return max(math.ceil(n_tx), 1)

    # ------------------------------------------------------------------ flow attributes

    def get_flow(self, flow_name: str, *, action: str = "retrieve it") -> Flow:
        """Return the named flow, or an empty placeholder flow (with a warning) if it was never added."""
        flow = self.flows.get(flow_name)
        if flow is None:
            self._warn(flow_name, action, f"Flow {flow_name} doesn't exist but trying to {action}")
            return Flow()
        return flow

    def set_flow_priority(self, flow_name: str, priority: int) -> None:
        self.get_flow(flow_name, action="set its priority").priority = int(priority)

    def set_flow_period(self, flow_name: str, period: int) -> None:
        self.get_flow(flow_name, action="set its period").period = int(period)

    def set_flow_deadline(self, flow_name: str, deadline: int) -> None:
        self.get_flow(flow_name, action="set its deadline").deadline = int(deadline)

    def set_flow_phase(self, flow_name: str, phase: int) -> None:
        self.get_flow(flow_name, action="set its phase").phase = int(phase)

    def get_flow_priority(self, flow_name: str) -> int:
        return self.get_flow(flow_name).priority

    def get_flow_period(self, flow_name: str) -> int:
        return self.get_flow(flow_name).period

    def get_flow_deadline(self, flow_name: str) -> int:
        return self.get_flow(flow_name).deadline

    def get_flow_phase(self, flow_name: str) -> int:
        return self.get_flow(flow_name).phase

    def get_flow_index(self, flow_name: str) -> int:
        return self.get_flow(flow_name).index

    def get_flow_tx_attempts_per_link(self, flow_name: str) -> int:
        return self.get_flow(flow_name).num_tx_per_link

    def get_node_priority_in_flow(self, flow_name: str, node_name: str) -> int:
        position = self.get_flow(flow_name).position_of(node_name)
        return 0 if position is None else position

    def next_release_time(self, flow_name: str, current_time: int) -> int:
        return self.get_flow(flow_name).next_release_time(current_time)

    def next_absolute_deadline(self, flow_name: str, current_time: int) -> int:
        return self.get_flow(flow_name).next_absolute_deadline(current_time)

    def set_node_channel(self, node_name: str, channel: int) -> None:
        self.nodes[node_name].channel = channel

    def get_node_channel(self, node_name: str) -> int | None:
        return self.nodes[node_name].channel

    # ------------------------------------------------------------------ ordering

    def _order_by(self, *keys: str) -> None:
        # Python's sort is stable, so sorting by the secondary key first and the primary key last
        # yields a lexicographic order.
        ordered = list(self.flows.values())
        for key in reversed(keys):
            ordered.sort(key=lambda flow: getattr(flow, key))
        self.flow_names_in_priority_order = [flow.name for flow in ordered]

    def set_flows_in_priority_order(self) -> None:
        """Smallest priority value first, ties broken by the order flows were added."""
        self._order_by("priority", "index")

    def set_flows_in_dm_order(self) -> None:
        """Deadline monotonic: smallest relative deadline first, ties broken by priority."""
        self._order_by("deadline", "priority")

    def set_flows_in_rm_order(self) -> None:
        """Rate monotonic: smallest period first, ties broken by priority."""
        self._order_by("period", "priority")

    def set_flows_in_real_time_hart_order(self) -> None:
        self.set_flows_in_priority_order()

    # ------------------------------------------------------------------ queries

    def get_flow_names(self) -> list[str]:
        return list(self.flow_names_in_original_order)

    def get_nodes_in_flow(self, flow_name: str) -> list[str]:
        flow = self.flows.get(flow_name)
        if flow is None:
            self._warn(flow_name, "list its nodes", f"No Flow with name {flow_name}")
            return []
        return flow.node_names

    def get_node_index(self, node_name: str) -> int:
        node = self.nodes.get(node_name)
        return 0 if node is None else node.index

    def get_node_names_ordered_alphabetically(self) -> list[str]:
        names = list(self.nodes)
        if names and all(_is_integer(name) for name in names):
            return sorted(names, key=int)
        return sorted(names)

    def get_hyper_period(self) -> int:
        """Least common multiple of all flow periods."""
        hyper_period = 1
        for flow_name in self.flow_names_in_original_order:
            hyper_period = math.lcm(hyper_period, self.get_flow_period(flow_name))
        return hyper_period

    def get_total_tx_attempts_in_flow(self, flow_name: str) -> int:
        cost = self.get_flow(flow_name).link_tx_and_total_cost
        return cost[-1] if cost else 0

    def get_num_tx_attempts_per_link(self, flow_name: str) -> list[int]:
        return list(self.get_flow(flow_name).link_tx_and_total_cost[:-1])

    def max_flow_length(self) -> int:
        return max((len(flow.nodes) for flow in self.flows.values()), default=0)

    def get_max_phase(self) -> int:
        return max((flow.phase for flow in self.flows.values()), default=0)

    def get_min_period(self) -> int:
        return min((flow.period for flow in self.flows.values()), default=0)

    def view(self) -> WorkloadView:
        return WorkloadView.from_flows(self.name, [self.flows[name] for name in self.flow_names_in_priority_order])

    def _warn(self, flow_name: str, action: str, message: str) -> None:
        _logger.warning(f"Warning! Bad situation: {message}")
        self.warnings.append(WorkloadWarning(flow_name=flow_name, action=action, message=message))
