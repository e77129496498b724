"""Reliability analysis of the messages carried by the flows of a WARP workload.

Let M be the minimum packet reception rate of a link. A flow's source holds its
message with probability 1.0 when the message is released; every other node starts at
0.0. Each push or pull on `src -> snk` moves the sink's probability to

    (1 - M) * PrevSnkNodeState + M * PrevSrcNodeState

so the last value of a node is the reliability of the message reaching it, and the
last value of the flow's sink is the flow's end-to-end reliability.
"""
from __future__ import annotations

import logging

from warp_reliability.analysis.budget import (
    DEFAULT_E2E,
    DEFAULT_MAX_TIME_SLOTS,
    DEFAULT_MIN_PACKET_RECEPTION_RATE,
    BudgetPolicy,
    E2eBudget,
    FixedFaultBudget,
    HasNodeNames,
    TransmissionBudget,
)
from warp_reliability.analysis.simulator import ReliabilitySimulator
from warp_reliability.analysis.table import TSV_DECIMALS, ReliabilityTable
from warp_reliability.schedule.program import ProgramSchedule
from warp_reliability.workload.view import WorkloadView

_logger = logging.getLogger(__name__)


class ReliabilityAnalysis:
    """Budgets, reliability table and verification for one set of reliability parameters.

    Passing `num_faults` selects the fixed-fault budget policy; otherwise budgets are
    sized from `e2e` and `min_packet_reception_rate`. The reliability table is always
    computed with `min_packet_reception_rate`.
    """

    def __init__(
        self,
        e2e: float | None = None,
        min_packet_reception_rate: float | None = None,
        num_faults: int | None = None,
        *,
        max_time_slots: int = DEFAULT_MAX_TIME_SLOTS,
    ):
        self.e2e = DEFAULT_E2E if e2e is None else float(e2e)
        self.min_packet_reception_rate = (
            DEFAULT_MIN_PACKET_RECEPTION_RATE if min_packet_reception_rate is None else float(min_packet_reception_rate)
        )
        self.num_faults = num_faults
        self.policy: BudgetPolicy
        if num_faults is not None:
            self.policy = FixedFaultBudget(num_faults=int(num_faults))
        else:
            self.policy = E2eBudget(
                e2e=self.e2e,
                min_packet_reception_rate=self.min_packet_reception_rate,
                max_time_slots=max_time_slots,
            )

    @property
    def uses_fixed_faults(self) -> bool:
        return self.num_faults is not None

    def budget(self, flow: HasNodeNames) -> TransmissionBudget:
        return self.policy.compute(flow)

    def num_tx_per_link_and_total_tx_cost(self, flow: HasNodeNames) -> list[int]:
        return self.budget(flow).as_list()

    def get_reliabilities(self, view: WorkloadView, schedule: ProgramSchedule) -> ReliabilityTable:
        simulator = ReliabilitySimulator(view, self.min_packet_reception_rate)
        return simulator.get_reliabilities(schedule)

    def verify_reliabilities(self, view: WorkloadView, table: ReliabilityTable) -> bool:
        """True when every flow's sink ends the schedule at or above the e2e target.

        The sink value is compared at the precision the table is printed with.
        """
        ok = True
        for record in view.flows:
            if record.sink is None:
                continue
            achieved = table.final_reliability(record.name, record.sink)
            if round(achieved, TSV_DECIMALS) < self.e2e:
                _logger.info(f"Flow {record.name} misses e2e target: {achieved:.6f} < {self.e2e}")
                ok = False
        return ok
