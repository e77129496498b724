"""Transmission budgets: how many push/pull attempts each link of a flow is given.

Two policies are available:

* `FixedFaultBudget` tolerates `num_faults` failed attempts on every link, so each
  link gets `num_faults + 1` attempts.
* `E2eBudget` replays the message-success recurrence

      NewSinkNodeState = (1 - M) * PrevSnkNodeState + M * PrevSrcNodeState

  one time slot at a time, transmitting on a link only while its sink is below the
  per-link threshold `max(e2e, e2e ** (1 / nHops))`, until the flow's sink reaches e2e.

Both return a `TransmissionBudget`; `as_list()` gives the per-link counts followed by
the total cost, the layout stored in `Flow.link_tx_and_total_cost`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from warp_reliability.errors import ConfigurationError, NonConvergenceError

_logger = logging.getLogger(__name__)

DEFAULT_E2E = 0.99
DEFAULT_MIN_PACKET_RECEPTION_RATE = 0.9
DEFAULT_MAX_TIME_SLOTS = 100_000


class HasNodeNames(Protocol):
    name: str

    @property
    def node_names(self) -> Sequence[str]: ...


@dataclass(frozen=True)
class TransmissionBudget:
    link_tx: tuple[int, ...]
    total_cost: int
    # Probability that the flow's sink holds the message once the budget is spent.
    achieved_reliability: float | None = None

    def as_list(self) -> list[int]:
        return [*self.link_tx, self.total_cost]

    @property
    def max_link_tx(self) -> int:
        return max(self.link_tx, default=0)


class BudgetPolicy(Protocol):
    def compute(self, flow: HasNodeNames) -> TransmissionBudget: ...


@dataclass(frozen=True)
class FixedFaultBudget:
    num_faults: int = 0

    def __post_init__(self) -> None:
        if self.num_faults < 0:
            raise ConfigurationError(f"num_faults must be >= 0, got {self.num_faults}")

    def compute(self, flow: HasNodeNames) -> TransmissionBudget:
        n_edges = max(len(flow.node_names) - 1, 0)
        max_faults_in_flow = n_edges * self.num_faults
        return TransmissionBudget(
            link_tx=tuple(self.num_faults + 1 for _ in range(n_edges)),
            total_cost=n_edges + max_faults_in_flow,
        )


@dataclass(frozen=True)
class E2eBudget:
    e2e: float = DEFAULT_E2E
    min_packet_reception_rate: float = DEFAULT_MIN_PACKET_RECEPTION_RATE
    max_time_slots: int = DEFAULT_MAX_TIME_SLOTS

    def __post_init__(self) -> None:
        if not 0.0 < self.e2e <= 1.0:
            raise ConfigurationError(f"e2e must be in (0, 1], got {self.e2e}")
        if self.min_packet_reception_rate <= 0.0:
            raise ConfigurationError(
                f"min_packet_reception_rate must be > 0, got {self.min_packet_reception_rate}; "
                "the e2e budget never converges without successful receptions"
            )
        if self.min_packet_reception_rate > 1.0:
            raise ConfigurationError(
                f"min_packet_reception_rate must be <= 1, got {self.min_packet_reception_rate}"
            )
        if self.max_time_slots < 1:
            raise ConfigurationError(f"max_time_slots must be >= 1, got {self.max_time_slots}")

    def min_link_reliability_needed(self, n_hops: int) -> float:
        # max() keeps the threshold from rounding above 1.0 when e2e == 1.0.
        return max(self.e2e, self.e2e ** (1.0 / n_hops))

    def compute(self, flow: HasNodeNames) -> TransmissionBudget:
        n_nodes = len(flow.node_names)
        if n_nodes == 0:
            _logger.warning(f"Flow {flow.name!r} has no nodes; assigning a zero transmission budget")
            return TransmissionBudget(link_tx=(), total_cost=0, achieved_reliability=0.0)
        n_hops = n_nodes - 1
        if n_hops < 1:
            raise ConfigurationError(
                f"Flow {flow.name!r} has a single node ({flow.node_names[0]}); "
                "an e2e budget needs at least one link"
            )

        m = self.min_packet_reception_rate
        threshold = self.min_link_reliability_needed(n_hops)
        n_pushes = [0] * n_hops
        current = [0.0] * n_nodes
        current[0] = 1.0

        time_slot = 0
        while current[n_hops] < self.e2e:
            if time_slot >= self.max_time_slots:
                raise NonConvergenceError(
                    f"Flow {flow.name!r} did not reach e2e={self.e2e} with M={m} "
                    f"within {self.max_time_slots} time slots (sink at {current[n_hops]})"
                )
            previous = list(current)
            for link in range(n_hops):
                prev_src = previous[link]
                prev_snk = previous[link + 1]
                if prev_snk < threshold and prev_src > 0.0:
                    current[link + 1] = (1.0 - m) * prev_snk + m * prev_src
                    n_pushes[link] += 1
            time_slot += 1

        _logger.debug(
            f"Flow {flow.name!r}: e2e={self.e2e} M={m} threshold={threshold:.6f} "
            f"link_tx={n_pushes} total={time_slot} sink={current[n_hops]:.6f}"
        )
        return TransmissionBudget(
            link_tx=tuple(n_pushes),
            total_cost=time_slot,
            achieved_reliability=current[n_hops],
        )
