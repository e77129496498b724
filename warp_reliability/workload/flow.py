from __future__ import annotations

from dataclasses import dataclass, field

from warp_reliability.workload.node import Node

DEFAULT_PERIOD = 100
DEFAULT_DEADLINE = 100
DEFAULT_PHASE = 0


@dataclass
class Flow:
    """A named chain of nodes (source first, sink last) and its scheduling attributes.

    Built incrementally by `WorkLoad.add_node_to_flow` and finalized once by
    `WorkLoad.finalize_current_flow`, which fills `num_tx_per_link` and
    `link_tx_and_total_cost`.
    """

    name: str = ""
    priority: int = 0
    index: int = 0
    period: int = DEFAULT_PERIOD
    deadline: int = DEFAULT_DEADLINE
    phase: int = DEFAULT_PHASE
    nodes: list[Node] = field(default_factory=list)
    num_tx_per_link: int = 0
    # One entry per link plus the trailing total cost.
    link_tx_and_total_cost: list[int] = field(default_factory=list)

    @property
    def node_names(self) -> list[str]:
        return [node.name for node in self.nodes]

    def add_node(self, node: Node) -> None:
        self.nodes.append(node)

    def position_of(self, node_name: str) -> int | None:
        for position, node in enumerate(self.nodes):
            if node.name == node_name:
                return position
        return None

    def next_release_time(self, current_time: int) -> int:
        """Earliest release (phase + k * period) at or after `current_time`."""
        if current_time <= self.phase or self.period <= 0:
            return self.phase
        periods_elapsed = -(-(current_time - self.phase) // self.period)
        return self.phase + periods_elapsed * self.period

    def next_absolute_deadline(self, current_time: int) -> int:
        return self.next_release_time(current_time) + self.deadline
