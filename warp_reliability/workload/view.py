"""Read-only snapshot of a finalized workload, handed to the analysis components."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Sequence

from warp_reliability.workload.flow import Flow


@dataclass(frozen=True)
class FlowRecord:
    handle: int
    name: str
    node_names: tuple[str, ...]
    priority: int
    period: int
    deadline: int
    phase: int
    num_tx_per_link: int
    link_tx_and_total_cost: tuple[int, ...]
    node_positions: Mapping[str, int] = field(compare=False, repr=False)

    @staticmethod
    def from_flow(handle: int, flow: Flow) -> "FlowRecord":
        names = tuple(flow.node_names)
        positions: dict[str, int] = {}
        for position, name in enumerate(names):
            # A node repeated in a chain resolves to its first position.
            positions.setdefault(name, position)
        return FlowRecord(
            handle=handle,
            name=flow.name,
            node_names=names,
            priority=flow.priority,
            period=flow.period,
            deadline=flow.deadline,
            phase=flow.phase,
            num_tx_per_link=flow.num_tx_per_link,
            link_tx_and_total_cost=tuple(flow.link_tx_and_total_cost),
            node_positions=MappingProxyType(positions),
        )

    @property
    def source(self) -> str | None:
        return self.node_names[0] if self.node_names else None

    @property
    def sink(self) -> str | None:
        return self.node_names[-1] if self.node_names else None

    def position_of(self, node_name: str) -> int | None:
        return self.node_positions.get(node_name)


@dataclass(frozen=True)
class WorkloadView:
    """Flows in priority order, addressed by integer handle (their index in `flows`)."""

    name: str
    flows: tuple[FlowRecord, ...]
    handles: Mapping[str, int] = field(compare=False, repr=False)

    @staticmethod
    def from_flows(name: str, flows_in_priority_order: Sequence[Flow]) -> "WorkloadView":
        records = tuple(FlowRecord.from_flow(handle, flow) for handle, flow in enumerate(flows_in_priority_order))
        handles: dict[str, int] = {}
        for record in records:
            if record.name in handles:
                raise ValueError(f"Duplicate flow name in workload view: {record.name}")
            handles[record.name] = record.handle
        return WorkloadView(name=name, flows=records, handles=MappingProxyType(handles))

    def flow(self, name: str) -> FlowRecord | None:
        handle = self.handles.get(name)
        return None if handle is None else self.flows[handle]

    @property
    def flow_names(self) -> list[str]:
        return [record.name for record in self.flows]

    def column_names(self) -> list[str]:
        """`<flow>:<node>` for every flow in priority order and every node in chain order."""
        return [f"{record.name}:{node}" for record in self.flows for node in record.node_names]
