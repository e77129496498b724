"""YAML configuration for a reliability analysis run.

Example:

    parameters:
      min_packet_reception_rate: 0.9
      e2e: 0.99
      num_faults: 0
      scheduler: priority
      num_channels: 16
    workload:
      name: Example
      flows:
        - {name: F0, nodes: [A, B, C], priority: 0, period: 20, deadline: 20}
        - {name: F1, nodes: [C, B, A]}
    schedule:
      columns: [A, B, C]
      rows:
        - ["push(F0: A -> B, #1)", "", ""]
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping

import yaml

from warp_reliability.analysis.budget import DEFAULT_E2E, DEFAULT_MIN_PACKET_RECEPTION_RATE
from warp_reliability.schedule.program import ProgramSchedule
from warp_reliability.workload.workload import WorkLoad

DEFAULT_NUM_CHANNELS = 16


class SchedulerKind(str, Enum):
    PRIORITY = "priority"
    DEADLINE_MONOTONIC = "dm"
    RATE_MONOTONIC = "rm"
    REAL_TIME_HART = "rthart"

    @property
    def display_name(self) -> str:
        """Name used in report headers (Priority, DM, RM, RTHART)."""
        return "Priority" if self is SchedulerKind.PRIORITY else self.value.upper()


def _section(value: Any, kind: type, path: str) -> Any:
    """Return `value` if it has the YAML shape expected at `path` (dict or list)."""
    if isinstance(value, kind):
        return value
    shape = "mapping" if kind is dict else "list"
    raise ValueError(f"'{path}' must be a {shape}, got {type(value).__name__}")


def load_yaml(path: str) -> Dict[str, Any]:
    """Read a run config; an empty document reads as an empty config."""
    with open(path, encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    return {} if cfg is None else _section(cfg, dict, path)


def _parse_scheduler(raw: Any, *, path: str) -> SchedulerKind:
    """Accepts: 'priority' | 'dm' | 'rm' | 'rtHART' (case-insensitive)."""
    if not isinstance(raw, str):
        raise ValueError(f"Expected string at '{path}', got {type(raw).__name__}")
    v = raw.strip().lower()
    for kind in SchedulerKind:
        if v == kind.value:
            return kind
    raise ValueError(f"Invalid scheduler at '{path}': {raw!r}. Valid: priority | dm | rm | rtHART")


@dataclass(frozen=True)
class ReliabilityParameters:
    """Reliability model parameters shared by the workload builder and the analysis."""

    min_packet_reception_rate: float = DEFAULT_MIN_PACKET_RECEPTION_RATE
    e2e: float = DEFAULT_E2E
    num_faults: int = 0
    scheduler: SchedulerKind = SchedulerKind.PRIORITY
    num_channels: int = DEFAULT_NUM_CHANNELS

    def __post_init__(self) -> None:
        if not 0.0 < self.min_packet_reception_rate <= 1.0:
            raise ValueError(
                f"parameters.min_packet_reception_rate must be in (0, 1], got {self.min_packet_reception_rate}"
            )
        if not 0.0 < self.e2e <= 1.0:
            raise ValueError(f"parameters.e2e must be in (0, 1], got {self.e2e}")
        if self.num_faults < 0:
            raise ValueError(f"parameters.num_faults must be >= 0, got {self.num_faults}")
        if self.num_channels < 1:
            raise ValueError(f"parameters.num_channels must be >= 1, got {self.num_channels}")

    @staticmethod
    def from_mapping(d: Mapping[str, Any] | None) -> "ReliabilityParameters":
        if d is None:
            return ReliabilityParameters()
        if not isinstance(d, Mapping):
            raise ValueError("Expected mapping for parameters")
        return ReliabilityParameters(
            min_packet_reception_rate=float(d.get("min_packet_reception_rate", DEFAULT_MIN_PACKET_RECEPTION_RATE)),
            e2e=float(d.get("e2e", DEFAULT_E2E)),
            num_faults=int(d.get("num_faults", 0)),
            scheduler=_parse_scheduler(d.get("scheduler", SchedulerKind.PRIORITY.value), path="parameters.scheduler"),
            num_channels=int(d.get("num_channels", DEFAULT_NUM_CHANNELS)),
        )


def workload_from_mapping(d: Mapping[str, Any], params: ReliabilityParameters) -> WorkLoad:
    """Build a workload from a `workload:` mapping; flows are not finalized here."""
    workload_cfg = _section(d, dict, "workload")
    flows_cfg = _section(workload_cfg.get("flows", []), list, "workload.flows")
    workload = WorkLoad(
        str(workload_cfg.get("name", "")),
        min_packet_reception_rate=params.min_packet_reception_rate,
        e2e=params.e2e,
        num_faults=params.num_faults,
    )
    for i, raw_flow in enumerate(flows_cfg):
        path = f"workload.flows[{i}]"
        flow_cfg = _section(raw_flow, dict, path)
        if "name" not in flow_cfg:
            raise ValueError(f"Missing required key '{path}.name'")
        flow_name = str(flow_cfg["name"])
        workload.add_flow(flow_name)
        for node_name in _section(flow_cfg.get("nodes", []), list, f"{path}.nodes"):
            workload.add_node_to_flow(flow_name, str(node_name))
        if "priority" in flow_cfg:
            workload.set_flow_priority(flow_name, int(flow_cfg["priority"]))
        if "period" in flow_cfg:
            workload.set_flow_period(flow_name, int(flow_cfg["period"]))
        if "deadline" in flow_cfg:
            workload.set_flow_deadline(flow_name, int(flow_cfg["deadline"]))
        if "phase" in flow_cfg:
            workload.set_flow_phase(flow_name, int(flow_cfg["phase"]))
    return workload


def schedule_from_mapping(d: Mapping[str, Any]) -> ProgramSchedule:
    schedule_cfg = _section(d, dict, "schedule")
    columns = [str(c) for c in _section(schedule_cfg.get("columns", []), list, "schedule.columns")]
    rows = []
    for i, raw_row in enumerate(_section(schedule_cfg.get("rows", []), list, "schedule.rows")):
        rows.append(_section(raw_row, list, f"schedule.rows[{i}]"))
    return ProgramSchedule.from_text_rows(columns, rows)
