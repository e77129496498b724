from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping

from log_setup import configure_run_logging
from warp_reliability.analysis.budget import TransmissionBudget
from warp_reliability.analysis.reliability_analysis import ReliabilityAnalysis
from warp_reliability.analysis.table import ReliabilityTable
from warp_reliability.config import (
    ReliabilityParameters,
    SchedulerKind,
    load_yaml,
    schedule_from_mapping,
    workload_from_mapping,
)
from warp_reliability.workload.view import WorkloadView
from warp_reliability.workload.workload import WorkLoad


@dataclass
class AnalysisRun:
    params: ReliabilityParameters
    workload: WorkLoad
    view: WorkloadView
    budgets: dict[str, TransmissionBudget]
    table: ReliabilityTable
    verified: bool
    log_path: str | None = None

    def describe(self) -> str:
        """Report header: the graph name and the parameters the analysis ran with."""
        lines = [
            f"Reliability Analysis for graph {self.view.name} created with the following parameters:",
            f"Scheduler Name:\t{self.params.scheduler.display_name}",
        ]
        if self.params.num_faults > 0:
            lines.append(f"numFaults:\t{self.params.num_faults}")
        lines.append(f"M:\t{self.params.min_packet_reception_rate}")
        lines.append(f"E2E:\t{self.params.e2e}")
        lines.append(f"nChannels:\t{self.params.num_channels}")
        return "\n".join(lines) + "\n"

    def to_report(self) -> str:
        return self.describe() + self.table.to_tsv()


def _order_flows(workload: WorkLoad, scheduler: SchedulerKind) -> None:
    if scheduler == SchedulerKind.DEADLINE_MONOTONIC:
        workload.set_flows_in_dm_order()
    elif scheduler == SchedulerKind.RATE_MONOTONIC:
        workload.set_flows_in_rm_order()
    elif scheduler == SchedulerKind.REAL_TIME_HART:
        workload.set_flows_in_real_time_hart_order()
    else:
        workload.set_flows_in_priority_order()


def _analysis_for(params: ReliabilityParameters) -> ReliabilityAnalysis:
    return ReliabilityAnalysis(
        e2e=params.e2e,
        min_packet_reception_rate=params.min_packet_reception_rate,
        num_faults=params.num_faults if params.num_faults > 0 else None,
    )


def run_analysis(cfg: Mapping[str, Any]) -> AnalysisRun:
    """Build the workload and schedule described by `cfg` and compute its reliability table."""
    params = ReliabilityParameters.from_mapping(cfg.get("parameters"))
    workload = workload_from_mapping(cfg.get("workload", {}), params)
    budgets = workload.finalize_all_flows()
    _order_flows(workload, params.scheduler)
    view = workload.view()
    schedule = schedule_from_mapping(cfg.get("schedule", {}))

    logging.info(
        f"Analyzing graph {view.name or '<unnamed>'}: flows={len(view.flows)} slots={schedule.num_rows} "
        f"scheduler={params.scheduler.value} M={params.min_packet_reception_rate} E2E={params.e2e}"
        + (f" numFaults={params.num_faults}" if params.num_faults > 0 else "")
    )
    start = time.time()
    analysis = _analysis_for(params)
    table = analysis.get_reliabilities(view, schedule)
    verified = analysis.verify_reliabilities(view, table)
    logging.info(f"Reliability analysis run time: {time.time() - start:.3f} seconds, verified={verified}")

    return AnalysisRun(
        params=params,
        workload=workload,
        view=view,
        budgets=budgets,
        table=table,
        verified=verified,
    )


def run_from_yaml(path: str, *, log_dir: str | None = None, file_debug: bool = True) -> AnalysisRun:
    """Load a YAML config and run the analysis; with `log_dir`, also write a per-run logfile."""
    cfg = load_yaml(path)
    log_path = None
    if log_dir is not None:
        params = ReliabilityParameters.from_mapping(cfg.get("parameters"))
        workload_cfg = cfg.get("workload") or {}
        log_path = configure_run_logging(
            str(workload_cfg.get("name", "")) if isinstance(workload_cfg, dict) else "",
            params.scheduler.value,
            log_dir=log_dir,
            file_level=logging.DEBUG if file_debug else logging.INFO,
        )
    run = run_analysis(cfg)
    run.log_path = log_path
    return run
