from __future__ import annotations

import logging
from dataclasses import dataclass

from warp_reliability.analysis.table import ReliabilityRow, ReliabilityTable
from warp_reliability.errors import ConfigurationError
from warp_reliability.schedule.instruction import Instruction, Push, Transfer, is_transfer
from warp_reliability.schedule.program import ProgramSchedule
from warp_reliability.workload.view import FlowRecord, WorkloadView

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedInstruction:
    slot: int
    column: int
    instruction: Instruction
    reason: str


@dataclass(frozen=True)
class _LinkUpdate:
    record: FlowRecord
    offset: int
    src: int
    snk: int
    releases: bool


class ReliabilitySimulator:
    """Replays a program schedule slot by slot and builds the reliability table.

    Every push/pull on `src -> snk` updates the sink from the previous slot's values:

        NewSinkNodeState = (1 - M) * PrevSnkNodeState + M * PrevSrcNodeState

    A push from a flow's source releases a new message instance: the source is forced
    to 1.0 and the rest of that flow is reset to 0.0. Releases are applied before any
    link of the slot is updated, so the result does not depend on column order.
    """

    def __init__(self, view: WorkloadView, min_packet_reception_rate: float):
        if not 0.0 <= min_packet_reception_rate <= 1.0:
            raise ConfigurationError(
                f"min_packet_reception_rate must be in [0, 1], got {min_packet_reception_rate}"
            )
        self.view = view
        self.m = float(min_packet_reception_rate)
        self.skipped: list[SkippedInstruction] = []

        self._offsets: dict[int, int] = {}
        offset = 0
        for record in view.flows:
            self._offsets[record.handle] = offset
            offset += len(record.node_names)
        self._num_columns = offset

    def column_names(self) -> list[str]:
        return self.view.column_names()

    def default_row(self) -> ReliabilityRow:
        """State right after release: every flow's source at 1.0, all other nodes at 0.0."""
        row = ReliabilityRow.zeros(self._num_columns)
        for record in self.view.flows:
            if record.node_names:
                row[self._offsets[record.handle]] = 1.0
        return row

    def get_reliabilities(self, schedule: ProgramSchedule) -> ReliabilityTable:
        table = ReliabilityTable(self.column_names())
        self.skipped = []

        previous = self.default_row()
        for slot in range(schedule.num_rows):
            updates = self._link_updates(slot, schedule)
            # Working copy: a release overrides the previous view without touching stored rows.
            prev_view = previous.copy()
            current = previous.copy()
            for update in updates:
                if update.releases:
                    self._reinject(update, prev_view, current)
            for update in updates:
                src_col = update.offset + update.src
                snk_col = update.offset + update.snk
                current[snk_col] = (1.0 - self.m) * prev_view[snk_col] + self.m * prev_view[src_col]
            table.append(current)
            previous = current

        if self.skipped:
            _logger.debug(f"Skipped {len(self.skipped)} schedule instructions that name unknown flows or nodes")
        _logger.debug(f"Reliability table built: {table.num_rows} rows x {table.num_columns} columns")
        return table

    def _link_updates(self, slot: int, schedule: ProgramSchedule) -> list[_LinkUpdate]:
        """Resolve the slot's transfers in column order, then cell order."""
        updates = []
        for column in range(schedule.num_columns):
            for instruction in schedule.cell(slot, column):
                if not is_transfer(instruction):
                    continue
                update = self._resolve(slot, column, instruction)
                if update is not None:
                    updates.append(update)
        return updates

    def _resolve(self, slot: int, column: int, instruction: Transfer) -> _LinkUpdate | None:
        record = self.view.flow(instruction.flow)
        if record is None:
            self._skip(slot, column, instruction, f"unknown flow {instruction.flow!r}")
            return None
        src = record.position_of(instruction.src)
        snk = record.position_of(instruction.snk)
        if src is None or snk is None:
            missing = instruction.src if src is None else instruction.snk
            self._skip(slot, column, instruction, f"node {missing!r} is not in flow {record.name!r}")
            return None
        return _LinkUpdate(
            record=record,
            offset=self._offsets[record.handle],
            src=src,
            snk=snk,
            releases=isinstance(instruction, Push) and src == 0,
        )

    @staticmethod
    def _reinject(update: _LinkUpdate, prev_view: ReliabilityRow, current: ReliabilityRow) -> None:
        # Non-source nodes keep their previous values in prev_view; this slot's updates read them.
        prev_view[update.offset] = 1.0
        current[update.offset] = 1.0
        for position in range(1, len(update.record.node_names)):
            current[update.offset + position] = 0.0

    def _skip(self, slot: int, column: int, instruction: Instruction, reason: str) -> None:
        self.skipped.append(SkippedInstruction(slot=slot, column=column, instruction=instruction, reason=reason))
        _logger.debug(f"slot={slot} column={column} skipping {instruction}: {reason}")
