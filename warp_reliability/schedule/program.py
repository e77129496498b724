from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from warp_reliability.schedule.instruction import Instruction, decode_instructions

CellText = Union[str, Sequence[str], None]


@dataclass(frozen=True)
class ProgramSchedule:
    """Time-slotted instruction grid: rows are time slots, columns are scheduling nodes."""

    column_names: tuple[str, ...]
    rows: tuple[tuple[tuple[Instruction, ...], ...], ...]

    def __post_init__(self) -> None:
        for slot, row in enumerate(self.rows):
            if len(row) != len(self.column_names):
                raise ValueError(
                    f"Schedule row {slot} has {len(row)} cells, expected {len(self.column_names)}"
                )

    @property
    def num_rows(self) -> int:
        return len(self.rows)

    @property
    def num_columns(self) -> int:
        return len(self.column_names)

    def cell(self, row: int, column: int) -> tuple[Instruction, ...]:
        return self.rows[row][column]

    @staticmethod
    def from_instructions(
        column_names: Sequence[str], rows: Iterable[Sequence[Iterable[Instruction]]]
    ) -> "ProgramSchedule":
        return ProgramSchedule(
            column_names=tuple(column_names),
            rows=tuple(tuple(tuple(cell) for cell in row) for row in rows),
        )

    @staticmethod
    def from_text_rows(column_names: Sequence[str], rows: Iterable[Sequence[CellText]]) -> "ProgramSchedule":
        """Decode a grid of instruction text; a cell is a string, a list of strings, or None."""
        decoded_rows = []
        for row in rows:
            decoded_rows.append(tuple(_decode_cell(cell) for cell in row))
        return ProgramSchedule(column_names=tuple(column_names), rows=tuple(decoded_rows))


def _decode_cell(cell: CellText) -> tuple[Instruction, ...]:
    if cell is None:
        return ()
    if isinstance(cell, str):
        return decode_instructions(cell)
    decoded: list[Instruction] = []
    for text in cell:
        decoded.extend(decode_instructions(text))
    return tuple(decoded)
