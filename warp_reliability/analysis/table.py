from __future__ import annotations

from typing import Iterable, Iterator, Sequence

from warp_reliability.errors import TableShapeError

TSV_DECIMALS = 10


def format_probability(value: float, decimals: int = TSV_DECIMALS) -> str:
    """Shortest decimal form of `value` after rounding away floating-point noise.

    >>> format_probability(0.9899999999999999)
    '0.99'
    """
    rounded = round(float(value), decimals)
    if rounded == 0.0:
        # Avoid printing -0.0.
        rounded = 0.0
    return repr(rounded)


class ReliabilityRow:
    """Per-(flow, node) probabilities for one time slot."""

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[float] = ()):
        self._values = [float(v) for v in values]

    @classmethod
    def zeros(cls, length: int) -> "ReliabilityRow":
        return cls([0.0] * length)

    def copy(self) -> "ReliabilityRow":
        return ReliabilityRow(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, column: int) -> float:
        return self._values[column]

    def __setitem__(self, column: int, value: float) -> None:
        self._values[column] = float(value)

    def __iter__(self) -> Iterator[float]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ReliabilityRow):
            return self._values == other._values
        if isinstance(other, (list, tuple)):
            return self._values == list(other)
        return NotImplemented

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"ReliabilityRow({self._values!r})"

    def to_list(self) -> list[float]:
        return list(self._values)


class ReliabilityTable:
    """Append-only matrix of reliability rows: row index = time slot, column = (flow, node)."""

    def __init__(self, column_names: Sequence[str]):
        self._column_names = tuple(column_names)
        self._column_index = {name: i for i, name in enumerate(self._column_names)}
        if len(self._column_index) != len(self._column_names):
            raise TableShapeError(f"Duplicate column names in {list(self._column_names)}")
        self._rows: list[ReliabilityRow] = []

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._column_names

    @property
    def num_rows(self) -> int:
        return len(self._rows)

    @property
    def num_columns(self) -> int:
        return len(self._column_names)

    def append(self, row: ReliabilityRow) -> None:
        if len(row) != self.num_columns:
            raise TableShapeError(
                f"Row {self.num_rows} has {len(row)} values but the table has {self.num_columns} columns"
            )
        # Store a private copy so callers can keep mutating their working row.
        self._rows.append(row.copy())

    def get(self, row: int, column: int) -> float:
        return self._rows[row][column]

    def get_row(self, row: int) -> ReliabilityRow:
        return self._rows[row].copy()

    def last_row(self) -> ReliabilityRow | None:
        return self._rows[-1].copy() if self._rows else None

    def column_index(self, flow_name: str, node_name: str) -> int:
        key = f"{flow_name}:{node_name}"
        try:
            return self._column_index[key]
        except KeyError:
            raise KeyError(f"No column {key!r} in reliability table") from None

    def final_reliability(self, flow_name: str, node_name: str) -> float:
        """Value of column `<flow>:<node>` in the last row (0.0 for an empty table)."""
        column = self.column_index(flow_name, node_name)
        if not self._rows:
            return 0.0
        return self._rows[-1][column]

    def __iter__(self) -> Iterator[ReliabilityRow]:
        return (row.copy() for row in self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def to_tsv(self, decimals: int = TSV_DECIMALS) -> str:
        lines = ["\t".join(self._column_names)]
        for row in self._rows:
            lines.append("\t".join(format_probability(v, decimals) for v in row))
        return "\n".join(lines) + "\n"
