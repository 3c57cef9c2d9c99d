"""
Dataset - Immutable snapshot of tabular records with typed cell values.

Every cell is resolved once, when the record is read, into a tagged value
(NUMBER, TEXT, DATE or EMPTY), so analysis stages never re-parse raw input.
Column names are normalized to lower-case, trimmed strings.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from shared.logging import get_logger
from shared.validation import ValidationError, coerce_number, is_empty

logger = get_logger(__name__)


class ValueKind(Enum):
    NUMBER = "number"
    TEXT = "text"
    DATE = "date"
    EMPTY = "empty"


@dataclass(frozen=True)
class CellValue:
    """A single typed cell."""

    kind: ValueKind
    raw: Any = None
    number: Optional[float] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "CellValue":
        if is_empty(raw):
            return EMPTY_CELL

        if isinstance(raw, np.datetime64):
            raw = pd.Timestamp(raw).to_pydatetime()
        if isinstance(raw, (datetime, date)):
            return cls(ValueKind.DATE, raw)

        number = coerce_number(raw)
        if number is not None:
            return cls(ValueKind.NUMBER, raw, number)

        return cls(ValueKind.TEXT, raw)

    @property
    def is_empty(self) -> bool:
        return self.kind is ValueKind.EMPTY

    @property
    def is_number(self) -> bool:
        return self.kind is ValueKind.NUMBER

    @property
    def text(self) -> str:
        """Trimmed string form, used for grouping and text comparison."""
        if self.kind is ValueKind.EMPTY:
            return ""
        if self.kind is ValueKind.DATE:
            return self.raw.isoformat()
        if self.kind is ValueKind.NUMBER and isinstance(self.raw, (float, np.floating)):
            if float(self.raw).is_integer():
                return str(int(self.raw))
        return str(self.raw).strip()


EMPTY_CELL = CellValue(ValueKind.EMPTY)


def normalize_column_name(name: Any) -> str:
    """Lower-case and trim a header."""
    return str(name).strip().lower()


class Record(Mapping):
    """
    Read-only ordered mapping from column name to CellValue.

    Missing columns read as EMPTY through value()/number().
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: Mapping):
        self._cells = MappingProxyType(dict(cells))

    @classmethod
    def from_raw(cls, row: Mapping) -> "Record":
        cells = {}
        for name, raw in row.items():
            cells[normalize_column_name(name)] = (
                raw if isinstance(raw, CellValue) else CellValue.from_raw(raw)
            )
        return cls(cells)

    def __getitem__(self, column: str) -> CellValue:
        return self._cells[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        items = ", ".join(f"{k}={v.raw!r}" for k, v in self._cells.items())
        return f"Record({items})"

    def value(self, column: str) -> CellValue:
        return self._cells.get(column, EMPTY_CELL)

    def number(self, column: str) -> Optional[float]:
        return self.value(column).number


class Dataset(Sequence):
    """
    Ordered, immutable sequence of Records.

    Example:
        >>> dataset = Dataset.from_records([
        ...     {"Gender": "Male", "Approved": 1},
        ...     {"Gender": "Female", "Approved": 0},
        ... ])
        >>> dataset.columns
        ('gender', 'approved')
    """

    def __init__(
        self,
        records: Iterable[Record],
        columns: Optional[Iterable[str]] = None,
    ):
        self._records: Tuple[Record, ...] = tuple(records)

        if columns is None:
            seen: Dict[str, None] = {}
            for record in self._records:
                for name in record:
                    seen.setdefault(name, None)
            columns = seen.keys()
        else:
            columns = dict.fromkeys(normalize_column_name(c) for c in columns).keys()

        self._columns: Tuple[str, ...] = tuple(columns)

    # ------------------------------------------------------------------
    # Data sources
    # ------------------------------------------------------------------

    @classmethod
    def from_records(cls, rows: Iterable[Mapping]) -> "Dataset":
        """
        Build a dataset from dictionaries (one per row).

        Raises:
            ValidationError: If a row is not a mapping
        """
        records = []
        for index, row in enumerate(rows):
            if not isinstance(row, Mapping):
                raise ValidationError(
                    f"Row {index} must be a mapping, got {type(row).__name__}"
                )
            records.append(Record.from_raw(row))
        return cls(records)

    @classmethod
    def from_rows(cls, header: Iterable[Any], rows: Iterable[Iterable[Any]]) -> "Dataset":
        """
        Build a dataset from a header row and data rows, as read from a sheet.

        Short rows are padded with empty cells.

        Raises:
            ValidationError: If a row has more cells than the header
        """
        columns = [normalize_column_name(h) for h in header]
        records = []
        for index, row in enumerate(rows):
            values = list(row)
            if len(values) > len(columns):
                raise ValidationError(
                    f"Row {index} has {len(values)} cells, header has {len(columns)}"
                )
            values += [None] * (len(columns) - len(values))
            records.append(Record.from_raw(dict(zip(columns, values))))
        return cls(records, columns)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "Dataset":
        """Snapshot a pandas DataFrame."""
        columns = [normalize_column_name(c) for c in df.columns]
        records = [
            Record.from_raw(dict(zip(columns, row)))
            for row in df.itertuples(index=False, name=None)
        ]
        logger.debug(f"Loaded {len(records)} records with {len(columns)} columns")
        return cls(records, columns)

    @classmethod
    def from_csv(cls, path: Union[str, Path], **read_kwargs: Any) -> "Dataset":
        """Read a CSV file through pandas."""
        df = pd.read_csv(path, **read_kwargs)
        logger.info(f"Read {len(df)} rows from {path}")
        return cls.from_dataframe(df)

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Dataset(self._records[index], self._columns)
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"Dataset(records={len(self._records)}, columns={list(self._columns)})"

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def columns(self) -> Tuple[str, ...]:
        return self._columns

    @property
    def records(self) -> Tuple[Record, ...]:
        return self._records

    def has_column(self, column: str) -> bool:
        return column in self._columns

    def subset(self, records: Iterable[Record]) -> "Dataset":
        """New dataset over the same columns."""
        return Dataset(records, self._columns)

    def column_values(self, column: str) -> List[CellValue]:
        return [record.value(column) for record in self._records]

    def sample_values(self, column: str, limit: int) -> List[CellValue]:
        """First `limit` non-empty values of a column, in record order."""
        samples = []
        for record in self._records:
            cell = record.value(column)
            if not cell.is_empty:
                samples.append(cell)
                if len(samples) >= limit:
                    break
        return samples

    def numeric_values(self, column: str) -> List[float]:
        return [
            cell.number for cell in self.column_values(column) if cell.is_number
        ]
