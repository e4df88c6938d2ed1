"""
Read (x, y) points from delimited text, from a file or standard input.
"""

import io
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Union

import pandas as pd

from .models import Point

MAX_REPORTED_ERRORS = 10


class PointReadError(ValueError):
    """Raised when the input cannot be turned into (x, y) points."""

    pass


class PointReader:
    """
    Reads two numeric columns out of whitespace- or delimiter-separated text.

    Columns are 1-based. Use "-" as the source to read standard input.

    Example:
        with PointReader("usage.txt", skip_rows=1) as reader:
            points = reader.read_points()
    """

    def __init__(
        self,
        source: Union[str, Path],
        delimiter: Optional[str] = None,
        skip_rows: int = 0,
        x_col: int = 1,
        y_col: int = 2,
        stdin: Optional[TextIO] = None,
    ) -> None:
        if skip_rows < 0:
            raise PointReadError(f"skip_rows must be non-negative, got {skip_rows}")
        if x_col < 1 or y_col < 1:
            raise PointReadError(
                f"Columns are 1-based, got x_col={x_col}, y_col={y_col}"
            )

        self.source = str(source)
        self.delimiter = delimiter
        self.skip_rows = skip_rows
        self.x_col = x_col
        self.y_col = y_col
        self._stdin = stdin
        self._handle: Optional[TextIO] = None

        if self.source != "-":
            path = Path(self.source)
            if not path.exists():
                raise FileNotFoundError(f"Input file not found: {path}")
            if not path.is_file():
                raise PointReadError(f"Path is not a file: {path}")

    def __enter__(self) -> "PointReader":
        if self.source == "-":
            stream = self._stdin if self._stdin is not None else sys.stdin
            self._handle = io.StringIO(stream.read())
        else:
            self._handle = open(self.source, encoding="utf-8")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def read_frame(self) -> pd.DataFrame:
        """Raw x/y columns as strings, indexed by 1-based input line number."""
        if self._handle is None:
            raise RuntimeError("PointReader must be used as a context manager")

        sep = r"\s+" if self.delimiter is None else self.delimiter
        try:
            df = pd.read_csv(
                self._handle,
                sep=sep,
                header=None,
                skiprows=self.skip_rows,
                dtype=str,
                skip_blank_lines=False,
            )
        except pd.errors.EmptyDataError:
            raise PointReadError("No data found.") from None

        # Blank lines are kept while reading so the index tracks input lines
        df.index = df.index + self.skip_rows + 1
        df = df.dropna(how="all")
        if df.empty:
            raise PointReadError("No data found.")

        max_col = max(self.x_col, self.y_col)
        if df.shape[1] < max_col:
            raise PointReadError(
                f"There are fewer columns ({df.shape[1]}) than the max specified column ({max_col})."
            )

        return pd.DataFrame(
            {"x": df.iloc[:, self.x_col - 1], "y": df.iloc[:, self.y_col - 1]}
        )

    def read_points(self) -> List[Point]:
        frame = self.read_frame()
        if frame.empty:
            raise PointReadError("No data found.")

        numeric = frame.apply(pd.to_numeric, errors="coerce")
        bad_rows = numeric[numeric.isna().any(axis=1)]
        if not bad_rows.empty:
            lines = [
                f"Could not parse x/y values {tuple(frame.loc[idx])!r} on line {idx}."
                for idx in bad_rows.index[:MAX_REPORTED_ERRORS]
            ]
            if len(bad_rows) > MAX_REPORTED_ERRORS:
                lines.append("...")
            raise PointReadError("\n".join(lines))

        return [Point(float(x), float(y)) for x, y in numeric.itertuples(index=False)]
