# FinBoard - Financial reporting dashboard core
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for FinBoard.

This module reads balance sheets and transactions from local files and
hands them to the core as plain lists of records. It stands in for the
storage layer: the core itself never touches files.

Balance sheets
--------------
A JSON file containing either:

1) a top-level array of balance sheet objects, or
2) an object with a ``balanceSheets`` (or ``balance_sheets``) array.

Each object may have any of the shapes supported by ``statements.py``;
shape checks happen during normalization, not here.

Transactions
------------
Either a JSON file (array, or object with a ``transactions`` array) or a
CSV file with the following columns (case-insensitive):

    date, amount, type[, description]

``created_at`` is accepted in place of ``date``. Missing cells become
None; numeric and date parsing happen later in ``transactions.py``.

If a file does not match one of the supported structures, a clear
ValueError is raised.
"""

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Union

import pandas as pd

PathLike = Union[str, "os.PathLike[str]"]


def _read_json(path: PathLike) -> Any:
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"Input file not found: {file_path}")
    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {file_path}.") from exc


def _records(data: Any, keys: tuple[str, ...], path: PathLike) -> list[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, Mapping):
        for key in keys:
            value = data.get(key)
            if isinstance(value, list):
                return value
    raise ValueError(
        f"Invalid structure in {path}. Expected either a JSON array or an "
        f"object with one of these arrays: {', '.join(keys)}."
    )


def read_balance_sheets(path: PathLike) -> list[Any]:
    """
    Read raw balance sheet records from a JSON file.

    Returns
    -------
    list
        The raw records, in file order.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the JSON is invalid or has an unsupported structure.
    """
    data = _read_json(path)
    return _records(data, ("balanceSheets", "balance_sheets"), path)


def read_transactions(path: PathLike) -> list[dict[str, Any]]:
    """
    Read raw transaction records from a JSON or CSV file.

    Returns
    -------
    list[dict]
        One record per transaction, with at least the keys found in the
        file. CSV column names are lowercased.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the structure does not match the supported formats.
    """
    file_path = Path(path)
    if file_path.suffix.lower() != ".csv":
        return _records(_read_json(file_path), ("transactions",), path)

    if not file_path.is_file():
        raise FileNotFoundError(f"Input file not found: {file_path}")

    df = pd.read_csv(file_path, dtype=str)

    # Normalize column names to lowercase (to make the check case-insensitive)
    df.columns = [c.lower().strip() for c in df.columns]
    cols = set(df.columns)

    if not {"amount", "type"}.issubset(cols) or not cols & {"date", "created_at"}:
        raise ValueError(
            "Invalid transactions structure. Expected columns:\n"
            "  - date (or created_at), amount, type[, description]\n"
            "(column names are case-insensitive)."
        )

    df = df.astype(object).where(df.notna(), None)
    return df.to_dict(orient="records")
