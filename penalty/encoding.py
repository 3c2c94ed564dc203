"""
encoding.py
-----------
One-hot resolution of metadata column names against raw categorical values.

Column names come in two conventions, tried in this order:
  1. "Key=Value"  -> key is the text before the first '=', value the text up to
                     the next '=' (anything after a second '=' is ignored);
                     exact (case-sensitive) match
  2. "Key_Value"  -> split at the LAST '_', case-insensitive match
A column whose key is not a known raw field encodes to 0.0.

Known limitation: with rule 2 the value is always the final underscore token,
so a value that itself contains '_' (e.g. "A_B_C" meant as key "A", value "B_C")
is misparsed. New metadata documents should use the "Key=Value" form.
"""

from __future__ import annotations

from typing import Mapping


def split_column(column: str):
    """Return (key, value, exact) for a one-hot column name, or None if it has no separator."""
    if "=" in column:
        key, value = column.split("=")[:2]
        return key.strip(), value.strip(), True
    key, sep, value = column.rpartition("_")
    if not sep or not key:
        return None
    return key, value, False


def encode_one_hot(column: str, raw_values: Mapping[str, str]) -> float:
    parsed = split_column(column)
    if parsed is None:
        return 0.0
    key, value, exact = parsed
    if key not in raw_values:
        return 0.0
    stored = raw_values[key]
    if exact:
        return 1.0 if stored == value else 0.0
    return 1.0 if str(stored).lower() == value.lower() else 0.0
