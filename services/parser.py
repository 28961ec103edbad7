"""Telemetry CSV parsing."""

from __future__ import annotations

import logging
import math
import re

from models.records import Dataset, Reading

logger = logging.getLogger(__name__)

_NUMERIC_FIELDS = 3

# Longest leading decimal literal, the prefix a browser's parseFloat accepts.
_DECIMAL_PREFIX = re.compile(
    r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)


def parse_number(raw: str | None) -> float:
    """Parse the leading decimal literal of ``raw``; NaN when there is none.

    Trailing junk is ignored (``"3.9V"`` is 3.9). Underscores, ``nan`` and
    ``inf`` spellings are not numbers here; only ``Infinity`` is.
    """
    if raw is None:
        return math.nan
    match = _DECIMAL_PREFIX.match(raw.lstrip())
    if match is None:
        return math.nan
    return float(match.group())


def parse_dataset(text: str) -> Dataset:
    """Parse ``label,voltage,current,power`` rows into a :class:`Dataset`.

    The first line is treated as a header and dropped without inspection.
    Blank lines are skipped. Every other line is split on plain commas with
    no quoting rules. Numeric cells that do not parse become NaN and the row
    is kept, so a bad cell poisons every aggregate computed from its column.
    Missing trailing cells behave the same way.
    """
    lines = text.strip().split("\n")[1:]

    readings: list[Reading] = []
    nan_cells = 0
    for line in lines:
        if not line.strip():
            continue

        cells: list[str | None] = list(line.rstrip("\r").split(","))
        cells += [None] * (1 + _NUMERIC_FIELDS - len(cells))
        voltage, current, power = (parse_number(cell) for cell in cells[1:4])
        nan_cells += sum(1 for value in (voltage, current, power) if math.isnan(value))
        readings.append(
            Reading(label=cells[0] or "", voltage=voltage, current=current, power=power)
        )

    if nan_cells:
        logger.warning(
            "Parsed non-numeric telemetry cells as NaN",
            extra={"nan_cells": nan_cells, "row_count": len(readings)},
        )

    return Dataset.from_readings(readings)
