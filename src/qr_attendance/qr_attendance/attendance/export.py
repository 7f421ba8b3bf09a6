from __future__ import annotations

import csv
from typing import Sequence

import pandas as pd

from ..common.datetime_utils import to_iso
from .model import SessionAttendanceRow

EXPORT_COLUMNS = ["marked_at", "method", "phone", "name"]


def attendance_csv(rows: Sequence[SessionAttendanceRow]) -> bytes:
    """One line per attendee, oldest mark first, every field quoted."""
    df = pd.DataFrame(
        [
            {"marked_at": to_iso(r.marked_at), "method": r.method.value, "phone": r.phone, "name": r.name}
            for r in rows
        ],
        columns=EXPORT_COLUMNS,
    )
    df = df.fillna("").sort_values("marked_at", kind="stable")
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n").encode("utf-8")
