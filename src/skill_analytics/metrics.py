# ABOUTME: Shared accuracy arithmetic and count breakdowns over answer frames.
# ABOUTME: Keeps percentage rounding identical across every report.

from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd


def accuracy_percent(correct: int, total: int) -> int:
    """Integer percentage rounded half up; 0 when there is nothing to score."""

    if total <= 0:
        return 0
    # Integer form of floor(100 * correct / total + 0.5).
    return (200 * int(correct) + int(total)) // (2 * int(total))


def count_breakdown(frame: pd.DataFrame, column: str, order: Sequence[str]) -> List[Dict]:
    """
    Count total and correct answers per value of ``column``.

    Values are listed in ``order``; values with no answers are omitted.
    """

    if frame.empty:
        return []

    grouped = frame.groupby(column, sort=False)["is_correct"].agg(total="size", correct="sum")
    entries = []
    for name in order:
        if name not in grouped.index:
            continue
        total = int(grouped.loc[name, "total"])
        correct = int(grouped.loc[name, "correct"])
        entries.append(
            {
                "name": name,
                "total": total,
                "correct": correct,
                "accuracyRate": accuracy_percent(correct, total),
            }
        )
    return entries
