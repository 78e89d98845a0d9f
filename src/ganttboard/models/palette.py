# Rev 0.2.0
"""Presentation color tokens handed to new tasks."""
from __future__ import annotations
import random
from typing import Sequence

TASK_COLORS: Sequence[str] = (
    "bg-rose-500",
    "bg-amber-500",
    "bg-lime-500",
    "bg-cyan-500",
    "bg-fuchsia-500",
    "bg-orange-500",
)


def pick_task_color(rng: random.Random | None = None) -> str:
    return (rng or random).choice(TASK_COLORS)
