"""Reincarnation lottery: a weighted draw of birthplace and gender."""

from __future__ import annotations

import bisect
import json
import random
from pathlib import Path
from typing import Iterable

FAILURE_MESSAGE = "投胎失败！\n您没能活到出生，祝您下次好运！"
_SUCCESS_THRESHOLD = 1 << 27
_WEIGHT_SCALE = 1e9
_MAX_TOTAL = (1 << 63) - 1


class WeightedChooser:
    """Picks items with probability proportional to their integer weights."""

    def __init__(self, choices: Iterable[tuple[object, int]]):
        ordered = sorted(choices, key=lambda choice: choice[1])
        self._items = []
        self._totals = []
        total = 0
        for item, weight in ordered:
            weight = int(weight)
            if weight < 0:
                raise ValueError("weight must not be negative")
            total += weight
            if total > _MAX_TOTAL:
                raise ValueError("weight overflowed")
            self._items.append(item)
            self._totals.append(total)
        if total <= 0:
            raise ValueError("zero choices with positive weight")
        self._total = total

    def pick(self, rng: random.Random | None = None):
        """Return one item drawn by weight."""
        rng = rng or random.Random()
        r = rng.randrange(self._total) + 1
        return self._items[bisect.bisect_left(self._totals, r)]


GENDERS = WeightedChooser([("男孩子", 50707), ("女孩子", 48292), ("雌雄同体", 1001)])


def load_rates(path) -> list[tuple[str, float]]:
    """Read a JSON list of ``{"name", "weight"}`` records into (name, weight) pairs."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("rate data must be a list")
    return [(str(entry["name"]), float(entry["weight"])) for entry in data]


def area_chooser(rates: Iterable[tuple[str, float]]) -> WeightedChooser:
    """Build a chooser of birthplaces from fractional weights."""
    return WeightedChooser((name, int(weight * _WEIGHT_SCALE)) for name, weight in rates)


def reborn_message(rng: random.Random | None, areas: WeightedChooser) -> str:
    """Draw a new life: usually a birthplace and gender, sometimes a failure."""
    rng = rng or random.Random()
    if rng.getrandbits(31) > _SUCCESS_THRESHOLD:
        return f"投胎成功！\n您出生在 {areas.pick(rng)}, 是 {GENDERS.pick(rng)}。"
    return FAILURE_MESSAGE