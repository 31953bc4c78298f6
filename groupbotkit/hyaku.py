"""Ogura Hyakunin Isshu: the hundred poems, read from their CSV table."""

from __future__ import annotations

import csv
from dataclasses import astuple, dataclass
from pathlib import Path

BASE_URL = "https://gitcode.net/u011570312/OguraHyakuninIsshu/-/raw/master/"
CSV_NAME = "小倉百人一首.csv"
POEM_COUNT = 100

_LABELS = (
    ("●", "番号"),
    ("◉", "歌人"),
    ("○", "上の句"),
    ("○", "下の句"),
    ("◎", "上の句ひらがな"),
    ("◎", "下の句ひらがな"),
)


@dataclass(frozen=True)
class Verse:
    """One poem: its number, poet, upper and lower verses and their kana readings."""

    number: str
    poet: str
    kami: str
    shimo: str
    kami_kana: str
    shimo_kana: str

    def __str__(self) -> str:
        return "".join(
            f"{mark}{label}：{value}\n"
            for (mark, label), value in zip(_LABELS, astuple(self))
        )


def load_verses(path) -> list[Verse]:
    """Read the poem table, skipping its title row.

    Raises ValueError unless it holds exactly 100 rows of 6 fields numbered 1 to 100.
    """
    with Path(path).open(encoding="utf-8-sig", newline="") as handle:
        rows = list(csv.reader(handle))
    if not rows:
        raise ValueError("invalid csvfile")
    rows = rows[1:]
    if len(rows) != POEM_COUNT:
        raise ValueError("invalid csvfile")
    verses = []
    for expected, row in enumerate(rows, start=1):
        if len(row) != len(_LABELS):
            raise ValueError("invalid csvfile")
        if int(row[0]) != expected:
            raise ValueError("invalid csvfile")
        verses.append(Verse(*row))
    return verses


def image_names(number: int) -> tuple[str, str]:
    """Return the card picture and the calligraphy picture of poem ``number``."""
    if number < 1 or number > POEM_COUNT:
        raise ValueError("超出范围")
    return f"img/{number:03d}.jpg", f"img/{number:03d}.png"