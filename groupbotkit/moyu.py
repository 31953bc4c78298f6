"""Slacker's reminder: days until the weekend and the public holidays."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable

HOLIDAY_NAMES = ("元旦", "春节", "清明节", "劳动节", "端午节", "中秋节", "国庆节")
GREETING = (
    "上午好，摸鱼人！\n工作再累，一定不要忘记摸鱼哦！有事没事起身去茶水间，去厕所，"
    "去廊道走走别老在工位上坐着，钱是老板的,但命是自己的。\n"
)
CLOSING = "上班是帮老板赚钱，摸鱼是赚老板的钱！最后，祝愿天下所有摸鱼人，都能愉快的渡过每一天…"
KEY_PREFIX = "holiday/"

_RECORD_RE = re.compile(r"(-?\d+)_(-?\d+)_(-?\d+)_(-?\d+)")


@dataclass(frozen=True)
class Holiday:
    """A named holiday starting at local midnight of ``date`` and lasting ``duration``."""

    name: str
    date: datetime
    duration: timedelta = timedelta(0)

    @classmethod
    def of(cls, name: str, dur: int, year: int, month: int, day: int) -> Holiday:
        """Build a holiday lasting ``dur`` days from its calendar date."""
        return cls(name, datetime(year, month, day), timedelta(days=dur))

    def describe(self, now: datetime | None = None) -> str:
        """Say how far away the holiday is, or whether it is on or over."""
        remaining = self.date - (now or datetime.now())
        if remaining >= timedelta(0):
            return f"距离{self.name}还有: {remaining.total_seconds() / 86400:.2f}天！"
        if remaining + self.duration >= timedelta(0):
            return f"好好享受 {self.name} 假期吧!"
        return f"今年 {self.name} 假期已过"

    def __str__(self) -> str:
        return self.describe()


def parse_holiday(name: str, value: str) -> Holiday:
    """Read a stored ``dur_year_month_day`` record; raise ValueError if malformed."""
    match = _RECORD_RE.match(value.strip())
    if match is None:
        raise ValueError(f"invalid holiday record: {value!r}")
    dur, year, month, day = (int(part) for part in match.groups())
    return Holiday.of(name, dur, year, month, day)


def format_holiday(name: str, dur: int, year: int, month: int, day: int) -> tuple[str, str]:
    """Return the (key, value) pair under which a holiday is stored."""
    return KEY_PREFIX + name, f"{dur}_{year}_{month}_{day}"


def get_holiday(name: str, fetch: Callable[[str], str]) -> Holiday:
    """Fetch a holiday by name; a failure yields a past holiday naming the error."""
    try:
        return parse_holiday(name, fetch(KEY_PREFIX + name))
    except Exception as err:  # the reminder still goes out when the store fails
        return Holiday(name + str(err), datetime.min, timedelta(0))


def weekend(today: date | None = None) -> str:
    """Say how many days remain until the weekend."""
    weekday = ((today or date.today()).weekday() + 1) % 7  # Sunday is 0
    if weekday in (0, 6):
        return "好好享受周末吧！"
    return f"距离周末还有:{5 - weekday}天！"


def reminder_text(today: date | None, now: datetime | None, fetch: Callable[[str], str]) -> str:
    """Compose the whole daily reminder."""
    now = now or datetime.now()
    today = today or now.date()
    holidays = "\n".join(get_holiday(name, fetch).describe(now) for name in HOLIDAY_NAMES)
    return (
        today.strftime("%Y-%m-%d")
        + GREETING
        + weekend(today)
        + "\n"
        + holidays
        + "\n"
        + CLOSING
    )