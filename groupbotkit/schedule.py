"""Computing when a date-based reminder should next wake up and fire."""

from __future__ import annotations

from datetime import datetime, timedelta

from groupbotkit.timer_model import Timer


def _go_weekday(date: datetime) -> int:
    """Weekday with Sunday as 0."""
    return (date.weekday() + 1) % 7


def _make_date(year, month, day, hour, minute, second, microsecond, tzinfo) -> datetime:
    """Build a datetime, letting out-of-range fields roll over."""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    base = datetime(year, month, 1, 0, 0, 0, microsecond, tzinfo=tzinfo)
    return base + timedelta(days=day - 1, hours=hour, minutes=minute, seconds=second)


def _add_date(date: datetime, years: int, months: int, days: int) -> datetime:
    return _make_date(
        date.year + years,
        date.month + months,
        date.day + days,
        date.hour,
        date.minute,
        date.second,
        date.microsecond,
        date.tzinfo,
    )


def first_week(date: datetime, week: int) -> datetime:
    """Return the first day of ``date``'s month falling on ``week`` (Sunday is 0)."""
    d = _add_date(date, 0, 0, 1 - date.day)
    while _go_weekday(d) != week:
        d = _add_date(d, 0, 0, 1)
    return d


def next_wake_time(timer: Timer, now: datetime) -> datetime:
    """Return the next moment after ``now`` at which ``timer`` should be checked."""
    m, d, h, mn, w = timer.month, timer.day, timer.hour, timer.minute, timer.week

    unit = timedelta(0)
    if mn >= 0:
        if h < 0:
            unit = timedelta(hours=1)
        elif d < 0 or w < 0:
            unit = timedelta(days=1)
        elif d == 0 and w >= 0:
            delta = timedelta(days=w - _go_weekday(now))
            if delta < timedelta(0):
                delta = timedelta(days=7)
            unit += delta
        elif m < 0:
            unit = timedelta(microseconds=-1)
    else:
        unit = timedelta(minutes=1)

    stable = 0
    if mn < 0:
        mn = now.minute
    if h < 0:
        h = now.hour
    else:
        stable |= 0x8
    if d < 0:
        d = now.day
    elif d > 0:
        stable |= 0x4
    else:
        d = now.day
        if w >= 0:
            stable |= 0x2
    if m < 0:
        m = now.month
    else:
        stable |= 0x1

    if stable == 0b0101:
        if timer.day != now.day or timer.month != now.month:
            h = 0
    elif stable == 0b1001:
        if timer.month != now.month:
            d = 0
    elif stable == 0b0001:
        if timer.month != now.month:
            d = 0
            h = 0

    date = _make_date(now.year, m, d, h, mn, now.second, now.microsecond, now.tzinfo)
    if unit > timedelta(0):
        date += unit

    if date <= now:
        if timer.month < 0:
            if timer.day > 0 or (timer.day == 0 and timer.week >= 0):
                date = _add_date(date, 0, 1, 0)
            elif timer.day < 0 or timer.week < 0:
                if timer.hour > 0:
                    date = _add_date(date, 0, 0, 1)
                elif timer.minute > 0:
                    date += timedelta(hours=1)
        else:
            date = _add_date(date, 1, 0, 0)

    if stable & 0x8 and date.hour != h:
        if stable & 0x4 == 0:
            date = _add_date(date, 0, 0, 1) - timedelta(hours=1)
        elif stable & 0x2 == 0:
            date = _add_date(date, 0, 0, 7) - timedelta(hours=1)
        else:
            date = _add_date(date, 1, 0, 0) - timedelta(hours=1)

    if stable & 0x4 and date.day != d:
        date = _add_date(date, 1, 0, -1)

    if stable & 0x2 and _go_weekday(date) != w:
        date = first_week(_add_date(date, 1, 0, 0), w)

    if date <= now:
        date = now + timedelta(minutes=1)
    return date


def should_fire(timer: Timer, now: datetime) -> bool:
    """Tell whether an enabled date timer matches the moment ``now``."""
    if not timer.en:
        return False
    if timer.month >= 0 and timer.month != now.month:
        return False
    if timer.day < 0 or timer.day == now.day:
        return _hour_minute_match(timer, now)
    if timer.day == 0 and (timer.week < 0 or timer.week == _go_weekday(now)):
        return _hour_minute_match(timer, now)
    return False


def _hour_minute_match(timer: Timer, now: datetime) -> bool:
    return (timer.hour < 0 or timer.hour == now.hour) and (
        timer.minute < 0 or timer.minute == now.minute
    )