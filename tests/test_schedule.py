from datetime import datetime, timedelta

from groupbotkit.schedule import first_week, next_wake_time, should_fire
from groupbotkit.timer_model import Timer


def _go_weekday(date):
    return (date.weekday() + 1) % 7


def _timer(month=-1, day=-1, week=-1, hour=-1, minute=-1, en=True):
    timer = Timer()
    timer.month = month
    timer.day = day
    timer.week = week
    timer.hour = hour
    timer.minute = minute
    timer.en = en
    return timer


def test_next_wake_time_weekly_is_in_future():
    ts = Timer()
    ts.month = -1
    ts.week = 6
    ts.hour = 16
    ts.minute = 30
    now = datetime(2022, 10, 12, 10, 0, 0)
    result = next_wake_time(ts, now)
    assert result - now >= timedelta(0)
    assert _go_weekday(result) == 6
    assert (result.hour, result.minute) == (16, 30)
    assert result - now < timedelta(days=7)


def test_next_wake_time_weekly_from_current_clock():
    ts = Timer()
    ts.month = -1
    ts.week = 6
    ts.hour = 16
    ts.minute = 30
    now = datetime.now()
    assert next_wake_time(ts, now) > now


def test_every_minute_timer_wakes_a_minute_later():
    now = datetime(2022, 3, 4, 5, 6, 7)
    assert next_wake_time(_timer(), now) == now + timedelta(minutes=1)


def test_daily_timer_next_day():
    now = datetime(2022, 3, 4, 10, 0, 0)
    result = next_wake_time(_timer(hour=8, minute=0), now)
    assert result == now.replace(hour=8) + timedelta(days=1)


def test_fixed_date_this_year():
    now = datetime(2022, 10, 12, 10, 0, 0)
    result = next_wake_time(_timer(month=12, day=25, week=0, hour=9, minute=0), now)
    assert (result.year, result.month, result.day, result.hour, result.minute) == (
        2022, 12, 25, 9, 0,
    )


def test_fixed_date_rolls_to_next_year():
    now = datetime(2022, 12, 26, 10, 0, 0)
    result = next_wake_time(_timer(month=12, day=25, week=0, hour=9, minute=0), now)
    assert result > now
    assert (result.year, result.month, result.day) == (2023, 12, 25)


def test_first_week_is_in_same_month():
    date = datetime(2022, 10, 20, 13, 0)
    result = first_week(date, 6)
    assert _go_weekday(result) == 6
    assert result.month == date.month
    assert result.day <= 7
    assert result.hour == date.hour


def test_should_fire_matching_minute():
    timer = _timer(hour=8, minute=0)
    assert should_fire(timer, datetime(2022, 1, 1, 8, 0))
    assert not should_fire(timer, datetime(2022, 1, 1, 8, 1))


def test_should_fire_disabled():
    timer = _timer(hour=8, minute=0, en=False)
    assert not should_fire(timer, datetime(2022, 1, 1, 8, 0))


def test_should_fire_weekday():
    now = datetime(2022, 10, 15, 16, 30)
    timer = Timer()
    timer.month = -1
    timer.week = _go_weekday(now)
    timer.hour = 16
    timer.minute = 30
    timer.en = True
    assert should_fire(timer, now)
    assert not should_fire(timer, now + timedelta(days=1))


def test_should_fire_wrong_month():
    timer = _timer(month=5, hour=-1, minute=-1)
    assert not should_fire(timer, datetime(2022, 6, 1, 0, 0))
    assert should_fire(timer, datetime(2022, 5, 1, 0, 0))