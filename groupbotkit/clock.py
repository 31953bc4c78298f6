"""Group reminder clock: persistent cron and date timers firing in the background."""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime, timedelta
from typing import Callable

from groupbotkit.schedule import next_wake_time, should_fire
from groupbotkit.timer_model import Timer

log = logging.getLogger(__name__)

Sender = Callable[[int, int, list], None]

_MONTH_NAMES = {
    name: number
    for number, name in enumerate(
        ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"),
        start=1,
    )
}
_DOW_NAMES = {
    name: number
    for number, name in enumerate(("sun", "mon", "tue", "wed", "thu", "fri", "sat"))
}
_DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}
_BOUNDS = ((0, 59, None), (0, 23, None), (1, 31, None), (1, 12, _MONTH_NAMES), (0, 6, _DOW_NAMES))


def _field_value(token: str, names: dict[str, int] | None) -> int:
    if names and token.lower() in names:
        return names[token.lower()]
    if token.isascii() and token.isdigit():
        return int(token)
    raise ValueError(f"failed to parse value: {token!r}")


def _parse_field(text: str, low: int, high: int, names) -> tuple[frozenset[int], bool]:
    values: set[int] = set()
    for part in text.split(","):
        span, slash, step_text = part.partition("/")
        step = _field_value(step_text, None) if slash else 1
        if step <= 0:
            raise ValueError(f"step must be positive: {part!r}")
        if span in ("*", "?"):
            start, end = low, high
        else:
            first, dash, last = span.partition("-")
            start = _field_value(first, names)
            if dash:
                end = _field_value(last, names)
            else:
                end = high if slash else start
        if start < low or end > high or start > end:
            raise ValueError(f"value out of range ({low}-{high}): {part!r}")
        values.update(range(start, end + 1, step))
    return frozenset(values), text.startswith(("*", "?"))


class CronSchedule:
    """A standard five-field cron expression or one of the @ descriptors."""

    def __init__(self, spec: str):
        self.spec = spec
        text = spec.strip()
        if text.startswith("@"):
            try:
                text = _DESCRIPTORS[text.lower()]
            except KeyError:
                raise ValueError(f"unrecognized descriptor: {spec}") from None
        fields = text.split()
        if len(fields) != 5:
            raise ValueError(f"expected exactly 5 fields, found {len(fields)}: {spec}")
        (
            self._minutes,
            self._hours,
            self._doms,
            self._months,
            self._dows,
        ) = [_parse_field(f, lo, hi, names) for f, (lo, hi, names) in zip(fields, _BOUNDS)]

    def matches(self, when: datetime) -> bool:
        """Tell whether the schedule fires in the minute of ``when``."""
        if when.minute not in self._minutes[0] or when.hour not in self._hours[0]:
            return False
        if when.month not in self._months[0]:
            return False
        dom_match = when.day in self._doms[0]
        dow_match = (when.weekday() + 1) % 7 in self._dows[0]
        if self._doms[1] or self._dows[1]:
            return dom_match and dow_match
        return dom_match or dow_match


def alert_message(timer: Timer) -> list[dict]:
    """Build the message segments a timer sends: @all, its text and optional image."""
    segments = [
        {"type": "at", "data": {"qq": "all"}},
        {"type": "text", "data": {"text": timer.alert}},
    ]
    if timer.url:
        segments.append({"type": "image", "data": {"file": timer.url, "cache": "0"}})
    return segments


class Clock:
    """Keeps reminder timers in a database and fires them through ``send``.

    ``send(self_id, group_id, segments)`` delivers a message; a ``self_id``
    of 0 leaves the choice of bot to the sender.
    """

    def __init__(self, db_path, send: Sender):
        self._send = send
        self._db = sqlite3.connect(str(db_path), check_same_thread=False)
        self._db_lock = threading.Lock()
        self._timers: dict[int, Timer] = {}
        self._timers_lock = threading.RLock()
        self._entries: dict[int, tuple[CronSchedule, Timer]] = {}
        self._entries_lock = threading.Lock()
        self._wakers: dict[int, threading.Event] = {}
        self._threads: list[threading.Thread] = []
        self._stop = threading.Event()
        with self._db_lock:
            self._db.execute(
                "CREATE TABLE IF NOT EXISTS timer ("
                "id INTEGER PRIMARY KEY, emdwhm INTEGER, sid INTEGER, gid INTEGER, "
                "alert TEXT, cron TEXT, url TEXT)"
            )
            self._db.commit()
        self._cron_thread = threading.Thread(target=self._run_cron, daemon=True)
        self._cron_thread.start()
        self._load_timers()

    def __enter__(self) -> Clock:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def register_timer(self, timer: Timer, save: bool, isinit: bool) -> bool:
        """Register a timer, optionally saving it; return whether it is scheduled.

        A cron timer with an invalid expression is rejected and the reason is
        put in its ``alert``. A date timer runs in its own background thread
        until it is disabled or cancelled. ``isinit`` marks timers loaded at
        start-up.
        """
        if save:
            key = timer.timer_id()
            timer.id = key
        else:
            key = timer.id
        existing = self.get_timer(key)
        if existing is not None and existing is not timer:
            existing.en = False
            self._wake(key)
            with self._entries_lock:
                self._entries.pop(key, None)
        log.info("[群管]注册计时器 %d%s", key, " (init)" if isinit else "")

        if timer.cron:
            try:
                schedule = CronSchedule(timer.cron)
            except ValueError as err:
                timer.alert = str(err)
                return False
            with self._entries_lock:
                self._entries[key] = (schedule, timer)
            try:
                if save:
                    self.add_timer_into_db(timer)
                self.add_timer_into_map(timer)
            except sqlite3.Error:
                log.exception("[群管]保存计时器失败")
                return False
            return True

        if save:
            try:
                self.add_timer_into_db(timer)
            except sqlite3.Error:
                log.exception("[群管]保存计时器失败")
        self.add_timer_into_map(timer)
        waker = threading.Event()
        with self._timers_lock:
            self._wakers[key] = waker
        thread = threading.Thread(target=self._run_date, args=(timer, waker), daemon=True)
        self._threads.append(thread)
        thread.start()
        return True

    def cancel_timer(self, key: int) -> bool:
        """Stop and forget a timer; return whether it existed and was removed."""
        timer = self.get_timer(key)
        if timer is None:
            return False
        if timer.cron:
            with self._entries_lock:
                self._entries.pop(key, None)
        else:
            timer.en = False
            self._wake(key)
        with self._timers_lock:
            self._timers.pop(key, None)
            try:
                with self._db_lock:
                    self._db.execute("DELETE FROM timer WHERE id = ?", (key,))
                    self._db.commit()
            except sqlite3.Error:
                log.exception("[群管]删除计时器失败")
                return False
        return True

    def list_timers(self, grp_id: int) -> list[str]:
        """Describe every timer of a group, one line each."""
        with self._timers_lock:
            timers = [t for t in self._timers.values() if t.grp_id == grp_id]
        lines = []
        for timer in timers:
            info = timer.timer_info()
            msg = (info[info.index("]") + 1 :] + "\n").replace("-1", "每")
            msg = msg.replace("月0日0周", "月周天")
            msg = msg.replace("月0日", "月")
            msg = msg.replace("日0周", "日")
            lines.append(msg)
        return lines

    def get_timer(self, key: int) -> Timer | None:
        """Return the registered timer with this id, if any."""
        with self._timers_lock:
            return self._timers.get(key)

    def add_timer_into_db(self, timer: Timer) -> None:
        """Save a timer, replacing one with the same id."""
        with self._timers_lock, self._db_lock:
            self._db.execute(
                "INSERT OR REPLACE INTO timer (id, emdwhm, sid, gid, alert, cron, url) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    timer.id,
                    timer.emdwhm,
                    timer.self_id,
                    timer.grp_id,
                    timer.alert,
                    timer.cron,
                    timer.url,
                ),
            )
            self._db.commit()

    def add_timer_into_map(self, timer: Timer) -> None:
        """Keep a timer in the in-memory registry under its id."""
        with self._timers_lock:
            self._timers[timer.id] = timer

    def close(self) -> None:
        """Stop every background thread and close the database."""
        self._stop.set()
        with self._timers_lock:
            for waker in self._wakers.values():
                waker.set()
            self._wakers.clear()
        self._cron_thread.join(timeout=2)
        for thread in self._threads:
            thread.join(timeout=2)
        with self._db_lock:
            self._db.close()

    def _wake(self, key: int) -> None:
        with self._timers_lock:
            waker = self._wakers.pop(key, None)
        if waker is not None:
            waker.set()

    def _load_timers(self) -> None:
        with self._db_lock:
            rows = self._db.execute(
                "SELECT id, emdwhm, sid, gid, alert, cron, url FROM timer"
            ).fetchall()
        for row in rows:
            self.register_timer(Timer(*row), False, True)

    def _deliver(self, timer: Timer) -> None:
        try:
            self._send(timer.self_id, timer.grp_id, alert_message(timer))
        except Exception:  # a failing bot must not stop the scheduler
            log.exception("[群管]发送提醒失败")

    def _tick(self, when: datetime) -> None:
        with self._entries_lock:
            entries = list(self._entries.values())
        for schedule, timer in entries:
            if schedule.matches(when):
                self._deliver(timer)

    def _run_cron(self) -> None:
        while not self._stop.is_set():
            now = datetime.now()
            upcoming = (now + timedelta(minutes=1)).replace(second=0, microsecond=0)
            if self._stop.wait((upcoming - now).total_seconds()):
                break
            self._tick(upcoming)

    def _run_date(self, timer: Timer, waker: threading.Event) -> None:
        while timer.en and not self._stop.is_set():
            now = datetime.now()
            wake_at = next_wake_time(timer, now)
            log.info("[群管]计时器%08x将睡眠%ds", timer.id, int((wake_at - now).total_seconds()))
            waker.wait(max(0.0, (wake_at - now).total_seconds()))
            if self._stop.is_set() or waker.is_set():
                break
            if should_fire(timer, datetime.now()):
                self._deliver(timer)