"""Reminder timers: packed schedule fields and parsing of Chinese date text."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

_EN_MASK = 0x800000
_MONTH_MASK = 0x780000
_DAY_MASK = 0x07C000
_WEEK_MASK = 0x003800
_HOUR_MASK = 0x0007C0
_MINUTE_MASK = 0x00003F

_CHINESE_DIGITS = "零一二三四五六七八九十"
_EVERY = "每"


def _unpack(value: int, mask: int, shift: int) -> int:
    field = (value & mask) >> shift
    return -1 if field == mask >> shift else field


def _pack(value: int, field: int, mask: int, shift: int) -> int:
    return ((field << shift) & mask) | (value & (0xFFFFFF & ~mask))


@dataclass
class Timer:
    """A group reminder, either a cron expression or packed date fields.

    The packed field ``emdwhm`` holds, from the top bit down: enabled (1 bit),
    month (4), day (5), weekday (3, Sunday is 0), hour (5) and minute (6).
    An all-ones field means "every" and reads back as -1.
    """

    id: int = 0
    emdwhm: int = 0
    self_id: int = 0
    grp_id: int = 0
    alert: str = ""
    cron: str = ""
    url: str = ""

    @property
    def en(self) -> bool:
        return self.emdwhm & _EN_MASK != 0

    @en.setter
    def en(self, value: bool) -> None:
        if value:
            self.emdwhm |= _EN_MASK
        else:
            self.emdwhm &= 0x7FFFFF

    @property
    def month(self) -> int:
        return _unpack(self.emdwhm, _MONTH_MASK, 19)

    @month.setter
    def month(self, value: int) -> None:
        self.emdwhm = _pack(self.emdwhm, value, _MONTH_MASK, 19)

    @property
    def day(self) -> int:
        return _unpack(self.emdwhm, _DAY_MASK, 14)

    @day.setter
    def day(self, value: int) -> None:
        self.emdwhm = _pack(self.emdwhm, value, _DAY_MASK, 14)

    @property
    def week(self) -> int:
        return _unpack(self.emdwhm, _WEEK_MASK, 11)

    @week.setter
    def week(self, value: int) -> None:
        self.emdwhm = _pack(self.emdwhm, value, _WEEK_MASK, 11)

    @property
    def hour(self) -> int:
        return _unpack(self.emdwhm, _HOUR_MASK, 6)

    @hour.setter
    def hour(self, value: int) -> None:
        self.emdwhm = _pack(self.emdwhm, value, _HOUR_MASK, 6)

    @property
    def minute(self) -> int:
        return _unpack(self.emdwhm, _MINUTE_MASK, 0)

    @minute.setter
    def minute(self, value: int) -> None:
        self.emdwhm = _pack(self.emdwhm, value, _MINUTE_MASK, 0)

    def timer_info(self) -> str:
        """Return the normalised description used to identify this timer."""
        if self.cron:
            return f"[{self.grp_id}]{self.cron}"
        return (
            f"[{self.grp_id}]{self.month}月{self.day}日{self.week}周"
            f"{self.hour}:{self.minute}"
        )

    def timer_id(self) -> int:
        """Return a 32-bit id derived from :meth:`timer_info`."""
        digest = hashlib.md5(self.timer_info().encode("utf-8")).digest()
        return int.from_bytes(digest[:4], "little")


def get_filled_cron_timer(croncmd: str, alert: str, img: str, botqq: int, gid: int) -> Timer:
    """Build a timer driven by a cron expression."""
    return Timer(self_id=botqq, grp_id=gid, alert=alert, cron=croncmd, url=img)


def get_filled_timer(date_strs, botqq: int, grp: int, match_date_only: bool) -> Timer:
    """Build a timer from the regex groups of a reminder command.

    ``date_strs`` holds the whole match at index 0, then month, day or week,
    hour, minute and, unless ``match_date_only``, the optional image part and
    the alert text. An invalid field leaves the timer disabled with a reason
    in ``alert``.
    """
    month_str, day_week_str, hour_str, minute_str = date_strs[1:5]
    timer = Timer()

    mon = chinese_num_to_int(month_str)
    if (mon != -1 and mon <= 0) or mon > 12:
        timer.alert = "月份非法！"
        return timer
    timer.month = mon

    if len(day_week_str) == 4:
        # "二十五日": drop the middle 十 and the trailing 日
        d = chinese_num_to_int(day_week_str[0] + day_week_str[2])
        if (d != -1 and d <= 0) or d > 31:
            timer.alert = "日期非法1！"
            return timer
        timer.day = d
    elif day_week_str.endswith("日"):
        d = chinese_num_to_int(day_week_str[:-1])
        if (d != -1 and d <= 0) or d > 31:
            timer.alert = "日期非法2！"
            return timer
        timer.day = d
    elif day_week_str.startswith(_EVERY):
        timer.week = -1
    else:
        w = chinese_num_to_int(day_week_str[1:])
        if w == 7:
            w = 0
        if w < 0 or w > 6:
            timer.alert = "星期非法！"
            return timer
        timer.week = w

    if len(hour_str) == 3:
        hour_str = hour_str[0] + hour_str[2]
    h = chinese_num_to_int(hour_str)
    if h < -1 or h > 23:
        timer.alert = "小时非法！"
        return timer
    timer.hour = h

    if len(minute_str) == 3:
        minute_str = minute_str[0] + minute_str[2]
    minute = chinese_num_to_int(minute_str)
    if minute < -1 or minute > 59:
        timer.alert = "分钟非法！"
        return timer
    timer.minute = minute

    if not match_date_only:
        url_str = date_strs[5]
        if url_str:
            timer.url = url_str[1:]  # drop the leading 用
            if not timer.url.startswith("http"):
                timer.url = "illegal"
                return timer
        timer.alert = date_strs[6]
        timer.en = True
    timer.self_id = botqq
    timer.grp_id = grp
    return timer


def chinese_num_to_int(text: str) -> int:
    """Convert a Chinese or Arabic number of at most two digits.

    A leading 每 means "every": 每 alone is -1 and 每二 is -2.
    Unparseable text yields 0 or -1 as the lookup rules dictate.
    """
    if not text:
        raise ValueError("empty number")
    result = -1
    if text[0].isdecimal():
        result = int(text) if text.isascii() and text.isdigit() else 0
    elif text[0] == _EVERY:
        if len(text) == 2:
            result = -chinese_char_to_int(text[1])
    elif len(text) == 1:
        result = chinese_char_to_int(text)
    else:
        ten = chinese_char_to_int(text[0])
        if ten != 10:
            ten *= 10
        ge = chinese_char_to_int(text[1])
        if ge == 10:
            ge = 0
        result = ten + ge
    return result


def chinese_char_to_int(char: str) -> int:
    """Map one Chinese numeral to 0..10; 日 and 天 (Sunday) map to 7."""
    if char in ("日", "天"):
        return 7
    index = _CHINESE_DIGITS.find(char)
    return index if index >= 0 and len(char) == 1 else 0