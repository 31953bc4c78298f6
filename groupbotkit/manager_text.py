"""Text helpers for the group manager: templates, mute lengths, switches and picks."""

from __future__ import annotations

import random
from typing import Mapping, Sequence

MAX_MUTE_MINUTES = 43199  # a mute may last at most one month

VERIFY_BIT = 0x1
GIST_BIT = 0x10

_ENABLE_WORDS = frozenset({"开启", "打开", "启用"})
_DISABLE_WORDS = frozenset({"关闭", "关掉", "禁用"})

_MINUTE_UNITS = frozenset({"分钟", "min", "mins", "m"})
_HOUR_UNITS = frozenset({"小时", "hour", "hours", "h"})
_DAY_UNITS = frozenset({"天", "day", "days", "d"})

_LUCKY_POOL = 10


def welcome_to_cq(template: str, uid: int, nickname: str, gid: int, group_name: str) -> str:
    """Fill a welcome or farewell template and return CQ-coded text.

    Placeholders: {at}, {nickname}, {avatar}, {uid}, {gid} and {groupname}.
    """
    uid_text = str(uid)
    at = "[CQ:at,qq=" + uid_text + "]"
    avatar = "[CQ:image,file=http://q4.qlogo.cn/g?b=qq&nk=" + uid_text + "&s=640]"
    text = template.replace("{at}", at)
    text = text.replace("{nickname}", nickname)
    text = text.replace("{avatar}", avatar)
    text = text.replace("{uid}", uid_text)
    text = text.replace("{gid}", str(gid))
    return text.replace("{groupname}", group_name)


def mute_minutes(amount: int, unit: str) -> int:
    """Convert a mute length with a unit into minutes, capped at one month.

    An unknown unit counts as minutes.
    """
    minutes = amount
    if unit in _HOUR_UNITS:
        minutes *= 60
    elif unit in _DAY_UNITS:
        minutes *= 60 * 24
    return MAX_MUTE_MINUTES if minutes >= 43200 else minutes


def unescape_brackets(text: str) -> str:
    """Turn escaped CQ brackets back into ``[`` and ``]``."""
    return text.replace("&#91;", "[").replace("&#93;", "]")


def toggle_verify(data: int, option: str) -> int | None:
    """Switch the join-question verification bit; None for an unknown option."""
    if option in _ENABLE_WORDS:
        return data | VERIFY_BIT
    if option in _DISABLE_WORDS:
        return data & 0x7FFFFFFF_FFFFFFFE
    return None


def toggle_gist(data: int, option: str) -> int | None:
    """Switch the gist auto-approval setting; None for an unknown option."""
    if option in _ENABLE_WORDS:
        return data | GIST_BIT
    if option in _DISABLE_WORDS:
        return data & 0x7FFFFFFF_FFFFFFFD
    return None


def pick_lucky(members: Sequence[Mapping], rng: random.Random | None = None) -> Mapping:
    """Pick one of the ten members who spoke most recently.

    Each member is a mapping with at least ``last_sent_time``.
    """
    if not members:
        raise ValueError("no group members to pick from")
    rng = rng or random.Random()
    ordered = sorted(members, key=lambda m: int(m.get("last_sent_time", 0)))
    pool = ordered[-_LUCKY_POOL:]
    return pool[rng.randrange(len(pool))]


def arithmetic_question(rng: random.Random | None = None) -> tuple[int, int, int]:
    """Return (a, b, a + b) for the join verification question."""
    rng = rng or random.Random()
    a = rng.randrange(100)
    b = rng.randrange(100)
    return a, b, a + b