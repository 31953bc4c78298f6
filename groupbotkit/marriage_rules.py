"""Eligibility rules for the marriage skills, checked before a command runs.

Each check returns None when the skill may be used, or the refusal message
to show the user otherwise.
"""

from __future__ import annotations

from typing import Callable

from groupbotkit.marriage import MarriageRegistry, Status, UserInfo

SKILL_MARRY = 1
SKILL_NTR = 2
SKILL_MATCHMAKE = 3
SKILL_DIVORCE = 4

MAX_NAME_WIDTH = 350
ELLIPSIS = "......"

IN_COOLDOWN = "你的技能还在CD中..."
NO_TARGET = "额，你的target好像不存在？"
STILL_SINGLE = "ta现在还是单身哦，快向ta表白吧！"


def slice_name(name: str, measure: Callable[[str], float]) -> str:
    """Shorten a name whose drawn width would exceed 350, ending it with dots.

    ``measure`` returns the drawn width of one character.
    """
    width = 0
    last = 0
    for index, char in enumerate(name):
        width += int(measure(char))
        if width > MAX_NAME_WIDTH:
            break
        last = index
    if width > MAX_NAME_WIDTH:
        return name[: max(0, last - 1)] + ELLIPSIS
    return name


def _parse_id(value) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _cooling_down(registry: MarriageRegistry, gid: int, uid: int, skill: int) -> bool:
    cd_time = registry.get_cd_time(gid)
    return not registry.compare_cd_time(gid, uid, skill, cd_time)


def _self_married(status: Status, info: UserInfo | None) -> bool:
    return status is not Status.SINGLE and info is not None and (
        info.target == 0 or info.user == 0
    )


def _together(status: Status, info: UserInfo | None, other: int) -> bool:
    if info is None:
        return False
    return (status is Status.HUSBAND and info.target == other) or (
        status is Status.WIFE and info.user == other
    )


def check_dog(registry: MarriageRegistry, gid: int, uid: int, fiancee) -> str | None:
    """Check that a single user may propose to ``fiancee``."""
    if _cooling_down(registry, gid, uid, SKILL_MARRY):
        return IN_COOLDOWN
    can_match, _ = registry.business_mode(gid)
    if can_match == 0:
        return "你群包分配,别在娶妻上面下功夫，好好水群"
    target = _parse_id(fiancee)
    if target is None:
        return NO_TARGET
    if registry.open_day(gid):
        return None  # everybody is single after the daily reset

    info, status = registry.lookup(gid, uid)
    if _self_married(status, info):
        return "今天的你是单身贵族噢"
    if _together(status, info, target):
        return "笨蛋！你们已经在一起了！"
    if status is Status.HUSBAND:
        return "笨蛋~你家里还有个吃白饭的w"
    if status is Status.WIFE:
        return "该是0就是0，当0有什么不好"

    info, status = registry.lookup(gid, target)
    if status is Status.SINGLE:
        return None
    if _self_married(status, info):
        return "今天的ta是单身贵族噢"
    if status is Status.HUSBAND:
        return "他有别的女人了，你该放下了"
    return "ta被别人娶了，你来晚力"


def check_cp(registry: MarriageRegistry, gid: int, uid: int, fiancee) -> str | None:
    """Check that a user may take ``fiancee`` away from their partner."""
    if _cooling_down(registry, gid, uid, SKILL_NTR):
        return IN_COOLDOWN
    _, can_ntr = registry.business_mode(gid)
    if can_ntr == 0:
        return "你群发布了牛头人禁止令，放弃吧"
    target = _parse_id(fiancee)
    if target is None:
        return NO_TARGET
    if registry.open_day(gid):
        return STILL_SINGLE

    info, status = registry.lookup(gid, target)
    if status is Status.SINGLE:
        return None if target == uid else STILL_SINGLE
    if _self_married(status, info):
        return "今天的ta是单身贵族噢"
    if _together(status, info, target):
        return "笨蛋！你们已经在一起了！"

    info, status = registry.lookup(gid, uid)
    if status is Status.SINGLE:
        return None
    if _self_married(status, info):
        return "今天的你是单身贵族噢"
    if status is Status.HUSBAND:
        return "打灭，不给纳小妾！"
    return "该是0就是0，当0有什么不好"


def check_divorce(registry: MarriageRegistry, gid: int, uid: int) -> str | None:
    """Check that a married user may ask for a divorce."""
    if _cooling_down(registry, gid, uid, SKILL_DIVORCE):
        return IN_COOLDOWN
    _, status = registry.lookup(gid, uid)
    if status is Status.SINGLE:
        return "今天你还没结婚哦"
    return None


def check_condition(
    registry: MarriageRegistry, gid: int, uid: int, gay_one, gay_zero
) -> str | None:
    """Check that a user may match ``gay_one`` with ``gay_zero``."""
    if _cooling_down(registry, gid, uid, SKILL_MATCHMAKE):
        return IN_COOLDOWN
    first = _parse_id(gay_one)
    if first is None:
        return "额，攻方好像不存在？"
    second = _parse_id(gay_zero)
    if second is None:
        return "额，受方好像不存在？"
    if uid in (first, second):
        return "禁止自己给自己做媒!"
    if first == second:
        return "你这个媒人XP很怪咧，不能这样噢"
    if registry.open_day(gid):
        return None

    info, status = registry.lookup(gid, first)
    if _self_married(status, info):
        return "今天的攻方是单身贵族噢"
    if _together(status, info, second):
        return "笨蛋！ta们已经在一起了！"
    if status is not Status.SINGLE:
        return "攻方不是单身,不允许给这种人做媒!"

    info, status = registry.lookup(gid, second)
    if status is Status.SINGLE:
        return None
    if _self_married(status, info):
        return "今天的你是单身贵族噢"
    return "受方不是单身,不允许给这种人做媒!"