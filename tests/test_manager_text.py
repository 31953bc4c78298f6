import random

import pytest

from groupbotkit.manager_text import (
    MAX_MUTE_MINUTES,
    arithmetic_question,
    mute_minutes,
    pick_lucky,
    toggle_gist,
    toggle_verify,
    unescape_brackets,
    welcome_to_cq,
)


class FixedRng:
    def __init__(self, value):
        self.value = value

    def randrange(self, n):
        return min(self.value, n - 1)


def test_welcome_at_and_uid():
    result = welcome_to_cq("{at} {uid}", 42, "nick", 7, "grp")
    assert result == "[CQ:at,qq=" + "42" + "] 42"


def test_welcome_avatar_and_group():
    result = welcome_to_cq("{avatar}{gid}{groupname}{nickname}", 9, "bob", 77, "club")
    assert result == "[CQ:image,file=http://q4.qlogo.cn/g?b=qq&nk=9&s=640]" + "77" + "club" + "bob"


def test_welcome_without_placeholders_unchanged():
    assert welcome_to_cq("欢迎~", 1, "a", 2, "b") == "欢迎~"


def test_mute_units_consistent():
    assert mute_minutes(5, "分钟") == 5
    assert mute_minutes(2, "小时") == mute_minutes(120, "分钟")
    assert mute_minutes(1, "天") == mute_minutes(24, "h")


def test_mute_unknown_unit_is_minutes():
    assert mute_minutes(13, "xyz") == 13


def test_mute_capped():
    assert mute_minutes(100, "天") == MAX_MUTE_MINUTES
    assert mute_minutes(43200, "分钟") == 43199


def test_unescape_brackets():
    assert unescape_brackets("&#91;CQ:face,id=1&#93;") == "[CQ:face,id=1]"


def test_toggle_verify():
    assert toggle_verify(0, "开启") == 1
    assert toggle_verify(1, "关闭") == 0
    assert toggle_verify(5, "whatever") is None


def test_toggle_verify_keeps_other_bits():
    data = 0x10
    on = toggle_verify(data, "启用")
    assert on & 1 == 1
    assert on & ~1 == data
    assert toggle_verify(on, "禁用") == data


def test_toggle_gist():
    assert toggle_gist(0, "打开") & 0x10 == 0x10
    assert toggle_gist(3, "关掉") & 0x2 == 0
    assert toggle_gist(3, "nope") is None


def test_pick_lucky_from_recent():
    members = [{"user_id": i, "last_sent_time": i} for i in range(15)]
    random.Random(1).shuffle(members)
    for seed in range(20):
        picked = pick_lucky(members, random.Random(seed))
        assert picked["last_sent_time"] >= 5


def test_pick_lucky_oldest_of_pool():
    members = [{"user_id": i, "last_sent_time": i} for i in range(15)]
    assert pick_lucky(members, FixedRng(0))["user_id"] == 5


def test_pick_lucky_empty():
    with pytest.raises(ValueError):
        pick_lucky([])


def test_arithmetic_question():
    rng = random.Random(3)
    for _ in range(50):
        a, b, r = arithmetic_question(rng)
        assert 0 <= a < 100 and 0 <= b < 100
        assert r == a + b