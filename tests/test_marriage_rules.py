import pytest

from groupbotkit.marriage import MarriageRegistry
from groupbotkit.marriage_rules import (
    ELLIPSIS,
    IN_COOLDOWN,
    NO_TARGET,
    SKILL_DIVORCE,
    SKILL_MARRY,
    SKILL_MATCHMAKE,
    SKILL_NTR,
    STILL_SINGLE,
    check_condition,
    check_cp,
    check_divorce,
    check_dog,
    slice_name,
)

GID = 1234


@pytest.fixture
def registry(tmp_path):
    reg = MarriageRegistry(tmp_path / "wife.db")
    yield reg
    reg.close()


@pytest.fixture
def opened(registry):
    registry.open_day(GID)
    registry.register(GID, 1, 2, "one", "two")
    return registry


def test_slice_name_short_is_unchanged():
    assert slice_name("abc", lambda c: 10) == "abc"


def test_slice_name_long_is_cut():
    result = slice_name("abcdef", lambda c: 100)
    assert result == "a......"
    assert result.endswith(ELLIPSIS)


def test_check_dog_fresh_group_allows(registry):
    assert check_dog(registry, GID, 1, 2) is None
    assert registry.open_day(GID) is False


def test_check_dog_cooldown(registry):
    registry.write_cd_time(GID, 1, SKILL_MARRY)
    assert check_dog(registry, GID, 1, 2) == IN_COOLDOWN


def test_check_dog_mode_disabled(registry):
    registry.set_mode(GID, "自由恋爱", 0)
    assert check_dog(registry, GID, 1, 2) == "你群包分配,别在娶妻上面下功夫，好好水群"


def test_check_dog_bad_target(registry):
    assert check_dog(registry, GID, 1, "abc") == NO_TARGET


def test_check_dog_married_cases(opened):
    assert check_dog(opened, GID, 1, 2) == "笨蛋！你们已经在一起了！"
    assert check_dog(opened, GID, 1, 3) == "笨蛋~你家里还有个吃白饭的w"
    assert check_dog(opened, GID, 2, 3) == "该是0就是0，当0有什么不好"
    assert check_dog(opened, GID, 3, 1) == "他有别的女人了，你该放下了"
    assert check_dog(opened, GID, 3, 2) == "ta被别人娶了，你来晚力"
    assert check_dog(opened, GID, 3, 4) is None


def test_check_dog_self_married(opened):
    opened.register(GID, 5, 0, "five", "")
    assert check_dog(opened, GID, 5, 6) == "今天的你是单身贵族噢"
    assert check_dog(opened, GID, 7, 5) == "今天的ta是单身贵族噢"


def test_check_cp_fresh_group_refuses(registry):
    assert check_cp(registry, GID, 1, 2) == STILL_SINGLE


def test_check_cp_ntr_disabled(registry):
    registry.set_mode(GID, "牛头人", 0)
    assert check_cp(registry, GID, 1, 2) == "你群发布了牛头人禁止令，放弃吧"


def test_check_cp_cooldown(registry):
    registry.write_cd_time(GID, 3, SKILL_NTR)
    assert check_cp(registry, GID, 3, 2) == IN_COOLDOWN


def test_check_cp_cases(opened):
    assert check_cp(opened, GID, 3, 9) == STILL_SINGLE
    assert check_cp(opened, GID, 3, 3) is None
    assert check_cp(opened, GID, 3, 2) is None
    assert check_cp(opened, GID, 3, 1) is None
    opened.register(GID, 4, 5, "four", "five")
    assert check_cp(opened, GID, 4, 2) == "打灭，不给纳小妾！"
    assert check_cp(opened, GID, 5, 2) == "该是0就是0，当0有什么不好"


def test_check_cp_self_married_target(opened):
    opened.register(GID, 6, 0, "six", "")
    assert check_cp(opened, GID, 3, 6) == "今天的ta是单身贵族噢"


def test_check_divorce(registry):
    assert check_divorce(registry, GID, 1) == "今天你还没结婚哦"
    registry.register(GID, 1, 2, "one", "two")
    assert check_divorce(registry, GID, 1) is None
    assert check_divorce(registry, GID, 2) is None
    registry.write_cd_time(GID, 1, SKILL_DIVORCE)
    assert check_divorce(registry, GID, 1) == IN_COOLDOWN


def test_check_condition_basic_refusals(registry):
    assert check_condition(registry, GID, 1, 1, 2) == "禁止自己给自己做媒!"
    assert check_condition(registry, GID, 1, 2, 1) == "禁止自己给自己做媒!"
    assert check_condition(registry, GID, 1, 2, 2) == "你这个媒人XP很怪咧，不能这样噢"
    assert check_condition(registry, GID, 1, "x", 2) == "额，攻方好像不存在？"
    assert check_condition(registry, GID, 1, 2, "y") == "额，受方好像不存在？"


def test_check_condition_fresh_group_allows(registry):
    assert check_condition(registry, GID, 9, 3, 4) is None


def test_check_condition_cooldown(registry):
    registry.write_cd_time(GID, 9, SKILL_MATCHMAKE)
    assert check_condition(registry, GID, 9, 3, 4) == IN_COOLDOWN


def test_check_condition_married_cases(opened):
    assert check_condition(opened, GID, 9, 1, 2) == "笨蛋！ta们已经在一起了！"
    assert check_condition(opened, GID, 9, 1, 3) == "攻方不是单身,不允许给这种人做媒!"
    assert check_condition(opened, GID, 9, 3, 2) == "受方不是单身,不允许给这种人做媒!"
    assert check_condition(opened, GID, 9, 3, 4) is None
    opened.register(GID, 5, 0, "five", "")
    assert check_condition(opened, GID, 9, 5, 3) == "今天的攻方是单身贵族噢"
    assert check_condition(opened, GID, 9, 3, 5) == "今天的你是单身贵族噢"