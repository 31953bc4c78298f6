import pytest

from groupbotkit.manager import (
    ManagerStore,
    check_new_user,
    gist_url,
    parse_gist_answer,
)

NOW = 1_665_000_000


@pytest.fixture
def store(tmp_path):
    s = ManagerStore(tmp_path / "config.db")
    yield s
    s.close()


def test_welcome_round_trip_and_replace(store):
    assert store.get_welcome(1) is None
    store.set_welcome(1, "hello {at}")
    assert store.get_welcome(1) == "hello {at}"
    store.set_welcome(1, "again")
    assert store.get_welcome(1) == "again"
    assert store.get_farewell(1) is None


def test_farewell_separate(store):
    store.set_farewell(2, "bye {nickname}")
    assert store.get_farewell(2) == "bye {nickname}"
    assert store.get_welcome(2) is None


def test_store_persists(tmp_path):
    path = tmp_path / "c.db"
    with ManagerStore(path) as s:
        s.set_welcome(3, "w")
        s.add_member(10, "octo")
    with ManagerStore(path) as s:
        assert s.get_welcome(3) == "w"
        assert s.has_member("octo") is True


def test_members(store):
    assert store.has_member("octo") is False
    store.add_member(10, "octo")
    assert store.has_member("octo") is True
    assert store.has_member("other") is False


def test_parse_gist_answer():
    assert parse_gist_answer("问题：x\n答案：octo/abc") == ("octo", "abc")


@pytest.mark.parametrize("comment", ["答案：/abc", "答案：octo", "答案："])
def test_parse_gist_answer_bad(comment):
    with pytest.raises(ValueError, match="格式错误!"):
        parse_gist_answer(comment)


def test_gist_url_shape():
    url = gist_url("octo", "abc", 123)
    prefix = "https://gist.githubusercontent.com/octo/abc/raw/"
    assert url.startswith(prefix)
    name = url[len(prefix):]
    assert len(name) == 32
    assert all(c in "0123456789abcdef" for c in name)
    assert gist_url("octo", "abc", 123) == url
    assert gist_url("octo", "abc", 124) != url


def test_check_new_user_accepts(store):
    seen = []

    def fetch(url):
        seen.append(url)
        return str(NOW - 100).encode()

    assert check_new_user(store, 10, 123, "octo", "abc", fetch, NOW) == (True, "")
    assert seen == [gist_url("octo", "abc", 123)]
    assert store.has_member("octo") is True
    assert check_new_user(store, 11, 123, "octo", "abc", fetch, NOW) == (False, "该github用户已入群")


def test_check_new_user_timeout(store):
    result = check_new_user(store, 10, 1, "octo", "abc", lambda u: str(NOW - 600).encode(), NOW)
    assert result == (False, "时间戳超时")
    assert store.has_member("octo") is False


def test_check_new_user_bad_format(store):
    result = check_new_user(store, 10, 1, "octo", "abc", lambda u: b"soon", NOW)
    assert result == (False, "时间戳格式错误: soon")


def test_check_new_user_fetch_error(store):
    def fetch(url):
        raise OSError("down")

    ok, reason = check_new_user(store, 10, 1, "octo", "abc", fetch, NOW)
    assert ok is False
    assert reason == "无法连接到gist: down"