"""Group manager storage and the gist-based join verification."""

from __future__ import annotations

import hashlib
import re
import sqlite3
import time
from typing import Callable

import requests

GIST_RAW = "https://gist.githubusercontent.com/{}/{}/raw/{}"
ANSWER_MARK = "答案："
_INT_RE = re.compile(r"[+-]?[0-9]+")


class ManagerStore:
    """Welcome and farewell messages per group and verified github members."""

    def __init__(self, path):
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        self._db.executescript(
            "CREATE TABLE IF NOT EXISTS welcome (gid INTEGER PRIMARY KEY, msg TEXT);"
            "CREATE TABLE IF NOT EXISTS member (qq INTEGER PRIMARY KEY, ghun TEXT);"
            "CREATE TABLE IF NOT EXISTS farewell (gid INTEGER PRIMARY KEY, msg TEXT);"
        )
        self._db.commit()

    def __enter__(self) -> ManagerStore:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _set(self, table: str, gid: int, msg: str) -> None:
        self._db.execute(f"INSERT OR REPLACE INTO {table} (gid, msg) VALUES (?, ?)", (gid, msg))
        self._db.commit()

    def _get(self, table: str, gid: int) -> str | None:
        row = self._db.execute(f"SELECT msg FROM {table} WHERE gid = ?", (gid,)).fetchone()
        return row[0] if row else None

    def set_welcome(self, gid: int, msg: str) -> None:
        """Store the welcome template of a group."""
        self._set("welcome", gid, msg)

    def get_welcome(self, gid: int) -> str | None:
        """Return the welcome template of a group, or None."""
        return self._get("welcome", gid)

    def set_farewell(self, gid: int, msg: str) -> None:
        """Store the farewell template of a group."""
        self._set("farewell", gid, msg)

    def get_farewell(self, gid: int) -> str | None:
        """Return the farewell template of a group, or None."""
        return self._get("farewell", gid)

    def has_member(self, ghun: str) -> bool:
        """Tell whether a github user already joined."""
        row = self._db.execute("SELECT 1 FROM member WHERE ghun = ?", (ghun,)).fetchone()
        return row is not None

    def add_member(self, qq: int, ghun: str) -> None:
        """Record that a QQ user joined as a github user."""
        self._db.execute("INSERT OR REPLACE INTO member (qq, ghun) VALUES (?, ?)", (qq, ghun))
        self._db.commit()

    def close(self) -> None:
        self._db.close()


def parse_gist_answer(comment: str) -> tuple[str, str]:
    """Split a join request answer of the form ``username/gisthash``.

    Raises ValueError("格式错误!") when there is no user name before a slash.
    """
    index = comment.find(ANSWER_MARK)
    answer = comment[index + len(ANSWER_MARK) :] if index >= 0 else comment
    divider = answer.find("/")
    if divider <= 0:
        raise ValueError("格式错误!")
    return answer[:divider], answer[divider + 1 :]


def gist_url(ghun: str, hash: str, gid: int) -> str:
    """Raw gist URL whose file name is the md5 of the group number."""
    name = hashlib.md5(str(gid).encode("ascii")).hexdigest()
    return GIST_RAW.format(ghun, hash, name)


def _fetch(url: str) -> bytes:
    response = requests.get(url, timeout=30)
    response.raise_for_status()
    return response.content


def check_new_user(
    store: ManagerStore,
    qq: int,
    gid: int,
    ghun: str,
    hash: str,
    fetch: Callable[[str], bytes] | None = None,
    now: float | None = None,
) -> tuple[bool, str]:
    """Verify a join request against a gist holding a recent unix timestamp.

    Returns (accepted, reason); an accepted user is recorded in ``store``.
    """
    if store.has_member(ghun):
        return False, "该github用户已入群"
    fetch = fetch or _fetch
    try:
        data = fetch(gist_url(ghun, hash, gid))
    except Exception as err:  # any transport failure becomes a refusal reason
        return False, "无法连接到gist: " + str(err)
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else str(data)
    if not _INT_RE.fullmatch(text):
        return False, "时间戳格式错误: " + text
    stamp = int(text)
    current = int(time.time() if now is None else now)
    if abs(current - stamp) < 600:
        store.add_member(qq, ghun)
        return True, ""
    return False, "时间戳超时"