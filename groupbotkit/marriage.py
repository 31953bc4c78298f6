"""Daily group marriage registry: rosters, settings, favorability and skill cooldowns."""

from __future__ import annotations

import sqlite3
import threading
import time
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

DEFAULT_CD_HOURS = 12.0
MODE_FREE_LOVE = "自由恋爱"
MODE_NTR = "牛头人"
FAVOR_MIN = 0
FAVOR_MAX = 100

_DAY_FORMAT = "%Y/%m/%d"
_PROTECTED_TABLE = "favorability"


class Status(str, Enum):
    """Marital status of a group member for the current day."""

    SINGLE = "单"
    HUSBAND = "攻"  # registered the marriage
    WIFE = "受"  # was taken as the partner


@dataclass(frozen=True)
class UserInfo:
    """One marriage certificate."""

    user: int
    target: int
    username: str
    targetname: str
    updatetime: str


def _group_table(gid) -> str:
    return f'"group{int(gid)}"'


class MarriageRegistry:
    """Keeps one roster per group, reset every day, in a SQLite database."""

    def __init__(self, path):
        self._db = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.RLock()
        with self._lock, self._db:
            self._ensure()

    def __enter__(self) -> MarriageRegistry:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _ensure(self) -> None:
        self._db.execute(
            "CREATE TABLE IF NOT EXISTS updateinfo (gid INTEGER PRIMARY KEY, "
            "updatetime TEXT, canmatch INTEGER, canntr INTEGER, cdtime REAL)"
        )
        self._db.execute(
            "CREATE TABLE IF NOT EXISTS favorability (userinfo TEXT PRIMARY KEY, favor INTEGER)"
        )
        self._db.execute(
            "CREATE TABLE IF NOT EXISTS cdsheet (time INTEGER, groupid INTEGER, "
            "userid INTEGER, modeid INTEGER, PRIMARY KEY (groupid, userid, modeid))"
        )

    def _ensure_group(self, gid) -> str:
        table = _group_table(gid)
        self._db.execute(
            f"CREATE TABLE IF NOT EXISTS {table} (user INTEGER PRIMARY KEY, target INTEGER, "
            "username TEXT, targetname TEXT, updatetime TEXT)"
        )
        return table

    def _settings(self, gid: int):
        return self._db.execute(
            "SELECT updatetime, canmatch, canntr, cdtime FROM updateinfo WHERE gid = ?", (gid,)
        ).fetchone()

    def _insert_settings(self, gid, updatetime, canmatch, canntr, cdtime) -> None:
        self._db.execute(
            "INSERT OR REPLACE INTO updateinfo (gid, updatetime, canmatch, canntr, cdtime) "
            "VALUES (?, ?, ?, ?, ?)",
            (gid, updatetime, canmatch, canntr, cdtime),
        )

    def open_day(self, gid: int, today: date | None = None) -> bool:
        """Start a new day for a group if needed; return whether the roster was reset."""
        day = (today or date.today()).strftime(_DAY_FORMAT)
        with self._lock, self._db:
            self._ensure()
            row = self._settings(gid)
            if row is None:
                self._insert_settings(gid, day, 1, 1, DEFAULT_CD_HOURS)
                return True
            if row[0] == day:
                return False
            self._db.execute(f"DROP TABLE IF EXISTS {_group_table(gid)}")
            self._db.execute("UPDATE updateinfo SET updatetime = ? WHERE gid = ?", (day, gid))
            return True

    def business_mode(self, gid: int) -> tuple[int, int]:
        """Return (can_match, can_ntr) of a group, creating default settings."""
        with self._lock, self._db:
            self._ensure()
            row = self._settings(gid)
            if row is None:
                self._insert_settings(gid, "", 1, 1, DEFAULT_CD_HOURS)
                return 1, 1
            return row[1], row[2]

    def set_mode(self, gid: int, mode: str, status: int) -> None:
        """Switch free love or NTR for a group; raise ValueError for other modes."""
        if mode not in (MODE_FREE_LOVE, MODE_NTR):
            raise ValueError("错误:修改内容不匹配！")
        with self._lock, self._db:
            self._ensure()
            row = self._settings(gid)
            if row is None:
                updatetime, canmatch, canntr, cdtime = "", 1, 1, DEFAULT_CD_HOURS
            else:
                updatetime, canmatch, canntr, cdtime = row
            if mode == MODE_FREE_LOVE:
                canmatch = status
            else:
                canntr = status
            self._insert_settings(gid, updatetime, canmatch, canntr, cdtime)

    def clear_roster(self, gid) -> None:
        """Reset the roster of one group, or of every group when ``gid`` is 0.

        Favorability survives; each cleared group gets fresh default settings.
        Raises LookupError if the named group has no roster.
        """
        target = str(gid)
        today = date.today().strftime(_DAY_FORMAT)
        with self._lock, self._db:
            tables = [
                row[0]
                for row in self._db.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
            ]
            if target != "0":
                name = f"group{int(target)}"
                if name not in tables:
                    raise LookupError(f"no such table: {name}")
                tables = [name]
            for name in tables:
                if name == _PROTECTED_TABLE:
                    continue
                self._db.execute(f'DROP TABLE IF EXISTS "{name}"')
                if not name.startswith("group"):
                    continue
                self._ensure()
                self._insert_settings(int(name[5:]), today, 1, 1, DEFAULT_CD_HOURS)
            self._ensure()

    def lookup(self, gid: int, uid: int) -> tuple[UserInfo | None, Status]:
        """Return a member's certificate and status; (None, SINGLE) if unmarried."""
        with self._lock, self._db:
            table = self._ensure_group(gid)
            columns = "user, target, username, targetname, updatetime"
            row = self._db.execute(
                f"SELECT {columns} FROM {table} WHERE user = ?", (uid,)
            ).fetchone()
            if row is not None:
                return UserInfo(*row), Status.HUSBAND
            row = self._db.execute(
                f"SELECT {columns} FROM {table} WHERE target = ?", (uid,)
            ).fetchone()
            if row is not None:
                return UserInfo(*row), Status.WIFE
            return None, Status.SINGLE

    def register(self, gid: int, uid: int, target: int, username: str, targetname: str) -> None:
        """Record a marriage of ``uid`` to ``target``; a target of 0 means single by choice."""
        updatetime = datetime.now().strftime("%H:%M:%S")
        with self._lock, self._db:
            table = self._ensure_group(gid)
            self._db.execute(
                f"INSERT OR REPLACE INTO {table} (user, target, username, targetname, updatetime) "
                "VALUES (?, ?, ?, ?, ?)",
                (uid, target, username, targetname, updatetime),
            )

    def divorce_wife(self, gid: int, wife: int) -> None:
        """Remove the marriage in which ``wife`` is the target."""
        with self._lock, self._db:
            table = self._ensure_group(gid)
            self._db.execute(f"DELETE FROM {table} WHERE target = ?", (wife,))

    def divorce_husband(self, gid: int, husband: int) -> None:
        """Remove the marriage registered by ``husband``."""
        with self._lock, self._db:
            table = self._ensure_group(gid)
            self._db.execute(f"DELETE FROM {table} WHERE user = ?", (husband,))

    def roster(self, gid: int) -> list[tuple[str, str, str, str]]:
        """List couples as (username, user, targetname, target), skipping the self-married."""
        with self._lock, self._db:
            table = self._ensure_group(gid)
            rows = self._db.execute(
                f"SELECT username, user, targetname, target FROM {table} "
                "WHERE target != 0 ORDER BY user"
            ).fetchall()
        return [(name, str(user), tname, str(target)) for name, user, tname, target in rows]

    def _find_favor(self, uid: int, target: int):
        return self._db.execute(
            "SELECT userinfo, favor FROM favorability WHERE userinfo GLOB ?",
            (f"*{uid}+{target}*",),
        ).fetchone()

    def get_favorability(self, uid: int, target: int) -> int:
        """Return the favorability between two users, starting a record at 0."""
        with self._lock, self._db:
            self._ensure()
            row = self._find_favor(uid, target)
            if row is None:
                self._db.execute(
                    "INSERT OR REPLACE INTO favorability (userinfo, favor) VALUES (?, ?)",
                    (f"{uid}+{target}+{uid}", 0),
                )
                return 0
            return row[1]

    def set_favorability(self, uid: int, target: int, score: int) -> int:
        """Add ``score`` to the favorability of a pair and return the new value.

        An existing value is kept within 0..100; a new record takes ``score`` as is.
        """
        with self._lock, self._db:
            self._ensure()
            row = self._find_favor(uid, target)
            if row is None:
                self._db.execute(
                    "INSERT OR REPLACE INTO favorability (userinfo, favor) VALUES (?, ?)",
                    (f"{uid}+{target}+{uid}", score),
                )
                return score
            key, favor = row
            favor = max(FAVOR_MIN, min(FAVOR_MAX, favor + score))
            self._db.execute(
                "INSERT OR REPLACE INTO favorability (userinfo, favor) VALUES (?, ?)", (key, favor)
            )
            return favor

    def get_cd_time(self, gid: int) -> float:
        """Return the skill cooldown of a group in hours, creating default settings."""
        with self._lock, self._db:
            self._ensure()
            row = self._settings(gid)
            if row is None:
                self._insert_settings(gid, "", 1, 1, DEFAULT_CD_HOURS)
                return DEFAULT_CD_HOURS
            return row[3]

    def set_cd_time(self, gid: int, cd_time: float) -> None:
        """Set the skill cooldown of a group in hours."""
        with self._lock, self._db:
            self._ensure()
            row = self._settings(gid)
            if row is None:
                self._insert_settings(gid, "", 1, 1, cd_time)
            else:
                self._insert_settings(gid, row[0], row[1], row[2], cd_time)

    def write_cd_time(self, gid: int, uid: int, mode: int) -> None:
        """Record that a user just used a skill."""
        with self._lock, self._db:
            self._ensure()
            self._db.execute(
                "INSERT OR REPLACE INTO cdsheet (time, groupid, userid, modeid) "
                "VALUES (?, ?, ?, ?)",
                (int(time.time()), gid, uid, mode),
            )

    def compare_cd_time(self, gid: int, uid: int, mode: int, cd_time: float) -> bool:
        """Tell whether a skill may be used; an expired record is removed."""
        where = "WHERE groupid = ? AND userid = ? AND modeid = ?"
        args = (gid, uid, mode)
        with self._lock, self._db:
            self._ensure()
            row = self._db.execute(f"SELECT time FROM cdsheet {where}", args).fetchone()
            if row is None:
                return True
            if (time.time() - row[0]) / 3600 > cd_time:
                self._db.execute(f"DELETE FROM cdsheet {where}", args)
                return True
            return False

    def close(self) -> None:
        with self._lock:
            self._db.close()