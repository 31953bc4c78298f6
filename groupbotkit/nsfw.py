"""Describing image classification scores in words."""

from __future__ import annotations

from dataclasses import dataclass

HSO_IMAGE = "https://gchat.qpic.cn/gchatpic_new//--4234EDEC5F147A4C319A41149D7E0EA9/0"
_THRESHOLD = 0.3


@dataclass
class Picture:
    """Class probabilities of one image."""

    drawings: float = 0.0
    hentai: float = 0.0
    neutral: float = 0.0
    porn: float = 0.0
    sexy: float = 0.0


def _tags(picture: Picture) -> list[str]:
    tags = []
    if picture.hentai > _THRESHOLD:
        tags.append(" hentai")
    if picture.porn > _THRESHOLD:
        tags.append(" porn")
    if picture.sexy > _THRESHOLD:
        tags.append(" hso")
    return tags


def judge(picture: Picture) -> str:
    """Describe a picture on request."""
    if picture.neutral > _THRESHOLD:
        return "普通哦"
    if picture.drawings > _THRESHOLD or picture.neutral < _THRESHOLD:
        kind = "二次元"
    else:
        kind = "三次元"
    return kind + "".join(_tags(picture))


def auto_judge(picture: Picture) -> str | None:
    """Describe a picture only when it is flagged; otherwise return None."""
    if picture.neutral > _THRESHOLD:
        return None
    kind = "二次元" if picture.drawings > _THRESHOLD else "三次元"
    tags = _tags(picture)
    if not tags:
        return None
    return kind + "".join(tags)