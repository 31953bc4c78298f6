"""Simple melody notation to MIDI, MIDI back to notation, and rendering to audio.

Notation: a note is a letter ``A``-``G`` optionally followed by ``b`` or ``#``,
an octave number (default 5, so ``C`` is middle C, 60) and ``<n`` giving its
length as a power of two quarter notes (``<1`` a half note, ``<-1`` an
eighth). ``R`` is a rest and takes the same ``<n`` length. Spaces are ignored.
"""

from __future__ import annotations

import io
import math
import os
import random
import re
import subprocess
from pathlib import Path

import mido

NOTE_MAP = {
    "C": 60,
    "Db": 61,
    "D": 62,
    "Eb": 63,
    "E": 64,
    "F": 65,
    "Gb": 66,
    "G": 67,
    "Ab": 68,
    "A": 69,
    "Bb": 70,
    "B": 71,
}

TICKS_PER_QUARTER = 960
DEFAULT_TIMBRE = 40
DEFAULT_OCTAVE = 5
TEMPO_BPM = 72
VELOCITY = 120

_LENGTH_RE = re.compile(r"-?[0-9]+")
_NAME_BY_CLASS = {value % 12: name for name, value in NOTE_MAP.items()}


class MidiParseError(ValueError):
    """The melody text holds a character that cannot be read."""


def note_octave(base: int, octave: int) -> int:
    """Place a pitch class in an octave, keeping the result within 0..127."""
    octave &= 0xFF
    base &= 0xFF
    if octave > 10:
        octave = 10
    if octave == 0:
        return base
    result = (base + 12 * octave) & 0xFF
    if result > 127:
        result -= 12
    return result


def note_name(note: int) -> str:
    """Return the letter name (with ``b`` for flats) of a MIDI note's pitch class."""
    return _NAME_BY_CLASS.get(note % 12, "")


def process_one(note: str) -> int:
    """Read a single note such as ``C#6`` into its MIDI number; other characters are skipped."""
    base = 0
    level = 0
    for ch in note.replace(" ", ""):
        if "A" <= ch <= "G":
            base = NOTE_MAP[ch] % 12
        elif ch == "b":
            base = (base - 1) & 0xFF
        elif ch == "#":
            base = (base + 1) & 0xFF
        elif "0" <= ch <= "9":
            level = (level * 10 + int(ch)) & 0xFF
    if level == 0:
        level = DEFAULT_OCTAVE
    return note_octave(base, level)


def random_target(rng: random.Random | None = None) -> tuple[int, str]:
    """Pick a note for ear training; return its MIDI number and its written answer."""
    rng = rng or random.Random()
    target = 55 + rng.randrange(34)
    return target, note_name(target) + str(target // 12)


def check_timbre(timbre: int) -> int:
    """Return a General MIDI program number, raising if it is outside 0..127."""
    if timbre < 0 or timbre > 127:
        raise ValueError("音色应该在0~127之间")
    return timbre


def _length_value(digits: str) -> int:
    return int(digits) if _LENGTH_RE.fullmatch(digits) else 0


def _length_ticks(length: int) -> int:
    if length >= 0:
        if length >= 32:
            return 0
        return (TICKS_PER_QUARTER << length) & 0xFFFFFFFF
    shift = -length
    if shift >= 32:
        raise MidiParseError("音符长度过短")
    return TICKS_PER_QUARTER // (1 << shift)


def _parse_notes(text: str) -> list[tuple[int, int, int]]:
    """Return (delay before, note, duration) triples in ticks."""
    k = text.replace(" ", "")
    n = len(k)
    events: list[tuple[int, int, int]] = []
    delay = 0
    i = 0
    while i < n:
        base = 0
        level = 0
        rest = False
        digits: list[str] = []
        while True:
            ch = k[i]
            if ch == "R":
                rest = True
                i += 1
            elif "A" <= ch <= "G":
                base = NOTE_MAP[ch] % 12
                i += 1
            elif ch == "b":
                base = (base - 1) & 0xFF
                i += 1
            elif ch == "#":
                base = (base + 1) & 0xFF
                i += 1
            elif "0" <= ch <= "9":
                level = (level * 10 + int(ch)) & 0xFF
                i += 1
            elif ch == "<":
                i += 1
                while i < n and (k[i] == "-" or "0" <= k[i] <= "9"):
                    digits.append(k[i])
                    i += 1
            else:
                raise MidiParseError(f"无法解析第{i}个位置的{ch}字符")
            if i >= n or "A" <= k[i] <= "G" or k[i] == "R":
                break
        ticks = _length_ticks(_length_value("".join(digits)))
        if rest:
            delay = ticks
            continue
        if level == 0:
            level = DEFAULT_OCTAVE
        events.append((delay, note_octave(base, level), ticks))
        delay = 0
    return events


def make_midi(path, text: str, timbre: int = DEFAULT_TIMBRE) -> None:
    """Write the melody ``text`` as a MIDI file; an existing file is left untouched."""
    path = Path(path)
    if path.exists():
        return
    check_timbre(timbre)
    events = _parse_notes(text)

    track = mido.MidiTrack()
    track.append(mido.MetaMessage("time_signature", numerator=4, denominator=4, time=0))
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(TEMPO_BPM), time=0))
    track.append(mido.MetaMessage("instrument_name", name="Violin", time=0))
    track.append(mido.Message("program_change", channel=0, program=timbre, time=0))
    for delay, note, duration in events:
        track.append(mido.Message("note_on", channel=0, note=note, velocity=VELOCITY, time=delay))
        track.append(mido.Message("note_off", channel=0, note=note, velocity=0, time=duration))
    track.append(mido.MetaMessage("end_of_track", time=0))

    midi = mido.MidiFile(type=1, ticks_per_beat=TICKS_PER_QUARTER)
    midi.tracks.append(track)
    midi.save(str(path))


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _power_of(length: float) -> int | None:
    if length <= 0:
        return None
    return _round_half_away(math.log2(length))


def midi_to_text(data: bytes, track_no: int) -> str:
    """Turn one track of a MIDI file back into melody notation."""
    midi = mido.MidiFile(file=io.BytesIO(data))
    if track_no < 0 or track_no >= len(midi.tracks):
        return ""
    abs_start = 0.0
    abs_end = 0.0
    start_note = 0
    end_note = 0
    out: list[str] = []
    ticks = 0
    for msg in midi.tracks[track_no]:
        ticks += msg.time
        if msg.is_meta:
            continue
        sounding = msg.type == "note_on" and msg.velocity > 0
        if sounding:
            abs_start = float(ticks)
            start_note = msg.note
        if msg.type == "note_off" or (msg.type == "note_on" and msg.velocity == 0):
            abs_end = float(ticks)
            end_note = msg.note
            if start_note == end_note:
                out.append(note_name(msg.note))
                level = msg.note // 12
                if level != DEFAULT_OCTAVE:
                    out.append(str(level))
                power = _power_of((abs_end - abs_start) / TICKS_PER_QUARTER)
                if power is not None and power >= -4 and power != 0:
                    out.append("<" + str(power))
                start_note = 0
                end_note = 0
        if sounding and abs_start > abs_end:
            power = _power_of((abs_start - abs_end) / TICKS_PER_QUARTER)
            if power == 0:
                out.append("R")
            elif power is not None and power >= -4:
                out.append("R<" + str(power))
    return "".join(out)


def str_to_music(text: str, midi_file, timbre: int = DEFAULT_TIMBRE) -> str:
    """Write ``text`` as MIDI and render it to WAV with timidity; return the WAV path."""
    midi_path = str(midi_file)
    make_midi(midi_path, text, timbre)
    wav_path = midi_path.replace(".mid", ".wav")
    subprocess.run(
        ["timidity", os.path.abspath(midi_path), "-Ow", "-o", os.path.abspath(wav_path)],
        check=True,
    )
    return wav_path