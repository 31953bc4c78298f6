# groupbotkit

Pieces for a group chat bot, kept free of any bot framework: each module
takes plain values (group ids, user ids, text) and returns plain values or
message text, so it can be wired into whatever transport you use.

## Modules

### Reminders

- `groupbotkit.timer_model` – `Timer`, a reminder record whose month, day,
  weekday, hour and minute are packed into one integer field (`emdwhm`) and
  exposed as properties, with `-1` meaning "every". `Timer.timer_info()`
  gives its normalised description and `Timer.timer_id()` a 32-bit id
  derived from it. `get_filled_timer` builds a timer from the regex groups
  of a reminder command (Chinese or Arabic numerals; an invalid field leaves
  the timer disabled with the reason in `alert`), `get_filled_cron_timer`
  builds one from a cron expression. `chinese_num_to_int` and
  `chinese_char_to_int` read Chinese numerals.
- `groupbotkit.schedule` – `next_wake_time(timer, now)` says when a date
  timer should next wake, `should_fire(timer, now)` whether it matches a
  moment, `first_week(date, week)` finds the first given weekday of a month.
- `groupbotkit.clock` – `Clock(db_path, send)` keeps timers in SQLite,
  reloads them on start and fires them in background threads by calling
  `send(self_id, group_id, segments)`. It offers `register_timer`,
  `cancel_timer`, `list_timers`, `get_timer`, `add_timer_into_db`,
  `add_timer_into_map` and `close`, and works as a context manager.
  `CronSchedule` parses five-field cron expressions and `@daily`-style
  descriptors; `alert_message(timer)` builds the @all, text and optional
  image segments a timer sends.

### Group management

- `groupbotkit.manager` – `ManagerStore(path)` stores welcome and farewell
  templates per group and verified github members in SQLite.
  `parse_gist_answer` splits a join answer of the form `username/gisthash`,
  `gist_url` builds the raw gist address named after the md5 of the group
  number, and `check_new_user` accepts a request when the gist holds a unix
  timestamp within 600 seconds (the fetch function and current time can be
  passed in; by default it uses `requests`).
- `groupbotkit.manager_text` – `welcome_to_cq` fills `{at}`, `{nickname}`,
  `{avatar}`, `{uid}`, `{gid}` and `{groupname}`; `mute_minutes` converts a
  mute length with its unit, capped at one month; `unescape_brackets`,
  `toggle_verify`, `toggle_gist`, `pick_lucky` (one of the ten most recent
  speakers) and `arithmetic_question`.

### Marriage game

- `groupbotkit.marriage` – `MarriageRegistry(path)` keeps a daily roster per
  group (`open_day`, `lookup`, `register`, `divorce_wife`,
  `divorce_husband`, `roster`, `clear_roster`), group settings
  (`business_mode`, `set_mode`, `get_cd_time`, `set_cd_time`), favorability
  (`get_favorability`, `set_favorability`) and skill cooldowns
  (`write_cd_time`, `compare_cd_time`). `Status` and `UserInfo` describe a
  member's state.
- `groupbotkit.marriage_rules` – `check_dog`, `check_cp`, `check_divorce`
  and `check_condition` return `None` when a skill may be used, or the
  refusal message; `slice_name` shortens a name to a drawn width of 350
  given a per-character measuring function.

### MIDI

- `groupbotkit.midi` – notation such as `CCGGAAGR C#6<1 R<-1`:
  `make_midi` writes a MIDI file (raising `MidiParseError` on an unreadable
  character), `midi_to_text` turns a track back into notation,
  `str_to_music` also renders WAV with the external `timidity` program.
  Helpers: `note_octave`, `note_name`, `process_one`, `random_target` (for
  ear training) and `check_timbre`.

### Small utilities

- `groupbotkit.moyu` – `Holiday`, `parse_holiday`, `format_holiday`,
  `get_holiday`, `weekend` and `reminder_text`, the daily slacker's
  countdown to the weekend and holidays.
- `groupbotkit.nsfw` – `Picture` scores and the verdict texts `judge` and
  `auto_judge`.
- `groupbotkit.runcode` – `cut_too_long` trims program output beyond 30
  lines or 1000 characters.
- `groupbotkit.hyaku` – `load_verses` reads the 100-poem Hyakunin Isshu CSV
  into `Verse` records; `image_names` gives the picture names of a poem.
- `groupbotkit.reborn` – `WeightedChooser`, `load_rates`, `area_chooser`
  and `reborn_message` for a weighted draw of birthplace and gender.

## Example

```python
from datetime import datetime

from groupbotkit.schedule import next_wake_time
from groupbotkit.timer_model import get_filled_timer

timer = get_filled_timer(["", "12", "-1", "12", "0", "", "test"], 0, 0, False)
print(timer.timer_info())
print(next_wake_time(timer, datetime.now()))
```

## What it does not do

- It does not connect to a chat service, parse incoming messages or
  dispatch commands; you match commands yourself and pass the values in.
- It does not send anything on its own: `Clock` needs a `send` callable.
- It holds no client for the holiday store: `get_holiday` and
  `reminder_text` take a `fetch` function.
- It does not classify images (`nsfw` only words given scores), run code
  remotely, download the poem table or its pictures, or draw the roster
  picture.

## Installing and testing

```
pip install groupbotkit
pip install "groupbotkit[test]"
pytest
```

`str_to_music` needs `timidity` on the `PATH`.