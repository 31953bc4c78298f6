"""Framework-free building blocks for a group chat bot: reminders, group management, a marriage game, MIDI and small utilities."""

__version__ = "0.1.0"

__all__ = [
    "timer_model",
    "schedule",
    "clock",
    "manager",
    "manager_text",
    "nsfw",
    "runcode",
    "midi",
    "marriage",
    "marriage_rules",
    "moyu",
    "hyaku",
    "reborn",
]