[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "groupbotkit"
version = "0.1.0"
description = "Framework-free building blocks for a group chat bot: reminders, group management, a marriage game, MIDI ear training and small utilities"
requires-python = ">=3.10"
keywords = ["chatbot", "group", "reminder", "timer", "cron", "midi", "cq"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Communications :: Chat",
    "Topic :: Multimedia :: Sound/Audio :: MIDI",
]
dependencies = [
    "mido",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["groupbotkit"]

[tool.pytest.ini_options]
addopts = "-ra"
