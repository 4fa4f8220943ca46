from __future__ import annotations

"""Domain error types.

These are raised by services and converted into short user-facing messages at
controller boundaries. None of them is fatal to the application.
"""


class HanziError(Exception):
    """Base class for recoverable application errors."""


class LevelNotFoundError(HanziError):
    """A level with the requested name does not exist."""

    def __init__(self, name: str) -> None:
        super().__init__("No such level: {}".format(name))
        self.name = name


class LevelFormatError(HanziError):
    """A level file exists but could not be parsed."""


class LevelWriteError(HanziError):
    """A level could not be written to storage."""


class AssetLoadError(HanziError):
    """A character model could not be fetched or measured."""

    def __init__(self, character: str, reason: str) -> None:
        super().__init__("Failed to load model for {!r}: {}".format(character, reason))
        self.character = character
        self.reason = reason
