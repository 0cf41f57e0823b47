from __future__ import annotations


class TaskQuestError(Exception):
    """Base class for errors surfaced to the UI."""


class StorageError(TaskQuestError):
    """The document store could not be read or written."""


class AuthError(TaskQuestError):
    """Anonymous sign-in failed."""


class NotSignedInError(TaskQuestError):
    """A store operation was attempted before a session existed."""


class QuoteFetchError(TaskQuestError):
    """The quotes API returned an error or an unexpected payload."""


class ThemeLockedError(TaskQuestError):
    """The requested theme needs a higher level."""

    def __init__(self, theme_id: str, level_required: int, level: int) -> None:
        super().__init__(f"Theme '{theme_id}' requires level {level_required} (current level {level})")
        self.theme_id = theme_id
        self.level_required = level_required
        self.level = level


class InvalidDocumentError(TaskQuestError):
    """An imported document is not a JSON object of the expected shape."""
