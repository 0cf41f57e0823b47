"""Task operations on top of ``UserStore``.

Each operation reads the current lists, applies one change and writes the
touched fields back. Concurrent edits from other tabs are last-writer-wins.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional

from taskquest.errors import ThemeLockedError
from taskquest.models import Quote, Task, ThemeSettings
from taskquest.store.storage import UserStore
from taskquest.themes import get_theme, is_known_theme
from taskquest.xp import XPAward, award_completions, level_from_xp

logger = logging.getLogger(__name__)


class TodoService:
    def __init__(self, store: UserStore, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self.store = store
        self._clock = clock

    def _now(self) -> datetime:
        return self._clock().replace(microsecond=0)

    # ---------------- Active tasks ----------------

    def add_task(self, task: Task) -> Task:
        tasks = self.store.get_tasks()
        self.store.save_tasks([task] + tasks)
        logger.info("Added task %s", task.id)
        return task

    def update_task(self, task: Task) -> bool:
        tasks = self.store.get_tasks()
        if not any(t.id == task.id for t in tasks):
            return False
        self.store.save_tasks([task if t.id == task.id else t for t in tasks])
        return True

    def remove_task(self, task_id: str) -> bool:
        tasks = self.store.get_tasks()
        kept = [t for t in tasks if t.id != task_id]
        if len(kept) == len(tasks):
            return False
        self.store.save_tasks(kept)
        logger.info("Removed task %s", task_id)
        return True

    def complete_task(self, task_id: str) -> Optional[XPAward]:
        """Move a task to the head of history and award its XP.

        Returns the award, or None when the task is no longer active.
        """
        tasks = self.store.get_tasks()
        task = next((t for t in tasks if t.id == task_id), None)
        if task is None:
            return None

        finished = task.completed(self._now())
        completed = [finished] + self.store.get_completed_tasks()
        remaining = [t for t in tasks if t.id != task_id]
        self.store.save_all(remaining, completed)

        xp = self.store.get_xp_data()
        result = award_completions(xp.xp, [finished], self._now())
        self.store.save_xp_data(result.xp, result.level)
        if result.level > xp.level:
            logger.info("Level up: %s -> %s", xp.level, result.level)
        return result.latest

    def clear_all(self) -> int:
        count = len(self.store.get_tasks())
        self.store.save_tasks([])
        return count

    # ---------------- History ----------------

    def undo_task(self, task_id: str) -> Optional[Task]:
        """Return a completed task to the end of the active list. XP already earned is kept."""
        completed = self.store.get_completed_tasks()
        task = next((t for t in completed if t.id == task_id), None)
        if task is None:
            return None
        reopened = task.reopened()
        tasks = self.store.get_tasks() + [reopened]
        self.store.save_all(tasks, [t for t in completed if t.id != task_id])
        return reopened

    def clear_history(self) -> int:
        count = len(self.store.get_completed_tasks())
        self.store.save_completed_tasks([])
        return count

    # ---------------- Quotes ----------------

    def pin_quote(self, text: str, author: str) -> Optional[Quote]:
        return self.store.add_pinned_quote(text, author)

    def remove_quote(self, quote_id: str) -> bool:
        return self.store.remove_pinned_quote(quote_id)

    def pinned_quotes(self) -> List[Quote]:
        return self.store.get_pinned_quotes()

    # ---------------- Theme ----------------

    def change_theme(self, theme_id: str) -> ThemeSettings:
        if not is_known_theme(theme_id):
            raise ValueError(f"Unknown theme: {theme_id}")
        theme = get_theme(theme_id)
        level = level_from_xp(self.store.get_xp_data().xp).level
        if level < theme.level_required:
            raise ThemeLockedError(theme.id, theme.level_required, level)
        current = self.store.get_theme_settings()
        self.store.save_theme_settings(theme.id, current.is_dark_mode)
        return ThemeSettings(theme_id=theme.id, is_dark_mode=current.is_dark_mode)

    def toggle_dark_mode(self) -> ThemeSettings:
        current = self.store.get_theme_settings()
        self.store.save_theme_settings(current.theme_id, not current.is_dark_mode)
        return ThemeSettings(theme_id=current.theme_id, is_dark_mode=not current.is_dark_mode)
