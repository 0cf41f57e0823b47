"""Streamlit building blocks shared by every page."""
from __future__ import annotations

import html
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, List, Optional

import streamlit as st

from taskquest.auth import ensure_signed_in
from taskquest.config import AppConfig, get_config
from taskquest.errors import AuthError, TaskQuestError
from taskquest.logging_setup import configure_from
from taskquest.models import Task, ThemeSettings, XPData
from taskquest.quotes import FALLBACK_QUOTE, FetchedQuote, QuoteClient
from taskquest.schedule import elapsed_label, format_remaining, remaining, subject_color, urgency_color
from taskquest.service import TodoService
from taskquest.store.storage import UserStore
from taskquest.store.watcher import DocumentWatcher
from taskquest.theme import set_theme
from taskquest.themes import available_themes, get_theme, locked_themes
from taskquest.xp import XPAward, badge_effects, level_from_xp

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    config: AppConfig
    store: UserStore
    service: TodoService
    theme: ThemeSettings


class LiveDocument:
    """Latest tasks and theme as pushed by the document watcher.

    ``changes`` counts deliveries; pages compare it with the value they last
    rendered to decide whether to rerun.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.changes = 0
        self.tasks: List[Task] = []
        self.completed: List[Task] = []
        self.theme = ThemeSettings()
        self._unsubscribe = []

    def attach(self, store: UserStore) -> None:
        if self._unsubscribe:
            return
        self._unsubscribe.append(store.subscribe_to_user_data(self._on_user_data))
        self._unsubscribe.append(store.subscribe_to_theme_settings(self._on_theme))

    def _on_user_data(self, tasks: List[Task], completed: List[Task]) -> None:
        with self._lock:
            self.tasks, self.completed = tasks, completed
            self.changes += 1

    def _on_theme(self, theme_id: str, is_dark_mode: bool) -> None:
        with self._lock:
            self.theme = ThemeSettings(theme_id=theme_id, is_dark_mode=is_dark_mode)


@st.cache_resource(show_spinner=False)
def _shared_watcher(database_url: str, document_id: str, interval_seconds: int) -> DocumentWatcher:
    return DocumentWatcher(database_url, document_id, interval_seconds=interval_seconds)


@st.cache_resource(show_spinner=False)
def _live_document(database_url: str, document_id: str) -> LiveDocument:
    return LiveDocument()


@st.cache_resource(show_spinner=False)
def _quote_client(url: str, api_key: Optional[str], timeout_seconds: float) -> QuoteClient:
    return QuoteClient(url=url, api_key=api_key, timeout_seconds=timeout_seconds)


def bootstrap(page_title: str, page_icon: str) -> AppContext:
    """Sign in, open the store and apply the saved theme. Stops the page on failure."""
    cfg = get_config()
    configure_from(cfg)

    try:
        session = ensure_signed_in(st.session_state, cfg.database_url)
    except AuthError as exc:
        set_theme(page_title, page_icon)
        st.error(f"Could not sign in: {exc}")
        st.stop()

    try:
        store = UserStore(
            cfg.database_url,
            cfg.document_id,
            session,
            watcher=_shared_watcher(cfg.database_url, cfg.document_id, cfg.sync_interval_seconds),
        )
        theme = store.get_theme_settings()
    except TaskQuestError as exc:
        set_theme(page_title, page_icon)
        st.error(str(exc))
        st.stop()

    set_theme(page_title, page_icon, theme_id=theme.theme_id, dark=theme.is_dark_mode)
    return AppContext(config=cfg, store=store, service=TodoService(store), theme=theme)


def live_sync(ctx: AppContext) -> None:
    """Rerun the page whenever another tab or device changes the document."""
    live = _live_document(ctx.config.database_url, ctx.config.document_id)
    try:
        live.attach(ctx.store)
    except TaskQuestError as exc:
        st.warning(f"Live sync unavailable: {exc}")
        return
    st.session_state.setdefault("live_seen", live.changes)

    @st.fragment(run_every=ctx.config.sync_interval_seconds)
    def _poll() -> None:
        if live.changes != st.session_state.get("live_seen"):
            st.session_state["live_seen"] = live.changes
            st.rerun()

    _poll()


@contextmanager
def reported_errors() -> Iterator[None]:
    try:
        yield
    except TaskQuestError as exc:
        logger.warning("Operation failed: %s", exc)
        st.error(str(exc))


# ---------------- Task cards ----------------


def _chip(text: str, color: str) -> str:
    return f'<span class="tq-chip" style="background:{color}">{html.escape(text)}</span>'


def task_card_html(task: Task, now: datetime) -> str:
    color = urgency_color(task, now)
    title = html.escape(task.title)
    if task.link:
        title = f'<a href="{html.escape(task.link)}" target="_blank">{title}</a>'

    meta = [f"Start {task.start_date} {task.start_time or ''}".rstrip()]
    if task.end_date:
        meta.append(f"Due {task.end_date} {task.end_time or ''}".rstrip())
    if task.workload:
        meta.append(f"{task.workload:g}h")

    chips = []
    if task.subject:
        chips.append(_chip(task.subject, subject_color(task.subject)))
    if task.is_completed:
        chips.append(_chip(f"Done {task.completed_at:%b %d %H:%M}", color))
        took = elapsed_label(task)
        if took:
            meta.append(f"took {took}")
    else:
        chips.append(_chip(format_remaining(remaining(task, now)), color))

    return (
        f'<div class="tq-card" style="--tq-accent:{color}">'
        f'<div class="tq-title">{title}</div>'
        f'<div>{"".join(chips)}</div>'
        f'<div class="tq-meta">{" · ".join(html.escape(m) for m in meta)}</div>'
        f"</div>"
    )


# ---------------- XP ----------------


def render_xp_bar(xp: XPData, last_award: Optional[XPAward] = None) -> None:
    progress = level_from_xp(xp.xp)
    fx = badge_effects(progress.level)
    classes = ["tq-badge"]
    for name in ("glow", "pulse", "shadow"):
        if getattr(fx, name):
            classes.append(name)
    if fx.major_effect:
        classes.append(fx.major_effect)
    sparkle = " ✨" if fx.sparkle else ""

    c1, c2 = st.columns([1, 6])
    with c1:
        st.markdown(
            f'<div class="{" ".join(classes)}" style="background:{fx.color};transform:scale({fx.size:.2f})">'
            f"{progress.level}</div>",
            unsafe_allow_html=True,
        )
    with c2:
        st.progress(min(1.0, progress.percent / 100))
        st.caption(f"Level {progress.level}{sparkle} · {progress.xp_in_level:,} / {progress.xp_to_next:,} XP · total {xp.xp:,}")

    if last_award is not None:
        bonus = f", +{last_award.difficulty_bonus_pct}% difficulty" if last_award.difficulty_bonus_pct else ""
        st.toast(
            f"+{last_award.total:,} XP (base {last_award.base}, workload {last_award.workload}, "
            f"speed {last_award.responsiveness}{bonus})"
        )


# ---------------- Theme ----------------


def render_theme_selector(ctx: AppContext) -> None:
    level = ctx.store.get_xp_data().level
    unlocked = available_themes(level)
    ids = [t.id for t in unlocked]
    current = ctx.theme.theme_id if ctx.theme.theme_id in ids else ids[0]

    st.subheader("Theme Selector")
    choice = st.selectbox(
        "Theme",
        ids,
        index=ids.index(current),
        format_func=lambda tid: f"{get_theme(tid).preview} {get_theme(tid).name}",
    )
    dark = st.toggle("Dark Mode", value=ctx.theme.is_dark_mode, help="Toggle between light and dark appearance")

    if choice != current:
        with reported_errors():
            ctx.service.change_theme(choice)
            st.rerun()
    if dark != ctx.theme.is_dark_mode:
        with reported_errors():
            ctx.service.toggle_dark_mode()
            st.rerun()

    locked = locked_themes(level)
    if locked:
        with st.expander("Locked Themes"):
            for t in locked:
                st.caption(f"🔒 {t.preview} {t.name} · level {t.level_required}")


# ---------------- Quotes ----------------


def _config_quote_client(cfg: AppConfig) -> QuoteClient:
    return _quote_client(cfg.quotes_url, cfg.quotes_api_key, cfg.quotes_timeout_seconds)


def render_random_quote(ctx: AppContext) -> None:
    if st.session_state.get("quote") is None or st.button("🔄 New quote", key="quote_refresh"):
        st.session_state["quote"] = _config_quote_client(ctx.config).fetch_or_fallback()
    quote: FetchedQuote = st.session_state.get("quote") or FALLBACK_QUOTE

    st.markdown(f'<div class="tq-quote">"{html.escape(quote.text)}"</div>', unsafe_allow_html=True)
    st.caption(f"— {quote.author}")
    if not quote.pinnable:
        return

    try:
        pinned = ctx.store.is_quote_pinned(quote.text, quote.author)
    except TaskQuestError as exc:
        st.caption(str(exc))
        return
    label = "📌 Pinned" if pinned else "📌 Pin quote"
    if st.button(label, disabled=pinned, key="quote_pin"):
        with reported_errors():
            ctx.service.pin_quote(quote.text, quote.author)
            st.rerun()
