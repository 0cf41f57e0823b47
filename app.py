import json
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

import streamlit as st

from taskquest.errors import InvalidDocumentError, TaskQuestError
from taskquest.forms import apply_edit, build_task, form_defaults, validate_task_form
from taskquest.listing import ACTIVE_SORT_KEYS, HISTORY_SORT_KEYS, filter_by_subject, sort_tasks, subject_suggestions
from taskquest.models import Task
from taskquest.session_state import LoadMoreWindow
from taskquest.widgets import (
    bootstrap,
    live_sync,
    render_random_quote,
    render_theme_selector,
    render_xp_bar,
    reported_errors,
    task_card_html,
)

ctx = bootstrap("TaskQuest", "✅")
live_sync(ctx)
now = datetime.now().replace(microsecond=0)

try:
    tasks = ctx.store.get_tasks()
    completed = ctx.store.get_completed_tasks()
    xp = ctx.store.get_xp_data()
except TaskQuestError as exc:
    st.error(str(exc))
    st.stop()

subjects = subject_suggestions(tasks, completed)


# ---------------- Form helpers ----------------


def _parse_day(raw: Optional[str]) -> Optional[date]:
    return date.fromisoformat(raw) if raw else None


def _parse_clock(raw: Optional[str], fallback: str) -> time:
    return time.fromisoformat(raw or fallback)


def _task_fields(prefix: str, values: Dict[str, Any]) -> Dict[str, Any]:
    """Render the task inputs and return them as form strings."""
    title = st.text_input("Title", value=values.get("title") or "", key=f"{prefix}_title")
    c1, c2 = st.columns(2)
    with c1:
        start_day = st.date_input("Start date", value=_parse_day(values.get("start_date")), key=f"{prefix}_sd")
        end_day = st.date_input("End date (optional)", value=_parse_day(values.get("end_date")), key=f"{prefix}_ed")
        workload = st.number_input(
            "Workload (optional)",
            min_value=0.0,
            step=0.5,
            value=float(values["workload"]) if values.get("workload") not in (None, "") else None,
            help="Estimated hours",
            key=f"{prefix}_wl",
        )
    with c2:
        start_clock = st.time_input("Start time", value=_parse_clock(values.get("start_time"), "00:00"), key=f"{prefix}_st")
        end_clock = st.time_input("End time (optional)", value=_parse_clock(values.get("end_time"), "23:59"), key=f"{prefix}_et")
        link = st.text_input("Link (optional)", value=values.get("link") or "", key=f"{prefix}_link")
    subject = st.text_input("Subject", value=values.get("subject") or "", key=f"{prefix}_subject")
    if subjects:
        st.caption("Subjects in use: " + ", ".join(subjects))
    return {
        "title": title,
        "start_date": start_day.isoformat() if start_day else None,
        "start_time": f"{start_clock:%H:%M}" if start_clock else None,
        "end_date": end_day.isoformat() if end_day else None,
        "end_time": f"{end_clock:%H:%M}" if end_clock else None,
        "workload": workload,
        "link": link,
        "subject": subject,
    }


def _show_errors(errors: Dict[str, str]) -> None:
    for field, message in errors.items():
        st.error(f"{field.replace('_', ' ').capitalize()}: {message}")


def _validate(fields: Dict[str, Any]) -> Dict[str, str]:
    errors = validate_task_form(
        title=fields["title"],
        start_date=fields["start_date"],
        start_time=fields["start_time"],
        end_date=fields["end_date"],
        end_time=fields["end_time"],
        workload=fields["workload"],
        link=fields["link"],
    )
    if not fields["start_date"]:
        errors.setdefault("start_date", "Start date is required")
    return errors


@st.dialog("Edit task", width="large")
def edit_dialog(task: Task) -> None:
    fields = _task_fields(f"edit_{task.id}", task.to_dict())
    if st.button("Save changes", type="primary"):
        errors = _validate(fields)
        if errors:
            _show_errors(errors)
            return
        with reported_errors():
            ctx.service.update_task(apply_edit(task, **fields))
            st.rerun()


@st.dialog("Please confirm")
def confirm_dialog(message: str, action: str) -> None:
    st.write(message)
    c1, c2 = st.columns(2)
    if c1.button("Yes", type="primary"):
        with reported_errors():
            if action == "clear_all":
                ctx.service.clear_all()
            elif action == "clear_history":
                ctx.service.clear_history()
            st.rerun()
    if c2.button("Cancel"):
        st.rerun()


# ---------------- Sidebar ----------------

with st.sidebar:
    render_theme_selector(ctx)
    st.divider()
    render_random_quote(ctx)
    st.divider()
    st.subheader("Import / Export")
    with reported_errors():
        st.download_button(
            "⬇️ Export JSON",
            data=json.dumps(ctx.store.export_document(), indent=2).encode("utf-8"),
            file_name=f"taskquest-{now:%Y%m%d}.json",
            mime="application/json",
        )
    upload = st.file_uploader("Import JSON", type=["json"])
    if upload is not None and st.button("Import", key="import_doc"):
        try:
            payload = json.loads(upload.getvalue().decode("utf-8"))
        except (UnicodeDecodeError, ValueError):
            st.error("The file is not valid JSON.")
        else:
            try:
                counts = ctx.store.import_document(payload)
            except InvalidDocumentError as exc:
                st.error(str(exc))
            else:
                st.success("Imported " + ", ".join(f"{n} {k}" for k, n in counts.items()) if counts else "Imported")


# ---------------- Header ----------------

st.title("✅ TaskQuest")
render_xp_bar(xp, st.session_state.pop("last_award", None))

with st.expander("➕ Add Task", expanded=not tasks):
    defaults = form_defaults(ctx.config.timezone, now)
    with st.form("add_task", clear_on_submit=True):
        fields = _task_fields("new", defaults)
        submitted = st.form_submit_button("Add Task", type="primary")
    if submitted:
        errors = _validate(fields)
        if errors:
            _show_errors(errors)
        else:
            with reported_errors():
                ctx.service.add_task(build_task(**fields, now=now))
                st.rerun()


# ---------------- Active tasks ----------------


def _render_active(task: Task) -> None:
    st.markdown(task_card_html(task, now), unsafe_allow_html=True)
    b1, b2, b3 = st.columns(3)
    if b1.button("✔ Done", key=f"done_{task.id}"):
        with reported_errors():
            st.session_state["last_award"] = ctx.service.complete_task(task.id)
            st.rerun()
    if b2.button("✏️ Edit", key=f"edit_{task.id}"):
        edit_dialog(task)
    if b3.button("🗑 Delete", key=f"del_{task.id}"):
        with reported_errors():
            ctx.service.remove_task(task.id)
            st.rerun()


def _controls(prefix: str, sort_keys: Dict[str, str], default_sort: str) -> tuple:
    options = [""] + subjects
    # Widget keys keep these choices in st.session_state across reruns.
    if st.session_state.get(f"ui:{prefix}_subject") not in options:
        st.session_state[f"ui:{prefix}_subject"] = ""
    st.session_state.setdefault(f"ui:{prefix}_sort", default_sort)
    st.session_state.setdefault(f"ui:{prefix}_order", "desc")

    c1, c2, c3 = st.columns([2, 2, 1])
    subject = c1.selectbox("Subject", options, format_func=lambda s: s or "All subjects", key=f"ui:{prefix}_subject")
    sort_by = c2.selectbox("Sort by", list(sort_keys), format_func=sort_keys.get, key=f"ui:{prefix}_sort")
    order = c3.radio("Order", ["desc", "asc"], horizontal=True, key=f"ui:{prefix}_order")
    return subject, sort_by, order


active_tab, history_tab = st.tabs([f"📋 Tasks ({len(tasks)})", f"✅ History ({len(completed)})"])

with active_tab:
    subject, sort_by, order = _controls("tasks", ACTIVE_SORT_KEYS, "created_at")
    view = st.radio("View", ["list", "grid"], horizontal=True, key="ui:taskViewMode", format_func=str.title)
    shown: List[Task] = sort_tasks(filter_by_subject(tasks, subject), sort_by, order)

    window = LoadMoreWindow(st.session_state, "ui:tasks_window", ctx.config.page_size)
    window.sync((subject, sort_by, order))

    if not shown:
        st.info("No tasks yet. Add one above.")
    elif view == "grid":
        cols = st.columns(3)
        for i, task in enumerate(window.visible(shown)):
            with cols[i % 3]:
                _render_active(task)
    else:
        for task in window.visible(shown):
            _render_active(task)

    if window.has_more(len(shown)):
        st.caption(f"Showing {window.count} of {len(shown)}")
        if st.button("Load more", key="tasks_more"):
            window.load_more()
            st.rerun()

    if tasks and st.button("🧹 Clear all tasks", key="clear_all"):
        confirm_dialog("Delete all tasks? This cannot be undone.", "clear_all")


# ---------------- History ----------------

with history_tab:
    subject, sort_by, order = _controls("history", HISTORY_SORT_KEYS, "completed_at")
    shown = sort_tasks(filter_by_subject(completed, subject), sort_by, order, default="completed_at")

    window = LoadMoreWindow(st.session_state, "ui:history_window", ctx.config.page_size)
    window.sync((subject, sort_by, order))

    if not shown:
        st.info("No completed tasks yet. Complete some tasks to see them here.")
    for task in window.visible(shown):
        st.markdown(task_card_html(task, now), unsafe_allow_html=True)
        if st.button("↩ Undo", key=f"undo_{task.id}"):
            with reported_errors():
                ctx.service.undo_task(task.id)
                st.rerun()

    if window.has_more(len(shown)):
        st.caption(f"Showing {window.count} of {len(shown)}")
        if st.button("Load more", key="history_more"):
            window.load_more()
            st.rerun()

    if completed and st.button("🧹 Clear history", key="clear_history"):
        confirm_dialog("Clear completed history? This cannot be undone.", "clear_history")
