from datetime import datetime

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from taskquest.analytics import (
    EXPLANATIONS,
    NO_SUBJECT,
    compute_analytics,
    efficiency_ratio,
    format_duration,
    insights,
    productivity_color,
    productivity_label,
)
from taskquest.errors import TaskQuestError
from taskquest.timeline import (
    date_position,
    entry_color,
    group_by_day,
    timeline_entries,
    timeline_markers,
    timeline_range,
)
from taskquest.widgets import bootstrap, live_sync, task_card_html

ctx = bootstrap("Timeline · TaskQuest", "📅")
live_sync(ctx)
now = datetime.now().replace(microsecond=0)

try:
    tasks = ctx.store.get_tasks()
    completed = ctx.store.get_completed_tasks()
except TaskQuestError as exc:
    st.error(str(exc))
    st.stop()

st.title("📅 Task Timeline")

entries = timeline_entries(tasks, completed)
rng = timeline_range(entries, now)
markers = timeline_markers(rng, now)

# ---------------- Timeline chart ----------------

if not entries:
    st.info("No tasks with deadlines yet. Give a task an end date to place it on the timeline.")
else:
    df = pd.DataFrame(
        [
            {
                "title": e.task.title,
                "due": e.due,
                "lane": e.task.subject or NO_SUBJECT,
                "color": entry_color(e.task),
                "status": "Completed" if e.task.is_completed else "Active",
                "position": round(date_position(e.due, rng), 1),
            }
            for e in entries
        ]
    )
    fig = go.Figure()
    fig.add_scatter(
        x=df["due"],
        y=df["lane"],
        mode="markers",
        marker=dict(size=14, color=df["color"], line=dict(width=1, color="#ffffff")),
        text=df["title"],
        customdata=df[["status", "position"]],
        hovertemplate="<b>%{text}</b><br>%{x|%b %d %H:%M}<br>%{customdata[0]}<extra></extra>",
        showlegend=False,
    )
    fig.add_vline(x=now, line_dash="dash", line_color="#dc3545")
    fig.update_layout(
        template="plotly_white",
        height=120 + 40 * df["lane"].nunique(),
        margin=dict(l=6, r=6, t=30, b=10),
        xaxis=dict(
            range=[rng.start, rng.end],
            tickvals=[m.when for m in markers],
            ticktext=[("Today" if m.is_today else m.label) for m in markers],
        ),
    )
    st.plotly_chart(fig, use_container_width=True)

    with st.expander("Tasks by day"):
        for day, day_entries in group_by_day(entries).items():
            st.markdown(f"**{day:%a %b %d, %Y}**")
            for e in day_entries:
                st.markdown(task_card_html(e.task, now), unsafe_allow_html=True)

# ---------------- Analytics ----------------

st.header("📊 Task Analytics Dashboard")
a = compute_analytics(tasks, completed, now)

c1, c2, c3, c4 = st.columns(4)
c1.metric("Completion Rate", f"{a.completion_rate:.0f}%")
c2.metric("On-Time Rate", f"{a.on_time_rate:.0f}%")
c3.metric("Avg Completion Time", format_duration(a.average_completion_time))
c4.markdown(
    f"**Productivity**<br><span style='font-size:1.8rem;color:{productivity_color(a.productivity_score)}'>"
    f"{a.productivity_score:.0f}</span> {productivity_label(a.productivity_score)}",
    unsafe_allow_html=True,
)

with st.expander("ℹ️ What do these numbers mean?"):
    for item in EXPLANATIONS.values():
        st.markdown(f"**{item['title']}**")
        st.caption(item["body"])

left, right = st.columns(2)
with left:
    st.subheader("📋 Task Overview")
    st.write(
        f"Total **{a.total_tasks}** · Active **{a.active_tasks}** · "
        f"Completed **{a.completed_tasks}** · Overdue **{a.overdue_tasks}**"
    )

    st.subheader("📅 Weekly Completion Trend")
    trend = go.Figure()
    trend.add_bar(
        x=[w.label for w in a.weekly_trends],
        y=[w.completions for w in a.weekly_trends],
        marker_color="#0b63d6",
    )
    trend.update_layout(template="plotly_white", height=260, margin=dict(l=6, r=6, t=20, b=10))
    st.plotly_chart(trend, use_container_width=True)

with right:
    st.subheader("🏷️ Subject Breakdown")
    if a.subject_stats:
        subj = pd.DataFrame(
            [
                {
                    "Subject": name,
                    "Total": s.total,
                    "Completed": s.completed,
                    "Active": s.active,
                    "Completion %": round(s.completion_rate, 1),
                }
                for name, s in a.subject_stats.items()
            ]
        ).sort_values("Total", ascending=False)
        st.dataframe(subj, hide_index=True, use_container_width=True)
    else:
        st.caption("No tasks yet.")

    st.subheader("⏰ Time Analysis")
    if a.tasks_with_duration:
        ratio = efficiency_ratio(a)
        st.write(f"Average planned duration: **{format_duration(a.average_planned_duration)}**")
        st.write(f"Average actual duration: **{format_duration(a.average_completion_time)}**")
        if ratio is not None:
            st.write(f"Efficiency: **{ratio:.0f}%** of planned time")
        st.caption(f"Based on {a.tasks_with_duration} completed tasks with start and end dates.")
    else:
        st.caption("Complete tasks that have an end date to see time analysis.")

st.subheader("💡 Insights")
tips = insights(a)
if tips:
    for tip in tips:
        st.write(tip)
else:
    st.caption("Keep completing tasks to unlock insights.")
