import html

import streamlit as st

from taskquest.errors import TaskQuestError
from taskquest.listing import page_count, page_items
from taskquest.models import Quote
from taskquest.widgets import bootstrap, live_sync, reported_errors

QUOTES_PER_PAGE = 9

ctx = bootstrap("Hall of Quotes · TaskQuest", "📌")
live_sync(ctx)

try:
    quotes = sorted(ctx.store.get_pinned_quotes(), key=lambda q: q.pinned_at, reverse=True)
except TaskQuestError as exc:
    st.error(str(exc))
    st.stop()

st.title("📌 Hall of Quotes")


@st.dialog("Pinned quote", width="large")
def quote_dialog(quote: Quote) -> None:
    st.caption(f"Pinned {quote.pinned_at:%B %d, %Y at %H:%M}")
    st.markdown(
        f'<div class="tq-quote" style="font-size:1.6rem">"{html.escape(quote.text)}"</div>',
        unsafe_allow_html=True,
    )
    st.markdown(f"### — {html.escape(quote.author)}")
    c1, c2 = st.columns(2)
    if c1.button("🗑 Remove", key=f"dlg_rm_{quote.id}"):
        with reported_errors():
            ctx.service.remove_quote(quote.id)
            st.rerun()
    if c2.button("Close", key=f"dlg_close_{quote.id}"):
        st.rerun()


if not quotes:
    st.info("No Pinned Quotes Yet. Pin a quote from the sidebar of the task board to keep it here.")
    st.stop()

pages = page_count(len(quotes), QUOTES_PER_PAGE)
page = min(max(1, int(st.session_state.get("ui:quotes_page", 1))), pages)
st.caption(f"{len(quotes)} pinned quote{'s' if len(quotes) != 1 else ''}")

start = (page - 1) * QUOTES_PER_PAGE
cols = st.columns(3)
for i, quote in enumerate(quotes[start:start + QUOTES_PER_PAGE]):
    with cols[i % 3]:
        with st.container(border=True):
            st.markdown(f'<div class="tq-quote">"{html.escape(quote.text)}"</div>', unsafe_allow_html=True)
            st.caption(f"— {quote.author} · {quote.pinned_at:%b %d, %Y}")
            b1, b2 = st.columns(2)
            if b1.button("View", key=f"view_{quote.id}"):
                quote_dialog(quote)
            if b2.button("Remove", key=f"rm_{quote.id}"):
                with reported_errors():
                    ctx.service.remove_quote(quote.id)
                    st.rerun()

items = page_items(page, pages)
if items:
    nav = st.columns(len(items) + 2)
    if nav[0].button("‹", disabled=page == 1, key="quotes_prev"):
        st.session_state["ui:quotes_page"] = page - 1
        st.rerun()
    for slot, item in zip(nav[1:-1], items):
        if item == "…":
            slot.markdown("…")
        elif slot.button(str(item), key=f"quotes_p{item}", type="primary" if item == page else "secondary"):
            st.session_state["ui:quotes_page"] = item
            st.rerun()
    if nav[-1].button("›", disabled=page == pages, key="quotes_next"):
        st.session_state["ui:quotes_page"] = page + 1
        st.rerun()
