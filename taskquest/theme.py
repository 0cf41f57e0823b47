import os

import streamlit as st
from streamlit.errors import StreamlitAPIException

from taskquest.themes import get_theme, theme_css


def set_theme(
    page_title: str = "TaskQuest",
    page_icon: str = "✅",
    theme_id: str = "default",
    dark: bool = False,
    layout: str = "wide",
    initial_sidebar_state: str = "expanded",
):
    """Configure the Streamlit page and inject the palette plus global CSS.

    Safe to call once at the top of each page. Subsequent calls are ignored by
    Streamlit for page_config but CSS is still (re)injected, so a theme change
    takes effect on the next rerun.
    """
    try:
        st.set_page_config(
            page_title=page_title,
            page_icon=page_icon,
            layout=layout,
            initial_sidebar_state=initial_sidebar_state,
        )
    except StreamlitAPIException:
        # set_page_config can only be called once per run.
        pass

    palette = theme_css(get_theme(theme_id), dark)

    theme_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'assets', 'custom_theme.css')

    try:
        with open(theme_file, 'r', encoding='utf-8') as f:
            css = f.read()
    except FileNotFoundError:
        st.error(f"Theme file not found at {theme_file}. Please check the file path.")
        css = ""
    st.markdown(f"<style>{palette}\n{css}</style>", unsafe_allow_html=True)
