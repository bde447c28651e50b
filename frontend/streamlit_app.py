"""
Streamlit frontend for the Course Tracker.

    streamlit run frontend/streamlit_app.py

Talks to the course-tracking REST API at TRACKER_BACKEND_URL and acts for
TRACKER_USER_ID (a placeholder until a real login exists). The current page
is kept in the ?path= query parameter so pages can be bookmarked.
"""

import logging
import sys
from pathlib import Path

import streamlit as st

# Ensure project root is on sys.path when launched via `streamlit run`
ROOT = str(Path(__file__).parent.parent)
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from frontend.ui import go, render_add, render_edit, render_list
from tracker.config import load_settings, setup_logging
from tracker.gateway import CourseGateway
from tracker.identity import UserContext
from tracker.shell import ADD_PATH, LIST_PATH, AppShell, RouteName

settings = load_settings()
setup_logging(settings.log_dir)
log = logging.getLogger("frontend")

st.set_page_config(page_title="Course Tracker", layout="wide")


def _shell() -> AppShell:
    """One shell per browser session, built on first run."""
    if "shell" not in st.session_state:
        gateway = CourseGateway(settings.backend_url, timeout=settings.request_timeout)
        user = UserContext(settings.user_id or None)
        log.info("New session: backend=%s  user=%s", settings.backend_url, user.user_id)
        st.session_state.shell = AppShell(gateway, user, redirect_delay=settings.redirect_delay)
    return st.session_state.shell


shell = _shell()
# Browser back/forward and bookmarks change the query param, not our state.
shell.navigate(st.query_params.get("path", LIST_PATH))

with st.sidebar:
    st.title("Course Tracker")
    if st.button("My Courses", use_container_width=True):
        go(shell, LIST_PATH)
    if st.button("Add Course", use_container_width=True):
        go(shell, ADD_PATH)

if shell.route.name == RouteName.ADD:
    render_add(shell, shell.view)
elif shell.route.name == RouteName.EDIT:
    render_edit(shell, shell.view)
else:
    render_list(shell, shell.view)
