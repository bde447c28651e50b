"""
Streamlit renderers for the three pages.

Each function draws one view object from tracker/ and forwards user input
back to it. No request logic lives here.
"""

import time
from datetime import date

import streamlit as st

from tracker.course_form import AddCourseView, CourseFormView, EditCourseView
from tracker.course_list import STATUS_FILTERS, CourseListView, SortKey, SortOrder
from tracker.models import Status
from tracker.shell import ADD_PATH, AppShell

SORT_LABELS = {
    SortKey.NONE: "None",
    SortKey.COURSE_NAME: "Course Name",
    SortKey.COMPLETION_DATE: "Completion Date",
}
STATUSES = [s.value for s in Status]

DELETE_PROMPT = "Are you sure you want to delete this course? This action cannot be undone."


def go(shell: AppShell, path: str) -> None:
    shell.navigate(path)
    st.query_params["path"] = path
    st.rerun()


# ---------------------------------------------------------------------------
# List page
# ---------------------------------------------------------------------------

def render_list(shell: AppShell, view: CourseListView) -> None:
    st.subheader("My Tracked Courses")

    left, mid, right = st.columns([2, 2, 1])
    status = left.selectbox(
        "Filter by Status", STATUS_FILTERS, index=STATUS_FILTERS.index(view.status_filter)
    )
    view.set_filter(status)

    keys = list(SORT_LABELS)
    key = mid.selectbox(
        "Sort by", keys, index=keys.index(view.sort_key), format_func=SORT_LABELS.get
    )
    view.set_sort_key(key)

    if view.can_toggle_order:
        label = "Ascending" if view.sort_order == SortOrder.ASC else "Descending"
        if right.button(label, key="sort_order"):
            view.toggle_sort_order()
            st.rerun()

    if view.fetch_error:
        st.error(view.fetch_error)
    if view.delete_error:
        st.error(view.delete_error)

    if view.pending_delete:
        st.warning(DELETE_PROMPT)
        yes, no = st.columns(2)
        if yes.button("Delete", type="primary", key="confirm_delete"):
            view.confirm_delete()
            st.rerun()
        if no.button("Cancel", key="cancel_delete"):
            view.cancel_delete()
            st.rerun()

    rows = view.rows()
    if not rows and not view.fetch_error:
        st.info("No courses to show.")

    header = st.columns([3, 2, 2, 3, 3])
    for col, title in zip(header, ["Course Name", "Status", "Completion Date", "Progress", "Actions"]):
        col.markdown(f"**{title}**")

    for row in rows:
        name, status_col, date_col, progress_col, actions = st.columns([3, 2, 2, 3, 3])
        name.write(row.course_name)
        status_col.write(row.status)
        date_col.write(row.completion_date)
        if row.show_progress_bar:
            progress_col.progress(row.progress / 100, text=row.progress_label)
        else:
            progress_col.write(row.progress_label)

        edit, delete, cert = actions.columns(3)
        if edit.button("Edit", key=f"edit_{row.course_id}"):
            go(shell, row.edit_path)
        if delete.button("Delete", key=f"delete_{row.course_id}"):
            view.request_delete(row.course_id)
            st.rerun()
        if row.certificate_href:
            cert.link_button("Certificate", row.certificate_href)

    add, refresh = st.columns([1, 1])
    if add.button("Add New Tracked Course", type="primary"):
        go(shell, ADD_PATH)
    if refresh.button("Refresh"):
        view.reload()
        st.rerun()


# ---------------------------------------------------------------------------
# Add / edit pages
# ---------------------------------------------------------------------------

def _course_form(view: CourseFormView, submit_label: str) -> bool:
    form = view.form
    status = form.status.value if isinstance(form.status, Status) else form.status
    status_index = STATUSES.index(status) if status in STATUSES else 0
    completion = form.completion_date if isinstance(form.completion_date, date) else None
    with st.form("course_form"):
        values = {
            "course_name": st.text_input("Course Name", value=form.course_name),
            "status": st.selectbox("Status", STATUSES, index=status_index),
            "instructor": st.text_input("Instructor (Optional)", value=form.instructor),
            "completion_date": st.date_input(
                "Completion Date (Optional)", value=completion, format="YYYY-MM-DD"
            ),
            "certificate_link": st.text_input("Certificate Link (Optional)", value=form.certificate_link),
            "progress": st.number_input("Progress (%)", value=int(form.progress or 0), step=1),
            "notes": st.text_area("Notes (Optional)", value=form.notes),
        }
        submitted = st.form_submit_button(submit_label, type="primary")

    if submitted:
        for name, value in values.items():
            view.update_field(name, value)
    return submitted


def _messages(view: CourseFormView) -> None:
    if view.message:
        st.success(view.message)
    if view.submit_error:
        st.error(view.submit_error)


def _wait_for_redirect(shell: AppShell, view: CourseFormView) -> None:
    """Block until the scheduled redirect is due, then follow it.

    Clicking elsewhere meanwhile interrupts this run; the shell then tears
    the view down and the redirect is cancelled.
    """
    action = view.navigation
    if action is None or not action.pending:
        return
    time.sleep(action.remaining())
    if action.fire_if_due():
        st.query_params["path"] = shell.path or "/"
        st.rerun()


def render_add(shell: AppShell, view: AddCourseView) -> None:
    st.subheader("Add New Tracked Course")
    if _course_form(view, "Add Course"):
        # Redraw from the view so a reset form shows its defaults.
        view.submit()
        st.rerun()
    _messages(view)
    _wait_for_redirect(shell, view)


def render_edit(shell: AppShell, view: EditCourseView) -> None:
    st.subheader("Edit Tracked Course")
    if view.fetch_error:
        st.error(view.fetch_error)
        return
    if not view.show_form:
        return
    if _course_form(view, "Update Course"):
        view.submit()
        st.rerun()
    _messages(view)
    _wait_for_redirect(shell, view)
