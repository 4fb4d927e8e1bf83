"""
Streamlit Frontend for Expense Tracker

A single page: an "Add Expense" toggle, the expense form,
and the expense table with a running total.

DESIGN PRINCIPLES:
1. The page only renders what ExpenseView.render() returns
2. A load error replaces the whole page with one message
3. A failed submit keeps the form open and filled in
4. The list refreshes on a fixed interval while the page is open

Streamlit re-runs the script instead of keeping an event loop alive,
so the periodic refresh is a fragment that re-runs on a timer and
asks the synchronizer whether a load is due.
"""

import asyncio
from datetime import date

import streamlit as st

from src.config import get_settings, validate_all_settings
from src.orchestrator import ExpenseView, create_app_components


# Page configuration
st.set_page_config(
    page_title="Expenses",
    page_icon="💸",
    layout="centered",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_view() -> ExpenseView:
    """Get or create this session's expense view."""
    if "expense_view" not in st.session_state:
        view, audit_storage = create_app_components()
        st.session_state.expense_view = view
        st.session_state.audit_storage = audit_storage
        st.session_state.form_generation = 0
    return st.session_state.expense_view


def render_form(view: ExpenseView, form_view) -> None:
    """Render the expense form and handle its submit."""
    # New widget keys after each successful submit, so inputs reset
    generation = st.session_state.form_generation
    values = {}

    with st.form(f"expense_form_{generation}", clear_on_submit=False):
        for field in form_view.fields:
            key = f"{field.name}_{generation}"
            if field.input_type == "date":
                picked = st.date_input(
                    field.label,
                    value=date.fromisoformat(field.value) if field.value else None,
                    key=key,
                )
                values[field.name] = picked.isoformat() if picked else ""
            elif field.input_type == "number":
                number = st.number_input(
                    field.label,
                    value=float(field.value) if field.value else None,
                    step=float(field.step or "0.01"),
                    format="%.2f",
                    key=key,
                )
                values[field.name] = "" if number is None else str(number)
            else:
                values[field.name] = st.text_input(
                    field.label,
                    value=field.value,
                    key=key,
                )

        submitted = st.form_submit_button(
            form_view.submit_label,
            disabled=form_view.submit_disabled,
            type="primary",
            use_container_width=True,
        )

    if not submitted:
        return

    for name, value in values.items():
        view.form.update_field(name, value)

    with st.spinner(view.form.SUBMITTING_LABEL):
        created = run_async(view.form.submit())

    if created is not None:
        st.session_state.form_generation += 1
        st.rerun()

    # Failed: the form keeps its values, the user retries
    alert = view.form.dismiss_alert()
    if alert:
        st.error(alert)


def render_table(view_model) -> None:
    """Render the expense rows plus the total row."""
    table = [
        {
            "Date": row.date,
            "Description": row.description,
            "Category": row.category,
            "Amount": row.amount_display,
        }
        for row in view_model.rows
    ]

    if view_model.total is not None:
        table.append({
            "Date": view_model.total.label,
            "Description": "",
            "Category": "",
            "Amount": view_model.total.amount_display,
        })

    if table:
        st.table(table)
    else:
        st.info("No expenses yet. Use 'Add Expense' to record one.")


def render_page() -> None:
    """Render the whole expense page (re-run on the refresh timer)."""
    view = get_view()
    run_async(view.refresh_if_due())

    view_model = view.render()

    if view_model.is_blocked:
        st.error(view_model.error_message)
        return

    st.title(view_model.title)

    _, right = st.columns([3, 1])
    with right:
        if st.button(view_model.toggle_label, use_container_width=True):
            view.form.toggle()
            st.rerun()

    alert = view.form.dismiss_alert()
    if alert:
        st.error(alert)

    if view_model.form is not None:
        render_form(view, view_model.form)

    render_table(view_model)


def render_sidebar() -> None:
    """Connection status and recent activity."""
    st.sidebar.title("💸 Expenses")
    st.sidebar.markdown("---")

    status = validate_all_settings()
    for name in ("api", "sync", "app"):
        if status.get(name, False):
            st.sidebar.success(f"✅ {name} settings")
        else:
            st.sidebar.error(f"❌ {name}: {status.get(f'{name}_error', 'Not configured')}")

    audit_storage = st.session_state.get("audit_storage")
    if audit_storage is None:
        return

    with st.sidebar.expander("Recent activity"):
        for event in run_async(audit_storage.get_recent_events(limit=10)):
            st.caption(f"{event.timestamp:%H:%M:%S} · {event.description}")


def main():
    """Main application entry point."""
    interval = get_settings().sync.refresh_interval_seconds

    render_sidebar()
    st.fragment(run_every=interval)(render_page)()


if __name__ == "__main__":
    main()
