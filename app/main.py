"""
Streamlit Frontend for Expense Tracker

DESIGN PRINCIPLES:
1. Log an expense in one short form
2. Calendar first: pick a day to see its expenses, page months for the chart
3. Clear field-level messages when a form is rejected
4. Every destructive action asks for confirmation

The UI never touches the expense list directly. It calls the flows built
by create_app_components and renders the snapshots they return.
"""

import logging
from datetime import date

import streamlit as st

from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.models.expense import ExpenseCategory
from expense_tracker.orchestrator import AppComponents, create_app_components
from expense_tracker.views import CalendarState, ExpenseTable, build_donut_chart, format_currency


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    logging.basicConfig(level=get_settings().app.effective_log_level, format="%(message)s")
    try:
        return create_app_components(use_file_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize storage: {e}")
        return create_app_components(use_file_storage=False)


def get_calendar() -> CalendarState:
    if "calendar" not in st.session_state:
        st.session_state.calendar = CalendarState()
    return st.session_state.calendar


def main():
    """Main application entry point."""
    components = get_components()

    st.sidebar.title("💸 Expense Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📅 Calendar", "➕ Log Expense", "🗂️ All Expenses", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.metric("Expenses logged", components.store.count())
    st.sidebar.metric(
        "Total spent",
        format_currency(components.engine.total(), get_settings().app.currency),
    )
    if not components.store.last_save_succeeded:
        st.sidebar.warning("Last change could not be saved to disk.")

    app_settings = get_settings().app
    if not app_settings.is_production:
        st.sidebar.caption(f"Environment: {app_settings.app_environment}")

    if page == "📅 Calendar":
        render_calendar_page(components)
    elif page == "➕ Log Expense":
        render_add_page(components)
    elif page == "🗂️ All Expenses":
        render_all_expenses_page(components)
    elif page == "⚙️ Settings":
        render_settings_page(components)


def render_expense_form(key: str, defaults: dict) -> tuple[bool, dict]:
    """Render the shared expense form. Returns (submitted, form_values)."""
    categories = list(ExpenseCategory)
    with st.form(key, clear_on_submit=False):
        col1, col2 = st.columns(2)
        with col1:
            expense_date = st.date_input("Date of Expense", value=defaults.get("date", date.today()))
            amount = st.number_input(
                "Amount of expense",
                value=float(defaults.get("amount", 1.0)),
                step=0.01,
                format="%.2f",
            )
        with col2:
            category = st.selectbox(
                "Category",
                options=categories,
                index=categories.index(defaults["category"]) if "category" in defaults else None,
                format_func=lambda c: c.label,
                placeholder="Select",
            )
            description = st.text_input(
                "Description",
                value=defaults.get("description", ""),
                placeholder="Eating out...",
                max_chars=get_settings().app.description_max_length,
            )
        submitted = st.form_submit_button("Save", type="primary")

    form = {
        "date": expense_date,
        "amount": amount,
        "category": category,
        "description": description,
    }
    return submitted, form


def show_issues(result) -> None:
    for issue in result.issues:
        if issue.severity == "error":
            st.error(f"**{issue.field.title()}**: {issue.message}")
        else:
            st.warning(f"**{issue.field.title()}**: {issue.message}")


def render_add_page(components: AppComponents):
    """Render the log-an-expense page."""
    st.title("➕ Log an Expense")

    submitted, form = render_expense_form("add_expense", {})
    if submitted:
        expense, result = components.expense_flow.submit(form)
        show_issues(result)
        if expense is not None:
            st.success(
                f"Saved {expense.category.label} expense of "
                f"{format_currency(expense.amount, get_settings().app.currency)}"
            )
            st.session_state.calendar = get_calendar().select(expense.date)


def render_expense_table(components: AppComponents, expenses, key_prefix: str):
    """Render expenses with edit/delete row actions wired to the flows."""
    flow = components.expense_flow
    table = ExpenseTable(
        on_delete=flow.remove,
        on_update=flow.edit,
        currency=get_settings().app.currency,
    )

    if not expenses:
        st.info("No expenses here yet.")
        return

    sort_by = st.selectbox(
        "Sort by",
        options=[None, "date", "amount"],
        format_func=lambda k: "As logged" if k is None else k.title(),
        key=f"{key_prefix}_sort",
    )
    descending = st.toggle("Descending", key=f"{key_prefix}_desc")
    rows = table.rows(expenses, sort_by=sort_by, descending=descending)
    by_id = {expense.id: expense for expense in expenses}

    header = st.columns([2, 2, 2, 4, 2])
    for col, column in zip(header, table.columns):
        col.markdown(f"**{column.header}**")

    for row in rows:
        cols = st.columns([2, 2, 2, 4, 2])
        cols[0].write(row["date"])
        cols[1].write(row["category"])
        cols[2].write(row["amount"])
        cols[3].write(row["description"])
        with cols[4].popover("⋯"):
            expense = by_id[row["id"]]
            submitted, form = render_expense_form(
                f"{key_prefix}_edit_{row['id']}",
                expense.model_dump(),
            )
            if submitted:
                updated, result = table.edit(row["id"], form)
                show_issues(result)
                if updated is not None:
                    st.rerun()
            if st.button("🗑️ Delete", key=f"{key_prefix}_delete_{row['id']}"):
                table.delete(row["id"])
                st.rerun()


def render_calendar_page(components: AppComponents):
    """Render the calendar dashboard."""
    st.title("📅 Calendar")
    calendar = get_calendar()
    currency = get_settings().app.currency

    col1, col2 = st.columns([1, 1])

    with col1:
        nav_prev, nav_label, nav_next = st.columns([1, 3, 1])
        if nav_prev.button("◀", key="prev_month"):
            st.session_state.calendar = calendar = calendar.previous_month()
        if nav_next.button("▶", key="next_month"):
            st.session_state.calendar = calendar = calendar.next_month()
        nav_label.markdown(f"### {calendar.period_label}")

        picked = st.date_input("Selected day", value=calendar.selected_date)
        if picked != calendar.selected_date:
            st.session_state.calendar = calendar = calendar.select(picked)

    dashboard = components.dashboard_flow.build(calendar)

    with col1:
        if dashboard.marked_days:
            days = ", ".join(str(d) for d in sorted(dashboard.marked_days))
            st.caption(f"Days with expenses this month: {days}")

    with col2:
        figure = build_donut_chart(
            dashboard.category_totals,
            dashboard.monthly_total,
            dashboard.period,
            currency=currency,
        )
        st.plotly_chart(figure, use_container_width=True)

    st.markdown("---")
    st.subheader(f"Expenses on {dashboard.selected_date.strftime('%d %B %Y')}")
    render_expense_table(components, dashboard.daily_expenses, "daily")


def render_all_expenses_page(components: AppComponents):
    """Render every expense with bulk actions."""
    st.title("🗂️ All Expenses")
    expenses = components.store.snapshot()

    render_expense_table(components, expenses, "all")

    if not expenses:
        return

    st.markdown("---")
    st.subheader("Bulk actions")
    chosen = st.multiselect(
        "Select expenses to delete",
        options=[e.id for e in expenses],
        format_func=lambda eid: next(
            f"{e.date.isoformat()} · {e.category.label} · {e.description}"
            for e in expenses if e.id == eid
        ),
    )
    if st.button("🗑️ Delete selected", disabled=not chosen):
        removed = components.expense_flow.remove_many(chosen)
        st.success(f"Deleted {removed} expenses")
        st.rerun()

    confirm = st.checkbox("I understand this removes every expense")
    if st.button("⚠️ Clear all expenses", disabled=not confirm):
        components.expense_flow.clear_all()
        st.rerun()


def render_settings_page(components: AppComponents):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()
    for name, key in [("Storage", "storage"), ("Application", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            st.error(f"❌ {name} - {status.get(f'{key}_error', 'Invalid')}")

    debug_mode = get_settings().app.debug_mode
    st.markdown("### Recent Activity")
    for event in components.audit_logger.recent_events(limit=20):
        st.markdown(
            f"`{event.timestamp.strftime('%H:%M:%S')}` "
            f"**{event.event_type.value}** {event.description}"
        )
        if debug_mode:
            st.json(event.to_log_dict(), expanded=False)

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
