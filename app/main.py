"""
Streamlit Frontend for Budget Tracker

Screens: landing, sign in, sign up, expenses, income and budget.

DESIGN PRINCIPLES:
1. One month at a time, picked from the sidebar
2. Clear error messages in simple language
3. Visual feedback for all operations
4. Nothing is saved without an explicit "Save" action

Each browser session owns a SessionContext; the backend components are
shared and cached.
"""

import asyncio
import threading
from decimal import Decimal

import streamlit as st

from src.audit import configure_logging, create_correlation_id
from src.auth import NotAuthenticatedError, SessionContext
from src.budgets import (
    current_month,
    month_display_name,
    recent_months,
    usage_color,
)
from src.config import get_settings, validate_all_settings
from src.models.budget import BudgetMode
from src.models.transaction import EXPENSE_CATEGORIES, INCOME_SOURCES, IncomeFrequency
from src.orchestrator import (
    AppComponents,
    BudgetFlow,
    ExpenseFlow,
    IncomeFlow,
    create_app_components,
)
from src.services.auth import AuthError
from src.services.storage import NotFoundError, StorageError


# Page configuration
st.set_page_config(
    page_title="Budget Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .progress-track {
        width: 100%;
        height: 10px;
        background-color: #2d3748;
        border-radius: 5px;
        margin: 4px 0 12px 0;
    }
    .progress-fill {
        height: 10px;
        border-radius: 5px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def _event_loop() -> tuple[asyncio.AbstractEventLoop, threading.Lock]:
    # Firestore's async client is bound to the loop it was first used on
    return asyncio.new_event_loop(), threading.Lock()


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop, lock = _event_loop()
    with lock:
        return loop.run_until_complete(coro)


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    configure_logging(get_settings().app.debug_mode)
    return create_app_components(use_storage=True)


def get_session(components: AppComponents) -> SessionContext:
    """The SessionContext of this browser session."""
    if "session_ctx" not in st.session_state:
        ctx = SessionContext(components.gateway)

        def remember_profile(profile):
            st.session_state.profile = profile

        st.session_state.unsubscribe_profile = ctx.subscribe(remember_profile)
        st.session_state.session_ctx = ctx
    return st.session_state.session_ctx


def money(amount: Decimal) -> str:
    symbol = get_settings().app.currency_symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def progress_bar(percentage_used: Decimal) -> None:
    color = usage_color(percentage_used, get_settings().app.budget_warning_percentage)
    width = min(float(percentage_used), 100.0)
    st.markdown(
        f'<div class="progress-track"><div class="progress-fill" '
        f'style="width:{width:.0f}%;background-color:{color};"></div></div>',
        unsafe_allow_html=True,
    )


def month_selector() -> str:
    months = recent_months(get_settings().app.month_history_count)
    return st.sidebar.selectbox(
        "Month",
        options=months,
        index=months.index(current_month()),
        format_func=month_display_name,
    )


def main():
    """Main application entry point."""
    components = get_components()
    session = get_session(components)

    st.sidebar.title("💰 Budget Tracker")
    st.sidebar.markdown("---")

    if not session.is_authenticated:
        page = st.sidebar.radio(
            "Navigate to:",
            ["🏠 Welcome", "🔑 Sign In", "📝 Sign Up"],
            key="public_page",
        )
        if page == "🏠 Welcome":
            render_landing_page()
        elif page == "🔑 Sign In":
            render_sign_in_page(session)
        else:
            render_sign_up_page(session)
        return

    profile = st.session_state.get("profile")
    st.sidebar.markdown(f"Hello, **{profile.name if profile else 'there'}**")
    month = month_selector()

    page = st.sidebar.radio(
        "Navigate to:",
        ["💸 Expenses", "💵 Income", "📊 Budget", "⚙️ Settings"],
        key="private_page",
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("Sign Out"):
        run_async(session.sign_out())
        st.rerun()

    if page == "💸 Expenses":
        render_expenses_page(components.expense_flow, session, month)
    elif page == "💵 Income":
        render_income_page(components.income_flow, components.expense_flow, session, month)
    elif page == "📊 Budget":
        render_budget_page(components.budget_flow, session, month)
    else:
        render_settings_page()


def render_landing_page():
    st.title("💰 Budget Tracker")
    st.markdown(
        """
        Keep track of where your money goes.

        - **Expenses**: record what you spend, by category
        - **Income**: record what comes in, by source
        - **Budget**: set a monthly limit and watch your progress

        Sign in or create an account from the sidebar to get started.
        """
    )


def render_sign_in_page(session: SessionContext):
    st.title("🔑 Sign In")
    validator = get_components().validator

    with st.form("sign_in_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In", type="primary")

    if not submitted:
        return

    result = validator.validate_sign_in(email, password)
    if not result.is_valid:
        st.error(result.first_error)
        return

    with st.spinner("Signing in..."):
        try:
            run_async(session.sign_in(email, password))
        except AuthError as e:
            st.error(e.message)
            return
    st.rerun()


def render_sign_up_page(session: SessionContext):
    st.title("📝 Create Account")
    validator = get_components().validator

    with st.form("sign_up_form"):
        name = st.text_input("Full Name")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        confirm = st.text_input("Confirm Password", type="password")
        submitted = st.form_submit_button("Sign Up", type="primary")

    if not submitted:
        return

    result = validator.validate_sign_up(name, email, password, confirm)
    if not result.is_valid:
        st.error(result.first_error)
        return

    with st.spinner("Creating your account..."):
        try:
            run_async(session.sign_up(name, email, password))
        except AuthError as e:
            st.error(e.message)
            return
    st.success("Account created successfully!")
    st.rerun()


def _render_entry_rows(flow, group, session: SessionContext, state_key: str):
    for entry in group.entries:
        col1, col2, col3, col4 = st.columns([4, 2, 1, 1])
        col1.markdown(f"**{entry.description or '-'}**  \n{entry.date:%b %d, %Y}")
        col2.markdown(money(entry.amount))
        if col3.button("✏️", key=f"edit_{state_key}_{entry.id}"):
            st.session_state[state_key] = entry
            st.rerun()
        if col4.button("🗑️", key=f"delete_{state_key}_{entry.id}"):
            try:
                run_async(flow.delete(session.user_id, entry.id))
                st.success(f"{flow.kind.capitalize()} deleted successfully")
                st.rerun()
            except StorageError:
                st.error(f"Failed to delete {flow.kind}")


def render_expenses_page(flow: ExpenseFlow, session: SessionContext, month: str):
    st.title("💸 Expenses")
    st.caption(month_display_name(month))

    editing = st.session_state.get("editing_expense")
    categories = [c.name for c in EXPENSE_CATEGORIES]

    with st.form("expense_form", clear_on_submit=True):
        st.subheader("Edit Expense" if editing else "Add Expense")
        description = st.text_input("Description", value=editing.description if editing else "")
        amount = st.text_input("Amount", value=str(editing.amount) if editing else "")
        category = st.selectbox(
            "Category",
            categories,
            index=categories.index(editing.category) if editing and editing.category in categories else 0,
        )
        submitted = st.form_submit_button("Save", type="primary")

    if editing and st.button("Cancel editing"):
        st.session_state.editing_expense = None
        st.rerun()

    if submitted:
        try:
            saved, result = run_async(flow.save(
                session.user_id,
                description,
                amount,
                category,
                entry_id=editing.id if editing else None,
                correlation_id=create_correlation_id(),
            ))
            if saved is None:
                st.error(result.first_error)
            else:
                st.success("Expense updated successfully" if editing else "Expense added successfully")
                st.session_state.editing_expense = None
        except NotAuthenticatedError as e:
            st.error(str(e))
        except StorageError:
            st.error("Failed to save expense")

    try:
        expenses = run_async(flow.load(session.require_user_id()))
    except StorageError:
        st.error("Failed to load expenses")
        return

    st.markdown("---")
    st.markdown(f'<div class="big-number">{money(flow.month_total(expenses, month))}</div>', unsafe_allow_html=True)
    st.caption("Total spent this month")

    for group in flow.month_groups(expenses, month):
        title = f"{group.option.icon} {group.option.name} · {money(group.total)} ({group.count})"
        with st.expander(title, expanded=bool(group.entries)):
            if not group.entries:
                st.caption("No expenses in this category")
            _render_entry_rows(flow, group, session, "editing_expense")


def render_income_page(
    flow: IncomeFlow,
    expense_flow: ExpenseFlow,
    session: SessionContext,
    month: str,
):
    st.title("💵 Income")
    st.caption(month_display_name(month))

    editing = st.session_state.get("editing_income")
    sources = [s.name for s in INCOME_SOURCES]
    frequencies = list(IncomeFrequency)

    with st.form("income_form", clear_on_submit=True):
        st.subheader("Edit Income" if editing else "Add Income")
        description = st.text_input("Description", value=editing.description if editing else "")
        amount = st.text_input("Amount", value=str(editing.amount) if editing else "")
        source = st.selectbox(
            "Source",
            sources,
            index=sources.index(editing.source) if editing and editing.source in sources else 0,
        )
        frequency = st.selectbox(
            "Frequency",
            frequencies,
            index=frequencies.index(editing.frequency) if editing else frequencies.index(IncomeFrequency.MONTHLY),
            format_func=lambda f: f.label,
        )
        submitted = st.form_submit_button("Save", type="primary")

    if editing and st.button("Cancel editing"):
        st.session_state.editing_income = None
        st.rerun()

    if submitted:
        try:
            saved, result = run_async(flow.save(
                session.user_id,
                description,
                amount,
                source,
                entry_id=editing.id if editing else None,
                correlation_id=create_correlation_id(),
                frequency=frequency,
            ))
            if saved is None:
                st.error(result.first_error)
            else:
                st.success("Income updated successfully" if editing else "Income added successfully")
                st.session_state.editing_income = None
        except NotAuthenticatedError as e:
            st.error(str(e))
        except StorageError:
            st.error("Failed to save income")

    user_id = session.require_user_id()
    try:
        income = run_async(flow.load(user_id))
        expenses = run_async(expense_flow.load(user_id))
    except StorageError:
        st.error("Failed to load income")
        return

    st.markdown("---")
    col1, col2 = st.columns(2)
    col1.metric("Total income", money(flow.month_total(income, month)))
    col2.metric("Net income", money(flow.net_income(income, expenses, month)))

    groups = flow.month_groups(income, month)
    if not groups:
        st.info("No income recorded for this month yet.")
    for group in groups:
        title = f"{group.option.icon} {group.option.name} · {money(group.total)} ({group.count})"
        with st.expander(title, expanded=True):
            _render_entry_rows(flow, group, session, "editing_income")


def render_budget_page(flow: BudgetFlow, session: SessionContext, month: str):
    st.title("📊 Budget")
    st.caption(month_display_name(month))
    user_id = session.require_user_id()

    try:
        stored = run_async(flow.load_budget(user_id, month))
    except StorageError:
        st.error("Failed to load budget data")
        return

    modes = [BudgetMode.CATEGORY, BudgetMode.TOTAL]
    mode = st.radio(
        "Budget type",
        modes,
        index=modes.index(stored.budget_mode) if stored else 0,
        format_func=lambda m: "Per category" if m == BudgetMode.CATEGORY else "Single total",
        horizontal=True,
    )

    with st.form("budget_form"):
        total_text = None
        category_texts = {}
        if mode == BudgetMode.TOTAL:
            total_text = st.text_input(
                "Monthly budget",
                value=str(stored.total_budget) if stored and stored.total_budget else "",
            )
        else:
            for option in EXPENSE_CATEGORIES:
                current = stored.category_budgets.get(option.name) if stored else None
                category_texts[option.name] = st.text_input(
                    f"{option.icon} {option.name}",
                    value=str(current) if current else "",
                )
        submitted = st.form_submit_button("Save Budget", type="primary")

    if submitted:
        try:
            run_async(flow.save_budget(
                user_id,
                month,
                mode,
                total_text=total_text,
                category_texts=category_texts,
                correlation_id=create_correlation_id(),
            ))
            st.success("Budget saved successfully")
        except StorageError:
            st.error("Failed to save budget")

    st.markdown("---")
    try:
        summary = run_async(flow.get_budget_summary(user_id, month))
    except NotFoundError as e:
        st.info(str(e))
        return
    except StorageError:
        st.error("Failed to load budget data")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Budget", money(summary.total_budget))
    col2.metric("Spent", money(summary.total_spent))
    col3.metric("Remaining", money(summary.remaining))
    st.caption(f"{summary.percentage_used:.1f}% used · income this month {money(summary.total_income)}")
    progress_bar(summary.percentage_used)

    st.subheader("By category")
    icons = {option.name: option.icon for option in EXPENSE_CATEGORIES}
    if mode == BudgetMode.TOTAL:
        overview = run_async(flow.spending_overview(user_id, month))
        if not overview:
            st.caption("No spending this month")
        for item in overview:
            st.markdown(f"{icons.get(item.category, '📝')} **{item.category}** · {money(item.spent)} ({item.count})")
    else:
        for category, figures in summary.category_breakdown.items():
            if figures.budgeted <= 0:
                continue
            st.markdown(
                f"{icons.get(category, '📝')} **{category}** · "
                f"{money(figures.spent)} of {money(figures.budgeted)} "
                f"({money(figures.remaining)} left)"
            )
            progress_bar(figures.percentage_used)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    sections = [
        ("Firebase (Authentication + Firestore)", "firebase"),
        ("Firestore collections", "firestore"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    if get_settings().app.use_in_memory_backend:
        st.warning("Running on the in-memory backend. Data is lost on restart.")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your Firebase keys. "
        "See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
