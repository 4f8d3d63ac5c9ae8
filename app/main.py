"""
Streamlit Frontend for Fintrax

The screens a user works with every day: sign-in, the dashboard, the
expense list and form, analytics and account settings.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. One short, plain-language message per failure
3. Visual feedback for every write
4. Nothing changes on screen until the backend confirmed it

Every figure shown here comes from fintrax.queries; this module only lays
things out.
"""

import asyncio
from datetime import date

import streamlit as st

from fintrax.config import get_settings, validate_all_settings
from fintrax.errors import FintraxError
from fintrax.formatting import format_currency
from fintrax.forms import Draft, EditStarted, FieldChanged, FormReset, reduce_draft
from fintrax.models import ALL, FilterCriteria
from fintrax.orchestrator import AccountFlow, ExpenseFlow, create_app_components
from fintrax.queries import (
    NO_DATA,
    available_months,
    category_series,
    describe_empty_state,
    insights,
    monthly_series,
    recent,
    weekly_series,
)
from fintrax.security import password_strength, unescape_for_display
from fintrax.validation import parse_date, years_before


# Page configuration
st.set_page_config(
    page_title="Fintrax",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .card {
        padding: 16px;
        background-color: #f8f9fa;
        border-radius: 10px;
        border-left: 5px solid #4c6ef5;
        margin: 6px 0;
    }
    .card .label {
        color: #6c757d;
        font-size: 0.9em;
    }
    .big-number {
        font-size: 1.8em;
        font-weight: bold;
        color: #2c3e50;
    }
    .expense-row {
        padding: 10px 14px;
        border-bottom: 1px solid #eee;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_components():
    """Get or create application components (one set per browser session)."""
    if "components" not in st.session_state:
        try:
            st.session_state.components = create_app_components(use_storage=True)
        except Exception as e:
            st.error(f"Failed to initialize: {e}")
            st.session_state.components = create_app_components(use_storage=False)
    return st.session_state.components


def card(label: str, value: str):
    st.markdown(f"""
    <div class="card">
        <div class="label">{label}</div>
        <div class="big-number">{value}</div>
    </div>
    """, unsafe_allow_html=True)


def get_draft(flow: ExpenseFlow) -> Draft:
    if "draft" not in st.session_state:
        st.session_state.draft = Draft.blank(category=flow.validator.categories[0])
        st.session_state.form_version = 0
    return st.session_state.draft


def set_draft(draft: Draft, remount: bool = False):
    """Store the next form state; remount re-creates widgets with its values."""
    st.session_state.draft = draft
    if remount:
        st.session_state.form_version = st.session_state.get("form_version", 0) + 1


def main():
    """Main application entry point."""
    expense_flow, account_flow, session = get_components()

    if not session.is_authenticated:
        render_auth_page(account_flow)
        return

    identity = session.current

    # Sidebar navigation
    st.sidebar.title("💰 Fintrax")
    st.sidebar.caption(identity.email)
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🧾 Expenses", "📈 Analytics", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Sign out"):
        run_async(account_flow.sign_out())
        st.session_state.pop("draft", None)
        st.rerun()

    if expense_flow.store.last_error is not None:
        st.warning(
            f"{expense_flow.store.last_error.user_message} "
            "Showing the last data we loaded."
        )

    # Route to appropriate page
    if page == "📊 Dashboard":
        render_dashboard_page(expense_flow)
    elif page == "🧾 Expenses":
        render_expenses_page(expense_flow)
    elif page == "📈 Analytics":
        render_analytics_page(expense_flow)
    elif page == "⚙️ Settings":
        render_settings_page(expense_flow, account_flow)


def render_auth_page(account_flow: AccountFlow):
    """Sign in, sign up and password reset."""
    st.title("💰 Fintrax")
    st.markdown("Track where your money goes.")

    sign_in_tab, sign_up_tab, reset_tab = st.tabs(["Sign in", "Create account", "Forgot password"])

    with sign_in_tab:
        with st.form("sign_in"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in", type="primary")
        if submitted:
            try:
                with st.spinner("Signing in..."):
                    run_async(account_flow.sign_in(email, password))
                st.rerun()
            except FintraxError as e:
                st.error(e.user_message)

    with sign_up_tab:
        email = st.text_input("Email", key="sign_up_email")
        password = st.text_input("Password", type="password", key="sign_up_password")
        strength = password_strength(password)
        if strength.value:
            st.caption(f"Password strength: {strength.label}")
        confirm = st.text_input("Confirm password", type="password", key="sign_up_confirm")
        if st.button("Create account", type="primary"):
            try:
                with st.spinner("Creating your account..."):
                    run_async(account_flow.sign_up(email, password, confirm))
                st.rerun()
            except FintraxError as e:
                st.error(e.user_message)

    with reset_tab:
        with st.form("reset"):
            email = st.text_input("Email", key="reset_email")
            submitted = st.form_submit_button("Send reset link")
        if submitted:
            try:
                run_async(account_flow.send_password_reset(email))
                st.success("Password reset email sent! Check your inbox.")
            except FintraxError as e:
                st.error(e.user_message)


def render_dashboard_page(flow: ExpenseFlow):
    """Summary cards, weekly chart, category chart and recent transactions."""
    st.title("📊 Dashboard")

    expenses = flow.store.expenses
    today = date.today()
    summary = flow.summary(today)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        card("Total spent", format_currency(summary.total))
    with col2:
        card("This month", format_currency(summary.this_month))
    with col3:
        card("Transactions", str(summary.transaction_count))
    with col4:
        card("Highest expense", format_currency(summary.highest))

    if not expenses:
        st.info("No expenses yet. Add your first one on the Expenses page.")
        return

    st.markdown("---")
    left, right = st.columns(2)
    with left:
        st.subheader("Last 7 days")
        st.bar_chart(
            [{"day": d.label, "amount": float(d.amount)} for d in weekly_series(expenses, today)],
            x="day",
            y="amount",
        )
    with right:
        st.subheader("By category")
        st.bar_chart(
            [{"category": c.category, "amount": float(c.amount)} for c in category_series(expenses)],
            x="category",
            y="amount",
        )

    st.subheader("Recent transactions")
    limit = get_settings().app.recent_limit
    for expense in recent(expenses, limit):
        st.markdown(f"""
        <div class="expense-row">
            <strong>{expense.title}</strong> · {expense.category} · {expense.date.strftime('%d %b %Y')}
            <span style="float:right">{format_currency(expense.amount)}</span>
        </div>
        """, unsafe_allow_html=True)


def render_expense_form(flow: ExpenseFlow):
    draft = get_draft(flow)
    version = st.session_state.get("form_version", 0)
    categories = list(flow.validator.categories)
    today = date.today()

    st.subheader("✏️ Edit expense" if draft.is_editing else "➕ Add expense")

    with st.form(f"expense_form_{version}"):
        title = st.text_input("Title", value=draft.title, max_chars=100)
        col1, col2, col3 = st.columns(3)
        with col1:
            amount = st.text_input("Amount", value=draft.amount, placeholder="0.00")
        with col2:
            expense_date = st.date_input(
                "Date",
                value=parse_date(draft.date) or today,
                min_value=years_before(today, 100),
                max_value=today,
            )
        with col3:
            category = st.selectbox(
                "Category",
                options=categories,
                index=categories.index(draft.category) if draft.category in categories else 0,
            )
        notes = st.text_area("Notes (optional)", value=draft.notes, max_chars=500)

        save_col, cancel_col = st.columns(2)
        with save_col:
            submitted = st.form_submit_button(
                "Update expense" if draft.is_editing else "Add expense",
                type="primary",
                disabled=draft.is_submitting,
            )
        with cancel_col:
            cancelled = st.form_submit_button("Cancel" if draft.is_editing else "Clear")

    if cancelled:
        set_draft(reduce_draft(draft, FormReset()), remount=True)
        st.rerun()

    if submitted:
        for field, value in (
            ("title", title),
            ("amount", amount),
            ("date", expense_date),
            ("category", category),
            ("notes", notes),
        ):
            draft = reduce_draft(draft, FieldChanged(field=field, value=value))

        with st.spinner("Saving..."):
            was_editing = draft.is_editing
            draft, saved = run_async(flow.submit(draft))

        if saved is None:
            set_draft(draft)
            st.error(draft.error)
        else:
            set_draft(draft, remount=True)
            st.session_state.flash = "Expense updated!" if was_editing else "Expense added!"
            st.rerun()


def render_expenses_page(flow: ExpenseFlow):
    """Expense form, search and filters, and the list."""
    st.title("🧾 Expenses")

    flash = st.session_state.pop("flash", None)
    if flash:
        st.success(flash)

    render_expense_form(flow)
    st.markdown("---")

    expenses = flow.store.expenses

    # Filters
    col1, col2, col3 = st.columns(3)
    with col1:
        text = st.text_input("🔍 Search", placeholder="Search by title or category")
    with col2:
        category = st.selectbox("Category", options=[ALL] + list(flow.validator.categories))
    with col3:
        month = st.selectbox("Month", options=[ALL] + available_months(expenses))

    visible = flow.view(FilterCriteria(text=text, category=category, month=month))

    empty_state = describe_empty_state(len(expenses), len(visible))
    if empty_state == NO_DATA:
        st.info("No expenses yet. Add your first expense above.")
        return
    if empty_state:
        st.info("No expenses match your filters.")
        return

    st.caption(f"{len(visible)} of {len(expenses)} expenses")

    for expense in visible:
        info_col, amount_col, edit_col, delete_col = st.columns([6, 2, 1, 1])
        with info_col:
            st.markdown(f"**{unescape_for_display(expense.title)}**")
            meta = f"{expense.category} · {expense.date.strftime('%d %b %Y')}"
            if expense.notes:
                meta += f" · {unescape_for_display(expense.notes)}"
            st.caption(meta)
        with amount_col:
            st.markdown(f"**{format_currency(expense.amount)}**")
        with edit_col:
            if st.button("✏️", key=f"edit_{expense.id}", help="Edit"):
                set_draft(reduce_draft(get_draft(flow), EditStarted(expense=expense)), remount=True)
                st.rerun()
        with delete_col:
            if st.button("🗑️", key=f"delete_{expense.id}", help="Delete"):
                try:
                    run_async(flow.remove_expense(expense.id))
                    st.session_state.flash = "Expense deleted!"
                    st.rerun()
                except FintraxError as e:
                    st.error(e.user_message)


def render_analytics_page(flow: ExpenseFlow):
    """Insight cards, monthly trend and category distribution."""
    st.title("📈 Analytics")

    expenses = flow.store.expenses
    summary = insights(expenses)
    if summary is None:
        st.info("Add some expenses to see your spending insights.")
        return

    col1, col2, col3 = st.columns(3)
    with col1:
        card("Average expense", format_currency(summary.average))
    with col2:
        card(
            f"Largest: {summary.largest.title}",
            format_currency(summary.largest.amount),
        )
    with col3:
        card(
            f"Top category: {summary.top_category.category}",
            format_currency(summary.top_category.amount),
        )

    st.markdown("---")
    st.subheader("Monthly trend")
    st.line_chart(
        [{"month": m.month, "amount": float(m.amount)} for m in monthly_series(expenses)],
        x="month",
        y="amount",
    )

    st.subheader("Spending by category")
    series = category_series(expenses)
    st.bar_chart(
        [{"category": c.category, "amount": float(c.amount)} for c in series],
        x="category",
        y="amount",
    )
    for entry in series:
        share = entry.amount / summary.total * 100 if summary.total else 0
        st.markdown(f"- **{entry.category}**: {format_currency(entry.amount)} ({share:.1f}%)")


def render_settings_page(expense_flow: ExpenseFlow, account_flow: AccountFlow):
    """Password change, data deletion and connection status."""
    st.title("⚙️ Settings")

    st.markdown("### Change password")
    with st.form("change_password", clear_on_submit=True):
        current = st.text_input("Current password", type="password")
        new = st.text_input("New password", type="password")
        confirm = st.text_input("Confirm new password", type="password")
        submitted = st.form_submit_button("Update password", type="primary")
    if submitted:
        try:
            run_async(account_flow.change_password(current, new, confirm))
            st.success("Password updated successfully!")
        except FintraxError as e:
            st.error(e.user_message)

    st.markdown("---")
    st.markdown("### Data")
    count = len(expense_flow.store.expenses)
    st.caption(f"{count} expenses stored")
    confirmed = st.checkbox("I understand this permanently deletes all my expenses")
    if st.button("🗑️ Delete all expenses", disabled=not confirmed or count == 0):
        try:
            with st.spinner("Deleting..."):
                deleted = run_async(expense_flow.delete_all())
            st.success(f"Deleted {deleted} expenses.")
        except FintraxError as e:
            st.error(e.user_message)
            # Some records may already be gone; show what remains
            try:
                run_async(expense_flow.refresh())
            except FintraxError:
                pass

    with st.expander("Delete account"):
        password = st.text_input("Password", type="password", key="delete_account_password")
        if st.button("Delete my account"):
            try:
                run_async(account_flow.delete_account(password))
                st.session_state.pop("draft", None)
                st.rerun()
            except FintraxError as e:
                st.error(e.user_message)

    st.markdown("---")
    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Firebase (Sign-in)", "firebase"),
        ("App settings", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error} (using local in-memory backend)")


if __name__ == "__main__":
    main()
