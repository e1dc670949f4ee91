"""
Streamlit Frontend for Timecard

A single page: log a session, see the month's totals, fix or remove
entries, and look back at sealed months.

DESIGN PRINCIPLES:
1. The form is parsed by the core, never by the page
2. Clear error messages in simple language
3. Totals always come from the tracker, never recomputed here
"""

import streamlit as st

from timecard.config import get_settings, validate_all_settings
from timecard.ledger import NotFoundError
from timecard.tracker import create_tracker
from timecard.validation import EntryFormParser, ValidationError


st.set_page_config(
    page_title="Timecard",
    page_icon="⏱️",
    layout="centered",
)


@st.cache_resource
def get_tracker():
    """Get or create the tracker (cached)."""
    return create_tracker()


@st.cache_resource
def get_parser() -> EntryFormParser:
    return EntryFormParser(get_settings().tracker.default_hourly_rate)


def render_entry_form(tracker, parser: EntryFormParser) -> None:
    st.subheader("Log a session")
    default_rate = get_settings().tracker.default_hourly_rate

    with st.form("add_entry", clear_on_submit=True):
        entry_date = st.text_input("Date (YYYY-MM-DD, blank for today)")
        category = st.text_input("Work type", placeholder="e.g. Class Time, Mentoring")
        mode = st.radio("Billing", ["Timed", "Flat rate"], horizontal=True)
        col1, col2 = st.columns(2)
        with col1:
            minutes = st.text_input("Minutes worked")
            hourly_rate = st.text_input("Hourly rate", value=str(default_rate))
        with col2:
            rate_amount = st.text_input("Flat amount")
        submitted = st.form_submit_button("Add entry")

    if not submitted:
        return

    try:
        entry_input = parser.parse(
            category=category,
            minutes=minutes if mode == "Timed" else "",
            hourly_rate=hourly_rate if mode == "Timed" else "",
            rate_amount=rate_amount if mode == "Flat rate" else "",
            date=entry_date,
        )
        entry = tracker.add_entry(entry_input)
    except ValidationError as e:
        for issue in e.issues:
            st.error(issue.message)
        return

    st.success(f"Added {entry.group_key}: ${entry.amount}")


def render_summary(tracker) -> None:
    totals = tracker.totals()
    st.subheader(f"Summary - {tracker.period.label}")

    col1, col2, col3 = st.columns(3)
    col1.metric("Sessions", len(tracker.entries))
    col2.metric("Time", f"{totals.total_minutes} min ({totals.total_hours} h)")
    col3.metric("Earned", f"${totals.total_amount}")

    by_category = tracker.totals_by_category()
    if by_category:
        st.markdown("**By work type**")
        for category, stats in by_category.items():
            st.markdown(f"- {category}: {stats.minutes} minutes (${stats.amount})")


def render_entries(tracker, parser: EntryFormParser) -> None:
    st.subheader("Time cards")
    if not tracker.entries:
        st.info("No entries yet this month.")
        return

    for entry in tracker.entries:
        billing = entry.billing
        with st.expander(f"{entry.date} · {entry.group_key} · ${entry.amount}"):
            if billing.mode == "timed":
                st.write(f"{billing.minutes} minutes at ${billing.hourly_rate}/hr")
            else:
                st.write(f"Flat rate ${billing.rate_amount}")

            with st.form(f"edit_{entry.id}"):
                category = st.text_input("Work type", value=entry.category)
                if billing.mode == "timed":
                    minutes = st.text_input("Minutes", value=str(billing.minutes))
                    hourly_rate = st.text_input("Hourly rate", value=str(billing.hourly_rate))
                    rate_amount = ""
                else:
                    minutes = hourly_rate = ""
                    rate_amount = st.text_input("Flat amount", value=str(billing.rate_amount))
                save = st.form_submit_button("Save changes")
                delete = st.form_submit_button("Delete")

            if save:
                try:
                    tracker.edit_entry(entry.id, parser.parse(
                        category=category,
                        minutes=minutes,
                        hourly_rate=hourly_rate,
                        rate_amount=rate_amount,
                    ))
                except ValidationError as e:
                    for issue in e.issues:
                        st.error(issue.message)
                except NotFoundError:
                    st.warning("That entry no longer exists. Refresh the page.")
                else:
                    st.rerun()
            if delete:
                tracker.delete_entry(entry.id)
                st.rerun()


def render_archive(tracker) -> None:
    if not tracker.archive:
        return
    st.subheader("Past months")
    for record in reversed(tracker.archive):
        summary = record.summary
        st.markdown(
            f"**{record.period.label}** - {summary.entry_count} sessions, "
            f"{summary.total_minutes} minutes, ${summary.total_amount}"
        )


def render_status() -> None:
    """Sidebar: which parts of the configuration load."""
    status = validate_all_settings()

    with st.sidebar:
        st.markdown("### Connection Status")

        if not status.get("tracker", False):
            st.error(f"❌ Tracker settings - {status.get('tracker_error')}")
        else:
            settings = get_settings().tracker
            st.success(f"✅ Storage - {settings.data_dir}")
            if not settings.notify_enabled:
                st.info("Google Sheets (Notifications) - Disabled")
            elif status.get("google_sheets", False):
                st.success("✅ Google Sheets (Notifications) - Configured")
            else:
                error = status.get("google_sheets_error", "Not configured")
                st.error(f"❌ Google Sheets (Notifications) - {error}")

        st.markdown("---")
        st.markdown(
            "To configure the tracker, create a `.env` file with `TIMECARD_` "
            "and `GOOGLE_SHEETS_` variables."
        )


def main():
    """Main application entry point."""
    tracker = get_tracker()
    parser = get_parser()

    # A tab left open over a month boundary rolls over on the next render
    tracker.reconcile()

    st.title("⏱️ Timecard")
    render_status()
    render_entry_form(tracker, parser)
    render_summary(tracker)
    render_entries(tracker, parser)
    render_archive(tracker)


if __name__ == "__main__":
    main()
