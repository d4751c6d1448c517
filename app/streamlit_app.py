"""
Streamlit UI for the Ride Invoice Generator.

This module provides a web interface for generating single and bulk ride
tax invoices, previewing them, and downloading printable HTML, JSON or PDF.
"""

import streamlit as st
import streamlit.components.v1 as components
import os
import sys
import json
import logging
from datetime import date, timedelta
from typing import Optional, Sequence
try:
    from dotenv import load_dotenv
    # Load nearest .env (current working dir or project root)
    load_dotenv()
except ImportError:
    pass  # Safe to ignore if not installed yet

# Add the project root to the Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.invoicing.config import load_settings
from src.invoicing.errors import InvoiceError, PdfUnavailableError
from src.invoicing.generator import InvoiceGenerator, build_bulk_request
from src.invoicing.rendering import (
    invoices_to_dataframe,
    render_bulk_html,
    render_invoice_html,
    render_pdf,
)
from src.invoicing.schema import InvoiceRecord
from src.invoicing.tax import format_currency

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)


# Page configuration
st.set_page_config(
    page_title="Ride Invoice Generator",
    page_icon="🧾",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Initialize session state
if 'generator' not in st.session_state:
    st.session_state.generator = None
if 'invoice' not in st.session_state:
    st.session_state.invoice = None
if 'bulk_invoices' not in st.session_state:
    st.session_state.bulk_invoices = []
if 'bulk_info' not in st.session_state:
    st.session_state.bulk_info = ""
if 'excluded_dates' not in st.session_state:
    st.session_state.excluded_dates = []


def initialize_generator():
    """Initialize the invoice generator once per session."""
    if st.session_state.generator is None:
        try:
            st.session_state.generator = InvoiceGenerator(settings=load_settings())
            logger.info("Invoice generator created for new session")
        except InvoiceError as e:
            st.error(f"Error initializing generator: {e}")
            return None
    return st.session_state.generator


def main():
    """Main Streamlit application."""
    st.title("🧾 Ride Invoice Generator")
    st.caption("Create professional-looking ride invoices instantly.")
    st.markdown("---")

    # Sidebar for navigation
    st.sidebar.title("Navigation")
    page = st.sidebar.selectbox(
        "Choose a page",
        ["Single Bill Generation", "Bulk Bill Generation", "Session Stats"]
    )

    generator = initialize_generator()
    if generator is None:
        st.error("Failed to initialize invoice generator. Please check your setup.")
        return

    if page == "Single Bill Generation":
        single_invoice_page(generator)
    elif page == "Bulk Bill Generation":
        bulk_invoice_page(generator)
    elif page == "Session Stats":
        session_stats_page(generator)


def single_invoice_page(generator: InvoiceGenerator):
    """Single invoice form and preview."""
    col_form, col_preview = st.columns([2, 3])

    with col_form:
        st.header("Invoice Details")
        with st.form("single_invoice"):
            customer_name = st.text_input("Customer Name", value="Shashi Kiran")
            pickup_address = st.text_input(
                "Pickup Address",
                value="Shivaji Nagar, Bengaluru, Karnataka 560001, India"
            )
            driver_name = st.text_input("Driver Name", value="NARENDRAN NARENDRAN")
            col1, col2 = st.columns(2)
            with col1:
                invoice_date = st.date_input("Date", value=date.today())
            with col2:
                price = st.text_input("Total Price (INR)", value="43.40")
            submitted = st.form_submit_button("Generate Invoice", type="primary")

        if submitted:
            try:
                st.session_state.invoice = generator.generate_single(
                    customer_name, pickup_address, invoice_date, driver_name, price
                )
            except InvoiceError as e:
                st.error(str(e))

    with col_preview:
        invoice = st.session_state.invoice
        if invoice is not None:
            display_invoice(invoice, generator)
        else:
            st.info("Fill in the form and generate an invoice to preview it here.")


def bulk_invoice_page(generator: InvoiceGenerator):
    """Bulk generation over a date range."""
    settings = generator.settings
    col_form, col_preview = st.columns([2, 3])

    with col_form:
        st.header("Bulk Invoice Generation")
        if st.session_state.bulk_info:
            st.warning(st.session_state.bulk_info)

        exclude_weekends = st.checkbox("Exclude weekends", value=True)

        # Custom excluded dates live outside the form so add/remove rerun immediately
        st.write("Custom dates to exclude (optional)")
        col_date, col_add = st.columns([3, 1])
        with col_date:
            custom_date = st.date_input("Exclude date", value=None, label_visibility="collapsed")
        with col_add:
            if st.button("Add") and custom_date and custom_date not in st.session_state.excluded_dates:
                st.session_state.excluded_dates.append(custom_date)
        for excluded in list(st.session_state.excluded_dates):
            col_label, col_remove = st.columns([3, 1])
            col_label.write(excluded.isoformat())
            if col_remove.button("✕", key=f"remove_{excluded.isoformat()}"):
                st.session_state.excluded_dates.remove(excluded)
                st.rerun()

        with st.form("bulk_invoice"):
            col1, col2 = st.columns(2)
            with col1:
                from_date = st.date_input("From Date", value=date.today() - timedelta(days=30))
                customer_name = st.text_input("Customer Name")
            with col2:
                to_date = st.date_input("To Date", value=date.today())
                pickup_address = st.text_input("Pickup Address")
            col1, col2, col3 = st.columns(3)
            with col1:
                min_price = st.number_input("Min Price", value=settings.default_min_price)
            with col2:
                max_price = st.number_input("Max Price", value=settings.default_max_price)
            with col3:
                count = st.number_input(
                    "Number of Invoices",
                    min_value=1,
                    max_value=settings.max_count,
                    value=min(settings.default_count, settings.max_count),
                    step=1,
                )
            submitted = st.form_submit_button("Generate Bulk Invoices", type="primary")

        if submitted:
            run_bulk_generation(
                generator, from_date, to_date, count, min_price, max_price,
                customer_name, pickup_address, exclude_weekends,
            )

    with col_preview:
        invoices: Sequence[InvoiceRecord] = st.session_state.bulk_invoices
        if invoices:
            display_bulk_invoices(invoices, generator)
        else:
            st.info("Generate bulk invoices to preview and download them here.")


def run_bulk_generation(generator: InvoiceGenerator, from_date, to_date, count, min_price, max_price,
                        customer_name, pickup_address, exclude_weekends):
    """Run a bulk request and replace the current result set."""
    if not customer_name or not pickup_address:
        st.error("Customer name and pickup address are required.")
        return

    with st.spinner("Generating..."):
        try:
            request = build_bulk_request(
                start_date=from_date,
                end_date=to_date,
                requested_count=count,
                min_price=min_price,
                max_price=max_price,
                customer_name=customer_name,
                pickup_address=pickup_address,
                exclude_weekends=exclude_weekends,
                excluded_dates=st.session_state.excluded_dates,
            )
            result = generator.generate_bulk(request)
        except InvoiceError as e:
            st.error(str(e))
            return

    st.session_state.bulk_invoices = result.invoices
    st.session_state.bulk_info = result.info_message
    st.session_state.invoice = result.invoices[0] if result.invoices else None
    st.rerun()


def display_invoice(invoice: InvoiceRecord, generator: InvoiceGenerator):
    """Preview and downloads for one invoice."""
    html = render_invoice_html(invoice, generator.settings)
    offer_downloads(html, json.dumps(invoice.to_dict(), indent=2), invoice.invoice_number)
    components.html(html, height=1000, scrolling=True)


def display_bulk_invoices(invoices: Sequence[InvoiceRecord], generator: InvoiceGenerator):
    """Summary table, downloads and per-invoice previews for a batch."""
    st.subheader(f"Bulk Invoice Preview ({len(invoices)})")

    df = invoices_to_dataframe(invoices)
    st.dataframe(df, use_container_width=True)
    st.metric("Total amount", format_currency(sum(inv.total_amount for inv in invoices)))

    html = render_bulk_html(invoices, generator.settings)
    json_str = json.dumps([inv.to_dict() for inv in invoices], indent=2)
    offer_downloads(html, json_str, f"bulk_{len(invoices)}_invoices")

    for invoice in invoices:
        with st.expander(f"{invoice.invoice_number} - {invoice.formatted_date}"):
            components.html(render_invoice_html(invoice, generator.settings), height=900, scrolling=True)


@st.cache_data(show_spinner="Building PDF...", max_entries=8)
def build_pdf(html: str) -> Optional[bytes]:
    """PDF bytes for the rendered HTML, or None when WeasyPrint is unusable.

    Cached on the HTML so reruns (expander clicks, navigation) reuse the document.
    """
    try:
        return render_pdf(html)
    except PdfUnavailableError as e:
        logger.info(f"PDF export disabled: {e}")
        return None


def offer_downloads(html: str, json_str: str, base_name: str):
    """HTML, JSON and (when WeasyPrint is usable) PDF download buttons."""
    col1, col2, col3 = st.columns(3)
    with col1:
        st.download_button(
            label="📥 Download HTML",
            data=html,
            file_name=f"{base_name}.html",
            mime="text/html"
        )
    with col2:
        st.download_button(
            label="📥 Download JSON",
            data=json_str,
            file_name=f"{base_name}.json",
            mime="application/json"
        )
    with col3:
        pdf_bytes = build_pdf(html)
        if pdf_bytes is None:
            st.caption("PDF export needs WeasyPrint. Use the browser's Print / Save as PDF on the HTML file.")
            return
        st.download_button(
            label="📥 Download PDF",
            data=pdf_bytes,
            file_name=f"{base_name}.pdf",
            mime="application/pdf"
        )


def session_stats_page(generator: InvoiceGenerator):
    """Session statistics page."""
    st.header("📈 Session Statistics")

    stats = generator.get_session_stats()

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Invoices Generated", stats['invoices_generated'])
    with col2:
        st.metric("Bulk Batches", stats['bulk_batches'])
    with col3:
        st.metric("Shortfalls", stats['shortfalls'])

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("📊 Counters")
        st.json({k: v for k, v in stats.items() if k != 'amounts'})
    with col2:
        st.subheader("💰 Amounts")
        st.json(stats['amounts'])

    if st.button("Reset statistics"):
        generator.tracker.reset()
        st.rerun()


if __name__ == "__main__":
    main()
