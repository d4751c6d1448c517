"""
HTML/PDF rendering of tax invoices.

The template reproduces the printed ride invoice: customer block, invoice
details, issuer block, a single fare line with the CGST/SGST split, totals,
and the e-commerce operator footer. Bulk output prints one invoice per page.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd
from jinja2 import Environment, Template

from .config import InvoiceSettings
from .errors import PdfUnavailableError
from .schema import InvoiceRecord
from .tax import CGST_RATE, SGST_RATE, format_currency, percent_label


PDF_INSTALL_HINT = "PDF export needs the optional extra: pip install 'ride-invoice-generator[pdf]'"


def load_weasyprint() -> Tuple[Optional[Any], Optional[str]]:
    """Import weasyprint on first use.

    Returns (module, None), or (None, reason) when PDF export is unavailable
    because the package or its native libraries are missing.
    """
    try:
        import weasyprint  # type: ignore
    except (ImportError, OSError) as e:
        return None, f"{PDF_INSTALL_HINT} ({type(e).__name__}: {e})"
    return weasyprint, None


def create_html_template() -> str:
    """Create Jinja2 HTML template for one or more invoices."""
    return """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{% if invoices|length == 1 %}Tax Invoice - {{ invoices[0].invoice_number }}{% else %}Tax Invoices ({{ invoices|length }}){% endif %}</title>
    <style>
        @page { size: A4; margin: 1.5cm; }
        body { font-family: ui-sans-serif, system-ui, sans-serif; font-size: 13px; color: #000; margin: 0; }
        .invoice { padding: 24px; min-height: 250mm; display: flex; flex-direction: column; }
        .invoice + .invoice { page-break-before: always; break-before: page; }
        .row { display: flex; justify-content: space-between; align-items: flex-start; margin-bottom: 36px; }
        .right { text-align: right; }
        .center { text-align: center; }
        .address { max-width: 320px; white-space: pre-line; word-wrap: break-word; }
        h2 { font-size: 20px; font-weight: normal; margin: 0; }
        h3 { font-size: 14px; font-weight: normal; margin: 0 0 4px 0; }
        p { margin: 2px 0; }
        table.items { width: 100%; border-collapse: collapse; }
        table.items th { text-align: left; padding: 8px 4px; border-bottom: 2px solid #000; }
        table.items td { vertical-align: top; padding: 8px 4px; border-bottom: 1px solid #000; }
        table.items .num { text-align: right; }
        .totals { margin-left: auto; margin-top: 16px; width: 300px; }
        .totals div { display: flex; justify-content: space-between; margin-bottom: 6px; }
        .totals .payable { font-weight: bold; border-top: 1px solid #000; padding-top: 6px; }
        .signature { margin-left: auto; margin-top: 64px; text-align: center; font-size: 11px; }
        .footer { margin-top: auto; padding-top: 48px; text-align: center; font-size: 11px; color: #4b5563; }
    </style>
</head>
<body>
{% for invoice in invoices %}
    <div class="invoice">
        <div class="row">
            <div>
                <h3>{{ invoice.customer_name }}</h3>
                <p class="address">Pick up address: {{ invoice.pickup_address }}</p>
            </div>
            <h2 class="right">Tax Invoice</h2>
        </div>

        <div class="row">
            <div>
                <p>Invoice number: {{ invoice.invoice_number }}</p>
                <p>Invoice date: {{ invoice.formatted_date }}</p>
                <p>Place of supply (Name of state): {{ settings.place_of_supply }}</p>
                <p>HSN Code: {{ settings.hsn_code }}</p>
                <p>Category of services: {{ settings.service_category }}</p>
                <p>Tax is payable on reverse charge basis: {{ settings.reverse_charge }}</p>
            </div>
            <div class="right">
                <p>Invoice issued by {{ settings.issuer_name }}</p>
                <p>on behalf of:</p>
                <p style="margin-top: 8px;">{{ invoice.driver_name|upper }}</p>
                <p>{{ settings.driver_city }}</p>
                <p>{{ settings.driver_country }}</p>
            </div>
        </div>

        <table class="items">
            <thead>
                <tr>
                    <th>Tax Point Date</th>
                    <th>Description</th>
                    <th class="center">Qty</th>
                    <th>Tax</th>
                    <th class="num">Tax Amount</th>
                    <th class="num">Net amount</th>
                </tr>
            </thead>
            <tbody>
                <tr>
                    <td>{{ invoice.formatted_date }}</td>
                    <td>{{ settings.service_description }}</td>
                    <td class="center">1</td>
                    <td><p>SGST/UTGST {{ sgst_label }}</p><p>CGST {{ cgst_label }}</p></td>
                    <td class="num"><p>{{ invoice.sgst|currency }}</p><p>{{ invoice.cgst|currency }}</p></td>
                    <td class="num">{{ invoice.net_amount|currency }}</td>
                </tr>
            </tbody>
        </table>

        <div class="totals">
            <div><span>Total net amount</span><span>{{ invoice.net_amount|currency }}</span></div>
            <div><span>Total CGST {{ cgst_label }}</span><span>{{ invoice.cgst|currency }}</span></div>
            <div><span>Total SGST/UTGST {{ sgst_label }}</span><span>{{ invoice.sgst|currency }}</span></div>
            <div class="payable"><span>Total amount payable</span><span>{{ invoice.total_amount|currency }}</span></div>
        </div>

        <div class="signature">
            <p>Authorised Signatory</p>
        </div>

        <div class="footer">
            <p><strong>Details of ECO under GST:</strong></p>
            <p>{{ settings.issuer_name }} / {{ settings.eco_address }} / GST: {{ settings.eco_gstin }}</p>
        </div>
    </div>
{% endfor %}
</body>
</html>"""


_template: Optional[Template] = None


def _get_template() -> Template:
    global _template
    if _template is None:
        environment = Environment(autoescape=True)
        environment.filters['currency'] = format_currency
        _template = environment.from_string(create_html_template())
    return _template


def render_bulk_html(invoices: Sequence[InvoiceRecord], settings: Optional[InvoiceSettings] = None) -> str:
    """Render invoices into one printable HTML document, one per page."""
    return _get_template().render(
        invoices=list(invoices),
        settings=settings or InvoiceSettings(),
        cgst_label=percent_label(CGST_RATE),
        sgst_label=percent_label(SGST_RATE),
    )


def render_invoice_html(invoice: InvoiceRecord, settings: Optional[InvoiceSettings] = None) -> str:
    return render_bulk_html([invoice], settings)


def render_pdf(html: str) -> bytes:
    """Convert rendered invoice HTML to PDF bytes.

    Raises:
        PdfUnavailableError: if WeasyPrint or its native libraries are missing.
    """
    weasyprint_module, error = load_weasyprint()
    if weasyprint_module is None:
        raise PdfUnavailableError(error)
    return weasyprint_module.HTML(string=html).write_pdf()


def invoices_to_dataframe(invoices: Sequence[InvoiceRecord]) -> pd.DataFrame:
    """Summary table for previews, amounts formatted for display."""
    rows: List[Dict[str, Any]] = []
    for invoice in invoices:
        rows.append({
            'Invoice #': invoice.invoice_number,
            'Date': invoice.formatted_date,
            'Driver': invoice.driver_name.upper(),
            'Net': format_currency(invoice.net_amount),
            'CGST': format_currency(invoice.cgst),
            'SGST': format_currency(invoice.sgst),
            'Total': format_currency(invoice.total_amount),
        })
    return pd.DataFrame(rows, columns=['Invoice #', 'Date', 'Driver', 'Net', 'CGST', 'SGST', 'Total'])
