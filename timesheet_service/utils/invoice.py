"""Invoice calculations."""
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from timesheet_service.errors import MissingSettingsError, MissingTemplateError
from timesheet_service.models.invoice import (
    ContractorDetails,
    ContractorSettings,
    InvoiceTemplate,
    InvoiceView,
)
from timesheet_service.models.timesheet import WeekTimesheet
from timesheet_service.utils.week import recompute, weekly_total_minutes

MINUTES_PER_DAY = 8 * 60
CENT = Decimal("0.01")
WHOLE_PERCENT = Decimal("1")
WEEK_ENDING_FORMAT = "%d %b"


def days_worked(weekly_total_minutes: int) -> float:
    """
    Convert worked minutes to billable days of eight hours.

    Fractional days are kept as is; only the display rounds.

    Examples:
        >>> days_worked(2400)
        5.0
        >>> days_worked(270)
        0.5625
    """
    return weekly_total_minutes / MINUTES_PER_DAY


def format_currency(amount: Decimal) -> str:
    """Format an amount with a thousands separator and two decimals."""
    return f"{amount:,.2f}"


def _override(custom: Optional[str], fallback: str) -> str:
    if custom and custom.strip():
        return custom
    return fallback


def compose_address(settings: ContractorSettings) -> str:
    """Build a one-line postal address from the settings fields."""
    line = settings.address_line1
    if settings.address_line2:
        line = f"{line}, {settings.address_line2}"
    return f"{line} {settings.city} {settings.state} {settings.postcode}"


def resolve_contractor_details(
    settings: ContractorSettings,
    template: InvoiceTemplate,
) -> ContractorDetails:
    """
    Overlay a template's contractor overrides onto the global settings.

    Each field uses the template override when it is set and not blank.
    A custom address replaces the composed global address verbatim.
    """
    return ContractorDetails(
        name=_override(template.custom_contractor_name, settings.contractor_name),
        abn=_override(template.custom_abn, settings.abn),
        bank_bsb=_override(template.custom_bank_bsb, settings.bank_bsb),
        bank_account=_override(template.custom_bank_account, settings.bank_account),
        address=_override(template.custom_address, compose_address(settings)),
    )


def order_templates(templates: list[InvoiceTemplate]) -> list[InvoiceTemplate]:
    """Sort templates default-first, then by name."""
    return sorted(templates, key=lambda t: (not t.is_default, t.template_name))


def select_template(
    templates: list[InvoiceTemplate],
    template_id: Optional[str] = None,
) -> InvoiceTemplate:
    """
    Pick the template to invoice with.

    Args:
        templates: The user's active templates, default-first
        template_id: Optional explicitly requested template

    Returns:
        The requested template if present, else the default, else the first

    Raises:
        MissingTemplateError: If there are no templates
    """
    if not templates:
        raise MissingTemplateError("No active invoice template configured")

    if template_id:
        for template in templates:
            if template.id == template_id:
                return template

    for template in templates:
        if template.is_default:
            return template

    return templates[0]


def compute_invoice(
    week: WeekTimesheet,
    template: Optional[InvoiceTemplate],
    settings: Optional[ContractorSettings],
    invoice_number: str,
) -> InvoiceView:
    """
    Compute the invoice for a week.

    The subtotal is rounded to cents from the exact minute count, GST is
    rounded to cents from the subtotal, and the total is their sum, which
    equals ``subtotal * (1 + gst_percentage)`` to the cent.

    Raises:
        MissingSettingsError: If contractor settings are missing
        MissingTemplateError: If no template was supplied
    """
    if settings is None:
        raise MissingSettingsError("Invoice settings not configured")
    if template is None:
        raise MissingTemplateError("No active invoice template configured")

    week = recompute(week)
    minutes = weekly_total_minutes(week)

    subtotal = (Decimal(minutes) * template.day_rate / MINUTES_PER_DAY).quantize(
        CENT, rounding=ROUND_HALF_UP
    )
    gst_amount = (subtotal * template.gst_percentage).quantize(CENT, rounding=ROUND_HALF_UP)
    total = subtotal + gst_amount

    days = days_worked(minutes)
    week_ending = week.week_start + timedelta(days=6)
    gst_percent = (template.gst_percentage * 100).quantize(WHOLE_PERCENT, rounding=ROUND_HALF_UP)

    return InvoiceView(
        invoice_number=invoice_number,
        template_id=template.id,
        template_name=template.template_name,
        client_name=template.client_name,
        week_start=week.week_start,
        week_ending=week_ending,
        week_ending_display=week_ending.strftime(WEEK_ENDING_FORMAT),
        weekly_total=week.weekly_total,
        days_worked=days,
        days_worked_display=f"{days:.1f}",
        day_rate=template.day_rate,
        gst_percentage=template.gst_percentage,
        gst_label=f"GST {gst_percent}%",
        subtotal=subtotal,
        gst_amount=gst_amount,
        total=total,
        day_rate_display=format_currency(template.day_rate),
        subtotal_display=format_currency(subtotal),
        gst_amount_display=format_currency(gst_amount),
        total_display=format_currency(total),
        contractor=resolve_contractor_details(settings, template),
    )
