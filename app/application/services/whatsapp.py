"""WhatsApp click-to-chat links and message text.

The link format is a third-party contract and must stay byte-for-byte:
https://wa.me/<digits>?text=<percent-encoded message>. Nothing is sent
from the server; the user opens the link and sends the message themselves.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from urllib.parse import quote

from app.domain.enums import PaymentMethod

WHATSAPP_LINK_BASE = "https://wa.me"
DEFAULT_COUNTRY_CODE = "91"
DEFAULT_SIGNATURE = "ManageKar"

_NON_DIGITS = re.compile(r"\D")
# Characters encodeURIComponent leaves unescaped besides alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_DIVIDER = "━━━━━━━━━━━━━━━━━"


def format_phone_number(phone: str, country_code: str = DEFAULT_COUNTRY_CODE) -> str:
    """Normalize a phone number to bare digits with country code.

    Strips every non-digit, drops one leading 0 (trunk prefix), and prefixes
    the country code when exactly ten digits remain.
    """
    cleaned = _NON_DIGITS.sub("", phone)
    if cleaned.startswith("0"):
        cleaned = cleaned[1:]
    if len(cleaned) == 10:
        cleaned = country_code + cleaned
    return cleaned


def encode_uri_component(value: str) -> str:
    """Percent-encode UTF-8 text the way JavaScript's encodeURIComponent does."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def generate_whatsapp_link(
    phone: str,
    message: str,
    *,
    base_url: str = WHATSAPP_LINK_BASE,
    country_code: str = DEFAULT_COUNTRY_CODE,
) -> str:
    """Return the click-to-chat URL for phone with message pre-filled."""
    return f"{base_url}/{format_phone_number(phone, country_code)}?text={encode_uri_component(message)}"


def format_inr(amount: Decimal | int | float | str) -> str:
    """Format an amount as Indian rupees without decimals, e.g. ₹1,00,000."""
    value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    digits = str(abs(int(value)))
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups: list[str] = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join([*groups, tail])
    return f"{sign}₹{digits}"


def format_display_date(value: date | datetime | str) -> str:
    """Format a date as '5 Jan 2025'. ISO strings are accepted."""
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return f"{value.day} {_MONTHS[value.month - 1]} {value.year}"


def payment_method_label(method: PaymentMethod | str) -> str:
    try:
        return PaymentMethod(method).label
    except ValueError:
        return str(method)


@dataclass(frozen=True)
class PaymentReceiptData:
    tenant_name: str
    amount: Decimal
    receipt_number: str
    property_name: str
    payment_date: date | str
    payment_method: PaymentMethod | str
    property_address: str | None = None
    room_number: str | None = None
    owner_name: str | None = None
    owner_phone: str | None = None
    for_period: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class PaymentReminderData:
    tenant_name: str
    amount: Decimal
    property_name: str
    due_date: date | str
    owner_name: str | None = None


@dataclass(frozen=True)
class OverdueAlertData:
    tenant_name: str
    amount: Decimal
    due_date: date | str
    total_due: Decimal
    owner_name: str | None = None


def payment_receipt_message(data: PaymentReceiptData) -> str:
    """Full receipt text for a recorded payment."""
    period = f"\n📆 For: {data.for_period}" if data.for_period else ""
    room = f"\n🚪 Room: {data.room_number}" if data.room_number else ""
    address = f"\n📍 {data.property_address}" if data.property_address else ""
    description = f"\n📝 {data.description}" if data.description else ""
    owner_contact = f"\n📞 Contact: {data.owner_phone}" if data.owner_phone else ""
    return (
        "🧾 *Payment Receipt*\n"
        "\n"
        f"Hi {data.tenant_name},\n"
        "\n"
        f"Your payment of *{format_inr(data.amount)}* has been received successfully.\n"
        "\n"
        f"{_DIVIDER}\n"
        f"📄 Receipt No: {data.receipt_number or 'N/A'}\n"
        f"📅 Date: {format_display_date(data.payment_date)}\n"
        f"💳 Method: {payment_method_label(data.payment_method)}{period}{description}\n"
        f"{_DIVIDER}\n"
        "\n"
        "🏠 *Property Details*\n"
        f"{data.property_name}{address}{room}\n"
        f"{_DIVIDER}\n"
        "\n"
        "✅ *Status: PAID*\n"
        "\n"
        "Thank you for your payment!\n"
        f"{owner_contact}\n"
        f"- {data.owner_name or DEFAULT_SIGNATURE}\n"
        "\n"
        f"_Powered by {DEFAULT_SIGNATURE}_"
    )


def payment_reminder_message(data: PaymentReminderData) -> str:
    return (
        "⏰ *Rent Reminder*\n"
        "\n"
        f"Hi {data.tenant_name},\n"
        "\n"
        f"Your rent of *{format_inr(data.amount)}* for {data.property_name} "
        f"is due on {format_display_date(data.due_date)}.\n"
        "\n"
        "Please make the payment to avoid late fees.\n"
        "\n"
        f"- {data.owner_name or DEFAULT_SIGNATURE}"
    )


def overdue_alert_message(data: OverdueAlertData) -> str:
    return (
        "⚠️ *Payment Overdue*\n"
        "\n"
        f"Hi {data.tenant_name},\n"
        "\n"
        f"Your payment of *{format_inr(data.amount)}* was due on "
        f"{format_display_date(data.due_date)}.\n"
        "\n"
        f"Current outstanding: *{format_inr(data.total_due)}*\n"
        "\n"
        "Please clear the dues at the earliest.\n"
        "\n"
        f"- {data.owner_name or DEFAULT_SIGNATURE}"
    )


def simple_receipt_message(tenant_name: str, amount: Decimal, receipt_number: str) -> str:
    """One-line receipt for quick sharing."""
    return (
        f"🧾 Hi {tenant_name}, your payment of {format_inr(amount)} received. "
        f"Receipt: {receipt_number}. Thank you! - {DEFAULT_SIGNATURE}"
    )
