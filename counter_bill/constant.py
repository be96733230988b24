"""Editable static receipt text and layout configuration."""

from __future__ import annotations

# Printed when the business settings row is missing or has blank fields.
DEFAULT_BUSINESS_NAME = "Vajan Badhao"
DEFAULT_BUSINESS_ADDRESS = "Shop No 12, RK Heights, MG Road, Pune, MAHARASHTRA"
DEFAULT_BUSINESS_PHONE = "9857387616"

CURRENCY_SYMBOL = "₹"
BILL_TO_LABEL = "Cash Sale"
CLOSING_MESSAGE = "THANK YOU VISIT AGAIN"

PAYMENT_MODE_LABELS: dict[str, str] = {
    "cash": "Cash",
    "electronic": "Electronic",
}

# 32 columns of Font A on a 58mm roll.
RECEIPT_WIDTH_CHARS = 32

# Item table: name | qty | rate | total. Widths add up to RECEIPT_WIDTH_CHARS;
# each numeric column keeps one leading space as the column gap.
RECEIPT_NAME_COLUMN = 11
RECEIPT_QTY_COLUMN = 4
RECEIPT_RATE_COLUMN = 8
RECEIPT_TOTAL_COLUMN = 9

RECEIPT_DATE_FORMAT = "%d/%m/%Y %I:%M %p"
