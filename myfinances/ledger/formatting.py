"""
Locale-aware display formatting.

All rounding happens here, at display time. Totals reach this module as
exact Decimals.
"""

from datetime import date
from decimal import Decimal

from babel.dates import format_date
from babel.numbers import format_currency


NO_TRANSACTIONS_LABEL = "Não há transações"

DAY_MONTH_PATTERN = "dd 'de' MMMM"
SHORT_DATE_PATTERN = "dd/MM/yy"


class LedgerFormatter:
    """Formats amounts and dates for one locale and currency."""

    def __init__(self, locale: str = "pt_BR", currency: str = "BRL"):
        self.locale = locale
        self.currency = currency

    def currency_text(self, amount: Decimal) -> str:
        """e.g. Decimal('1000') -> 'R$ 1.000,00' in pt_BR"""
        return format_currency(amount, self.currency, locale=self.locale)

    def day_month(self, value: date) -> str:
        """e.g. date(2024, 4, 1) -> '01 de abril'"""
        return format_date(value, DAY_MONTH_PATTERN, locale=self.locale)

    def short_date(self, value: date) -> str:
        return format_date(value, SHORT_DATE_PATTERN, locale=self.locale)

    def interval(self, start_day: int, end: date) -> str:
        """
        Day range ending on `end`, e.g. '01 a 16 de abril'.

        The start day is clamped so the range never runs backwards.
        """
        first = min(start_day, end.day)
        return f"{first:02d} a {self.day_month(end)}"
