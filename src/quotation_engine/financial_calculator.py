#!/usr/bin/env python3
"""
Financial Calculator for Quotations
Builds the money summary shown under a billing table and the live total of a
quotation draft, using the prices library.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping, Optional, Union

from prices import Money

from .billing import build_billing_table
from .models import BillingTable, CatalogSet, Quotation, to_decimal
from .price_resolver import resolve_quantity

logger = logging.getLogger(__name__)

CURRENCY_SYMBOLS = {
    'VND': '₫',
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'JPY': '¥',
}

# Currencies displayed without minor units
ZERO_DECIMAL_CURRENCIES = {'VND', 'JPY'}


def format_currency(amount: Union[Money, Decimal, int], currency_code: str = 'VND') -> str:
    """Format an amount for display, e.g. ``500.000.000 ₫`` or ``$1,234.50``."""
    if isinstance(amount, Money):
        currency_code = amount.currency
        amount = amount.amount
    amount = Decimal(amount)
    symbol = CURRENCY_SYMBOLS.get(currency_code, currency_code)

    if currency_code in ZERO_DECIMAL_CURRENCIES:
        rounded = amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP)
        formatted = f"{rounded:,.0f}"
        if currency_code == 'VND':
            return f"{formatted.replace(',', '.')} {symbol}"
        return f"{symbol}{formatted}"

    rounded = amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    formatted = f"{rounded:,.2f}"
    if currency_code == 'EUR':
        return f"{formatted} {symbol}"
    return f"{symbol}{formatted}"


@dataclass
class FinancialSummary:
    subtotal: Money
    discount_total: Money
    tax_amount: Money
    final_total: Money
    reported_final: Optional[Money] = None

    @property
    def matches_reported(self) -> bool:
        """True when the backend total is absent or agrees with the computed one."""
        return self.reported_final is None or self.reported_final == self.final_total

    def as_dict(self) -> dict:
        result = {
            'subtotal': format_currency(self.subtotal),
            'discounts': format_currency(self.discount_total),
            'taxAmount': format_currency(self.tax_amount),
            'finalTotal': format_currency(self.final_total),
        }
        if self.reported_final is not None:
            result['reportedFinal'] = format_currency(self.reported_final)
        return result


class FinancialCalculator:
    """
    Handles the money summary of a quotation.

    The subtotal always comes from the billing table. The backend
    ``final_amount`` is only carried for display and compared, never used.
    """

    def __init__(self, currency_code: str = 'VND'):
        self.currency_code = currency_code

    def money(self, amount: Any) -> Money:
        value = to_decimal(amount)
        return Money(value if value is not None else Decimal('0'), self.currency_code)

    def summarize(self, quotation: Quotation, table: Optional[BillingTable] = None,
                  catalogs: Optional[CatalogSet] = None) -> FinancialSummary:
        if table is None:
            table = build_billing_table(quotation, catalogs)

        subtotal = self.money(table.grand_total)
        discount_total = self.money(sum((item.discount for item in quotation.items), Decimal('0')))
        tax_amount = self.money(quotation.tax_amount)
        final_total = subtotal - discount_total + tax_amount

        reported = None
        if quotation.final_amount is not None:
            reported = self.money(quotation.final_amount)

        summary = FinancialSummary(
            subtotal=subtotal,
            discount_total=discount_total,
            tax_amount=tax_amount,
            final_total=final_total,
            reported_final=reported,
        )
        if not summary.matches_reported:
            logger.warning(
                f"Quotation {quotation.code or quotation.id}: backend final_amount "
                f"{reported.amount} differs from computed {final_total.amount}"
            )
        return summary

    def estimate_draft_total(self, vehicle_price: Any, quantity: Any = 1, discount: Any = 0,
                             options: Iterable[Mapping[str, Any]] = (),
                             accessories: Iterable[Mapping[str, Any]] = (),
                             catalogs: Optional[CatalogSet] = None) -> Money:
        """
        Live total of a quotation being drafted.

        Options count once each, accessories are multiplied by their quantity
        (default 1). Selections without an id are ignored. Never negative.
        """
        catalogs = catalogs or CatalogSet()
        vehicle_quantity = to_decimal(quantity)
        if vehicle_quantity is None or vehicle_quantity <= 0:
            vehicle_quantity = Decimal('1')

        total = self.money(vehicle_price) * vehicle_quantity
        for option in options:
            option_id = option.get('option_id')
            if option_id:
                total += self.money(catalogs.options.get(option_id))
        for accessory in accessories:
            accessory_id = accessory.get('accessory_id')
            if accessory_id:
                price = self.money(catalogs.accessories.get(accessory_id))
                total += price * resolve_quantity(accessory.get('quantity'))
        total -= self.money(discount)

        if total.amount < 0:
            return Money(Decimal('0'), self.currency_code)
        return total


def summarize_quotation(quotation: Quotation, catalogs: Optional[CatalogSet] = None,
                        currency_code: str = 'VND') -> FinancialSummary:
    """
    Convenience function to build the financial summary of a quotation.
    """
    calculator = FinancialCalculator(currency_code)
    return calculator.summarize(quotation, catalogs=catalogs)
