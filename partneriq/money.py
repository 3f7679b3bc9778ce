"""
Currency amounts.

Revenue and estimated deal values arrive as display strings such as
"$850K", "$1.2M" or "€62.3B". They are stored as a currency code plus a
Decimal amount; parsing and formatting live here and nowhere else.
"""
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional, Union

CURRENCY_SYMBOLS = {
    '$': 'USD',
    '€': 'EUR',
    '£': 'GBP',
    '¥': 'JPY',
}
SYMBOL_FOR_CURRENCY = {code: symbol for symbol, code in CURRENCY_SYMBOLS.items()}

SCALE_SUFFIXES = {
    'K': Decimal(10) ** 3,
    'M': Decimal(10) ** 6,
    'B': Decimal(10) ** 9,
}

MAX_AMOUNT = Decimal(10) ** 18

_CODE_RE =re.compile(r'\b([A-Z]{3})\b')
_NUMBER_RE = re.compile(r'[^0-9.\-]')


@dataclass(frozen=True)
class Money:
    """An amount in a given ISO 4217 currency."""
    currency: str
    amount: Decimal

    def display(self) -> str:
        return format_money(self)

    def to_dict(self):
        return {
            'currency': self.currency,
            'amount': float(self.amount),
            'display': self.display(),
        }


def parse_money(value: Union[str, dict, 'Money', None], default_currency: str = 'USD') -> Optional[Money]:
    """Parse a display string or a ``{"currency", "amount"}`` mapping.

    Returns None for empty or malformed input.
    """
    if value is None:
        return None
    if isinstance(value, Money):
        return _finite(value)
    if isinstance(value, dict):
        return _parse_mapping(value, default_currency)
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return _finite(Money(default_currency, Decimal(str(value))))
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    upper = text.upper()
    currency = default_currency
    for symbol, code in CURRENCY_SYMBOLS.items():
        if symbol in upper:
            currency = code
            break
    else:
        match = _CODE_RE.search(upper)
        if match:
            currency = match.group(1)

    # Symbols and codes may sit on either side of the scale letter
    body = _CODE_RE.sub('', upper)
    for symbol in CURRENCY_SYMBOLS:
        body = body.replace(symbol, '')
    body = body.replace(',', '').strip()

    multiplier = Decimal(1)
    if body and body[-1] in SCALE_SUFFIXES:
        multiplier = SCALE_SUFFIXES[body[-1]]
        body = body[:-1]

    digits = _NUMBER_RE.sub('', body)
    if not any(ch.isdigit() for ch in digits):
        return None
    try:
        amount = Decimal(digits)
    except InvalidOperation:
        return None

    return _finite(Money(currency, amount * multiplier))


def _finite(money: Money) -> Optional[Money]:
    """Drop NaN, infinities and amounts too large for a Numeric(20, 2) column."""
    if not money.amount.is_finite() or abs(money.amount) >= MAX_AMOUNT:
        return None
    return money


def _parse_mapping(value: dict, default_currency: str) -> Optional[Money]:
    amount = value.get('amount')
    if amount is None or isinstance(amount, bool):
        return None
    try:
        amount = Decimal(str(amount))
    except InvalidOperation:
        return None
    currency = str(value.get('currency') or default_currency).upper()
    return _finite(Money(currency, amount))


def _compact(amount: Decimal) -> str:
    """Render 850000 as 850K, 1200000 as 1.2M, 62300000000 as 62.3B."""
    magnitude = abs(amount)
    for suffix in ('B', 'M', 'K'):
        scale = SCALE_SUFFIXES[suffix]
        if magnitude >= scale:
            scaled = (amount / scale).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)
            return f"{scaled.normalize():f}{suffix}"
    return f"{amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP):f}"


def format_money(money: Optional[Money]) -> Optional[str]:
    """Compact display form, e.g. ``$1.2M`` or ``EUR 3K`` for unknown symbols."""
    if money is None:
        return None
    symbol = SYMBOL_FOR_CURRENCY.get(money.currency)
    if symbol:
        return f"{symbol}{_compact(money.amount)}"
    return f"{money.currency} {_compact(money.amount)}"


def sum_amounts(values: Iterable[Union[Money, str, None]]) -> Decimal:
    """Sum the amounts of ``values``; missing or malformed entries count as 0.

    Currencies are not converted.
    """
    total = Decimal(0)
    for value in values:
        money = parse_money(value)
        if money is not None:
            total += money.amount
    return total


def format_pipeline_value(total: Decimal) -> str:
    """Format an aggregate pipeline amount in dollars.

    >= 1,000,000 renders with one decimal in millions, >= 1,000 in whole
    thousands, anything smaller as whole dollars.
    """
    total = Decimal(total)
    if total >= 1_000_000:
        millions = (total / Decimal(1_000_000)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)
        return f"${millions:f}M"
    if total >= 1_000:
        thousands = (total / Decimal(1_000)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
        return f"${thousands:f}K"
    return f"${total.quantize(Decimal('1'), rounding=ROUND_HALF_UP):f}"
