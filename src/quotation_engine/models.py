"""
Data models for the Quotation Engine.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Union

PRICE_FIELDS = ("price", "unit_price", "amount", "value", "cost")

VEHICLE_UNIT = "Chiếc"
ACCESSORY_UNIT = "Bộ"
OPTION_UNIT = "Gói"


def to_decimal(value: Any) -> Optional[Decimal]:
    """Convert a JSON scalar to Decimal, or None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not result.is_finite():
        return None
    return result


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 date or timestamp into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _ref_id(value: Any) -> Optional[str]:
    # Populated references arrive as nested documents
    if isinstance(value, Mapping):
        value = value.get("_id") or value.get("id")
    if value is None or value == "":
        return None
    return str(value)


@dataclass(frozen=True)
class CatalogEntry:
    """Reference price for one accessory or option."""
    id: str
    price: Decimal


@dataclass
class CatalogSet:
    """Accessory and option price indexes for one detail-view session."""
    accessories: Dict[str, Decimal] = field(default_factory=dict)
    options: Dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedPrice:
    """Effective unit price and quantity of one line."""
    price: Decimal
    quantity: int
    source: str = "default"


@dataclass
class LineAddOn:
    """An accessory or option attached to a quotation item."""
    ref_id: Optional[str] = None
    name: Optional[str] = None
    quantity: Any = None
    price_fields: Dict[str, Any] = field(default_factory=dict)
    resolved_price: Optional[Decimal] = None
    resolved_quantity: Optional[int] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], kind: str = "accessory") -> "LineAddOn":
        ref = None
        for key in (f"{kind}_id", "_id", "id"):
            ref = _ref_id(raw.get(key))
            if ref:
                break
        name = raw.get("name")
        nested = raw.get(f"{kind}_id")
        if not name and isinstance(nested, Mapping):
            name = nested.get("name")
        return cls(
            ref_id=ref,
            name=name,
            quantity=raw.get("quantity"),
            price_fields={key: raw[key] for key in PRICE_FIELDS if key in raw},
        )


@dataclass
class QuotationItem:
    """One vehicle line of a quotation with its add-ons."""
    vehicle_ref: Optional[str]
    vehicle_name: str
    vehicle_price: Optional[Decimal]
    quantity: int = 1
    color: Optional[str] = None
    unit_price: Optional[Decimal] = None
    discount: Decimal = Decimal("0")
    accessories: List[LineAddOn] = field(default_factory=list)
    options: List[LineAddOn] = field(default_factory=list)
    final_amount: Optional[Decimal] = None

    @property
    def effective_vehicle_price(self) -> Decimal:
        # A zero vehicle price counts as unset
        if self.vehicle_price is not None and self.vehicle_price > 0:
            return self.vehicle_price
        if self.unit_price is not None and self.unit_price > 0:
            return self.unit_price
        return Decimal("0")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "QuotationItem":
        vehicle = raw.get("vehicle_id")
        name = raw.get("vehicle_name")
        if not name and isinstance(vehicle, Mapping):
            name = vehicle.get("name") or vehicle.get("model")
        quantity = to_decimal(raw.get("quantity"))
        return cls(
            vehicle_ref=_ref_id(vehicle),
            vehicle_name=name or raw.get("vehicle_model") or "",
            vehicle_price=to_decimal(raw.get("vehicle_price")),
            quantity=int(quantity) if quantity is not None and quantity >= 1 else 1,
            color=raw.get("color") or None,
            unit_price=to_decimal(raw.get("unit_price")),
            discount=to_decimal(raw.get("discount")) or Decimal("0"),
            accessories=[
                LineAddOn.from_dict(entry, "accessory")
                for entry in raw.get("accessories") or []
                if isinstance(entry, Mapping)
            ],
            options=[
                LineAddOn.from_dict(entry, "option")
                for entry in raw.get("options") or []
                if isinstance(entry, Mapping)
            ],
            final_amount=to_decimal(raw.get("final_amount")),
        )


@dataclass
class Quotation:
    """A quotation record as returned by the quotation store."""
    id: Optional[str]
    code: Optional[str] = None
    status: Optional[str] = None
    valid_until: Optional[datetime] = None
    items: List[QuotationItem] = field(default_factory=list)
    final_amount: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    customer_name: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Quotation":
        customer = raw.get("customer") or raw.get("customer_id")
        customer_name = raw.get("customer_name")
        if not customer_name and isinstance(customer, Mapping):
            customer_name = customer.get("full_name")
        status = raw.get("status")
        return cls(
            id=_ref_id(raw.get("_id") or raw.get("id")),
            code=raw.get("code"),
            status=status if status else None,
            valid_until=parse_datetime(raw.get("valid_until") or raw.get("endDate")),
            items=[
                QuotationItem.from_dict(item)
                for item in raw.get("items") or []
                if isinstance(item, Mapping)
            ],
            final_amount=to_decimal(raw.get("final_amount")),
            tax_amount=to_decimal(raw.get("tax_amount")),
            customer_name=customer_name,
            raw=dict(raw),
        )


@dataclass(frozen=True)
class BillingRow:
    """One printable line of the derived pricing table."""
    sequence: int
    label: str
    unit: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    kind: str = "vehicle"


@dataclass
class BillingTable:
    """Flat billing rows of a quotation plus their grand total."""
    rows: List[BillingRow] = field(default_factory=list)
    grand_total: Decimal = Decimal("0")


@dataclass
class QuotationPage:
    """One page of quotations extracted from a list response."""
    quotations: List[Quotation] = field(default_factory=list)
    total: int = 0
    page: Optional[int] = None
    limit: Optional[int] = None
    malformed: bool = False


@dataclass
class QuotationFilter:
    """Query parameters for the quotation list endpoint."""
    page: int = 1
    limit: int = 10
    query: Optional[str] = None
    customer_id: Optional[str] = None
    status: Optional[str] = None

    def to_params(self) -> Dict[str, Union[str, int]]:
        params: Dict[str, Union[str, int]] = {}
        if self.query:
            params["q"] = self.query
        if self.customer_id:
            params["customer_id"] = self.customer_id
        if self.page:
            params["page"] = self.page
        if self.limit:
            params["limit"] = self.limit
        if self.status:
            params["status"] = self.status
        return params
