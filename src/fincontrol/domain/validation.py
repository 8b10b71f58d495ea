"""Schema checks run before every write.

Each ``validate_*`` function takes the raw field map the caller wants to
write, checks it and returns a normalized copy (enums resolved, amounts as
Decimal, dates as ``date``). With ``partial=True`` only the fields present
are checked, which is what single-row and bulk updates use.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from fincontrol.domain.entities import (
    AssetType,
    EntryKind,
    RecurrenceMode,
    TradeType,
    OPEN_STATUS,
)
from fincontrol.domain.errors import ValidationError
from fincontrol.utils.date_parser import parse_entry_date

MAX_QUANTITY_PLACES = 6

ENTRY_FIELDS = frozenset(
    {
        "description",
        "amount",
        "status",
        "category_id",
        "subcategory",
        "effective_date",
        "recurrence_mode",
        "installment_count",
        "installment_index",
        "card_id",
    }
)


def _require(data: Mapping[str, Any], name: str, partial: bool) -> bool:
    """Return True when the field must be checked."""
    if name in data:
        return True
    if partial:
        return False
    raise ValidationError(f"{name} is required")


def _text(value: Any, name: str, min_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be text")
    value = value.strip()
    if len(value) < min_length:
        raise ValidationError(f"{name} must have at least {min_length} characters")
    return value


def _optional_text(value: Any, name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be text")
    return value.strip() or None


def _decimal(value: Any, name: str) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{name} must be a number")
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{name} must be a number")
    if not number.is_finite():
        raise ValidationError(f"{name} must be a number")
    return number


def _positive_decimal(value: Any, name: str) -> Decimal:
    number = _decimal(value, name)
    if number <= 0:
        raise ValidationError(f"{name} must be positive")
    return number


def _positive_int(value: Any, name: str, nullable: bool = False) -> int | None:
    if value is None and nullable:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")
    if number != value and not isinstance(value, str):
        raise ValidationError(f"{name} must be an integer")
    if number <= 0:
        raise ValidationError(f"{name} must be positive")
    return number


def _date(value: Any, name: str) -> date:
    try:
        return parse_entry_date(value)
    except (ValueError, TypeError, AttributeError) as e:
        raise ValidationError(f"{name}: {e}")


def _choice(value: Any, name: str, enum_type):
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationError(f"{name} must be one of: {allowed}")


def _bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be true or false")
    return value


def validate_entry(kind: EntryKind, data: Mapping[str, Any], partial: bool = False) -> dict[str, Any]:
    """Validate an expense or income field map.

    Raises:
        ValidationError: On the first rule the payload breaks
    """
    unknown = set(data) - ENTRY_FIELDS
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")

    result: dict[str, Any] = {}
    if _require(data, "description", partial):
        result["description"] = _text(data["description"], "description", 3)
    if _require(data, "amount", partial):
        result["amount"] = _positive_decimal(data["amount"], "amount")
    if _require(data, "status", partial):
        if data["status"] not in kind.statuses:
            raise ValidationError(
                f"status must be '{kind.settled_status}' or '{OPEN_STATUS}'"
            )
        result["status"] = data["status"]
    if _require(data, "category_id", partial):
        result["category_id"] = _positive_int(data["category_id"], "category_id")
    if _require(data, "effective_date", partial):
        result["effective_date"] = _date(data["effective_date"], "effective_date")

    if "subcategory" in data:
        result["subcategory"] = _optional_text(data["subcategory"], "subcategory")
    if "recurrence_mode" in data:
        result["recurrence_mode"] = _choice(data["recurrence_mode"], "recurrence_mode", RecurrenceMode)
    if "installment_count" in data:
        result["installment_count"] = _positive_int(data["installment_count"], "installment_count")
    if "installment_index" in data:
        result["installment_index"] = _positive_int(data["installment_index"], "installment_index")
    if "card_id" in data:
        if kind is not EntryKind.EXPENSE and data["card_id"] is not None:
            raise ValidationError("Only expenses can reference a credit card")
        result["card_id"] = _positive_int(data["card_id"], "card_id", nullable=True)

    count = result.get("installment_count")
    index = result.get("installment_index")
    if count is not None and index is not None and index > count:
        raise ValidationError("installment_index cannot exceed installment_count")

    return result


def validate_category(data: Mapping[str, Any], partial: bool = False) -> dict[str, Any]:
    """Validate a category field map."""
    result: dict[str, Any] = {}
    if _require(data, "name", partial):
        result["name"] = _text(data["name"], "name", 2)
    if _require(data, "category_type", partial):
        result["category_type"] = _choice(data["category_type"], "category_type", EntryKind)
    if "active" in data:
        result["active"] = _bool(data["active"], "active")
    return result


def validate_credit_card(data: Mapping[str, Any], partial: bool = False) -> dict[str, Any]:
    """Validate a credit card field map."""
    result: dict[str, Any] = {}
    if _require(data, "name", partial):
        result["name"] = _text(data["name"], "name", 2)
    if _require(data, "brand", partial):
        result["brand"] = _text(data["brand"], "brand", 1)
    if _require(data, "best_purchase_day", partial):
        day = _positive_int(data["best_purchase_day"], "best_purchase_day")
        if not 1 <= day <= 31:
            raise ValidationError("best_purchase_day must be between 1 and 31")
        result["best_purchase_day"] = day
    if "active" in data:
        result["active"] = _bool(data["active"], "active")
    return result


def validate_asset(data: Mapping[str, Any], partial: bool = False) -> dict[str, Any]:
    """Validate an investment asset field map."""
    result: dict[str, Any] = {}
    if _require(data, "name", partial):
        result["name"] = _text(data["name"], "name", 2)
    if _require(data, "asset_type", partial):
        result["asset_type"] = _choice(data["asset_type"], "asset_type", AssetType)
    if "ticker" in data:
        ticker = _optional_text(data["ticker"], "ticker")
        result["ticker"] = ticker.upper() if ticker else None
    if "sector" in data:
        result["sector"] = _optional_text(data["sector"], "sector")
    if "description" in data:
        result["description"] = _optional_text(data["description"], "description")
    if "active" in data:
        result["active"] = _bool(data["active"], "active")
    return result


def validate_investment_transaction(
    data: Mapping[str, Any], partial: bool = False
) -> dict[str, Any]:
    """Validate an investment transaction field map.

    ``total_value`` is never accepted from callers; it is derived from
    quantity and unit price by the service.
    """
    if "total_value" in data:
        raise ValidationError("total_value is computed from quantity and unit_price")

    result: dict[str, Any] = {}
    if _require(data, "asset_id", partial):
        result["asset_id"] = _positive_int(data["asset_id"], "asset_id")
    if _require(data, "trade_date", partial):
        result["trade_date"] = _date(data["trade_date"], "trade_date")
    if _require(data, "trade_type", partial):
        result["trade_type"] = _choice(data["trade_type"], "trade_type", TradeType)
    if _require(data, "quantity", partial):
        quantity = _positive_decimal(data["quantity"], "quantity")
        if -quantity.as_tuple().exponent > MAX_QUANTITY_PLACES:
            raise ValidationError(
                f"quantity supports at most {MAX_QUANTITY_PLACES} decimal places"
            )
        result["quantity"] = quantity
    if _require(data, "unit_price", partial):
        result["unit_price"] = _positive_decimal(data["unit_price"], "unit_price")
    return result


def validate_user(data: Mapping[str, Any]) -> dict[str, Any]:
    """Validate a new user."""
    name = _text(data.get("name", ""), "name", 2)
    email = _text(data.get("email", ""), "email", 3).lower()
    if "@" not in email:
        raise ValidationError("email must be a valid address")
    return {"name": name, "email": email}
