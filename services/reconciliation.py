"""
Asset entry reconciliation.
Keeps quantity, unit price and total value consistent while a holding is
entered or edited, and records field-level changes on edit.
"""

import random
import logging
from typing import List, Optional

from pydantic import BaseModel
from sqlmodel import SQLModel, Field

from models import Asset, ProductType, FieldChange, UpdateRecord, TRACKED_FIELDS, new_id
from models.asset import utc_now
from services.common import normalize_symbol, to_number

logger = logging.getLogger(__name__)


class AssetDraft(SQLModel):
    """
    Form state for a holding being entered or edited.
    Every field is optional; numeric fields start at zero.
    """
    platform: Optional[str] = None
    product_type: Optional[ProductType] = None
    symbol: Optional[str] = None
    quantity: Optional[float] = 0.0
    unit_price: Optional[float] = 0.0
    total_value: Optional[float] = 0.0
    currency: Optional[str] = "USD"
    exposure_tags: List[str] = Field(default_factory=list)
    expected_yield_apy: Optional[float] = None
    notes: Optional[str] = None

    @classmethod
    def from_asset(cls, asset: Asset) -> "AssetDraft":
        """Prefill a draft from a stored asset for editing."""
        return cls(
            platform=asset.platform,
            product_type=asset.product_type,
            symbol=asset.symbol,
            quantity=asset.quantity,
            unit_price=asset.unit_price,
            total_value=asset.total_value,
            currency=asset.currency,
            exposure_tags=list(asset.exposure_tags),
            expected_yield_apy=asset.expected_yield_apy,
            notes=asset.notes,
        )


def set_quantity(draft: AssetDraft, quantity) -> AssetDraft:
    """Change the quantity, holding the unit price fixed."""
    qty = to_number(quantity)
    draft.quantity = qty
    draft.total_value = qty * to_number(draft.unit_price)
    return draft


def set_unit_price(draft: AssetDraft, unit_price) -> AssetDraft:
    """Change the unit price and recompute the total."""
    price = to_number(unit_price)
    draft.unit_price = price
    draft.total_value = to_number(draft.quantity) * price
    return draft


def set_total_value(draft: AssetDraft, total_value) -> AssetDraft:
    """Change the total and back out the unit price (0 when quantity is 0)."""
    total = to_number(total_value)
    qty = to_number(draft.quantity)
    draft.total_value = total
    draft.unit_price = total / qty if qty > 0 else 0.0
    return draft


def can_submit(draft: AssetDraft) -> bool:
    """A draft needs a symbol and a non-zero quantity."""
    return bool(normalize_symbol(draft.symbol)) and to_number(draft.quantity) > 0


def _dedupe(tags: List[str]) -> List[str]:
    seen = set()
    result = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def finalize_draft(draft: AssetDraft) -> Optional[Asset]:
    """
    Turn a submitted draft into a new Asset.

    Args:
        draft: Form state at submit time

    Returns:
        The new Asset, or None when the draft is missing a symbol or quantity
    """
    if not can_submit(draft):
        logger.debug("Draft rejected: symbol and quantity are required")
        return None

    qty = to_number(draft.quantity)
    price = to_number(draft.unit_price)
    total = to_number(draft.total_value)

    if total == 0 and price > 0:
        total = qty * price
    if price == 0 and total > 0:
        price = total / qty

    return Asset(
        id=new_id(),
        platform=(draft.platform or "").strip() or "Other",
        product_type=draft.product_type or ProductType.OTHER,
        symbol=normalize_symbol(draft.symbol),
        quantity=qty,
        unit_price=price,
        total_value=total,
        currency=(draft.currency or "").strip().upper() or "USD",
        exposure_tags=_dedupe(draft.exposure_tags) or ["General"],
        expected_yield_apy=draft.expected_yield_apy,
        notes=draft.notes,
        change24h=random.uniform(-2.5, 2.5),
        created_at=utc_now(),
    )


def merge_parsed_into_draft(draft: AssetDraft, parsed: BaseModel) -> AssetDraft:
    """
    Merge an AI-parsed partial asset into the current form.
    Only fields the parser supplied override what is already in the draft.

    Args:
        draft: Current form state
        parsed: Validated partial asset (see services.ai_gateway.ParsedAsset)

    Returns:
        A new draft with the parsed fields applied
    """
    supplied = {
        key: value
        for key, value in parsed.model_dump(exclude_unset=True).items()
        if value is not None and key in AssetDraft.model_fields
    }
    merged = draft.model_copy(update=supplied)

    qty = to_number(merged.quantity)
    price = to_number(merged.unit_price)
    parsed_total = to_number(supplied.get("total_value"))
    if parsed_total > 0:
        merged.total_value = parsed_total
    elif qty and price:
        merged.total_value = qty * price
    else:
        merged.total_value = 0.0
    return merged


def diff_tracked_fields(asset: Asset, draft: AssetDraft) -> List[FieldChange]:
    """List the tracked fields whose value differs between asset and draft."""
    changes = []
    for field in TRACKED_FIELDS:
        old_value = getattr(asset, field)
        new_value = getattr(draft, field)
        if field in ("quantity", "unit_price"):
            new_value = to_number(new_value)
        elif field == "platform":
            new_value = (new_value or "").strip() or old_value
        elif field == "notes":
            new_value = new_value or None
        if old_value != new_value:
            changes.append(FieldChange(field=field, old_value=old_value, new_value=new_value))
    return changes


def apply_edit(asset: Asset, draft: AssetDraft) -> Asset:
    """
    Apply an edit draft to a stored asset.

    One UpdateRecord is appended when at least one tracked field changed.
    The id, creation time and earlier history entries are carried over untouched.

    Args:
        asset: Asset as currently stored
        draft: Edited form state

    Returns:
        A new Asset; the stored one is not modified
    """
    changes = diff_tracked_fields(asset, draft)

    qty = to_number(draft.quantity)
    price = to_number(draft.unit_price)
    history = list(asset.update_history)
    if changes:
        history.append(UpdateRecord(timestamp=utc_now(), changes=changes))

    updates = {
        "platform": (draft.platform or "").strip() or asset.platform,
        "product_type": draft.product_type or asset.product_type,
        "symbol": normalize_symbol(draft.symbol) or asset.symbol,
        "quantity": qty,
        "unit_price": price,
        "total_value": qty * price,
        "currency": (draft.currency or "").strip().upper() or asset.currency,
        "exposure_tags": _dedupe(draft.exposure_tags) or list(asset.exposure_tags),
        "expected_yield_apy": draft.expected_yield_apy,
        "notes": draft.notes or None,
        "update_history": history,
    }
    return asset.model_copy(update=updates)
