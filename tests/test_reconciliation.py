"""Tests for draft reconciliation and edit history."""

from __future__ import annotations

import pytest

from models import Asset, FieldChange, ProductType, UpdateRecord
from services.ai_gateway import ParsedAsset
from services.reconciliation import (
    AssetDraft,
    apply_edit,
    can_submit,
    finalize_draft,
    merge_parsed_into_draft,
    set_quantity,
    set_total_value,
    set_unit_price,
)


class TestFieldReconciliation:
    def test_quantity_then_price_sets_total(self) -> None:
        draft = AssetDraft(symbol="AAPL")
        set_quantity(draft, 10)
        set_unit_price(draft, 200)
        assert draft.total_value == 2000

    def test_quantity_change_keeps_price(self) -> None:
        draft = AssetDraft(symbol="AAPL", quantity=10, unit_price=200, total_value=2000)
        set_quantity(draft, "15")
        assert draft.unit_price == 200
        assert draft.total_value == 3000

    def test_total_backs_out_unit_price(self) -> None:
        draft = AssetDraft(symbol="AAPL", quantity=4)
        set_total_value(draft, 1000)
        assert draft.unit_price == 250

    def test_total_with_zero_quantity(self) -> None:
        draft = AssetDraft(symbol="AAPL")
        set_total_value(draft, 5000)
        assert draft.total_value == 5000
        assert draft.unit_price == 0

    @pytest.mark.parametrize("raw", ["", None, "abc", -3])
    def test_invalid_numbers_become_zero(self, raw) -> None:
        draft = AssetDraft(symbol="AAPL", unit_price=10)
        set_quantity(draft, raw)
        assert draft.quantity == 0
        assert draft.total_value == 0


class TestFinalizeDraft:
    def test_requires_symbol_and_quantity(self) -> None:
        assert not can_submit(AssetDraft(symbol="", quantity=5))
        assert not can_submit(AssetDraft(symbol="AAPL", quantity=0))
        assert finalize_draft(AssetDraft(symbol="  ", quantity=5)) is None
        assert finalize_draft(AssetDraft(symbol="AAPL")) is None

    def test_applies_defaults(self) -> None:
        asset = finalize_draft(AssetDraft(symbol="aapl", quantity=10, unit_price=200))
        assert asset is not None
        assert asset.symbol == "AAPL"
        assert asset.total_value == 2000
        assert asset.platform == "Other"
        assert asset.product_type == ProductType.OTHER
        assert asset.currency == "USD"
        assert asset.exposure_tags == ["General"]
        assert asset.update_history == []
        assert not asset.is_auto_synced
        assert -2.5 <= asset.change24h <= 2.5

    def test_derives_price_from_total(self) -> None:
        asset = finalize_draft(AssetDraft(symbol="BTC", quantity=2, total_value=100000))
        assert asset.unit_price == 50000

    def test_ids_are_unique(self) -> None:
        draft = AssetDraft(symbol="AAPL", quantity=1, unit_price=1)
        assert finalize_draft(draft).id != finalize_draft(draft).id

    def test_keeps_supplied_tags(self) -> None:
        draft = AssetDraft(symbol="NVDA", quantity=1, exposure_tags=["AI", "AI", " Growth "])
        assert finalize_draft(draft).exposure_tags == ["AI", "Growth"]


class TestMergeParsed:
    def test_parsed_fields_override_draft(self) -> None:
        draft = AssetDraft(platform="Fidelity", symbol="MSFT", quantity=1, unit_price=400)
        parsed = ParsedAsset.model_validate({"symbol": "aapl", "quantity": 10, "unitPrice": 200})
        merged = merge_parsed_into_draft(draft, parsed)
        assert merged.symbol == "AAPL"
        assert merged.quantity == 10
        assert merged.unit_price == 200
        assert merged.total_value == 2000
        assert merged.platform == "Fidelity"

    def test_parsed_total_wins(self) -> None:
        draft = AssetDraft(quantity=3, unit_price=10)
        parsed = ParsedAsset.model_validate({"symbol": "ETH", "totalValue": 9600})
        merged = merge_parsed_into_draft(draft, parsed)
        assert merged.total_value == 9600
        assert merged.quantity == 3

    def test_missing_amounts_zero_total(self) -> None:
        parsed = ParsedAsset.model_validate({"symbol": "SOL"})
        merged = merge_parsed_into_draft(AssetDraft(), parsed)
        assert merged.total_value == 0

    def test_original_draft_untouched(self) -> None:
        draft = AssetDraft(symbol="MSFT")
        merge_parsed_into_draft(draft, ParsedAsset.model_validate({"symbol": "AAPL"}))
        assert draft.symbol == "MSFT"


class TestApplyEdit:
    def test_quantity_change_recorded(self, manual_asset: Asset) -> None:
        draft = AssetDraft.from_asset(manual_asset)
        draft.quantity = 15

        edited = apply_edit(manual_asset, draft)

        assert edited.id == manual_asset.id
        assert edited.created_at == manual_asset.created_at
        assert edited.quantity == 15
        assert edited.total_value == 1500
        assert len(edited.update_history) == 1
        assert edited.update_history[0].changes == [
            FieldChange(field="quantity", old_value=10, new_value=15)
        ]

    def test_no_change_appends_nothing(self, manual_asset: Asset) -> None:
        edited = apply_edit(manual_asset, AssetDraft.from_asset(manual_asset))
        assert edited.update_history == []

    def test_blank_notes_are_not_a_change(self, manual_asset: Asset) -> None:
        draft = AssetDraft.from_asset(manual_asset)
        draft.notes = ""
        assert apply_edit(manual_asset, draft).update_history == []

    def test_multiple_fields_in_one_record(self, manual_asset: Asset) -> None:
        draft = AssetDraft.from_asset(manual_asset)
        draft.unit_price = 120
        draft.platform = "Schwab"
        draft.notes = "rebalanced"

        edited = apply_edit(manual_asset, draft)

        assert len(edited.update_history) == 1
        fields = [c.field for c in edited.update_history[0].changes]
        assert fields == ["unit_price", "notes", "platform"]

    def test_history_is_appended(self, manual_asset: Asset) -> None:
        first = AssetDraft.from_asset(manual_asset)
        first.quantity = 12
        once = apply_edit(manual_asset, first)

        second = AssetDraft.from_asset(once)
        second.quantity = 8
        twice = apply_edit(once, second)

        assert len(twice.update_history) == 2
        assert twice.update_history[0] == once.update_history[0]
        assert twice.update_history[1].changes[0].old_value == 12

    def test_stored_asset_not_modified(self, manual_asset: Asset) -> None:
        draft = AssetDraft.from_asset(manual_asset)
        draft.quantity = 99
        apply_edit(manual_asset, draft)
        assert manual_asset.quantity == 10
        assert manual_asset.update_history == []

    def test_history_record_type(self, manual_asset: Asset) -> None:
        draft = AssetDraft.from_asset(manual_asset)
        draft.quantity = 11
        record = apply_edit(manual_asset, draft).update_history[0]
        assert isinstance(record, UpdateRecord)
        assert record.timestamp.tzinfo is not None
