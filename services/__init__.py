"""
Services package for UniAsset.
Provides core business logic separated from presentation and state.
"""

from services.common import (
    classify_address,
    normalize_symbol,
    to_quote_symbol,
    suggest_symbols,
    suggest_platforms,
    to_number,
    round_quantity,
    round_money,
)
from services.reconciliation import (
    AssetDraft,
    set_quantity,
    set_unit_price,
    set_total_value,
    can_submit,
    finalize_draft,
    merge_parsed_into_draft,
    apply_edit,
)
from services.wallet_service import WalletService, address_seed, seeded_quantity
from services.market_data import MarketDataService, MarketQuote
from services.ai_gateway import AIGateway, ParsedAsset
from services.portfolio import PortfolioService, match_event_assets, exposure_value
from services.advisory import AdvisoryChat

__all__ = [
    # Common utilities
    'classify_address',
    'normalize_symbol',
    'to_quote_symbol',
    'suggest_symbols',
    'suggest_platforms',
    'to_number',
    'round_quantity',
    'round_money',
    # Reconciliation
    'AssetDraft',
    'set_quantity',
    'set_unit_price',
    'set_total_value',
    'can_submit',
    'finalize_draft',
    'merge_parsed_into_draft',
    'apply_edit',
    # Services
    'WalletService',
    'address_seed',
    'seeded_quantity',
    'MarketDataService',
    'MarketQuote',
    'AIGateway',
    'ParsedAsset',
    'PortfolioService',
    'match_event_assets',
    'exposure_value',
    'AdvisoryChat',
]
