"""
UniAsset - Streamlit Application
Unified holdings dashboard, market intelligence feed and AI advisory chat.
"""

import asyncio
import base64
import logging

import streamlit as st
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from config import configure_logging, get_settings
from constants import COMMON_SYMBOLS, initial_assets, initial_events
from exceptions import AIUnavailableError, UniAssetError
from models import Chain, ProductType
from services import (
    AIGateway, AdvisoryChat, AssetDraft, PortfolioService,
    can_submit, exposure_value, match_event_assets, merge_parsed_into_draft,
    set_quantity, set_total_value, set_unit_price, suggest_platforms, suggest_symbols,
)
from services.intelligence import IntelligenceFeed
from store import EventStore, PortfolioStore

configure_logging()
logger = logging.getLogger(__name__)

# Configure Streamlit page
st.set_page_config(
    page_title="UniAsset - Unified Asset Intelligence",
    page_icon="📈",
    layout="wide"
)


# ==================== SESSION STATE ====================
if "portfolio" not in st.session_state:
    st.session_state.portfolio = PortfolioStore(assets=initial_assets())

if "events" not in st.session_state:
    st.session_state.events = EventStore(initial_events())

if "gateway" not in st.session_state:
    st.session_state.gateway = AIGateway()

if "chat" not in st.session_state:
    st.session_state.chat = AdvisoryChat(st.session_state.gateway, st.session_state.portfolio.assets)

if "draft" not in st.session_state:
    st.session_state.draft = AssetDraft()

if "insights_for" not in st.session_state:
    st.session_state.insights_for = None


# ==================== HELPER FUNCTIONS ====================
def run_async(coro):
    """Run a store coroutine from Streamlit's synchronous script."""
    return asyncio.run(coro)


def refresh_insights():
    """Pull new AI insights once per holding count, like a change-driven effect."""
    portfolio: PortfolioStore = st.session_state.portfolio
    count = len(portfolio.assets)
    if not count or st.session_state.insights_for == count:
        return
    st.session_state.insights_for = count
    if not st.session_state.gateway.is_available:
        return
    feed = IntelligenceFeed(st.session_state.gateway, st.session_state.events)
    added = feed.refresh(portfolio.assets)
    if added:
        st.toast(f"{len(added)} new market insights")


# ==================== SIDEBAR ====================
def render_sidebar():
    """Render the sidebar with AI status and wallet management."""
    st.sidebar.title("⚙️ Settings")

    st.sidebar.subheader("🤖 AI Status")
    settings = get_settings()
    if st.session_state.gateway.is_available:
        model = settings.openai_model if settings.llm_mode == "cloud" else settings.local_model
        st.sidebar.success(f"✅ AI online ({settings.llm_mode}: {model})")
    else:
        st.sidebar.warning("⚠️ AI unavailable. Set OPENAI_API_KEY to enable it.")

    render_wallets()


def render_wallets():
    """Connect, sync and remove wallets."""
    portfolio: PortfolioStore = st.session_state.portfolio
    st.sidebar.subheader("👛 Wallets")

    address = st.sidebar.text_input(
        "Wallet Address",
        placeholder="0x..., Solana or Bitcoin address",
        help="Try 0x1111111111111111111111111111111111111111 for a demo wallet"
    )
    chain_override = st.sidebar.selectbox(
        "Chain", ["Auto-detect"] + [c.value for c in Chain], index=0
    )

    if st.sidebar.button("Connect Wallet", use_container_width=True):
        try:
            chain = None if chain_override == "Auto-detect" else Chain(chain_override)
            wallet = portfolio.connect_wallet(address, chain)
            with st.spinner("Syncing wallet..."):
                assets = run_async(portfolio.sync_wallet(wallet.id))
            st.sidebar.success(f"✅ Connected {wallet.chain.value} wallet ({len(assets)} assets)")
        except UniAssetError as e:
            st.sidebar.error(f"❌ {e}")

    if not portfolio.wallets:
        return

    if st.sidebar.button("🔄 Sync All Wallets", use_container_width=True):
        try:
            with st.spinner("Syncing wallets..."):
                run_async(portfolio.sync_all_wallets())
            st.sidebar.success("✅ Wallets synced")
        except UniAssetError:
            st.sidebar.error("❌ Wallet sync failed. Please try again.")

    for wallet in portfolio.wallets:
        col1, col2 = st.sidebar.columns([3, 1])
        with col1:
            synced = wallet.last_synced.strftime("%H:%M:%S") if wallet.last_synced else "never"
            st.caption(f"**{wallet.chain.value}** `{wallet.address[:10]}…` synced {synced}")
        with col2:
            if st.button("🗑️", key=f"rm_wallet_{wallet.id}"):
                removed = portfolio.remove_wallet(wallet.id)
                st.sidebar.info(f"Removed wallet and {removed} assets")
                st.rerun()


# ==================== MAIN CONTENT ====================
def render_dashboard():
    """Render portfolio value, allocation and upcoming risks."""
    portfolio: PortfolioStore = st.session_state.portfolio
    events: EventStore = st.session_state.events
    assets = portfolio.assets

    total = PortfolioService.total_value(assets)
    st.metric("Total Portfolio Value", f"${total:,.2f}")

    col1, col2 = st.columns([2, 1])
    with col1:
        st.line_chart(PortfolioService.simulated_value_history(total, seed=len(assets)))
    with col2:
        st.markdown("### ⚠️ Upcoming Risks")
        risks = PortfolioService.upcoming_risks(events.events)
        if not risks:
            st.info("No high-impact events ahead.")
        for event in risks:
            st.markdown(f"**{event.title}** ({event.date})")
            st.caption(", ".join(event.affected_assets))

    st.markdown("### Allocation")
    allocation = PortfolioService.allocation_by_type(assets)
    if allocation.empty:
        st.info("No assets in portfolio. Go to 'Portfolio' to add holdings!")
    else:
        st.dataframe(allocation, use_container_width=True, hide_index=True)


def render_add_asset_form():
    """Render the manual / AI-assisted asset entry form."""
    portfolio: PortfolioStore = st.session_state.portfolio
    gateway: AIGateway = st.session_state.gateway
    draft: AssetDraft = st.session_state.draft

    st.subheader("➕ Add Asset")

    with st.expander("✨ Describe it instead (AI)", expanded=False):
        ai_text = st.text_area("Description", placeholder="e.g. 12 NVDA at 880 on Fidelity")
        image = st.file_uploader("Or a screenshot", type=["png", "jpg", "jpeg"])
        if st.button("Interpret", disabled=not gateway.is_available):
            try:
                image_b64 = None
                if image is not None:
                    image_b64 = base64.b64encode(image.getvalue()).decode("ascii")
                with st.spinner("Interpreting..."):
                    parsed = gateway.parse_asset_entry(ai_text, image_b64, image.type if image else "image/png")
                st.session_state.draft = merge_parsed_into_draft(draft, parsed)
                st.rerun()
            except (ValueError, AIUnavailableError) as e:
                st.error(f"❌ {e}")

    col1, col2 = st.columns(2)
    with col1:
        platform = st.text_input("Platform", value=draft.platform or "", placeholder="e.g. Robinhood")
        matches = suggest_platforms(platform)
        if platform and matches and platform not in matches:
            st.caption("Did you mean: " + ", ".join(matches))
        symbol = st.text_input("Symbol", value=draft.symbol or "", placeholder="e.g. AAPL, BTC").upper()
        symbol_matches = suggest_symbols(symbol)
        if symbol and symbol_matches and symbol not in [s["symbol"] for s in symbol_matches]:
            st.caption("Suggestions: " + ", ".join(f"{s['symbol']} ({s['name']})" for s in symbol_matches))
        types = [t.value for t in ProductType]
        product_type = st.selectbox(
            "Product Type", types,
            index=types.index(draft.product_type.value) if draft.product_type else types.index("Other")
        )
        tags = st.text_input("Exposure Tags (comma separated)", value=", ".join(draft.exposure_tags))
    with col2:
        quantity = st.number_input("Quantity", min_value=0.0, value=float(draft.quantity or 0.0), step=0.01)
        unit_price = st.number_input("Unit Price", min_value=0.0, value=float(draft.unit_price or 0.0), step=0.01)
        total_value = st.number_input("Total Value", min_value=0.0, value=float(draft.total_value or 0.0), step=0.01)
        notes = st.text_input("Notes", value=draft.notes or "")

    # Reconcile whichever number the user touched
    if quantity != (draft.quantity or 0.0):
        set_quantity(draft, quantity)
        st.rerun()
    elif unit_price != (draft.unit_price or 0.0):
        set_unit_price(draft, unit_price)
        st.rerun()
    elif total_value != (draft.total_value or 0.0):
        set_total_value(draft, total_value)
        st.rerun()

    draft.platform = platform or None
    draft.symbol = symbol
    draft.product_type = ProductType(product_type)
    draft.exposure_tags = [t.strip() for t in tags.split(",") if t.strip()]
    draft.notes = notes or None

    known = {s["symbol"]: s for s in COMMON_SYMBOLS}
    if symbol and not draft.unit_price and st.button("💲 Fetch Market Price"):
        with st.spinner("Fetching price..."):
            quote = gateway.get_asset_market_data(symbol, known[symbol]["type"] if symbol in known else None)
        if quote:
            set_unit_price(draft, quote.price)
            st.rerun()
        else:
            st.warning("No price available for this symbol.")

    if st.button("Add Asset", type="primary", disabled=not can_submit(draft), use_container_width=True):
        asset = portfolio.submit_draft(draft)
        if asset:
            st.session_state.draft = AssetDraft()
            st.success(f"✅ Added {asset.symbol} (${asset.total_value:,.2f})")
            st.rerun()


def render_holdings():
    """Render holdings with edit and delete actions."""
    portfolio: PortfolioStore = st.session_state.portfolio
    st.subheader("📁 Holdings")

    if not portfolio.assets:
        st.info("No assets yet.")
        return

    st.dataframe(PortfolioService.holdings_frame(portfolio.assets), use_container_width=True, hide_index=True)

    for asset in portfolio.assets:
        label = f"**{asset.symbol}** · {asset.platform} · ${asset.total_value:,.2f}"
        with st.expander(label):
            with st.form(f"edit_{asset.id}"):
                col1, col2 = st.columns(2)
                with col1:
                    quantity = st.number_input("Quantity", min_value=0.0, value=float(asset.quantity), key=f"q_{asset.id}")
                    unit_price = st.number_input("Unit Price", min_value=0.0, value=float(asset.unit_price), key=f"p_{asset.id}")
                with col2:
                    platform = st.text_input("Platform", value=asset.platform, key=f"pl_{asset.id}")
                    notes = st.text_input("Notes", value=asset.notes or "", key=f"n_{asset.id}")
                if st.form_submit_button("Save"):
                    draft = AssetDraft.from_asset(asset)
                    draft.platform = platform
                    draft.notes = notes or None
                    set_unit_price(draft, unit_price)
                    set_quantity(draft, quantity)
                    portfolio.edit_asset(asset.id, draft)
                    st.rerun()

            if asset.update_history:
                st.markdown("**Update History**")
                for record in reversed(asset.update_history):
                    changes = "; ".join(f"{c.field}: {c.old_value} → {c.new_value}" for c in record.changes)
                    st.text(f"{record.timestamp:%Y-%m-%d %H:%M} | {changes}")

            if st.button("🗑️ Delete", key=f"del_{asset.id}"):
                portfolio.delete_asset(asset.id)
                st.rerun()


def render_intelligence():
    """Render past and upcoming events with matched exposure."""
    events: EventStore = st.session_state.events
    assets = st.session_state.portfolio.assets
    st.subheader("🌐 Market Intelligence")

    if st.button("Generate New Insights", disabled=not st.session_state.gateway.is_available):
        with st.spinner("Analyzing portfolio..."):
            added = IntelligenceFeed(st.session_state.gateway, events).refresh(assets)
        st.info(f"{len(added)} new events")

    col1, col2 = st.columns(2)
    for column, title, items in ((col1, "Past Events", events.past()), (col2, "Upcoming Events", events.upcoming())):
        with column:
            st.markdown(f"### {title}")
            for event in items:
                with st.expander(f"{event.title} ({event.date}) · {event.impact_strength.value} · {event.direction.value}"):
                    st.write(event.reasoning)
                    matched = match_event_assets(event, assets)
                    if matched:
                        st.markdown(f"**Your exposure:** ${exposure_value(event, assets):,.2f}")
                        st.caption(", ".join(a.symbol for a in matched))
                    else:
                        st.caption("No matching holdings.")


def render_chat_interface():
    """Render the AI advisory chat."""
    chat: AdvisoryChat = st.session_state.chat
    st.subheader("🤖 UniAsset Assistant")

    for message in chat.messages:
        with st.chat_message("assistant" if message.role.value == "model" else "user"):
            st.markdown(message.text)

    if prompt := st.chat_input("Ask about your exposure, risks or upcoming events..."):
        with st.spinner("Thinking..."):
            chat.send(prompt, st.session_state.portfolio.assets, st.session_state.events.events)
        st.rerun()


# ==================== MAIN APP ====================
def main():
    """Main application entry point."""
    st.title("📈 UniAsset")
    st.markdown("*Unified Asset Intelligence Platform*")

    render_sidebar()
    refresh_insights()

    tab1, tab2, tab3, tab4 = st.tabs([
        "📊 Dashboard", "📁 Portfolio", "🌐 Intelligence", "🤖 Advisory"
    ])

    with tab1:
        render_dashboard()

    with tab2:
        render_add_asset_form()
        st.markdown("---")
        render_holdings()

    with tab3:
        render_intelligence()

    with tab4:
        render_chat_interface()

    # Footer
    st.markdown("---")
    st.markdown(
        "<div style='text-align: center; color: gray;'>"
        "⚠️ UniAsset is for informational purposes only. Not financial advice.</div>",
        unsafe_allow_html=True
    )


if __name__ == "__main__":
    main()
