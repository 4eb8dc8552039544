"""
Streamlit Chat Frontend for Chat Finance Tracker

A local stand-in for the chat transport: every line typed here is
delivered to the dispatcher as an inbound message from the sender named
in the sidebar, and the bot's reply is shown underneath.

Switching the sender name in the sidebar simulates a second chat
participant, each with their own report flow state.
"""

import asyncio

import streamlit as st

from src.config import validate_all_settings
from src.dispatcher import Dispatcher, create_app_components
from src.services.storage import GoogleSheetsLedgerStore


# Page configuration
st.set_page_config(
    page_title="Chat Finance Tracker",
    page_icon="💰",
    layout="centered",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        dispatcher, store = create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        dispatcher, store = create_app_components(use_storage=False)
    ready = run_async(dispatcher.startup())
    return dispatcher, store, ready


def render_sidebar(store, ready: bool) -> str:
    """Render sender selection and connection status; returns the sender id."""
    st.sidebar.title("💰 Chat Finance Tracker")
    st.sidebar.markdown("---")

    sender_id = st.sidebar.text_input(
        "Sender",
        value="me",
        help="Messages are sent as this chat participant",
    ).strip() or "me"

    st.sidebar.markdown("---")
    st.sidebar.markdown("### Ledger")
    if isinstance(store, GoogleSheetsLedgerStore):
        if ready:
            st.sidebar.success("✅ Google Sheets - Connected")
        else:
            st.sidebar.error("❌ Google Sheets - Not reachable")
    else:
        status = validate_all_settings()
        st.sidebar.warning(
            "⚠️ In-memory ledger (data is lost on restart). "
            f"{status.get('google_sheets_error', '')}"
        )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **Commands:**
        - `!in 5000000 gaji`
        - `!out 50000 makan siang`
        - `!report`, then `1` or `2`
        - `!help`
        """
    )

    if st.sidebar.button("🗑️ Clear chat"):
        st.session_state.messages = []
        st.rerun()

    return sender_id


def render_chat(dispatcher: Dispatcher, sender_id: str):
    """Render the conversation and deliver new messages."""
    st.title("💬 Chat")

    if "messages" not in st.session_state:
        st.session_state.messages = []

    for message in st.session_state.messages:
        with st.chat_message(message["role"]):
            if message["role"] == "user":
                st.caption(message["sender"])
            st.text(message["content"])

    prompt = st.chat_input("Kirim perintah, mis. !out 50000 makan siang")
    if not prompt:
        return

    st.session_state.messages.append(
        {"role": "user", "sender": sender_id, "content": prompt}
    )
    with st.chat_message("user"):
        st.caption(sender_id)
        st.text(prompt)

    reply = run_async(dispatcher.handle_message(sender_id, prompt))
    if reply is None:
        st.caption("(message ignored: not a command)")
        return

    st.session_state.messages.append({"role": "assistant", "content": reply})
    with st.chat_message("assistant"):
        st.text(reply)


def main():
    """Main application entry point."""
    dispatcher, store, ready = get_components()
    sender_id = render_sidebar(store, ready)
    render_chat(dispatcher, sender_id)


if __name__ == "__main__":
    main()
