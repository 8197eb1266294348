import sys
import os

# Ensure project root is on sys.path so `import ftpclient` resolves when Streamlit runs
# (Streamlit runs the script from its directory which can make package imports fail)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from datetime import datetime, timezone
import threading
import time
import traceback
import logging

from ftpclient.core import ClientSession, Credentials, EncryptionMode, SessionConfig

import streamlit as st

# Configure logging for Streamlit app
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


st.set_page_config(page_title="FTP Client", layout="wide")

# --- Helpers -----------------------------------------------------------------

# A lightweight wrapper to run blocking network calls in a thread and capture exceptions
def run_in_thread(fn, *args, **kwargs):
    result = {"value": None, "error": None}
    def target():
        try:
            result["value"] = fn(*args, **kwargs)
        except Exception as e:
            result["error"] = e
    t = threading.Thread(target=target)
    t.start()
    return t, result


def wait_for(t, label):
    with st.spinner(label):
        while t.is_alive():
            time.sleep(0.05)


def note_failure(command, error):
    tmp = st.session_state.get("tmp_history", [])
    tmp.append({
        "time": datetime.now(timezone.utc),
        "command": command,
        "raw": str(error),
        "parsed": None,
        "error": True
    })
    st.session_state["tmp_history"] = tmp


# --- UI ----------------------------------------------------------------------
st.title("FTP / FTPS Client")

if "session" not in st.session_state:
    st.session_state["session"] = None

with st.sidebar:
    st.header("Connection")
    host = st.text_input("Host", value=os.getenv("FTP_HOST", "127.0.0.1"))
    port = st.number_input("Port (0 = default)", min_value=0, max_value=65535, value=0)
    mode = st.selectbox("Encryption", [m.value for m in EncryptionMode], index=0)
    username = st.text_input("User", value="anonymous")
    password = st.text_input("Password", type="password")
    timeout = st.number_input("Timeout (s)", min_value=1.0, max_value=60.0, value=15.0)
    send_host = st.checkbox("Send HOST", value=False)
    ccc = st.checkbox("Clear command channel (CCC)", value=False)
    validate = st.checkbox("Validate certificate", value=True)

    if st.button("Connect"):
        config = SessionConfig(
            host=host or None,
            port=int(port),
            encryption_mode=EncryptionMode(mode),
            credentials=Credentials(username, password) if username else None,
            send_host=send_host,
            plain_text_encryption=ccc,
            connect_timeout=float(timeout),
            read_timeout=float(timeout),
            validate_certificate=validate,
        )
        session = st.session_state.get("session") or ClientSession(config)
        logger.info(f"[UI] Connect button clicked: {host}:{config.port_or_default} ({mode})")
        t, result = run_in_thread(session.connect, config)
        wait_for(t, "Connecting...")
        if result["error"]:
            logger.error(f"[UI] Connection failed: {result['error']}")
            note_failure(f"CONNECT {host}:{config.port_or_default}", result["error"])
            st.error(f"Connection failed: {result['error']}")
        else:
            st.success(f"Connected to {host}:{config.port_or_default}")
        st.session_state["session"] = session

    if st.button("Disconnect"):
        logger.info("[UI] Disconnect button clicked")
        session = st.session_state.get("session")
        if session:
            try:
                session.disconnect()
                logger.info("[UI] Disconnect successful")
                st.info("Disconnected")
            except Exception as e:
                logger.error(f"[UI] Error disconnecting: {e}")
                st.error(f"Error disconnecting: {e}")


session: ClientSession = st.session_state.get("session")

col1, col2 = st.columns([3, 1])

with col1:
    st.subheader("Session")
    if session is None or not session.is_ready:
        st.info("Not connected")
    else:
        st.write(f"Server: **{session.server_type.value}** — OS: **{session.server_os.value}**")
        st.write(f"SYST: `{session.system_type}`")
        st.write(f"Encrypted: {session.is_encrypted} — encoding: {session.text_encoding}")
        st.write(f"Listing parser: {session.listing_parser.kind.value} "
                 f"({session.listing_parser.effective_kind.value})")
        st.write("Capabilities: " + ", ".join(sorted(c.value for c in session.capabilities)))
        st.write(f"Hash algorithms: {session.hash_algorithms}")
        status = session.status
        st.write(f"AUTH TLS failed: {status.tls_upgrade_failed} — "
                 f"OPTS UTF8 accepted: {status.utf8_opts_accepted}")

    st.subheader("Create directory")
    path = st.text_input("Remote path", placeholder="e.g. /upload/2024/reports", key="mkd_path")
    force = st.checkbox("Create missing parents", value=True)
    if st.button("Create") and path:
        logger.info(f"[UI] Create directory: {path} (force={force})")
        if session is None or not session.is_ready:
            logger.warning("[UI] Not connected")
            st.error("Not connected. Connect first.")
        else:
            try:
                t, result = run_in_thread(session.create_directory, path, force)
                wait_for(t, "Creating...")
                if result["error"]:
                    logger.error(f"[UI] Create directory error: {result['error']}")
                    st.error(f"Error: {result['error']}")
                elif result["value"]:
                    st.success(f"Created {path}")
                else:
                    st.info(f"{path} already exists")
            except Exception as e:
                logger.error(f"[UI] Unhandled exception: {traceback.format_exc()}")
                st.error(f"Unhandled exception:\n{traceback.format_exc()}")

with col2:
    st.subheader("History")
    if session is None:
        st.info("No history: not connected")
        tmp = st.session_state.get("tmp_history", [])
        for entry in reversed(tmp[-50:]):
            t = entry.get("time")
            time_str = t.isoformat() if isinstance(t, datetime) else str(t)
            with st.expander(f"{time_str} — {entry.get('command')}"):
                if entry.get("raw"):
                    st.code(entry.get("raw"))
                if entry.get("error"):
                    st.error("This entry had an error")
    else:
        hist = session.commands.get_history()
        if st.button("Clear History"):
            session.commands.clear_history()
            st.rerun()
        for entry in reversed(hist[-100:]):
            t = entry.get("time")
            if isinstance(t, datetime):
                time_str = t.isoformat()
            else:
                time_str = str(t)
            with st.expander(f"{time_str} — {entry.get('command')}"):
                parsed = entry.get("parsed")
                if parsed:
                    st.write(f"Code: {parsed.code}")
                    st.write(f"Message: {parsed.message}")
                    st.write(f"Type: {parsed.type}")
                if entry.get("raw"):
                    st.code(entry.get("raw"))
                if entry.get("error"):
                    st.error("This entry had an error")


# Footer
st.markdown("---")
st.caption("FTP client — negotiated session state and command history.")
