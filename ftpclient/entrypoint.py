#!/usr/bin/env python3
"""
Entry point for the FTP client console.

Starts the Streamlit UI (ftpclient/ui/app.py). Host and credentials can be
preset with FTP_HOST / FTP_USER / FTP_PASSWORD.
"""

import argparse
import logging
import os
import subprocess
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("ftpclient")

APP_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'ui', 'app.py')


def build_command(host: str, port: int) -> list:
    return [
        sys.executable, '-m', 'streamlit',
        'run',
        APP_PATH,
        f'--server.port={port}',
        f'--server.address={host}',
        '--logger.level=info',
        '--client.showErrorDetails=true'
    ]


def start_streamlit_client(host='0.0.0.0', port=8501):
    """
    Start the Streamlit FTP client UI.

    Args:
        host: Host to bind Streamlit to (default: 0.0.0.0 for Docker)
        port: Port to expose Streamlit on (default: 8501)
    """
    logger.info(f"Starting Streamlit FTP Client UI on {host}:{port}...")
    os.environ.setdefault('STREAMLIT_TELEMETRY_ENABLED', 'false')
    try:
        subprocess.run(build_command(host, port), check=True)
    except subprocess.CalledProcessError as e:
        logger.error(f"Streamlit exited with error code {e.returncode}")
        sys.exit(e.returncode)
    except KeyboardInterrupt:
        logger.info("FTP client UI stopped")


def main(argv=None):
    parser = argparse.ArgumentParser(description="FTP/FTPS client console")
    parser.add_argument("--address", default=os.getenv("CLIENT_UI_ADDRESS", "0.0.0.0"),
                        help="Address the UI listens on")
    parser.add_argument("--port", type=int, default=int(os.getenv("CLIENT_UI_PORT", "8501")),
                        help="Port the UI listens on")
    args = parser.parse_args(argv)
    start_streamlit_client(args.address, args.port)


if __name__ == '__main__':
    main()
