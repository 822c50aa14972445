#!/usr/bin/env python3
"""
Simple runner script for the care console Flask application.
"""

import sys
from pathlib import Path

# Add the current directory to Python path
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

from config_manager import get_app_config
from care_console.logging_config import setup_logging, stop_logging
from care_console.main import create_app


def main() -> None:
    app_config = get_app_config()
    setup_logging(debug=app_config.debug)
    app = create_app()
    try:
        app.run(
            host=app_config.host,
            port=app_config.port,
            debug=app_config.debug
        )
    finally:
        stop_logging()


if __name__ == "__main__":
    main()
