"""
Flask application for the care coordination console.
"""
import logging
from typing import Optional

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from config_manager import ConfigManager
from scoring_client import ScoringClient

from .ai_recommendations import create_ai_recommendations_module

logger = logging.getLogger(__name__)


def create_app(config_manager: Optional[ConfigManager] = None,
               scoring_client: Optional[ScoringClient] = None) -> Flask:
    """Build the Flask app.

    Args:
        config_manager: Configuration source; a fresh ConfigManager by default
        scoring_client: Pre-built client (tests pass a fake)
    """
    config_manager = config_manager or ConfigManager()
    app_config = config_manager.get_app_config()
    scoring_config = config_manager.get_scoring_service_config()
    cache_config = config_manager.get_cache_config()

    app = Flask(__name__)
    app.wsgi_app = ProxyFix(
        app.wsgi_app,
        x_proto=1,   # trust 1 hop for X-Forwarded-Proto
        x_host=1,    # trust 1 hop for X-Forwarded-Host
        x_prefix=1)  # trust 1 hop for X-Forwarded-Prefix
    app.config["DEBUG"] = app_config.debug

    recommendations = create_ai_recommendations_module(
        base_url=scoring_config.base_url,
        api_token=scoring_config.api_token or None,
        timeout_seconds=scoring_config.timeout_seconds,
        proxy_url=scoring_config.proxy_url or None,
        ttl_seconds=cache_config.ttl_seconds,
        max_entries=cache_config.max_entries,
        admin_user_ids=app_config.admin_user_ids,
        client=scoring_client,
    )
    app.register_blueprint(recommendations["blueprint"])
    app.extensions["ai_recommendations"] = recommendations

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    logger.info(f"Care console ready, scoring service at {scoring_config.base_url}, "
                f"cache TTL {cache_config.ttl_seconds}s")
    return app
