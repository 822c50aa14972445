"""
AI recommendations routes.
"""
import logging
from typing import List

from flask import Blueprint, jsonify, request

from scoring_client import RecommendationServiceError, ValidationError

from .models import UserContext
from .service import RecommendationsService

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")


def _flag(value) -> bool:
    """JSON booleans as they are; strings only when spelled truthy."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return False


def create_ai_recommendations_routes(service: RecommendationsService,
                                     admin_user_ids: List[str] = None) -> Blueprint:
    """Create AI recommendations routes."""
    bp = Blueprint("ai_recommendations", __name__, url_prefix="/api/recommendations")
    admins = list(admin_user_ids or [])

    def current_user():
        return UserContext.from_uid(request.cookies.get("uid"), admins)

    def request_ids() -> list:
        payload = request.get_json(silent=True) or {}
        ids = payload.get("ids") if isinstance(payload, dict) else None
        if not isinstance(ids, list):
            raise ValidationError("Body must contain an 'ids' list")
        return ids

    @bp.errorhandler(RecommendationServiceError)
    def handle_service_error(error: RecommendationServiceError):
        return jsonify(error.to_dict()), error.status_code

    @bp.route("", methods=["GET"])
    async def list_recommendations():
        """Recommendations for the requester's current view."""
        view = request.args.get("view") or None
        force = _flag(request.args.get("force", ""))
        user = current_user()
        entities = await service.get_sorted_recommendations(user, view=view, force_refresh=force)
        scope = service.resolver.active_scope(user)
        return jsonify({
            "recommendations": [entity.to_dict() for entity in entities],
            "count": len(entities),
            "scope": scope.key if scope else None,
        })

    @bp.route("/generate", methods=["POST"])
    async def generate():
        """Generate recommendations for one or more requests."""
        result = await service.generate_for_ids(request_ids(), current_user())
        return jsonify(result.to_dict())

    @bp.route("/batch", methods=["POST"])
    async def process_batch():
        """Score a set of requests in one fan-out call."""
        payload = request.get_json(silent=True) or {}
        include_ranking = _flag(payload.get("include_ranking")) if isinstance(payload, dict) else False
        result = await service.process_batch(request_ids(), current_user(), include_ranking=include_ranking)
        return jsonify(result.to_dict())

    @bp.route("/priorities", methods=["POST"])
    async def rank_priorities():
        priorities = await service.rank_priorities(request_ids(), current_user())
        return jsonify({"priorities": [p.to_dict() for p in priorities]})

    @bp.route("/<int:entity_id>/refresh", methods=["POST"])
    async def refresh(entity_id):
        result = await service.refresh(entity_id, current_user())
        return jsonify(result.to_dict())

    @bp.route("/<int:entity_id>/status", methods=["GET"])
    def status(entity_id):
        record = service.get_status(entity_id)
        if record is None:
            return jsonify({"entity_id": entity_id, "status": "idle"})
        return jsonify(record.to_dict())

    @bp.route("/clear", methods=["POST"])
    def clear():
        user = current_user()
        if user is None:
            return jsonify({"error": "authentication_required", "message": "User not authenticated"}), 401
        service.clear()
        logger.info(f"Recommendation cache cleared by {user.user_id}")
        return jsonify({"success": True, "message": "Recommendation cache cleared"})

    @bp.route("/stats", methods=["GET"])
    def stats():
        return jsonify(service.get_cache_stats())

    return bp
