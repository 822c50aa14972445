"""
Basic import tests to verify the core functionality.
"""


def test_scoring_client_imports():
    """Test that the scoring client surface can be imported."""
    from scoring_client import (
        ScoringClient,
        build_session,
        BatchRequest,
        BatchResult,
        RecommendationEntity,
        RecommendationServiceError,
        TransportError,
    )

    assert callable(build_session)
    assert issubclass(TransportError, RecommendationServiceError)
    assert hasattr(ScoringClient, "generate_batch")
    assert BatchResult().total_processed == 0
    assert BatchRequest.create([3]).entity_ids == (3,)
    assert RecommendationEntity.model_fields


def test_ai_recommendations_imports():
    """Test that the recommendations module wires together."""
    from care_console.ai_recommendations import (
        CacheScope,
        RecommendationsService,
        create_ai_recommendations_module,
    )

    assert callable(create_ai_recommendations_module)
    assert CacheScope.all().key == "all"
    assert hasattr(RecommendationsService, "fetch_recommendations")


def test_app_factory_import():
    from care_console.main import create_app

    assert callable(create_app)
