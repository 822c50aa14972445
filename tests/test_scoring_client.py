"""
Tests for the scoring service HTTP client.
"""
import asyncio
import json
from unittest.mock import Mock

import pydantic
import pytest
import requests

from scoring_client import (
    AuthenticationError,
    BatchRequest,
    RecommendationEntity,
    RecommendationStatus,
    RequestRejectedError,
    ScoringClient,
    TransportError,
    UrgencyLevel,
    build_session,
)


def make_response(status_code=200, body=None, text=None):
    response = Mock()
    response.status_code = status_code
    if body is not None:
        raw = json.dumps(body)
        response.json.return_value = body
    else:
        raw = text or ""
        response.json.side_effect = ValueError("No JSON object could be decoded")
    response.content = raw.encode("utf-8")
    response.text = raw
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return ScoringClient("https://scoring.example.org/", session=session, timeout=5)


ENTITY_JSON = {
    "id": 501,
    "requestId": 7,
    "userId": 9,
    "priorityScore": 82.5,
    "priorityReason": "Lives alone, missed two check-ins",
    "urgencyLevel": "HIGH",
    "recommendationText": "Schedule a home visit within 24 hours",
    "status": "COMPLETED",
    "createdAt": "2025-03-01T10:15:00",
}


class TestScoringClientRequests:
    """Endpoint paths, payloads and parsing."""

    def test_generate_single(self, client, session):
        session.request.return_value = make_response(body=ENTITY_JSON)

        entity = asyncio.run(client.generate_single(7))

        session.request.assert_called_once_with(
            "POST", "https://scoring.example.org/api/aifeatures/recommend/generate/7",
            json=None, timeout=5,
        )
        assert entity.id == 7
        assert entity.recommendation_id == 501
        assert entity.urgency_level == UrgencyLevel.HIGH
        assert entity.status == RecommendationStatus.COMPLETED
        assert entity.to_dict()["requestId"] == 7

    def test_generate_batch_with_failures(self, client, session):
        session.request.return_value = make_response(body={
            "totalProcessed": 3,
            "successCount": 1,
            "failureCount": 2,
            "recommendations": [ENTITY_JSON],
            "failures": [
                {"requestId": 8, "status": "FAILED", "priorityReason": "Request already closed"},
                {"requestId": 9, "status": "FAILED"},
            ],
        })
        batch = BatchRequest.create([7, 8, 9], requester_id="9", include_ranking=True)

        result = asyncio.run(client.generate_batch(batch))

        _, kwargs = session.request.call_args
        assert kwargs["json"] == {
            "requestIds": [7, 8, 9],
            "includePriorityRanking": True,
            "userId": 9,
        }
        assert [e.id for e in result.successes] == [7]
        assert [(f.entity_id, f.reason) for f in result.failures] == [
            (8, "Request already closed"),
            (9, "Recommendation generation failed"),
        ]

    def test_list_endpoints(self, client, session):
        session.request.return_value = make_response(body=[ENTITY_JSON])

        mine = asyncio.run(client.list_mine("9"))
        everything = asyncio.run(client.list_all())

        urls = [call.args[1] for call in session.request.call_args_list]
        assert urls == [
            "https://scoring.example.org/api/aifeatures/recommend/my/9",
            "https://scoring.example.org/api/aifeatures/recommend/all",
        ]
        assert [e.id for e in mine] == [e.id for e in everything] == [7]

    def test_empty_list_body(self, client, session):
        session.request.return_value = make_response(status_code=204)

        assert asyncio.run(client.list_all()) == []

    def test_rank_priorities(self, client, session):
        session.request.return_value = make_response(body=[
            {"taskId": 3, "priorityScore": 8.5, "urgencyLevel": "CRITICAL"},
        ])

        priorities = asyncio.run(client.rank_priorities((3,)))

        assert session.request.call_args.kwargs["json"] == [3]
        assert priorities[0].task_id == 3
        assert priorities[0].urgency_level == UrgencyLevel.CRITICAL


class TestScoringClientErrors:
    """Failure classification."""

    def test_connection_error_is_transport(self, client, session):
        session.request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(client.generate_single(7))

        assert "unreachable" in exc_info.value.message

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_status(self, client, session, status):
        session.request.return_value = make_response(status_code=status, body={"message": "Token expired"})

        with pytest.raises(AuthenticationError) as exc_info:
            asyncio.run(client.list_all())

        assert exc_info.value.message == "Token expired"
        assert exc_info.value.status == status

    def test_client_error_is_rejection(self, client, session):
        session.request.return_value = make_response(
            status_code=404, body={"errors": [{"message": "Request 7 not found"}]}
        )

        with pytest.raises(RequestRejectedError) as exc_info:
            asyncio.run(client.generate_single(7))

        assert exc_info.value.message == "Request 7 not found"

    def test_server_error_is_transport(self, client, session):
        session.request.return_value = make_response(status_code=503, text="Service Unavailable")

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(client.list_all())

        assert exc_info.value.status == 503
        assert exc_info.value.message == "Service Unavailable"

    def test_malformed_json_is_transport(self, client, session):
        session.request.return_value = make_response(text="<html>oops</html>")

        with pytest.raises(TransportError):
            asyncio.run(client.list_all())

    def test_unexpected_shape_is_transport(self, client, session):
        session.request.return_value = make_response(body={"recommendations": "nope"})

        with pytest.raises(TransportError):
            asyncio.run(client.list_all())

    def test_entity_without_request_id_is_transport(self, client, session):
        session.request.return_value = make_response(body={"id": 501})

        with pytest.raises(TransportError):
            asyncio.run(client.generate_single(7))


class TestBuildSession:

    def test_token_and_proxy(self):
        session = build_session(proxy_url="http://proxy:3128", api_token="abc")

        assert session.headers["Authorization"] == "Bearer abc"
        assert session.proxies["https"] == "http://proxy:3128"

    def test_defaults(self):
        session = build_session()

        assert "Authorization" not in session.headers
        assert session.headers["Accept"] == "application/json"


class TestBatchFailureEntries:
    """Failure records as the scoring service actually sends them."""

    def test_failure_without_request_id_is_skipped(self, client, session):
        session.request.return_value = make_response(body={
            "recommendations": [{"requestId": 1, "status": "COMPLETED"}],
            "failures": [{
                "requestId": None,
                "userId": None,
                "priorityScore": 0,
                "priorityReason": "Error: LLM timeout",
                "urgencyLevel": "LOW",
                "recommendationText": "Error generating recommendation",
                "status": "FAILED",
            }],
        })

        result = asyncio.run(client.generate_batch(BatchRequest.create([1, 2])))

        assert [e.id for e in result.successes] == [1]
        assert result.failures == []

    def test_entity_id_key_is_accepted(self, client, session):
        session.request.return_value = make_response(body={
            "recommendations": [],
            "failures": [{"requestId": None, "entityId": 4, "reason": "closed"}],
        })

        result = asyncio.run(client.generate_batch(BatchRequest.create([4])))

        assert [(f.entity_id, f.reason) for f in result.failures] == [(4, "closed")]


class TestRecommendationEntity:

    def test_row_id_never_becomes_request_id(self):
        with pytest.raises(pydantic.ValidationError):
            RecommendationEntity.model_validate({"id": 501})

    def test_aliases_map_both_ids(self):
        entity = RecommendationEntity.model_validate({"id": 501, "requestId": 7})

        assert (entity.id, entity.recommendation_id) == (7, 501)


class TestBatchRequestPayload:

    def test_numeric_requester_sent_as_number(self):
        payload = BatchRequest.create([1, 1, 2], requester_id="42").to_payload()

        assert payload == {"requestIds": [1, 2], "includePriorityRanking": False, "userId": 42}

    def test_non_numeric_requester_omitted(self):
        payload = BatchRequest.create([1], requester_id="admin1").to_payload()

        assert "userId" not in payload
