"""Unit tests for response classification."""

from typing import Dict, Optional

import pytest

from bamboo_client.errors import (
    InvalidResponseError,
    ResourceNotFoundError,
    ServerError,
)
from bamboo_client.models.service import CallOutcome, Service
from bamboo_client.transport import ResponseClassifier


@pytest.fixture
def classifier():
    """Create a response classifier for testing."""
    return ResponseClassifier()


def outcome(status_code: int, content: bytes = b"") -> CallOutcome:
    return CallOutcome(status_code=status_code, content=content)


class TestSuccessfulResponses:
    """Test cases for 2xx responses."""

    def test_decodes_payload_into_result_type(self, classifier):
        """Test a 2xx body is decoded into the requested type."""
        result = classifier.classify(
            outcome(200, b'{"id": "/web", "acl": "hdr(host) -i web"}'), Service
        )

        assert result == Service(id="/web", acl="hdr(host) -i web")

    def test_no_result_type_ignores_body(self, classifier):
        """Test success without a destination returns None, even for junk bodies."""
        assert classifier.classify(outcome(204, b"not json")) is None
        assert classifier.classify(outcome(299, b"")) is None

    def test_undecodable_success_body_is_invalid_response(self, classifier):
        """Test a malformed success payload surfaces InvalidResponseError."""
        with pytest.raises(InvalidResponseError) as exc_info:
            classifier.classify(outcome(200, b"<html>oops</html>"), Service)

        assert exc_info.value.status_code == 200

    def test_wrong_shape_success_body_is_invalid_response(self, classifier):
        """Test a well-formed JSON body of the wrong shape is rejected."""
        with pytest.raises(InvalidResponseError):
            classifier.classify(outcome(200, b'["/web"]'), Service)

    def test_empty_body_allowed(self, classifier):
        """Test an empty body is success-with-no-payload when allowed."""
        assert classifier.classify(outcome(200, b""), Service, allow_empty=True) is None
        assert classifier.classify(outcome(200, b"  \n"), Service, allow_empty=True) is None

    def test_empty_body_not_allowed(self, classifier):
        """Test an empty body is rejected when a payload is required."""
        with pytest.raises(InvalidResponseError):
            classifier.classify(outcome(201, b""), Service)

    def test_decodes_service_mapping(self, classifier):
        """Test a collection decodes into a name to service mapping."""
        result = classifier.classify(
            outcome(200, b'{"/web": {"id": "/web", "acl": "a"}, "/api": {"id": "/api", "acl": "b"}}'),
            Dict[str, Service],
        )

        assert set(result) == {"/web", "/api"}
        assert result["/api"].acl == "b"

    def test_null_collection(self, classifier):
        """Test a JSON null decodes to None for an optional mapping."""
        assert classifier.classify(outcome(200, b"null"), Optional[Dict[str, Service]]) is None


class TestErrorResponses:
    """Test cases for non-2xx responses."""

    @pytest.mark.parametrize("body", [b"", b'{"message": "gone"}', b"garbage"])
    def test_404_is_not_found(self, classifier, body):
        """Test 404 surfaces ResourceNotFoundError whatever the body."""
        with pytest.raises(ResourceNotFoundError) as exc_info:
            classifier.classify(outcome(404, body), Service)

        assert exc_info.value.status_code == 404

    @pytest.mark.parametrize("body", [b"", b'{"message": "database down"}', b"garbage"])
    def test_500_is_invalid_response(self, classifier, body):
        """Test 500 surfaces InvalidResponseError regardless of body content."""
        with pytest.raises(InvalidResponseError) as exc_info:
            classifier.classify(outcome(500, body))

        assert exc_info.value.status_code == 500

    def test_error_message_is_carried(self, classifier):
        """Test a parsable error body yields ServerError with its message."""
        with pytest.raises(ServerError) as exc_info:
            classifier.classify(outcome(429, b'{"message":"quota exceeded"}'))

        assert exc_info.value.message == "quota exceeded"
        assert str(exc_info.value) == "quota exceeded"
        assert exc_info.value.status_code == 429

    @pytest.mark.parametrize("body", [b'{"message":""}', b"{}", b'{"message": null}', b'{"error": "x"}'])
    def test_empty_error_message_is_unknown_error(self, classifier, body):
        """Test a missing or empty message falls back to 'unknown error'."""
        with pytest.raises(ServerError) as exc_info:
            classifier.classify(outcome(429, body))

        assert exc_info.value.message == "unknown error"

    @pytest.mark.parametrize("body", [b"", b"quota exceeded", b'["quota"]', b'{"message": 42}'])
    def test_unparsable_error_body_is_invalid_response(self, classifier, body):
        """Test an error body that fails to parse surfaces InvalidResponseError."""
        with pytest.raises(InvalidResponseError):
            classifier.classify(outcome(400, body))

    @pytest.mark.parametrize("status_code", [301, 400, 403, 409, 502, 503])
    def test_other_statuses_are_server_errors(self, classifier, status_code):
        """Test every other non-2xx status maps to ServerError."""
        with pytest.raises(ServerError):
            classifier.classify(outcome(status_code, b'{"message": "nope"}'))
