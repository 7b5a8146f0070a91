"""
Response classification for registry calls.

Turns a raw call outcome into a decoded payload or one of the client's
error types, so no transport details leak to callers.
"""

from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from bamboo_client.errors import (
    InvalidResponseError,
    ResourceNotFoundError,
    ServerError,
)
from bamboo_client.models.service import CallOutcome, ErrorMessage

UNKNOWN_ERROR = "unknown error"


class ResponseClassifier:
    """Maps (status, body) pairs onto results and errors."""

    def classify(
        self,
        outcome: CallOutcome,
        result_type: Optional[Any] = None,
        allow_empty: bool = False,
    ) -> Any:
        """
        Classify the outcome of a call.

        Args:
            outcome: Status code and body of the response
            result_type: Type the body of a successful response decodes
                         into, or None when no payload is expected
            allow_empty: Whether an empty successful body means "no payload"

        Returns:
            The decoded payload, or None

        Raises:
            ResourceNotFoundError: On 404
            InvalidResponseError: On 500 or an undecodable body
            ServerError: On any other non-2xx status
        """
        status_code = outcome.status_code

        if outcome.is_success:
            if result_type is None:
                return None
            return self._decode_success(outcome, result_type, allow_empty)

        if status_code == 404:
            raise ResourceNotFoundError(status_code=status_code)
        if status_code == 500:
            raise InvalidResponseError(status_code=status_code)

        try:
            error = ErrorMessage.model_validate_json(outcome.content)
        except ValidationError as e:
            raise InvalidResponseError(
                f"Unable to decode the error response from bamboo (status {status_code})",
                status_code=status_code,
            ) from e
        raise ServerError(error.message or UNKNOWN_ERROR, status_code=status_code)

    def _decode_success(self, outcome: CallOutcome, result_type: Any, allow_empty: bool) -> Any:
        if not outcome.content.strip():
            if allow_empty:
                return None
            raise InvalidResponseError(
                "Empty response from bamboo", status_code=outcome.status_code
            )

        try:
            return TypeAdapter(result_type).validate_json(outcome.content)
        except ValidationError as e:
            raise InvalidResponseError(
                "Unable to decode the response from bamboo", status_code=outcome.status_code
            ) from e
