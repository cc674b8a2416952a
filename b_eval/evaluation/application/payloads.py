"""Validation of oracle JSON payloads into domain models."""

from pydantic import BaseModel, ValidationError

from b_eval.oracle.domain.oracle import OracleResponse
from b_eval.oracle.infrastructure.errors import OracleParseError


def parse_payload[ModelT: BaseModel](model: type[ModelT], response: OracleResponse) -> ModelT:
    """Validate the response's JSON object as *model*.

    Raises:
        OracleParseError: if the payload is not an object or does not fit the model.
    """
    if not isinstance(response.parsed_json, dict):
        raise OracleParseError(text=response.text, reason="expected a JSON object")
    try:
        return model.model_validate(response.parsed_json)
    except ValidationError as exc:
        raise OracleParseError(
            text=response.text,
            reason=f"unexpected {model.__name__} structure ({exc.error_count()} errors)",
        ) from exc
