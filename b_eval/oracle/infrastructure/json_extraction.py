"""Extract JSON payloads from free-form oracle output."""

import json
import re
from typing import Any

from b_eval.oracle.infrastructure.errors import OracleParseError

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")


def unwrap_cli_output(stdout: str) -> tuple[str, Any]:
    """Split `claude --output-format json` stdout into (text, direct_payload).

    The CLI wraps the model's answer as ``{"type": "result", "result": "..."}``;
    the answer text is returned for further extraction. Any other JSON object
    without CLI metadata is treated as the payload itself.
    """
    text = stdout.strip()
    try:
        wrapper = json.loads(text)
    except json.JSONDecodeError:
        return text, None

    if isinstance(wrapper, dict):
        if wrapper.get("type") == "result" and isinstance(wrapper.get("result"), str):
            return wrapper["result"], None
        if "type" not in wrapper and "session_id" not in wrapper:
            return text, wrapper
    return text, None


def extract_json(text: str) -> Any:
    """Parse a fenced ```json block if present, else the whole text.

    Raises:
        OracleParseError: if neither attempt yields valid JSON.
    """
    match = _FENCED_JSON.search(text)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise OracleParseError(text=text) from exc
