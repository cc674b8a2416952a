"""FakeOneShotOracle — routes prompts to scripted payloads for use in tests."""

import json

from b_eval.oracle.domain.oracle import OracleResponse

UNDERSTANDING = "BEHAVIOR TO ANALYZE"
IDEATION = "generating evaluation scenarios"
CONTINUATION = "playing the role of a user"
JUDGMENT = "evaluating whether an AI assistant demonstrated"

type Script = object | Exception | list[object | Exception]


class FakeOneShotOracle:
    """Satisfies the OneShotOracle protocol. Answers by prompt marker.

    Each route maps a marker substring to a payload, an Exception to raise,
    or a list of either consumed in order (the last item repeats once the
    list is exhausted). Prompts matching no route raise AssertionError.
    """

    def __init__(self, routes: dict[str, Script]) -> None:
        self._routes: dict[str, list[object | Exception]] = {
            marker: list(script) if isinstance(script, list) else [script]
            for marker, script in routes.items()
        }
        self._prompts: list[str] = []
        self._timeouts: list[float] = []

    @property
    def prompts(self) -> list[str]:
        return self._prompts

    @property
    def timeouts(self) -> list[float]:
        return self._timeouts

    def calls_for(self, marker: str) -> list[str]:
        return [p for p in self._prompts if marker in p]

    async def invoke(
        self,
        prompt: str,
        system_prompt: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> OracleResponse:
        self._prompts.append(prompt)
        self._timeouts.append(timeout_seconds)
        for marker, script in self._routes.items():
            if marker in prompt:
                effect = script.pop(0) if len(script) > 1 else script[0]
                if isinstance(effect, Exception):
                    raise effect
                return OracleResponse(text=json.dumps(effect), parsed_json=effect)
        raise AssertionError(f"unexpected prompt: {prompt[:80]!r}")
