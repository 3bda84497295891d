import json

import httpx
import pytest

from fairmind.core.exceptions import GenerationFailure
from fairmind.services.resolution_generator import (
    ResolutionGenerator,
    build_resolution_prompt,
    fallback_resolutions,
    parse_resolution_candidates,
)


def model_text(resolutions):
    return "Sure, here you go:\n" + json.dumps({"resolutions": resolutions}) + "\nHope this helps."


GOOD = [
    {"id": "1", "title": "Take turns", "description": "Alternate weeks.", "ai_score": 82, "suggested_best": 1},
    {"id": "2", "title": "Split costs", "description": "Pay half each.", "ai_score": 71, "suggested_best": 0},
    {"id": "3", "title": "Ask a friend", "description": "Get a neutral view.", "ai_score": 55, "suggested_best": 0},
]


def assert_valid_batch(candidates):
    assert len(candidates) == 3
    assert all(0 <= c.ai_score <= 100 for c in candidates)
    assert sum(c.suggested_best for c in candidates) == 1


class TestParsing:

    def test_extracts_json_from_surrounding_text(self):
        candidates = parse_resolution_candidates(model_text(GOOD))

        assert [c.title for c in candidates] == ["Take turns", "Split costs", "Ask a friend"]
        assert [c.suggested_best for c in candidates] == [True, False, False]

    def test_scores_are_clamped(self):
        data = [dict(r) for r in GOOD]
        data[0]["ai_score"] = 140
        data[2]["ai_score"] = -5
        candidates = parse_resolution_candidates(model_text(data))

        assert [c.ai_score for c in candidates] == [100, 71, 0]

    def test_several_flags_keep_only_the_best_flagged(self):
        data = [dict(r, suggested_best=1) for r in GOOD]
        data[1]["ai_score"] = 90
        candidates = parse_resolution_candidates(model_text(data))

        assert [c.suggested_best for c in candidates] == [False, True, False]

    def test_no_flag_recommends_highest_score(self):
        data = [dict(r, suggested_best=0) for r in GOOD]
        candidates = parse_resolution_candidates(model_text(data))

        assert_valid_batch(candidates)
        assert candidates[0].suggested_best

    @pytest.mark.parametrize("text", [
        "no json at all",
        "{not valid json}",
        json.dumps({"resolutions": GOOD[:2]}),
        json.dumps({"resolutions": GOOD + GOOD[:1]}),
        json.dumps({"resolutions": [dict(GOOD[0], ai_score="high")] + GOOD[1:]}),
        json.dumps({"resolutions": [{"title": "x"}] + GOOD[1:]}),
    ])
    def test_malformed_output_raises(self, text):
        with pytest.raises(GenerationFailure):
            parse_resolution_candidates(text)


def test_fallback_batch_is_valid():
    batch = fallback_resolutions()
    assert_valid_batch(batch)
    assert [c.title for c in batch] == ["Compromise Solution", "Time-Based Trial", "Alternative Perspective"]


def test_prompt_contains_conversation():
    prompt = build_resolution_prompt("A: hi\nB: hello")
    assert "A: hi\nB: hello" in prompt
    assert "EXACTLY 3" in prompt


class TestGenerator:

    def _generator(self, handler):
        return ResolutionGenerator(
            api_url="https://inference.test/models",
            model_id="mediator",
            api_key="secret",
            timeout=5,
            transport=httpx.MockTransport(handler),
        )

    async def test_first_attempt_success(self):
        requests = []

        def handler(request):
            requests.append(json.loads(request.content))
            assert request.headers["Authorization"] == "Bearer secret"
            assert request.url == "https://inference.test/models/mediator"
            return httpx.Response(200, json=[{"generated_text": model_text(GOOD)}])

        candidates = await self._generator(handler).generate(["one", "two"])

        assert_valid_batch(candidates)
        assert len(requests) == 1
        assert requests[0]["parameters"]["temperature"] == 0.7
        assert "one\ntwo" in requests[0]["inputs"]

    async def test_retries_once_with_lower_temperature(self):
        temperatures = []

        def handler(request):
            body = json.loads(request.content)
            temperatures.append(body["parameters"]["temperature"])
            if len(temperatures) == 1:
                return httpx.Response(200, json={"generated_text": "I cannot answer in JSON"})
            return httpx.Response(200, json={"generated_text": model_text(GOOD)})

        candidates = await self._generator(handler).generate(["a"])

        assert temperatures == [0.7, 0.5]
        assert candidates[0].title == "Take turns"

    async def test_two_failures_give_fallback(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503, text="model loading")

        candidates = await self._generator(handler).generate(["a"])

        assert len(calls) == 2
        assert [c.title for c in candidates] == [c.title for c in fallback_resolutions()]

    async def test_connection_errors_give_fallback(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        assert_valid_batch(await self._generator(handler).generate(["a"]))

    async def test_misconfigured_endpoint_gives_fallback(self):
        def handler(request):
            raise httpx.InvalidURL("Invalid port: 'abc'")

        candidates = await self._generator(handler).generate(["a"])

        assert [c.title for c in candidates] == [c.title for c in fallback_resolutions()]

    async def test_without_api_key_uses_fallback(self):
        def handler(request):
            raise AssertionError("must not be called")

        generator = ResolutionGenerator(api_key="", transport=httpx.MockTransport(handler))
        assert_valid_batch(await generator.generate(["a"]))
