"""Tests for the AI oracle response parsing and failure handling."""
from types import SimpleNamespace

import pytest

from recon.schemas.sku import CatalogEntry
from recon.services.ai_oracle import NullSKUOracle, OpenAISKUOracle, parse_oracle_response


def _catalog():
    return [
        CatalogEntry(sku_id=1, sku_code="BOLT-M8", name="Steel bolt M8"),
        CatalogEntry(sku_id=2, sku_code="NUT-M8", name="Hex nut M8"),
    ]


class _FakeCompletions:

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestParseOracleResponse:
    """Oracle output is filtered to known catalog ids and clamped."""

    def test_parses_fenced_json(self):
        content = '```json\n[{"id": 2, "confidence": 0.8, "reasoning": "nut"}]\n```'
        suggestions = parse_oracle_response(content, known_ids=[1, 2])
        assert [s.sku_id for s in suggestions] == [2]
        assert suggestions[0].reasoning == "nut"

    def test_drops_unknown_ids(self):
        content = '[{"id": 99, "confidence": 0.99}, {"id": 1, "confidence": 0.6}]'
        suggestions = parse_oracle_response(content, known_ids=[1, 2])
        assert [s.sku_id for s in suggestions] == [1]

    def test_clamps_and_sorts(self):
        content = '[{"id": 1, "confidence": 0.4}, {"id": 2, "confidence": 1.7}]'
        suggestions = parse_oracle_response(content, known_ids=[1, 2])
        assert [s.sku_id for s in suggestions] == [2, 1]
        assert suggestions[0].confidence == 1.0

    def test_limit(self):
        content = '[{"id": 1, "confidence": 0.4}, {"id": 2, "confidence": 0.5}]'
        assert len(parse_oracle_response(content, known_ids=[1, 2], limit=1)) == 1

    def test_skips_malformed_items(self):
        content = '[{"id": "abc", "confidence": 0.4}, "text", {"id": 1, "confidence": 0.5}]'
        assert [s.sku_id for s in parse_oracle_response(content, known_ids=[1])] == [1]

    def test_non_array_raises(self):
        with pytest.raises(ValueError):
            parse_oracle_response('{"id": 1}', known_ids=[1])


class TestOpenAISKUOracle:

    def test_returns_parsed_suggestions(self):
        completions = _FakeCompletions(content='[{"id": 1, "confidence": 0.82}]')
        oracle = OpenAISKUOracle(client=_client(completions), model="test-model")

        suggestions = oracle.rank("steel bolt m-8", "7318", _catalog())

        assert [s.sku_id for s in suggestions] == [1]
        assert completions.calls[0]["model"] == "test-model"
        assert "7318" in completions.calls[0]["messages"][0]["content"]

    def test_failure_degrades_to_empty(self):
        completions = _FakeCompletions(error=TimeoutError("oracle timed out"))
        oracle = OpenAISKUOracle(client=_client(completions))
        assert oracle.rank("steel bolt", None, _catalog()) == []

    def test_bad_json_degrades_to_empty(self):
        completions = _FakeCompletions(content="I think it is the bolt")
        oracle = OpenAISKUOracle(client=_client(completions))
        assert oracle.rank("steel bolt", None, _catalog()) == []

    def test_empty_catalog_skips_call(self):
        completions = _FakeCompletions(content="[]")
        oracle = OpenAISKUOracle(client=_client(completions))
        assert oracle.rank("steel bolt", None, []) == []
        assert completions.calls == []

    def test_null_oracle(self):
        assert NullSKUOracle().rank("anything", None, _catalog()) == []
