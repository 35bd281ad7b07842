"""Tests for the LLM client and the features built on it."""

import json
import sys
from pathlib import Path
from types import SimpleNamespace

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from subscout.app_analysis import (
    AnalysisError,
    analyze_app_url,
    analyze_pain_point_trends,
    generate_first_contact_post,
)
from subscout.discovery import (
    FALLBACK_RECOMMENDATIONS,
    DiscoveryError,
    SubredditRecommendation,
    activity_from_subscribers,
    discover_subreddits,
    enrich_recommendations,
    normalize_subreddit_name,
    parse_recommendations,
    search_reddit_trends,
)
from subscout.llm_client import (
    APIKeyError,
    LLMClient,
    LLMClientError,
    LLMResponse,
    parse_json_response,
)
from subscout.reddit_client import SubredditInfo


class FakeLLM:
    """Stands in for LLMClient, replaying a canned reply."""

    def __init__(self, reply=None, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, prompt, system_prompt=None, **kwargs):
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt, **kwargs})
        if self.error:
            raise self.error
        content = self.reply if isinstance(self.reply, str) else json.dumps(self.reply)
        return LLMResponse(content, "fake", "fake", 1, 1, 2)

    def generate_json(self, prompt, system_prompt=None, **kwargs):
        response = self.generate(prompt, system_prompt, **kwargs)
        try:
            return parse_json_response(response.content)
        except ValueError as e:
            raise LLMClientError(str(e))


# ============================================================================
# LLM client
# ============================================================================

class TestParseJsonResponse:
    def test_plain_json(self):
        assert parse_json_response('{"a": 1}') == {"a": 1}

    def test_fenced_json(self):
        content = 'Here you go:\n```json\n{"name": "Example"}\n```'
        assert parse_json_response(content) == {"name": "Example"}

    def test_no_json(self):
        with pytest.raises(ValueError):
            parse_json_response("I could not find anything.")


class TestLLMClient:
    def test_missing_key(self):
        with pytest.raises(APIKeyError):
            LLMClient(provider="perplexity", api_key="")

    def test_unknown_provider(self):
        with pytest.raises(LLMClientError):
            LLMClient(provider="acme", api_key="test-key")

    def test_generate_passes_options(self):
        client = LLMClient(provider="google", model="gemini-2.0-flash", api_key="test-key")
        captured = {}

        def create(**kwargs):
            captured.update(kwargs)
            return SimpleNamespace(
                choices=[SimpleNamespace(message=SimpleNamespace(content='{"ok": true}'))],
                usage=SimpleNamespace(prompt_tokens=3, completion_tokens=4, total_tokens=7),
            )

        client._client = SimpleNamespace(
            chat=SimpleNamespace(completions=SimpleNamespace(create=create))
        )

        result = client.generate_json("prompt", "system", json_mode=True)

        assert result == {"ok": True}
        assert captured["model"] == "gemini-2.0-flash"
        assert captured["response_format"] == {"type": "json_object"}
        assert captured["messages"][0] == {"role": "system", "content": "system"}

    def test_generate_wraps_errors(self):
        client = LLMClient(provider="openai", api_key="test-key")

        def create(**kwargs):
            raise TimeoutError("timed out")

        client._client = SimpleNamespace(
            chat=SimpleNamespace(completions=SimpleNamespace(create=create))
        )

        with pytest.raises(LLMClientError):
            client.generate("prompt")


# ============================================================================
# App analysis
# ============================================================================

class TestAppAnalysis:
    def test_analyze_app_url(self):
        llm = FakeLLM({
            "name": "Example",
            "description": "Shared notes",
            "targetAudience": "Remote teams",
            "painPoints": ["sync conflicts", ""],
            "features": ["offline mode"],
            "tags": ["notes"],
        })

        analysis = analyze_app_url("https://example.com", client=llm)

        assert analysis.name == "Example"
        assert analysis.target_audience == "Remote teams"
        assert analysis.pain_points == ["sync conflicts"]
        assert "https://example.com" in llm.calls[0]["prompt"]

    def test_analyze_app_url_llm_failure(self):
        llm = FakeLLM(error=LLMClientError("quota exceeded"))

        with pytest.raises(AnalysisError):
            analyze_app_url("https://example.com", client=llm)

    def test_analyze_app_url_not_json(self):
        with pytest.raises(AnalysisError):
            analyze_app_url("https://example.com", client=FakeLLM("no idea"))

    def test_first_contact_post(self):
        llm = FakeLLM({"title": "How do you keep notes in sync?", "content": "Curious..."})

        draft = generate_first_contact_post("productivity", "Shared notes", ["sync"], client=llm)

        assert draft.title == "How do you keep notes in sync?"
        assert "productivity" in llm.calls[0]["prompt"]

    def test_first_contact_post_missing_content(self):
        with pytest.raises(AnalysisError):
            generate_first_contact_post("productivity", "", [], client=FakeLLM({"title": "Hi"}))

    def test_trends(self):
        llm = FakeLLM({
            "trends": [
                {"topic": "billing", "frequency": 4, "growth": "rising"},
                {"topic": "sync", "frequency": "2", "growth": "exploding"},
                {"frequency": 1},
            ],
            "summary": "Billing dominates",
        })

        report = analyze_pain_point_trends(["Billing is broken", "Sync is slow"], client=llm)

        assert [(t.topic, t.frequency, t.growth) for t in report.trends] == [
            ("billing", 4, "rising"),
            ("sync", 2, "stable"),
        ]
        assert report.summary == "Billing dominates"

    def test_trends_empty_input_skips_llm(self):
        llm = FakeLLM(error=AssertionError("should not be called"))

        report = analyze_pain_point_trends([], client=llm)

        assert report.trends == []
        assert llm.calls == []


# ============================================================================
# Discovery
# ============================================================================

class TestDiscovery:
    def test_normalize_subreddit_name(self):
        assert normalize_subreddit_name("r/SaaS") == "SaaS"
        assert normalize_subreddit_name("1. /r/startups") == "startups"
        assert normalize_subreddit_name("not a name!") is None

    def test_activity_from_subscribers(self):
        assert activity_from_subscribers(250_000) == "high"
        assert activity_from_subscribers(20_000) == "medium"
        assert activity_from_subscribers(900) == "low"
        assert activity_from_subscribers(0) == "low"

    def test_parse_recommendations(self):
        recs = parse_recommendations({"subreddits": [
            {"name": "r/SaaS", "subscribers": 150000, "matchScore": 140},
            {"name": "saas", "subscribers": 1},
            {"name": "bad name!"},
            "junk",
            {"name": "indiehackers", "activity": "medium", "matchScore": "75"},
        ]})

        assert [r.name for r in recs] == ["SaaS", "indiehackers"]
        assert recs[0].match_score == 100
        assert recs[0].activity == "high"
        assert recs[0].display_name == "r/SaaS"
        assert recs[1].match_score == 75

    def test_discover_sorted_by_match(self):
        llm = FakeLLM({"subreddits": [
            {"name": "startups", "matchScore": 70},
            {"name": "SaaS", "matchScore": 90},
        ]})

        recs = discover_subreddits("Billing tool", "Founders", client=llm)

        assert [r.name for r in recs] == ["SaaS", "startups"]

    def test_discover_unparseable_reply_uses_fallback(self):
        recs = discover_subreddits("Billing tool", "Founders", client=FakeLLM("Sorry, no results"))

        assert recs == list(FALLBACK_RECOMMENDATIONS)

    def test_discover_llm_failure(self):
        llm = FakeLLM(error=LLMClientError("503"))

        with pytest.raises(DiscoveryError):
            discover_subreddits("Billing tool", "Founders", client=llm)

    def test_enrich_recommendations(self):
        rec = SubredditRecommendation("SaaS", "r/SaaS", "guess", 1000, "low", 90)

        class FakeReddit:
            def get_subreddit_info(self, name):
                if name != "SaaS":
                    return None
                return SubredditInfo("SaaS", "r/SaaS", "Software as a Service", 150000, 300, False, True)

        enriched = enrich_recommendations([rec], FakeReddit())

        assert enriched[0].subscribers == 150000
        assert enriched[0].description == "Software as a Service"
        assert enriched[0].match_score == 90
        assert enrich_recommendations([rec], None) == [rec]

    def test_search_reddit_trends(self):
        llm = FakeLLM({"trends": ["AI notes"], "discussions": ["Best note app?"]})

        trends = search_reddit_trends("note taking", client=llm)

        assert trends.to_dict() == {"trends": ["AI notes"], "discussions": ["Best note app?"]}
        assert llm.calls[0]["extra_body"]["search_domain_filter"] == ["reddit.com"]

    def test_search_reddit_trends_failure_is_empty(self):
        trends = search_reddit_trends("note taking", client=FakeLLM(error=LLMClientError("down")))

        assert trends.trends == []
        assert trends.discussions == []
