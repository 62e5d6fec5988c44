"""Tests for the generation gateway and its output parsing"""

import httpx
import openai
import pytest
from unittest.mock import MagicMock

from conftest import make_completion

from blogsmith.core.exceptions import GenerationFailed, ValidationError
from blogsmith.services.generation_service import (
    GenerationGateway,
    build_prompt,
    clean_title,
    parse_generated_content,
)

MARS_RESPONSE = '{"title":"Title: \\"Life on Mars\\"","content":"paragraph one...\\n\\nparagraph two..."}'


def provider_request():
    return httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


class TestBuildPrompt:
    def test_prompt_mentions_topic_style_and_format(self):
        prompt = build_prompt("colonizing mars", "casual")
        assert '"colonizing mars"' in prompt
        assert "casual style" in prompt
        assert "five paragraphs" in prompt
        assert '"title"' in prompt and '"content"' in prompt
        assert 'must not start with "Title:"' in prompt
        assert "600 words" in prompt

    def test_length_changes_word_target(self):
        assert "300 words" in build_prompt("t", "s", "short")
        assert "1200 words" in build_prompt("t", "s", "long")

    @pytest.mark.parametrize("topic,style", [("", "casual"), ("mars", ""), ("  ", "casual"), (None, "casual")])
    def test_topic_and_style_are_required(self, topic, style):
        with pytest.raises(ValidationError):
            build_prompt(topic, style)

    def test_unknown_length_is_rejected(self):
        with pytest.raises(ValidationError):
            build_prompt("mars", "casual", "epic")


class TestParsing:
    @pytest.mark.parametrize("raw,expected", [
        ('Title: "Life on Mars"', "Life on Mars"),
        ("title:Life on Mars", "Life on Mars"),
        ("“Life on Mars”", "Life on Mars"),
        ("'Life on Mars'", "Life on Mars"),
        ('"Title: Life on Mars"', "Life on Mars"),
        ("Life on Mars", "Life on Mars"),
        ("Don't Panic", "Don't Panic"),
        ('"Hello" World', '"Hello" World'),
        ("'90s Music Revival", "'90s Music Revival"),
        ("Programmers’", "Programmers’"),
        ("“Unbalanced\"", "“Unbalanced\""),
    ])
    def test_clean_title(self, raw, expected):
        assert clean_title(raw) == expected

    def test_mars_payload(self):
        content = parse_generated_content(MARS_RESPONSE)
        assert content.title == "Life on Mars"
        assert content.content == "paragraph one...\n\nparagraph two..."

    def test_fenced_json_is_accepted(self):
        raw = '```json\n{"title": "Fenced", "content": "Body inside a code fence"}\n```'
        assert parse_generated_content(raw).title == "Fenced"

    @pytest.mark.parametrize("raw", [
        None,
        "",
        "Here is your blog post about Mars!",
        '["title", "content"]',
        '{"title": "Only a title"}',
        '{"title": 5, "content": "numbers are not titles"}',
        '{"title": "Title: \\"\\"", "content": "quotes only"}',
    ])
    def test_unusable_output_raises(self, raw):
        with pytest.raises(ValueError):
            parse_generated_content(raw)

    def test_minimum_lengths(self):
        raw = '{"title": "Abc", "content": "short"}'
        assert parse_generated_content(raw).title == "Abc"
        with pytest.raises(ValueError):
            parse_generated_content(raw, min_title_length=4)
        with pytest.raises(ValueError):
            parse_generated_content(raw, min_content_length=20)


class TestGenerationGateway:
    def test_colonizing_mars_scenario(self, provider_client):
        provider_client.chat.completions.create.return_value = make_completion(MARS_RESPONSE)
        gateway = GenerationGateway(client=provider_client, models=["gpt-test"])

        content = gateway.generate("colonizing mars", "casual")

        assert content.model_dump() == {
            "title": "Life on Mars",
            "content": "paragraph one...\n\nparagraph two...",
        }

    def test_provider_request_parameters(self, provider_client):
        provider_client.chat.completions.create.return_value = make_completion(MARS_RESPONSE)
        gateway = GenerationGateway(client=provider_client, models=["gpt-test"], max_tokens=800, timeout=12.5)

        gateway.generate("colonizing mars", "casual")

        kwargs = provider_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 800
        assert kwargs["timeout"] == 12.5
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "colonizing mars" in kwargs["messages"][-1]["content"]

    def test_non_json_output_fails(self, provider_client):
        provider_client.chat.completions.create.return_value = make_completion("Sure! Here is a post.")
        gateway = GenerationGateway(client=provider_client, models=["gpt-test"])

        with pytest.raises(GenerationFailed):
            gateway.generate("colonizing mars", "casual")

    def test_empty_choices_fail(self, provider_client):
        response = MagicMock()
        response.choices = []
        provider_client.chat.completions.create.return_value = response
        gateway = GenerationGateway(client=provider_client, models=["gpt-test"])

        with pytest.raises(GenerationFailed):
            gateway.generate("colonizing mars", "casual")

    def test_connection_error_fails_cleanly(self, provider_client):
        provider_client.chat.completions.create.side_effect = openai.APIConnectionError(request=provider_request())
        gateway = GenerationGateway(client=provider_client, models=["gpt-test"])

        with pytest.raises(GenerationFailed) as exc_info:
            gateway.generate("colonizing mars", "casual")
        assert exc_info.value.message == "Failed to generate content. Please try again."

    def test_timeout_fails_cleanly(self, provider_client):
        provider_client.chat.completions.create.side_effect = openai.APITimeoutError(request=provider_request())
        gateway = GenerationGateway(client=provider_client, models=["gpt-test"])

        with pytest.raises(GenerationFailed):
            gateway.generate("colonizing mars", "casual")

    def test_roster_falls_through_to_next_model(self, provider_client):
        provider_client.chat.completions.create.side_effect = [
            openai.APIConnectionError(request=provider_request()),
            make_completion("not json"),
            make_completion(MARS_RESPONSE),
        ]
        gateway = GenerationGateway(client=provider_client, models=["first", "second", "third"])

        content = gateway.generate("colonizing mars", "casual")

        assert content.title == "Life on Mars"
        tried = [call.kwargs["model"] for call in provider_client.chat.completions.create.call_args_list]
        assert tried == ["first", "second", "third"]

    def test_roster_stops_at_first_success(self, provider_client):
        provider_client.chat.completions.create.return_value = make_completion(MARS_RESPONSE)
        gateway = GenerationGateway(client=provider_client, models=["first", "second"])

        gateway.generate("colonizing mars", "casual")

        assert provider_client.chat.completions.create.call_count == 1

    def test_exhausted_roster_fails(self, provider_client):
        provider_client.chat.completions.create.return_value = make_completion('{"title": "x"}')
        gateway = GenerationGateway(client=provider_client, models=["first", "second"])

        with pytest.raises(GenerationFailed):
            gateway.generate("colonizing mars", "casual")
        assert provider_client.chat.completions.create.call_count == 2

    def test_missing_client_fails_without_calling(self):
        gateway = GenerationGateway(client=None, models=["gpt-test"])
        with pytest.raises(GenerationFailed):
            gateway.generate("colonizing mars", "casual")

    def test_invalid_input_never_reaches_provider(self, provider_client):
        gateway = GenerationGateway(client=provider_client, models=["gpt-test"])
        with pytest.raises(ValidationError):
            gateway.generate("", "casual")
        provider_client.chat.completions.create.assert_not_called()
