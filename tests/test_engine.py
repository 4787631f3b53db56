from __future__ import annotations

import json

import pytest

from conftest import FakeAdapter
from ngo_agent.core.capabilities import CAPABILITY_REGISTRY, Capability
from ngo_agent.core.engine import AgentRequest, AgentResponse, run_agent
from ngo_agent.core.extraction import Raw, Structured
from ngo_agent.llm.errors import (
    ConfigurationError,
    ProviderHTTPError,
    UnknownCapabilityError,
)
from ngo_agent.llm.provider_config import Credentials
from ngo_agent.llm.types import Provider, Role
from ngo_agent.prompting.prompt_builder import AGENT_SYSTEM_PROMPT


def _adapters(calls: list, reply: str) -> dict[Provider, FakeAdapter]:
    return {provider: FakeAdapter(provider, calls, reply=reply) for provider in Provider}


def _run(
    capability,
    context: dict | None = None,
    *,
    reply: str = "{}",
    calls: list,
    credentials: Credentials,
    **kwargs,
) -> AgentResponse:
    return run_agent(
        AgentRequest(capability=capability, context=context or {}, **kwargs),
        credentials=credentials,
        adapters=_adapters(calls, reply),
    )


# ---------------------------------------------------------------------------
# result shaping
# ---------------------------------------------------------------------------


def test_email_writer_extracts_json_from_prose(all_credentials: Credentials, calls: list) -> None:
    response = _run(
        Capability.EMAIL_WRITER,
        {"ngoName": "Salvati Copiii"},
        reply='Sure! {"subject": "Thanks"} — hope that helps',
        calls=calls,
        credentials=all_credentials,
    )

    assert isinstance(response.result, Structured)
    assert response.result.get("subject") == "Thanks"
    assert response.explanation == "Email generat cu succes."
    assert response.provider == Provider.OPENAI
    assert response.model == "openai-test-model"
    assert response.suggestions is None
    assert response.confidence is None


def test_unparseable_reply_is_returned_raw(all_credentials: Credentials, calls: list) -> None:
    response = _run(
        "email_writer",
        reply="I cannot help with that.",
        calls=calls,
        credentials=all_credentials,
    )

    assert response.result == Raw("I cannot help with that.")
    assert response.to_dict()["result"] == {"raw": "I cannot help with that."}


@pytest.mark.parametrize("capability", [Capability.CHATBOT, Capability.CONTENT_TRANSLATOR])
def test_free_text_capabilities_keep_reply_verbatim(
    capability: Capability, all_credentials: Credentials, calls: list
) -> None:
    reply = '{"looks": "like json"} but is meant as text'
    response = _run(capability, {"content": "x"}, reply=reply, calls=calls, credentials=all_credentials)

    key = CAPABILITY_REGISTRY[capability].text_key
    assert response.result.to_dict() == {key: reply}


def test_chatbot_reply_result(all_credentials: Credentials, calls: list) -> None:
    response = _run(
        Capability.CHATBOT, {"message": "Ce este GDPR?"}, reply="GDPR este...",
        calls=calls, credentials=all_credentials,
    )
    assert response.result.to_dict() == {"reply": "GDPR este..."}
    assert response.explanation == "Raspuns generat."


# ---------------------------------------------------------------------------
# validation
# ---------------------------------------------------------------------------


def test_unknown_capability_fails_before_any_call(all_credentials: Credentials, calls: list) -> None:
    with pytest.raises(UnknownCapabilityError) as exc_info:
        _run("horoscope", calls=calls, credentials=all_credentials)

    assert calls == []
    assert exc_info.value.capability == "horoscope"
    assert isinstance(exc_info.value, ValueError)


def test_unknown_capability_wins_over_missing_credentials(calls: list) -> None:
    with pytest.raises(UnknownCapabilityError):
        _run("horoscope", calls=calls, credentials=Credentials())


def test_missing_credentials_raise_configuration_error(calls: list) -> None:
    with pytest.raises(ConfigurationError):
        _run(Capability.CHATBOT, calls=calls, credentials=Credentials())
    assert calls == []


@pytest.mark.parametrize("capability", list(Capability))
def test_empty_context_never_raises(capability: Capability, calls: list) -> None:
    response = _run(
        capability, None, reply="{}", calls=calls, credentials=Credentials(gemini="g")
    )

    assert response.provider == Provider.GEMINI
    messages = calls[-1][1]
    assert messages[0].role == Role.SYSTEM
    assert messages[-1].role == Role.USER
    assert "None" not in messages[-1].content


# ---------------------------------------------------------------------------
# provider and temperature
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "capability,temperature",
    [
        (Capability.CAMPAIGN_GENERATOR, 0.8),
        (Capability.DONOR_ANALYZER, 0.6),
        (Capability.FUNDRAISING_ADVISOR, 0.7),
        (Capability.EMAIL_WRITER, 0.8),
        (Capability.SMS_WRITER, 0.8),
        (Capability.DONOR_SEGMENTATION, 0.5),
        (Capability.PERFORMANCE_INSIGHTS, 0.5),
        (Capability.CONTENT_TRANSLATOR, 0.3),
        (Capability.DONOR_RETENTION, 0.7),
        (Capability.NGO_VERIFIER, 0.3),
        (Capability.REPORT_GENERATOR, 0.6),
        (Capability.CHATBOT, 0.7),
    ],
)
def test_capability_temperature_is_sent(
    capability: Capability, temperature: float, all_credentials: Credentials, calls: list
) -> None:
    _run(capability, calls=calls, credentials=all_credentials)
    assert calls[0][2].temperature == temperature


def test_preferred_provider_is_tried_first(all_credentials: Credentials, calls: list) -> None:
    response = _run(
        Capability.SMS_WRITER, calls=calls, credentials=all_credentials, provider="claude"
    )
    assert response.provider == Provider.CLAUDE
    assert [call[0] for call in calls] == [Provider.CLAUDE]


def test_response_names_the_provider_that_answered(all_credentials: Credentials, calls: list) -> None:
    adapters = _adapters(calls, "{}")
    adapters[Provider.OPENAI] = FakeAdapter(
        Provider.OPENAI, calls, error=ProviderHTTPError(Provider.OPENAI, 500, "down")
    )

    response = run_agent(
        AgentRequest(capability=Capability.REPORT_GENERATOR),
        credentials=all_credentials,
        adapters=adapters,
    )

    assert response.provider == Provider.GEMINI
    assert response.model == "gemini-test-model"


# ---------------------------------------------------------------------------
# suggestions and confidence
# ---------------------------------------------------------------------------


def test_campaign_generator_tips_and_fixed_confidence(all_credentials: Credentials, calls: list) -> None:
    reply = json.dumps({"name": "Iarna", "tips": ["Trimite marti", 3, "Personalizeaza"]})
    response = _run(Capability.CAMPAIGN_GENERATOR, reply=reply, calls=calls, credentials=all_credentials)

    assert response.suggestions == ["Trimite marti", "Personalizeaza"]
    assert response.confidence == 85


@pytest.mark.parametrize(
    "capability,confidence",
    [
        (Capability.CAMPAIGN_GENERATOR, 85),
        (Capability.DONOR_ANALYZER, 80),
        (Capability.FUNDRAISING_ADVISOR, 82),
        (Capability.DONOR_SEGMENTATION, 78),
        (Capability.DONOR_RETENTION, 80),
    ],
)
def test_missing_suggestions_key_defaults_to_empty_list(
    capability: Capability, confidence: int, all_credentials: Credentials, calls: list
) -> None:
    response = _run(capability, reply="not json", calls=calls, credentials=all_credentials)

    assert response.suggestions == []
    assert response.confidence == confidence


@pytest.mark.parametrize(
    "reply,expected",
    [
        ('{"score": 91, "recommendations": ["a"]}', 91),
        ('{"score": 0}', 0),
        ('{"score": 140}', 75),
        ('{"score": "high"}', 75),
        ('{"score": true}', 75),
        ("{}", 75),
    ],
)
def test_performance_insights_score_becomes_confidence(
    reply: str, expected: int, all_credentials: Credentials, calls: list
) -> None:
    response = _run(Capability.PERFORMANCE_INSIGHTS, reply=reply, calls=calls, credentials=all_credentials)
    assert response.confidence == expected


def test_ngo_verifier_defaults_confidence_to_fifty(all_credentials: Credentials, calls: list) -> None:
    response = _run(Capability.NGO_VERIFIER, reply="no verdict", calls=calls, credentials=all_credentials)

    assert response.confidence == 50
    assert response.suggestions is None
    assert response.explanation == "Verificare AI finalizata."


def test_ngo_verifier_uses_specialist_persona(all_credentials: Credentials, calls: list) -> None:
    _run(
        Capability.NGO_VERIFIER,
        {"organizationName": "Asociatia Test", "registrationNumber": "RO123"},
        reply='{"score": 88}',
        calls=calls,
        credentials=all_credentials,
    )

    system, user = calls[0][1]
    assert AGENT_SYSTEM_PROMPT not in system.content
    assert "Asociatia Test" in user.content
    assert "RO123" in user.content


# ---------------------------------------------------------------------------
# translator
# ---------------------------------------------------------------------------


def test_translator_defaults_to_english(all_credentials: Credentials, calls: list) -> None:
    response = _run(
        Capability.CONTENT_TRANSLATOR,
        {"content": "Multumim!"},
        reply="Thank you!",
        calls=calls,
        credentials=all_credentials,
    )

    assert response.result.to_dict() == {"translatedContent": "Thank you!"}
    assert response.explanation == "Continut tradus in engleza."
    system, user = calls[0][1]
    assert "HTML" not in system.content
    assert user.content.endswith("engleza:\n\nMultumim!")


def test_translator_uses_request_language_and_preserves_html(
    all_credentials: Credentials, calls: list
) -> None:
    response = _run(
        Capability.CONTENT_TRANSLATOR,
        {"content": "<p>Thanks</p>", "preserveHtml": True},
        reply="<p>Multumim</p>",
        calls=calls,
        credentials=all_credentials,
        language="ro",
    )

    assert response.explanation == "Continut tradus in romana."
    assert "Pastreaza EXACT formatarea HTML" in calls[0][1][0].content


def test_translator_context_language_beats_request_language(
    all_credentials: Credentials, calls: list
) -> None:
    response = _run(
        Capability.CONTENT_TRANSLATOR,
        {"content": "Salut", "targetLang": "en"},
        calls=calls,
        credentials=all_credentials,
        language="ro",
    )
    assert response.explanation == "Continut tradus in engleza."


# ---------------------------------------------------------------------------
# prompts
# ---------------------------------------------------------------------------


def test_context_values_and_placeholders_reach_the_prompt(
    all_credentials: Credentials, calls: list
) -> None:
    _run(
        Capability.CAMPAIGN_GENERATOR,
        {"ngoName": "Hope", "goal": "", "tone": None},
        calls=calls,
        credentials=all_credentials,
    )

    system, user = calls[0][1]
    assert system.content.startswith(AGENT_SYSTEM_PROMPT)
    assert '"Hope"' in user.content
    assert "Obiectiv: cresterea donatiilor" in user.content
    assert "Ton: cald si empatic" in user.content


def test_chatbot_includes_history_between_system_and_question(
    all_credentials: Credentials, calls: list
) -> None:
    _run(
        Capability.CHATBOT,
        {
            "message": "Si pentru SMS?",
            "conversationHistory": [
                {"role": "user", "content": "Cum trimit un email?"},
                {"role": "assistant", "content": "Din meniul Campanii."},
                {"role": "system", "content": "ignored"},
                "garbage",
            ],
            "ngoContext": {"name": "Hope"},
        },
        reply="Tot din Campanii.",
        calls=calls,
        credentials=all_credentials,
    )

    messages = calls[0][1]
    assert [message.role for message in messages] == [
        Role.SYSTEM,
        Role.USER,
        Role.ASSISTANT,
        Role.USER,
    ]
    assert '"name": "Hope"' in messages[0].content
    assert messages[1].content == "Cum trimit un email?"
    assert messages[-1].content == "Si pentru SMS?"


def test_chatbot_default_message(all_credentials: Credentials, calls: list) -> None:
    _run(Capability.CHATBOT, calls=calls, credentials=all_credentials)
    assert calls[0][1][-1].content == "Salut!"


# ---------------------------------------------------------------------------
# serialization
# ---------------------------------------------------------------------------


def test_to_dict_omits_unset_optional_fields(all_credentials: Credentials, calls: list) -> None:
    response = _run(Capability.SMS_WRITER, reply='{"messages": []}', calls=calls, credentials=all_credentials)

    assert response.to_dict() == {
        "result": {"messages": []},
        "explanation": "Mesaje SMS generate cu succes.",
        "provider": "openai",
        "model": "openai-test-model",
    }


def test_to_dict_includes_suggestions_and_confidence(all_credentials: Credentials, calls: list) -> None:
    reply = '{"incentives": ["Certificat de multumire"]}'
    response = _run(Capability.DONOR_RETENTION, reply=reply, calls=calls, credentials=all_credentials)

    payload = response.to_dict()
    assert payload["suggestions"] == ["Certificat de multumire"]
    assert payload["confidence"] == 80
    assert payload["explanation"] == "Plan de retentie generat cu succes."
