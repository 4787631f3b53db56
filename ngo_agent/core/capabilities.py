"""Capability identifiers and their fixed execution definitions.

The capability set is closed. Each entry binds a capability to its typed context
view, its message builder, its sampling temperature, how the reply becomes a
result, and where suggestions/confidence come from. `get_capability_definition`
is the single validation point for capability names.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from ngo_agent.llm.errors import UnknownCapabilityError
from ngo_agent.prompting import contexts, prompt_builder


class Capability(str, Enum):
    CAMPAIGN_GENERATOR = "campaign_generator"
    DONOR_ANALYZER = "donor_analyzer"
    FUNDRAISING_ADVISOR = "fundraising_advisor"
    EMAIL_WRITER = "email_writer"
    SMS_WRITER = "sms_writer"
    DONOR_SEGMENTATION = "donor_segmentation"
    PERFORMANCE_INSIGHTS = "performance_insights"
    CONTENT_TRANSLATOR = "content_translator"
    DONOR_RETENTION = "donor_retention"
    NGO_VERIFIER = "ngo_verifier"
    REPORT_GENERATOR = "report_generator"
    CHATBOT = "chatbot"


@dataclass(frozen=True)
class CapabilityDefinition:
    """Execution policy for one capability.

    Attributes:
        capability: Capability identifier.
        context_type: `ContextView` dataclass reading the request context.
        build_messages: Builds the ordered message list from the typed context.
        temperature: Sampling temperature sent to the provider.
        explanation: Static sentence, or a callable of the typed context.
        text_key: When set, the reply is not parsed and the result is
            `{text_key: content}`. When `None`, JSON extraction applies.
        suggestions_key: Result key holding the suggestion list; `None` means
            the response has no suggestions.
        confidence_key: Result key holding a 0-100 score, if any.
        confidence: Fixed confidence, or the default when `confidence_key` is
            missing or invalid.
    """

    capability: Capability
    context_type: type
    build_messages: Callable[[Any], list]
    temperature: float
    explanation: str | Callable[[Any], str]
    text_key: str | None = None
    suggestions_key: str | None = None
    confidence_key: str | None = None
    confidence: float | None = None

    def explain(self, ctx: Any) -> str:
        if callable(self.explanation):
            return self.explanation(ctx)
        return self.explanation


CAPABILITY_REGISTRY: dict[Capability, CapabilityDefinition] = {
    Capability.CAMPAIGN_GENERATOR: CapabilityDefinition(
        capability=Capability.CAMPAIGN_GENERATOR,
        context_type=contexts.CampaignGeneratorContext,
        build_messages=prompt_builder.build_campaign_generator_messages,
        temperature=0.8,
        explanation="Campanie generata cu succes folosind AI.",
        suggestions_key="tips",
        confidence=85,
    ),
    Capability.DONOR_ANALYZER: CapabilityDefinition(
        capability=Capability.DONOR_ANALYZER,
        context_type=contexts.DonorAnalyzerContext,
        build_messages=prompt_builder.build_donor_analyzer_messages,
        temperature=0.6,
        explanation="Analiza donatorilor finalizata.",
        suggestions_key="recommendations",
        confidence=80,
    ),
    Capability.FUNDRAISING_ADVISOR: CapabilityDefinition(
        capability=Capability.FUNDRAISING_ADVISOR,
        context_type=contexts.FundraisingAdvisorContext,
        build_messages=prompt_builder.build_fundraising_advisor_messages,
        temperature=0.7,
        explanation="Plan de fundraising generat cu succes.",
        suggestions_key="retentionTips",
        confidence=82,
    ),
    Capability.EMAIL_WRITER: CapabilityDefinition(
        capability=Capability.EMAIL_WRITER,
        context_type=contexts.EmailWriterContext,
        build_messages=prompt_builder.build_email_writer_messages,
        temperature=0.8,
        explanation="Email generat cu succes.",
    ),
    Capability.SMS_WRITER: CapabilityDefinition(
        capability=Capability.SMS_WRITER,
        context_type=contexts.SmsWriterContext,
        build_messages=prompt_builder.build_sms_writer_messages,
        temperature=0.8,
        explanation="Mesaje SMS generate cu succes.",
    ),
    Capability.DONOR_SEGMENTATION: CapabilityDefinition(
        capability=Capability.DONOR_SEGMENTATION,
        context_type=contexts.DonorSegmentationContext,
        build_messages=prompt_builder.build_donor_segmentation_messages,
        temperature=0.5,
        explanation="Segmentare donatori finalizata.",
        suggestions_key="immediateActions",
        confidence=78,
    ),
    Capability.PERFORMANCE_INSIGHTS: CapabilityDefinition(
        capability=Capability.PERFORMANCE_INSIGHTS,
        context_type=contexts.PerformanceInsightsContext,
        build_messages=prompt_builder.build_performance_insights_messages,
        temperature=0.5,
        explanation="Analiza performantei finalizata.",
        suggestions_key="recommendations",
        confidence_key="score",
        confidence=75,
    ),
    Capability.CONTENT_TRANSLATOR: CapabilityDefinition(
        capability=Capability.CONTENT_TRANSLATOR,
        context_type=contexts.ContentTranslatorContext,
        build_messages=prompt_builder.build_content_translator_messages,
        temperature=0.3,
        explanation=lambda ctx: f"Continut tradus in {ctx.target_language_name}.",
        text_key="translatedContent",
    ),
    Capability.DONOR_RETENTION: CapabilityDefinition(
        capability=Capability.DONOR_RETENTION,
        context_type=contexts.DonorRetentionContext,
        build_messages=prompt_builder.build_donor_retention_messages,
        temperature=0.7,
        explanation="Plan de retentie generat cu succes.",
        suggestions_key="incentives",
        confidence=80,
    ),
    Capability.NGO_VERIFIER: CapabilityDefinition(
        capability=Capability.NGO_VERIFIER,
        context_type=contexts.NgoVerifierContext,
        build_messages=prompt_builder.build_ngo_verifier_messages,
        temperature=0.3,
        explanation="Verificare AI finalizata.",
        confidence_key="score",
        confidence=50,
    ),
    Capability.REPORT_GENERATOR: CapabilityDefinition(
        capability=Capability.REPORT_GENERATOR,
        context_type=contexts.ReportGeneratorContext,
        build_messages=prompt_builder.build_report_generator_messages,
        temperature=0.6,
        explanation="Raport generat cu succes.",
    ),
    Capability.CHATBOT: CapabilityDefinition(
        capability=Capability.CHATBOT,
        context_type=contexts.ChatbotContext,
        build_messages=prompt_builder.build_chatbot_messages,
        temperature=0.7,
        explanation="Raspuns generat.",
        text_key="reply",
    ),
}


def get_capability_definition(capability: Any) -> CapabilityDefinition:
    """Resolve a capability (enum or name) to its definition.

    Raises:
        UnknownCapabilityError: `capability` is not one of the fixed set.
    """
    try:
        key = capability if isinstance(capability, Capability) else Capability(capability)
    except ValueError:
        raise UnknownCapabilityError(capability) from None
    return CAPABILITY_REGISTRY[key]
