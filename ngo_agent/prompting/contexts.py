"""Typed per-capability views over the loose request context map.

Callers pass `AgentRequest.context` as a plain mapping using the product's
camelCase keys (`ngoName`, `targetAudience`, ...). Each capability reads it
through one dataclass below, where every field has an explicit default, so a
missing or empty key becomes a placeholder instead of an exception.

Empty values (`None`, `""`, `0`, `[]`, `{}`, `False`) are treated as absent and
replaced by the field default.
"""

from dataclasses import MISSING, dataclass, field, fields
from typing import Any, Mapping


def _key(name: str, default=MISSING, default_factory=MISSING):
    metadata = {"key": name}
    if default_factory is not MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


class ContextView:
    """Mixin building a context dataclass from a mapping with defaults."""

    @classmethod
    def from_mapping(cls, context: Mapping[str, Any] | None, language: str | None = None):
        source = context if isinstance(context, Mapping) else {}
        values = {}
        for item in fields(cls):
            raw = source.get(item.metadata.get("key", item.name))
            if raw:
                values[item.name] = raw
        return cls(**values)


@dataclass(frozen=True)
class CampaignGeneratorContext(ContextView):
    ngo_name: Any = _key("ngoName", "ONG")
    campaign_type: Any = _key("campaignType", "strangere de fonduri")
    target_audience: Any = _key("targetAudience", "toti donatorii")
    goal: Any = _key("goal", "cresterea donatiilor")
    tone: Any = _key("tone", "cald si empatic")


@dataclass(frozen=True)
class DonorAnalyzerContext(ContextView):
    donors: Any = _key("donors", 0)
    total_donations: Any = _key("totalDonations", 0)
    avg_donation: Any = _key("avgDonation", 0)
    top_donors: Any = _key("topDonors", default_factory=list)
    retention_rate: Any = _key("retentionRate", "necunoscuta")


@dataclass(frozen=True)
class FundraisingAdvisorContext(ContextView):
    ngo_name: Any = _key("ngoName", "ONG")
    ngo_type: Any = _key("ngoType", "general")
    current_revenue: Any = _key("currentRevenue", 0)
    donor_count: Any = _key("donorCount", 0)
    campaigns: Any = _key("campaigns", 0)
    goals: Any = _key("goals", "cresterea veniturilor")


@dataclass(frozen=True)
class EmailWriterContext(ContextView):
    ngo_name: Any = _key("ngoName", "ONG")
    purpose: Any = _key("purpose", "multumire")
    donor_name: Any = _key("donorName", "Donator")
    tone: Any = _key("tone", "cald")
    details: Any = _key("details", "")


@dataclass(frozen=True)
class SmsWriterContext(ContextView):
    ngo_name: Any = _key("ngoName", "ONG")
    purpose: Any = _key("purpose", "notificare")
    tone: Any = _key("tone", "prietenos")
    details: Any = _key("details", "")


@dataclass(frozen=True)
class DonorSegmentationContext(ContextView):
    donors: Any = _key("donors", default_factory=list)


@dataclass(frozen=True)
class PerformanceInsightsContext(ContextView):
    campaigns: Any = _key("campaigns", 0)
    open_rate: Any = _key("openRate", 0)
    click_rate: Any = _key("clickRate", 0)
    bounce_rate: Any = _key("bounceRate", 0)
    revenue: Any = _key("revenue", 0)


@dataclass(frozen=True)
class ContentTranslatorContext(ContextView):
    content: Any = _key("content", "")
    target_lang: Any = _key("targetLang", "en")
    preserve_html: bool = _key("preserveHtml", False)

    @classmethod
    def from_mapping(cls, context, language=None):
        view = super().from_mapping(context, language)
        source = context if isinstance(context, Mapping) else {}
        if not source.get("targetLang") and language:
            view = cls(
                content=view.content,
                target_lang=language,
                preserve_html=view.preserve_html,
            )
        return view

    @property
    def target_language_name(self) -> str:
        # Anything other than "ro" translates to English.
        return "romana" if self.target_lang == "ro" else "engleza"


@dataclass(frozen=True)
class DonorRetentionContext(ContextView):
    at_risk_donors: Any = _key("atRiskDonors", default_factory=list)
    last_campaigns: Any = _key("lastCampaigns", default_factory=list)
    avg_time_between_donations: Any = _key("avgTimeBetweenDonations", "necunoscut")


@dataclass(frozen=True)
class NgoVerifierContext(ContextView):
    organization_name: Any = _key("organizationName", "necunoscut")
    registration_number: Any = _key("registrationNumber", "necunoscut")
    legal_form: Any = _key("legalForm", "necunoscut")
    fiscal_code: Any = _key("fiscalCode", "necunoscut")
    address: Any = _key("address", "necunoscuta")


@dataclass(frozen=True)
class ReportGeneratorContext(ContextView):
    ngo_name: Any = _key("ngoName", "ONG")
    period: Any = _key("period", "ultima luna")
    stats: Any = _key("stats", default_factory=dict)


@dataclass(frozen=True)
class ChatbotContext(ContextView):
    message: Any = _key("message", "Salut!")
    conversation_history: Any = _key("conversationHistory", default_factory=list)
    ngo_context: Any = _key("ngoContext", default_factory=dict)
