"""Message assembly for every agent capability.

This module only turns an already-typed capability context into an ordered
message list. Capability selection, provider dispatch and result extraction
happen in `ngo_agent.core`.

Design constraints:
    - Deterministic construction for identical inputs.
    - Fixed ordering: one system message first, then (chatbot only) prior
      conversation turns, then the user message.
    - No hidden side effects (no I/O, no global state mutation).
    - Never raises on missing context: absent values were already replaced by
      placeholders in `ngo_agent.prompting.contexts`.

Prompt safety model:
    Context values are interpolated as raw strings or JSON dumps. Trust
    boundaries and size limits are the caller's responsibility.
"""

import json
from typing import Any

from ngo_agent.llm.types import Message, Role
from ngo_agent.prompting.contexts import (
    CampaignGeneratorContext,
    ChatbotContext,
    ContentTranslatorContext,
    DonorAnalyzerContext,
    DonorRetentionContext,
    DonorSegmentationContext,
    EmailWriterContext,
    FundraisingAdvisorContext,
    NgoVerifierContext,
    PerformanceInsightsContext,
    ReportGeneratorContext,
    SmsWriterContext,
)


# =========================================================
# AGENT PERSONA (GLOBAL)
# =========================================================
# Shared prefix of every system message except the translator and verifier,
# which use their own specialist personas. Fixes the reply language to Romanian.

AGENT_SYSTEM_PROMPT = (
    "Esti un Super Agent AI specializat in ajutarea ONG-urilor din Romania.\n"
    'Numele tau este "NGO HUB AI Assistant".\n'
    "Raspunzi INTOTDEAUNA in limba romana.\n"
    "Esti expert in:\n"
    "- Marketing si comunicare pentru ONG-uri\n"
    "- Strangere de fonduri si retentie donatori\n"
    "- Legislatia romaneasca privind ONG-urile\n"
    "- GDPR si protectia datelor\n"
    "- Strategii de campanii si automatizari\n"
    "- Analiza si segmentare donatori\n\n"
    "Raspunde concis, actionabil si profesional. "
    "Ofera sfaturi practice, nu teoretice."
)


def _persona(instruction: str) -> Message:
    return Message.system(f"{AGENT_SYSTEM_PROMPT}\n\n{instruction}")


def _json(value: Any, indent: int | None = None) -> str:
    return json.dumps(value, ensure_ascii=False, indent=indent, default=str)


# =========================================================
# CREATIVE CAPABILITIES
# =========================================================

def build_campaign_generator_messages(ctx: CampaignGeneratorContext) -> list[Message]:
    """Full email + SMS campaign draft, returned by the model as JSON."""
    return [
        _persona(
            "Esti un expert in crearea campaniilor de email si SMS pentru ONG-uri. "
            "Genereaza continut complet pentru campanii."
        ),
        Message.user(
            f'Genereaza o campanie completa pentru ONG-ul "{ctx.ngo_name}".\n\n'
            f"Tip campanie: {ctx.campaign_type}\n"
            f"Audienta: {ctx.target_audience}\n"
            f"Obiectiv: {ctx.goal}\n"
            f"Ton: {ctx.tone}\n\n"
            "Genereaza in format JSON:\n"
            "{\n"
            '  "name": "Numele campaniei",\n'
            '  "subject": "Subiect email",\n'
            '  "previewText": "Text previzualizare",\n'
            '  "emailBody": "HTML complet al emailului cu inline styles",\n'
            '  "smsVersion": "Varianta SMS sub 160 caractere",\n'
            '  "suggestedSegment": "Segmentul recomandat",\n'
            '  "bestSendTime": "Momentul optim de trimitere",\n'
            '  "tips": ["sfat1", "sfat2", "sfat3"]\n'
            "}"
        ),
    ]


def build_email_writer_messages(ctx: EmailWriterContext) -> list[Message]:
    return [
        _persona(
            "Scrii emailuri perfecte pentru ONG-uri. Emailurile trebuie sa fie "
            "personale, emotionale si cu call-to-action clar. "
            "Foloseste HTML cu inline styles."
        ),
        Message.user(
            f'Scrie un email pentru ONG-ul "{ctx.ngo_name}".\n\n'
            f"Scop: {ctx.purpose}\n"
            f"Destinatar: {ctx.donor_name}\n"
            f"Ton: {ctx.tone}\n"
            f"Detalii: {ctx.details}\n\n"
            "Genereaza in format JSON:\n"
            "{\n"
            '  "subject": "Subiectul emailului",\n'
            '  "previewText": "Text de previzualizare",\n'
            '  "htmlBody": "HTML complet al emailului cu inline styles, header, '
            'continut, buton CTA si footer",\n'
            '  "variants": [\n'
            '    {"subject": "Varianta alternativa subiect 1", "preview": "..."},\n'
            '    {"subject": "Varianta alternativa subiect 2", "preview": "..."}\n'
            "  ]\n"
            "}"
        ),
    ]


def build_sms_writer_messages(ctx: SmsWriterContext) -> list[Message]:
    return [
        _persona(
            "Scrii mesaje SMS scurte si eficiente pentru ONG-uri. "
            "Fiecare mesaj TREBUIE sa fie sub 160 caractere."
        ),
        Message.user(
            f'Scrie mesaje SMS pentru ONG-ul "{ctx.ngo_name}".\n\n'
            f"Scop: {ctx.purpose}\n"
            f"Ton: {ctx.tone}\n"
            f"Detalii: {ctx.details}\n\n"
            "Genereaza 5 variante in format JSON:\n"
            "{\n"
            '  "messages": [\n'
            '    {"text": "Mesaj SMS sub 160 caractere", "chars": 120}\n'
            "  ],\n"
            '  "bestTime": "Momentul optim de trimitere",\n'
            '  "tip": "Sfat pentru eficienta maxima"\n'
            "}"
        ),
    ]


def build_donor_retention_messages(ctx: DonorRetentionContext) -> list[Message]:
    return [
        _persona(
            "Esti expert in retentia donatorilor. "
            "Creezi strategii personalizate de re-engagement."
        ),
        Message.user(
            "Creeaza strategii de retentie pentru donatorii la risc:\n\n"
            f"Donatori la risc: {_json(ctx.at_risk_donors)}\n"
            f"Ultimele campanii: {_json(ctx.last_campaigns)}\n"
            f"Timp mediu intre donatii: {ctx.avg_time_between_donations}\n\n"
            "Genereaza:\n"
            "1. Plan de re-engagement personalizat\n"
            "2. Secventa de emailuri (3-5 emailuri)\n"
            "3. Mesaje SMS de follow-up\n"
            "4. Oferte speciale / incentive\n\n"
            "Format JSON:\n"
            "{\n"
            '  "plan": "Strategia generala",\n'
            '  "emailSequence": [\n'
            '    {"day": 1, "subject": "...", "preview": "...", "type": "empathy"},\n'
            '    {"day": 7, "subject": "...", "preview": "...", "type": "impact"},\n'
            '    {"day": 14, "subject": "...", "preview": "...", "type": "urgency"}\n'
            "  ],\n"
            '  "smsMessages": ["..."],\n'
            '  "incentives": ["..."],\n'
            '  "expectedRecoveryRate": "15-25%"\n'
            "}"
        ),
    ]


# =========================================================
# ANALYTICAL CAPABILITIES
# =========================================================

def build_donor_analyzer_messages(ctx: DonorAnalyzerContext) -> list[Message]:
    return [
        _persona("Analizezi datele donatorilor si oferi perspective valoroase."),
        Message.user(
            "Analizeaza datele donatorilor ONG-ului:\n\n"
            f"Total donatori: {ctx.donors}\n"
            f"Total donatii: {ctx.total_donations} RON\n"
            f"Donatie medie: {ctx.avg_donation} RON\n"
            f"Top donatori: {_json(ctx.top_donors)}\n"
            f"Rata retentie: {ctx.retention_rate}\n\n"
            "Ofera:\n"
            "1. Analiza generala a bazei de donatori\n"
            "2. Segmente identificate (VIP, regulari, la risc, noi)\n"
            "3. Recomandari concrete de actiune pentru fiecare segment\n"
            "4. Strategii de crestere a donatiei medii\n"
            "5. Predictie de churn (donatori la risc de pierdere)\n\n"
            "Raspunde in format JSON:\n"
            "{\n"
            '  "analysis": "Analiza generala",\n'
            '  "segments": [{"name": "...", "count": "...", "action": "..."}],\n'
            '  "recommendations": ["..."],\n'
            '  "riskDonors": "Descriere donatori la risc",\n'
            '  "growthStrategy": "Strategie de crestere",\n'
            '  "predictedChurn": "Rata estimata de pierdere"\n'
            "}"
        ),
    ]


def build_donor_segmentation_messages(ctx: DonorSegmentationContext) -> list[Message]:
    return [
        _persona(
            "Esti expert in segmentare RFM (Recency, Frequency, Monetary) "
            "pentru donatori."
        ),
        Message.user(
            "Analizeaza si segmenteaza acesti donatori:\n\n"
            f"{_json(ctx.donors, indent=2)}\n\n"
            "Creeaza segmente bazate pe:\n"
            "- Recenta ultimei donatii\n"
            "- Frecventa donatiilor\n"
            "- Valoarea totala donata\n\n"
            "Raspunde in format JSON:\n"
            "{\n"
            '  "segments": [\n'
            "    {\n"
            '      "name": "Numele segmentului",\n'
            '      "criteria": "Criteriile de includere",\n'
            '      "donorIds": ["id1", "id2"],\n'
            '      "count": 5,\n'
            '      "strategy": "Strategia recomandata pentru acest segment",\n'
            '      "campaignIdea": "Idee de campanie targetata"\n'
            "    }\n"
            "  ],\n"
            '  "insights": ["Perspectiva 1", "Perspectiva 2"],\n'
            '  "immediateActions": ["Actiune urgenta 1", "Actiune urgenta 2"]\n'
            "}"
        ),
    ]


def build_performance_insights_messages(ctx: PerformanceInsightsContext) -> list[Message]:
    return [
        _persona(
            "Analizezi performanta campaniilor si oferi recomandari de imbunatatire."
        ),
        Message.user(
            "Analizeaza performanta campaniilor:\n\n"
            f"Campanii trimise: {ctx.campaigns}\n"
            f"Rata deschidere: {ctx.open_rate}%\n"
            f"Rata click: {ctx.click_rate}%\n"
            f"Rata bounce: {ctx.bounce_rate}%\n"
            f"Venituri generate: {ctx.revenue} RON\n\n"
            "Compara cu benchmark-urile din industrie si ofera:\n"
            "1. Scor general de performanta\n"
            "2. Ce merge bine si ce trebuie imbunatatit\n"
            "3. Recomandari concrete\n"
            "4. Idei de A/B testing\n"
            "5. Optimizari de timing\n\n"
            "Raspunde in format JSON:\n"
            "{\n"
            '  "score": 75,\n'
            '  "grade": "B+",\n'
            '  "strengths": ["..."],\n'
            '  "weaknesses": ["..."],\n'
            '  "recommendations": ["..."],\n'
            '  "abTestIdeas": ["..."],\n'
            '  "timingTips": ["..."],\n'
            '  "benchmarkComparison": {\n'
            '    "openRate": {"yours": 25, "industry": 21, "verdict": "Peste medie"},\n'
            '    "clickRate": {"yours": 3, "industry": 2.5, "verdict": "Peste medie"}\n'
            "  }\n"
            "}"
        ),
    ]


# Verifier uses a legal-specialist persona instead of the shared agent persona.
NGO_VERIFIER_SYSTEM_PROMPT = (
    "Esti un expert in legislatia romaneasca privind ONG-urile "
    "(asociatii, fundatii, federatii).\n"
    "Analizezi datele de inregistrare si identifici potential de frauda "
    "sau inconsistente.\n"
    "Cunosti:\n"
    "- Formatele CUI/CIF romanesti\n"
    "- Tipurile de forme juridice (Asociatie, Fundatie, Federatie)\n"
    "- Registrul National ONG\n"
    "- Cerintele legale de inregistrare"
)


def build_ngo_verifier_messages(ctx: NgoVerifierContext) -> list[Message]:
    return [
        Message.system(NGO_VERIFIER_SYSTEM_PROMPT),
        Message.user(
            "Verifica legitimitatea acestui ONG:\n\n"
            f"Nume: {ctx.organization_name}\n"
            f"Numar inregistrare (CUI): {ctx.registration_number}\n"
            f"Forma juridica: {ctx.legal_form}\n"
            f"Cod fiscal: {ctx.fiscal_code}\n"
            f"Adresa: {ctx.address}\n\n"
            "Analizeaza:\n"
            "1. Consistenta numelui cu forma juridica\n"
            "2. Formatul CUI/CIF (valid in Romania?)\n"
            "3. Completitudinea datelor\n"
            "4. Red flags potentiale\n"
            "5. Scor de incredere (0-100)\n\n"
            "Format JSON:\n"
            "{\n"
            '  "score": 75,\n'
            '  "status": "NEEDS_REVIEW",\n'
            '  "analysis": {\n'
            '    "nameCheck": {"valid": true, "note": "..."},\n'
            '    "cuiCheck": {"valid": true, "note": "..."},\n'
            '    "legalFormCheck": {"valid": true, "note": "..."},\n'
            '    "completeness": {"score": 80, "missing": ["..."]}\n'
            "  },\n"
            '  "flags": [{"severity": "warning", "message": "..."}],\n'
            '  "recommendation": "Aprobat / Necesita verificare manuala / Respins",\n'
            '  "nextSteps": ["..."]\n'
            "}"
        ),
    ]


# =========================================================
# ADVISORY / REPORTING CAPABILITIES
# =========================================================

def build_fundraising_advisor_messages(ctx: FundraisingAdvisorContext) -> list[Message]:
    return [
        _persona(
            "Esti un consultant expert in strangere de fonduri pentru ONG-uri romanesti."
        ),
        Message.user(
            "Ofera consultanta de fundraising pentru:\n\n"
            f"ONG: {ctx.ngo_name}\n"
            f"Tip activitate: {ctx.ngo_type}\n"
            f"Venituri curente: {ctx.current_revenue} RON/luna\n"
            f"Numar donatori: {ctx.donor_count}\n"
            f"Campanii active: {ctx.campaigns}\n"
            f"Obiective: {ctx.goals}\n\n"
            "Vreau:\n"
            "1. Strategie de fundraising pe 3 luni\n"
            "2. Idei de campanii lunare\n"
            "3. Canale de comunicare recomandate\n"
            "4. Tehnici de retentie donatori\n"
            "5. Oportunitati de granturi si sponsorizari\n"
            "6. Calendar de actiuni\n\n"
            "Raspunde in format JSON:\n"
            "{\n"
            '  "strategy": "Strategia generala pe 3 luni",\n'
            '  "monthlyPlan": [\n'
            '    {"month": 1, "campaign": "...", "target": "...", "actions": ["..."]},\n'
            '    {"month": 2, "campaign": "...", "target": "...", "actions": ["..."]},\n'
            '    {"month": 3, "campaign": "...", "target": "...", "actions": ["..."]}\n'
            "  ],\n"
            '  "channels": ["..."],\n'
            '  "retentionTips": ["..."],\n'
            '  "grantOpportunities": ["..."],\n'
            '  "kpis": ["..."]\n'
            "}"
        ),
    ]


def build_report_generator_messages(ctx: ReportGeneratorContext) -> list[Message]:
    return [
        _persona(
            "Generezi rapoarte profesionale de activitate pentru ONG-uri in format HTML."
        ),
        Message.user(
            f'Genereaza un raport de activitate pentru ONG-ul "{ctx.ngo_name}".\n\n'
            f"Perioada: {ctx.period}\n"
            f"Statistici: {_json(ctx.stats)}\n\n"
            "Genereaza raportul in HTML cu sectiuni:\n"
            "1. Rezumat executiv\n"
            "2. Donatori si donatii\n"
            "3. Campanii si comunicare\n"
            "4. Obiective si realizari\n"
            "5. Recomandari pentru perioada urmatoare\n\n"
            "Format JSON:\n"
            "{\n"
            '  "title": "Titlul raportului",\n'
            '  "htmlContent": "HTML complet al raportului",\n'
            '  "keyMetrics": [{"label": "...", "value": "...", "trend": "up/down/stable"}],\n'
            '  "executiveSummary": "Rezumat in 2-3 propozitii"\n'
            "}"
        ),
    ]


# =========================================================
# FREE-TEXT CAPABILITIES
# =========================================================

def build_content_translator_messages(ctx: ContentTranslatorContext) -> list[Message]:
    """Translation prompt with an optional HTML-preservation instruction."""
    instruction = (
        "Esti un traducator profesionist. Traduci text cu acuratete pastrand "
        "tonul si intentia originala."
    )
    if ctx.preserve_html:
        instruction += " Pastreaza EXACT formatarea HTML si inline styles."

    return [
        Message.system(instruction),
        Message.user(
            f"Traduceti urmatorul text in {ctx.target_language_name}:\n\n{ctx.content}"
        ),
    ]


CHATBOT_TOPICS = (
    "Raspunzi la intrebari despre:\n"
    "- Cum sa foloseasca platforma NGO HUB\n"
    "- Strategii de fundraising\n"
    "- GDPR si protectia datelor\n"
    "- Campanii email/SMS\n"
    "- Automatizari\n"
    "- Best practices pentru ONG-uri\n"
    "- Legislatie romaneasca ONG\n\n"
    "Fii concis, prietenos si actionabil."
)


def history_messages(history: Any) -> list[Message]:
    """Normalize prior chat turns into `Message` values.

    Accepts dicts with `role`/`content` or `Message` instances. Only `user` and
    `assistant` turns are kept; anything else is skipped.
    """
    if not isinstance(history, (list, tuple)):
        return []

    messages = []
    for turn in history:
        if isinstance(turn, Message):
            role, content = turn.role, turn.content
        elif isinstance(turn, dict):
            role, content = turn.get("role"), turn.get("content")
        else:
            continue

        if role not in (Role.USER, Role.ASSISTANT, "user", "assistant"):
            continue
        messages.append(Message(Role(role), "" if content is None else str(content)))
    return messages


def build_chatbot_messages(ctx: ChatbotContext) -> list[Message]:
    """System persona with NGO context, prior turns, then the new question."""
    system = (
        f"{AGENT_SYSTEM_PROMPT}\n\n"
        f"Context ONG: {_json(ctx.ngo_context)}\n\n"
        f"{CHATBOT_TOPICS}"
    )
    return [
        Message.system(system),
        *history_messages(ctx.conversation_history),
        Message.user(str(ctx.message)),
    ]
