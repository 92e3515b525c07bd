"""Prompt templates for the assistant generation step."""

from __future__ import annotations

from knowledge_federation.models.domain import ChatContext, ChatMessage, ContextBundle

ASSISTANT_SYSTEM = """You are an AI assistant for an agile product-management workspace.
You can see the user's notes, meetings, priorities, stakeholders, emails and market data.
Rules:
- Ground your answer in the provided sources and mention the titles you rely on.
- If no source is relevant, say so and give general guidance instead.
- Be concise but thorough, and suggest actionable next steps when appropriate.
- Use agile terminology appropriate for the user's role."""

ASSISTANT_PROMPT = """USER QUESTION: {query}

CONTEXT:
- User Role: {user_role}
- Current Segment: {segment}
- Available records: {preamble}

RELEVANT DATA SOURCES:
{sources_block}

{history_block}RESPONSE:"""


def format_sources_block(bundle: ContextBundle) -> str:
    if not bundle.entries:
        return "- No specific data sources found matching the query"
    lines = []
    for i, entry in enumerate(bundle.entries, 1):
        lines.append(f"{i}. [{entry.type.value.upper()}] {entry.title}")
        if entry.snippet:
            lines.append(f"   Summary: {entry.snippet}")
        lines.append(f"   Recency: {entry.recency.replace('_', ' ')}")
        lines.append(f"   Relevance: {entry.score:.1f}")
    return "\n".join(lines)


def format_history_block(history: list[ChatMessage]) -> str:
    if not history:
        return ""
    lines = ["CONVERSATION SO FAR:"]
    for message in history:
        lines.append(f"{message.role.upper()}: {message.content}")
    return "\n".join(lines) + "\n\n"


def render_prompt(
    bundle: ContextBundle,
    history: list[ChatMessage],
    query: str,
    context: ChatContext | None = None,
) -> str:
    return ASSISTANT_PROMPT.format(
        query=query,
        user_role=(context.user_role if context and context.user_role else "Product Owner"),
        segment=(context.segment if context and context.segment else "general"),
        preamble=bundle.preamble,
        sources_block=format_sources_block(bundle),
        history_block=format_history_block(history),
    )
