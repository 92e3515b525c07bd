"""Cross-source ranking, deduplication and truncation."""

from __future__ import annotations

from knowledge_federation.models.domain import ScoredItem


def rank(scored: list[ScoredItem], cap: int) -> list[ScoredItem]:
    """Sort, deduplicate by (type, id) and truncate to ``cap``.

    Order is determined by the sort keys alone: score descending, then most
    recent ``created_at``, then type, id, title and text so that the result
    never depends on the order the adapters answered in. The first
    (highest-ranked) occurrence of each identity is kept.
    """
    kinds = {s.kind for s in scored}
    if len(kinds) > 1:
        raise ValueError(f"cannot rank mixed score kinds: {sorted(k.value for k in kinds)}")

    ordered = sorted(
        scored,
        key=lambda s: (
            -s.score,
            -s.item.created_at.timestamp(),
            s.item.type.value,
            s.item.id,
            s.item.title,
            s.item.text,
        ),
    )

    seen: set[tuple[str, str]] = set()
    ranked: list[ScoredItem] = []
    for s in ordered:
        if len(ranked) >= cap:
            break
        if s.item.key in seen:
            continue
        seen.add(s.item.key)
        ranked.append(s)
    return ranked
