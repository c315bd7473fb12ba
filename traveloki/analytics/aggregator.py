from __future__ import annotations

from collections import Counter
from typing import Any

MODERATION_EVENTS = ("submission", "approval", "rejection", "direct_create", "deletion")


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    total = len(searches)

    # Queries that found nothing
    misses = sum(1 for s in searches if not s.get("found"))

    # Top queries
    query_counter: Counter[str] = Counter()
    for s in searches:
        query_counter[s.get("query", "")] += 1
    top_queries = [{"query": q, "count": c} for q, c in query_counter.most_common(10)]

    # Categories revealed by a search hit
    activation_counter: Counter[str] = Counter()
    for s in searches:
        if s.get("activated"):
            activation_counter[s.get("category", "unknown")] += 1

    # Proximity lookups
    proximity = [e for e in events if e["type"] in ("nearest", "nearby")]

    # Moderation activity
    moderation = Counter(e["type"] for e in events if e["type"] in MODERATION_EVENTS)
    approved_by_category: Counter[str] = Counter(
        e.get("category", "unknown") for e in events if e["type"] == "approval"
    )

    return {
        "total_searches": total,
        "not_found": misses,
        "hit_rate": round((total - misses) / total * 100, 1) if total else 0.0,
        "top_queries": top_queries,
        "category_activations": dict(activation_counter),
        "proximity_lookups": len(proximity),
        "moderation": {name: moderation.get(name, 0) for name in MODERATION_EVENTS},
        "approved_by_category": dict(approved_by_category),
    }
