from __future__ import annotations

from collections import Counter
from typing import Any

from .store import COMPARE_EVENT, GENERATE_EVENT


def _rate(part: int, whole: int) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    generates = [e for e in events if e["type"] == GENERATE_EVENT]
    compares = [e for e in events if e["type"] == COMPARE_EVENT]
    total = len(generates)
    succeeded = sum(1 for e in generates if e.get("success"))

    # Average response time over every request kind
    times = [e["response_time_ms"] for e in generates + compares if "response_time_ms" in e]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    strategy_counter: Counter[str] = Counter(
        e["strategy"] for e in generates if e.get("strategy")
    )

    failure_counter: Counter[str] = Counter(
        e["code"] for e in generates if not e.get("success") and e.get("code")
    )

    interest_counter: Counter[str] = Counter()
    for e in generates + compares:
        for interest in e.get("interests", []) or []:
            interest_counter[interest] += 1
    top_interests = [{"name": n, "count": c} for n, c in interest_counter.most_common(10)]

    enhancement_counter: Counter[str] = Counter()
    for e in generates:
        for feature in e.get("enhancements", []) or []:
            enhancement_counter[feature] += 1

    # Which strategies fail when compared side by side
    comparison_failures: Counter[str] = Counter()
    for e in compares:
        for strategy in e.get("failed_strategies", []) or []:
            comparison_failures[strategy] += 1

    successful_costs = [e["total_cost"] for e in generates if e.get("success") and "total_cost" in e]

    return {
        "total_generates": total,
        "total_compares": len(compares),
        "success_rate": _rate(succeeded, total),
        "avg_response_time_ms": avg_time,
        "avg_total_cost": round(sum(successful_costs) / len(successful_costs), 2) if successful_costs else 0.0,
        "strategy_usage": dict(strategy_counter),
        "failure_codes": dict(failure_counter),
        "top_interests": top_interests,
        "enhancement_usage": dict(enhancement_counter),
        "comparison_failures": dict(comparison_failures),
    }
