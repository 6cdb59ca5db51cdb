"""
Sentiment Arc Analyzer.

Groups inquiry events by tenant (phone number), orders each tenant's events
by start time, and compares the FIRST and LAST sentiment:

    positive pole {satisfied, positive}  ->  negative pole {frustrated, urgent, negative}
    negative pole                        ->  positive pole

Tenants with fewer than two events (with a sentiment) have no arc and are
ignored. Rates use the number of qualifying tenants as denominator, not the
number of events.

A transition matrix counts every adjacent pair (event i -> event i+1) across
all qualifying tenants for drill-down.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Tuple

from constants import MAX_SENTIMENT_TRANSITIONS, NEGATIVE_SENTIMENTS, POSITIVE_SENTIMENTS
from services.metrics import safe_percent

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def polarity(sentiment: str) -> int:
    """+1 positive pole, -1 negative pole, 0 otherwise."""
    if sentiment in POSITIVE_SENTIMENTS:
        return 1
    if sentiment in NEGATIVE_SENTIMENTS:
        return -1
    return 0


@dataclass
class SentimentArcs:
    qualifying_tenants: int = 0
    positive_to_negative: int = 0
    negative_to_positive: int = 0
    transitions: Dict[Tuple[str, str], int] = field(default_factory=dict)

    @property
    def positive_to_negative_rate(self) -> float:
        return safe_percent(self.positive_to_negative, self.qualifying_tenants)

    @property
    def negative_to_positive_rate(self) -> float:
        return safe_percent(self.negative_to_positive, self.qualifying_tenants)

    def transition_list(self, limit: int = MAX_SENTIMENT_TRANSITIONS) -> List[Dict[str, object]]:
        """[{from, to, count}] sorted by count descending, first-seen order on ties."""
        items = [
            {'from': src, 'to': dst, 'count': count}
            for (src, dst), count in self.transitions.items()
        ]
        items.sort(key=lambda item: -item['count'])
        return items[:limit]


def group_by_tenant(events: Iterable) -> Dict[str, List]:
    """phone -> events that carry both a phone number and a sentiment."""
    tenants: Dict[str, List] = {}
    for event in events:
        if event.phone_number and event.tenant_sentiment:
            tenants.setdefault(event.phone_number, []).append(event)
    return tenants


def analyze_arcs(events: Iterable) -> SentimentArcs:
    """Sentiment arcs and transition matrix over tenants with 2+ events."""
    arcs = SentimentArcs()

    for tenant_events in group_by_tenant(events).values():
        if len(tenant_events) < 2:
            continue
        arcs.qualifying_tenants += 1

        ordered = sorted(tenant_events, key=lambda e: e.started_at or _EARLIEST)
        first = polarity(ordered[0].tenant_sentiment)
        last = polarity(ordered[-1].tenant_sentiment)
        if first > 0 and last < 0:
            arcs.positive_to_negative += 1
        elif first < 0 and last > 0:
            arcs.negative_to_positive += 1

        for current, following in zip(ordered, ordered[1:]):
            pair = (current.tenant_sentiment, following.tenant_sentiment)
            arcs.transitions[pair] = arcs.transitions.get(pair, 0) + 1

    return arcs
