"""Default fuzzy matcher.

Hosts usually supply their own matcher; any callable with the signature
``match(query, candidate) -> (score, spans)`` works, where a score of 0 or
less means no match.
"""

from typing import Callable, List, Tuple

from .models import MatchSpan

MatchResult = Tuple[int, List[MatchSpan]]
Matcher = Callable[[str, str], MatchResult]


def fuzzy_match(query: str, text: str) -> MatchResult:
    """Score ``text`` against ``query``.

    Scoring:
    - Exact match: 1000
    - Prefix match: 500 + (len(query) / len(text)) * 100
    - Substring match: 100 - position penalty (at most 50)
    - In-order characters: 50 + 20 per adjacent pair - gap lengths, floored at 1
    - No match: 0

    Args:
        query: Search query
        text: Text to match against

    Returns:
        Tuple of (score, match spans)
    """
    query = query.strip()
    if not query or not text:
        return (0, [])

    text_lower = text.lower()
    query_lower = query.lower()

    if text_lower == query_lower:
        return (1000, [MatchSpan(0, len(text))])

    if text_lower.startswith(query_lower):
        score = 500 + int((len(query) / len(text)) * 100)
        return (score, [MatchSpan(0, len(query))])

    pos = text_lower.find(query_lower)
    if pos != -1:
        position_penalty = min(pos * 10, 50)
        return (100 - position_penalty, [MatchSpan(pos, pos + len(query))])

    # Every query character must appear in order
    positions = []
    text_idx = 0
    for char in query_lower:
        text_idx = text_lower.find(char, text_idx)
        if text_idx == -1:
            return (0, [])
        positions.append(text_idx)
        text_idx += 1

    score = 50
    for prev, cur in zip(positions, positions[1:]):
        if cur == prev + 1:
            score += 20
        else:
            score -= cur - prev - 1
    score = max(score, 1)

    spans: List[MatchSpan] = []
    for index in positions:
        if spans and spans[-1].end == index:
            spans[-1] = MatchSpan(spans[-1].start, index + 1)
        else:
            spans.append(MatchSpan(index, index + 1))

    return (score, spans)
