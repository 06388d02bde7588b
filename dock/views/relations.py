"""Cross-document relationships: backlinks, tag overlap and brief comparison.

These are recomputed from the full snapshot whenever the active document
changes; nothing is cached between calls.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from datetime import date

from ..content.loader import coerce_timestamp
from ..content.parser import build_snippet
from ..models import BriefComparison, Doc, MarketFigure, RelatedDoc

DEFAULT_MARKET_LABELS: tuple[str, ...] = ("S&P 500", "Nasdaq", "Dow", "BTC", "ETH")
DEFAULT_RELATED_LIMIT = 5

# Number after a colon, optionally prefixed by a dollar sign: "BTC: $64,210.50"
_MARKET_VALUE = re.compile(r":\s*\$?([0-9][0-9,]*\.?\d*)")
_LIST_MARKER = re.compile(r"^\s*[-*+]\s*")
_ISO_DATE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")


def backlinks(docs: Iterable[Doc], active: Doc | None) -> list[Doc]:
    """Documents other than ``active`` whose body mentions its title."""
    if active is None:
        return []
    needle = (active.title or "").lower()
    if not needle:
        return []
    return [doc for doc in docs if doc.path != active.path and needle in doc.content.lower()]


def backlink_snippets(linked: Iterable[Doc], active: Doc | None, max_len: int = 120) -> dict[str, str]:
    """Map each backlinking doc path to an excerpt around the mention."""
    if active is None or not active.title:
        return {}
    return {doc.path: build_snippet(doc.content, active.title, max_len) for doc in linked}


def related_docs(docs: Iterable[Doc], active: Doc | None, limit: int = DEFAULT_RELATED_LIMIT) -> list[RelatedDoc]:
    """Rank other documents by the number of tags shared with ``active``.

    Comparison is case-insensitive; overlap labels keep the other document's
    spelling. Ties keep input order.
    """
    if active is None or not active.tags:
        return []
    active_tags = {tag.lower() for tag in active.tags}
    scored = []
    for doc in docs:
        if doc.path == active.path:
            continue
        overlap = tuple(tag for tag in doc.tags if tag.lower() in active_tags)
        if overlap:
            scored.append(RelatedDoc(doc=doc, score=len(overlap), overlap=overlap))
    scored.sort(key=lambda item: -item.score)
    return scored[:limit]


def parse_market_value(line: str) -> float | None:
    """Parse the number following the first colon-prefixed figure in a line."""
    match = _MARKET_VALUE.search(line)
    if not match:
        return None
    try:
        return float(match.group(1).replace(",", ""))
    except ValueError:
        return None


def parse_brief_markets(content: str, labels: Sequence[str] = DEFAULT_MARKET_LABELS) -> dict[str, MarketFigure]:
    """Extract tracked figures from a brief body.

    For each label the first line containing it is used. Labels that never
    appear are absent from the result.
    """
    results: dict[str, MarketFigure] = {}
    for line in (content or "").split("\n"):
        for label in labels:
            if label in results or label not in line:
                continue
            results[label] = MarketFigure(
                raw=_LIST_MARKER.sub("", line, count=1).strip(),
                value=parse_market_value(line),
            )
    return results


def brief_date(doc: Doc) -> date | None:
    """Calendar date of a brief.

    Uses ``meta["date"]`` when parseable, then an ISO date in the title,
    then the creation date.
    """
    explicit = coerce_timestamp(doc.meta.get("date")) if doc.meta else None
    if explicit is not None:
        return explicit.date()
    match = _ISO_DATE.search(doc.title or "")
    if match:
        try:
            return date.fromisoformat(match.group(1))
        except ValueError:
            pass
    if doc.created_at is not None:
        return doc.created_at.date()
    return None


def brief_compare(
    docs: Iterable[Doc],
    active: Doc | None,
    labels: Sequence[str] = DEFAULT_MARKET_LABELS,
) -> BriefComparison | None:
    """Pair the active brief with the brief dated immediately before it.

    Returns None when the active document is not a dated brief or has no
    chronological predecessor.
    """
    if active is None or not active.is_brief or brief_date(active) is None:
        return None

    dated = [(brief_date(doc), doc) for doc in docs if doc.is_brief]
    ordered = [doc for day, doc in sorted((pair for pair in dated if pair[0] is not None), key=lambda pair: pair[0])]

    index = next((i for i, doc in enumerate(ordered) if doc.path == active.path), -1)
    if index <= 0:
        return None

    today = ordered[index]
    yesterday = ordered[index - 1]
    return BriefComparison(
        today=today,
        yesterday=yesterday,
        today_markets=parse_brief_markets(today.content, labels),
        yesterday_markets=parse_brief_markets(yesterday.content, labels),
        labels=tuple(labels),
    )
