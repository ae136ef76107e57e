"""
Fuzzy line matching.

The scoring is the Sublime Text style heuristic popularised by the
``sahilm/fuzzy`` matcher: every pattern character must appear in order, and a
candidate earns bonuses for matching its first character, characters right
after a separator, camel-case humps and runs of adjacent characters, while
leading and unmatched characters cost points.  For each pattern character the
best position before the next pattern character shows up is chosen, so
``"tk"`` prefers the ``K`` of ``"The Black Knight"``.

Scores are unbounded integers; :func:`score_percent` maps them onto 0-100 for
display and thresholds.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

FIRST_CHAR_MATCH_BONUS = 10
MATCH_FOLLOWING_SEPARATOR_BONUS = 20
CAMEL_CASE_MATCH_BONUS = 20
ADJACENT_MATCH_BONUS = 5
UNMATCHED_LEADING_CHAR_PENALTY = -5
MAX_UNMATCHED_LEADING_CHAR_PENALTY = -15

SEPARATORS = frozenset("/-_ .\\")


@dataclass(frozen=True)
class Match:
    """A corpus entry that matched, with highlight positions (character offsets)."""

    index: int
    score: int
    matched_indexes: tuple[int, ...]
    text: str


def _fold_eq(a: str, b: str) -> bool:
    return a == b or a.casefold() == b.casefold()


def _adjacent_bonus(index: int, last_match: int, current_bonus: int) -> int:
    if last_match == index:
        return current_bonus * 2 + ADJACENT_MATCH_BONUS
    return 0


def score_text(pattern: str, text: str) -> tuple[int, list[int]] | None:
    """Score one candidate.

    Returns:
        ``(score, positions)`` when every pattern character matched, else ``None``.
    """
    if not pattern:
        return None

    total = 0
    matched: list[int] = []
    pattern_index = 0
    best_score = -1
    matched_index = -1
    current_adjacent = 0
    last = ""
    last_index = 0
    last_pattern = len(pattern) - 1

    for j, candidate in enumerate(text):
        if _fold_eq(candidate, pattern[pattern_index]):
            score = 0
            if j == 0:
                score += FIRST_CHAR_MATCH_BONUS
            if last.islower() and candidate.isupper():
                score += CAMEL_CASE_MATCH_BONUS
            if j != 0 and last in SEPARATORS:
                score += MATCH_FOLLOWING_SEPARATOR_BONUS
            if matched:
                bonus = _adjacent_bonus(last_index, matched[-1], current_adjacent)
                score += bonus
                # adjacent bonuses compound along a run
                current_adjacent += bonus
            if score > best_score:
                best_score = score
                matched_index = j

        next_p = pattern[pattern_index + 1] if pattern_index < last_pattern else ""
        next_c = text[j + 1] if j + 1 < len(text) else ""

        # Commit the best position once the next pattern char is coming up
        # or the candidate has run out.
        if (next_p and next_c and _fold_eq(next_p, next_c)) or not next_c:
            if matched_index > -1:
                if not matched:
                    penalty = matched_index * UNMATCHED_LEADING_CHAR_PENALTY
                    best_score += max(penalty, MAX_UNMATCHED_LEADING_CHAR_PENALTY)
                total += best_score
                matched.append(matched_index)
                best_score = -1
                pattern_index += 1
                if pattern_index > last_pattern:
                    break

        last_index = j
        last = candidate

    if len(matched) != len(pattern):
        return None
    # one point off for each character that did not match
    total += len(matched) - len(text)
    return total, matched


def find(pattern: str, data: Sequence[str]) -> list[Match]:
    """Rank ``data`` against ``pattern``, best first.

    Ties keep corpus order, so identical inputs always give identical output.
    """
    if not pattern:
        return []
    matches = []
    for index, text in enumerate(data):
        scored = score_text(pattern, text)
        if scored is None:
            continue
        score, positions = scored
        matches.append(Match(index, score, tuple(positions), text))
    matches.sort(key=lambda m: -m.score)
    return matches


def score_percent(raw_score: int, query_len: int) -> int:
    """Normalise a raw score to 0-100.

    ``-(query_len ** 2)`` maps to 0 and a score of 0 or better to 100; an
    empty query always scores 0.
    """
    if query_len == 0:
        return 0
    worst = -(query_len * query_len)
    if raw_score <= worst:
        return 0
    pct = int((raw_score - worst) / -worst * 100)
    return min(pct, 100)


def highlight_spans(text: str, positions: Sequence[int]) -> list[tuple[str, bool]]:
    """Split ``text`` into runs of ``(chunk, is_matched)`` for renderers."""
    if not positions:
        return [(text, False)] if text else []
    marked = set(positions)
    spans: list[tuple[str, bool]] = []
    for i, char in enumerate(text):
        hit = i in marked
        if spans and spans[-1][1] == hit:
            spans[-1] = (spans[-1][0] + char, hit)
        else:
            spans.append((char, hit))
    return spans
