"""
Score accumulation and selection for amount candidates.

Observations of the same value add up; the value with the highest
accumulated score is selected as the total.
"""

from functools import reduce
from typing import Iterable, List, Optional, Tuple

from .candidates import AmountCandidate, AmountScore

__all__ = [
    'accumulate_scores', 'rank_scores',
    'select_best_amount', 'select_top_amounts',
]


def _merge(acc: Tuple[AmountScore, ...], candidate: AmountCandidate) -> Tuple[AmountScore, ...]:
    for i, entry in enumerate(acc):
        if entry.value == candidate.value:
            passes = entry.passes
            if candidate.pass_name not in passes:
                passes = passes + (candidate.pass_name,)
            merged = AmountScore(
                value=entry.value,
                score=entry.score + candidate.score,
                first_line=min(entry.first_line, candidate.line_index),
                order=entry.order,
                passes=passes,
            )
            return acc[:i] + (merged,) + acc[i + 1:]

    return acc + (AmountScore(
        value=candidate.value,
        score=candidate.score,
        first_line=candidate.line_index,
        order=len(acc),
        passes=(candidate.pass_name,),
    ),)


def accumulate_scores(candidates: Iterable[AmountCandidate]) -> Tuple[AmountScore, ...]:
    """
    Fold candidates into one entry per distinct value.

    Values are compared by decimal equality, so 42.5 and 42.50 share an
    entry (the first spelling seen is kept).

    Args:
        candidates: Candidates in the order the passes produced them

    Returns:
        Tuple of AmountScore in first-observation order
    """
    return reduce(_merge, candidates, ())


def _ranking_key(entry: AmountScore) -> Tuple[int, int, int]:
    # Highest score, then lowest first line, then first observed
    return (-entry.score, entry.first_line, entry.order)


def rank_scores(scores: Iterable[AmountScore]) -> List[AmountScore]:
    """Sort accumulated scores best first."""
    return sorted(scores, key=_ranking_key)


def select_best_amount(candidates: Iterable[AmountCandidate]) -> Optional[AmountScore]:
    """
    Select the best amount.

    Args:
        candidates: All candidates from every pass

    Returns:
        Winning AmountScore or None when there are no candidates
    """
    ranked = rank_scores(accumulate_scores(candidates))
    return ranked[0] if ranked else None


def select_top_amounts(
    candidates: Iterable[AmountCandidate],
    top_n: int = 3
) -> List[AmountScore]:
    """Select top N accumulated amounts for the review UI."""
    return rank_scores(accumulate_scores(candidates))[:top_n]
