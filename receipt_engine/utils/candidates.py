"""
Candidate dataclasses for extraction scoring.

Each candidate is one observation of a possible total: the value a pass
found on a line, and the priority that pass gives it.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Tuple


@dataclass(frozen=True)
class AmountCandidate:
    """
    A single amount observation.

    Scoring factors:
    - score: Pass base score minus the line index
    - line_index: Where the observation was made (earlier = better on ties)
    - pass_name: Which pass produced it, for debugging and review
    """
    value: Decimal
    score: int
    line_index: int
    pass_name: str
    raw_text: str = ""  # Original matched text


@dataclass(frozen=True)
class AmountScore:
    """
    All observations of one amount value, summed.

    Equal values coming from different lines or passes share one entry;
    first_line is the lowest line index any of them was seen on, and order
    is the position at which the value was first observed.
    """
    value: Decimal
    score: int
    first_line: int
    order: int
    passes: Tuple[str, ...] = ()


def create_amount_candidate(
    value: Decimal,
    pass_name: str,
    base_score: int,
    line_index: int,
    raw_text: str = ""
) -> AmountCandidate:
    """
    Create AmountCandidate with its position-adjusted score.

    Args:
        value: Parsed amount
        pass_name: Name of the pass that matched
        base_score: The pass's maximum score
        line_index: Index of the line the match was found on
        raw_text: Original matched text

    Returns:
        AmountCandidate scored base_score - line_index
    """
    return AmountCandidate(
        value=value,
        score=base_score - line_index,
        line_index=line_index,
        pass_name=pass_name,
        raw_text=raw_text,
    )
