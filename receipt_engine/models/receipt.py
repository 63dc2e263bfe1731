"""
Pydantic models for extracted receipt data.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional, Tuple
from datetime import datetime
from decimal import Decimal


class AmountOption(BaseModel):
    """Alternative total offered to the user when reviewing a draft."""
    model_config = ConfigDict(frozen=True)

    value: Decimal
    score: int


class ExtractionResult(BaseModel):
    """
    Best-effort record inferred from one receipt's OCR text.

    Every field except raw_text may be absent. Callers should treat the
    values as a draft for the user to confirm, not as authoritative data.
    """
    model_config = ConfigDict(frozen=True)

    amount: Optional[Decimal] = None
    date: Optional[datetime] = None  # Naive local time
    merchant: Optional[str] = None
    items: Tuple[str, ...] = ()
    raw_text: str
    currency: Optional[str] = None  # ISO code hint, never used for conversion
    amount_candidates: Tuple[AmountOption, ...] = ()

    @property
    def timestamp_ms(self) -> Optional[int]:
        """Transaction instant as epoch milliseconds."""
        if self.date is None:
            return None
        return int(self.date.timestamp() * 1000)
