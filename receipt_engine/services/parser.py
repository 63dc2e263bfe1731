"""
Receipt parser service for extracting structured data from OCR text.
"""

import re
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Set, Tuple, Union
from datetime import datetime
from decimal import Decimal

from receipt_engine.config import Settings, settings
from receipt_engine.models.receipt import AmountOption, ExtractionResult
from receipt_engine.utils.lines import Line, as_lines, normalize_lines
from receipt_engine.utils.money import (
    CURRENCY_SYMBOL_CLASS,
    MONEY_NUMBER,
    currency_code,
    parse_money,
)
from receipt_engine.utils.candidates import AmountCandidate, AmountScore, create_amount_candidate
from receipt_engine.utils.scoring import select_top_amounts

logger = logging.getLogger(__name__)

LineInput = Union[Line, str]

# English abbreviations mapped by hand; %b and %p follow the process locale
MONTH_NUMBERS = {
    'jan': '01', 'feb': '02', 'mar': '03', 'apr': '04', 'may': '05', 'jun': '06',
    'jul': '07', 'aug': '08', 'sep': '09', 'oct': '10', 'nov': '11', 'dec': '12',
}


@dataclass(frozen=True)
class PatternSpec:
    """A named regex pattern with example and notes for documentation."""
    name: str
    pattern: str
    example: str
    notes: Optional[str] = None
    parse_format: Optional[str] = None  # strptime format for date/time tokens
    month_group: Optional[int] = None  # Group holding an English month abbreviation
    meridiem_group: Optional[int] = None  # Group holding AM/PM
    flags: int = re.IGNORECASE
    compiled: re.Pattern = field(default=None, init=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'compiled', re.compile(self.pattern, self.flags))

    def parse_datetime(self, match: re.Match) -> Optional[datetime]:
        """
        Strictly parse a match with parse_format.

        Groups are joined with single spaces. The month group is replaced by
        its number and the meridiem group is applied after parsing, so only
        numeric strptime directives are ever used.
        """
        groups = list(match.groups())
        meridiem = None

        if self.month_group is not None:
            month = MONTH_NUMBERS.get(groups[self.month_group - 1].lower())
            if month is None:
                logger.debug("Pattern %s: unknown month %r", self.name, groups[self.month_group - 1])
                return None
            groups[self.month_group - 1] = month

        if self.meridiem_group is not None:
            meridiem = groups.pop(self.meridiem_group - 1).upper()

        token = ' '.join(' '.join(groups).split())
        try:
            parsed = datetime.strptime(token, self.parse_format)
        except ValueError:
            logger.debug("Pattern %s matched %r but it does not parse", self.name, token)
            return None

        if meridiem is not None:
            parsed = parsed.replace(hour=parsed.hour % 12 + (12 if meridiem == 'PM' else 0))
        return parsed


@dataclass(frozen=True)
class AmountPass:
    """
    One scan strategy in the amount cascade.

    Each match on a line yields a candidate scored base_score - line index.
    Passes run in order; a later pass may skip lines an earlier claiming
    pass already produced a candidate for.
    """
    spec: PatternSpec
    base_score: int
    line_keywords: Tuple[str, ...] = ()  # Line must contain one of these (lowercase)
    first_match_only: bool = False
    claims_lines: bool = False
    skips_claimed_lines: bool = False

    @property
    def name(self) -> str:
        return self.spec.name

    def applies_to(self, line: Line, claimed: Set[int]) -> bool:
        if self.skips_claimed_lines and line.index in claimed:
            return False
        if self.line_keywords:
            lower = line.text.lower()
            return any(keyword in lower for keyword in self.line_keywords)
        return True

    def scan(self, line: Line) -> Iterator[AmountCandidate]:
        if self.first_match_only:
            first = self.spec.compiled.search(line.text)
            matches = [first] if first else []
        else:
            matches = self.spec.compiled.finditer(line.text)

        for match in matches:
            value = parse_money(match.group(1))
            if value is None or value <= 0:
                continue
            yield create_amount_candidate(
                value=value,
                pass_name=self.name,
                base_score=self.base_score,
                line_index=line.index,
                raw_text=match.group(0),
            )


class ReceiptParser:
    """Service for parsing receipt text and extracting structured data."""

    # Base scores per pass; later passes always rank below earlier ones
    TOTAL_KEYWORD_SCORE = 1000
    CURRENCY_SYMBOL_SCORE = 500
    DECIMAL_HEURISTIC_SCORE = 300

    MERCHANT_EXCLUDE_KEYWORDS = (
        'receipt', 'tax', 'total', 'subtotal', 'amount', 'date', 'time',
        'cashier', 'invoice', 'transaction', 'payment', 'change', 'cash',
    )

    ITEM_EXCLUDE_KEYWORDS = ('total', 'tax', 'subtotal')

    def __init__(
        self,
        config: Optional[Settings] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize parser with regex patterns.

        Args:
            config: Settings to use instead of the module-level settings
            clock: Source of "now" for the date fallback
        """
        self.settings = config or settings
        self._clock = clock
        self._init_patterns()

    def _init_patterns(self):
        """Initialize regex patterns for parsing."""

        self.amount_passes = (
            AmountPass(
                spec=PatternSpec(
                    name='total_keyword',
                    pattern=(
                        r'\b(?:grand\s+total|net\s+total|total|amount|balance|sum)(?![A-Za-z])'
                        r'[\s:=\-]*' + CURRENCY_SYMBOL_CLASS + r'?\s*(' + MONEY_NUMBER + r')'
                    ),
                    example='TOTAL: $42.50',
                    notes='Keyword followed by an amount, possibly glued ("TOTAL42.50"); '
                          '"subtotal" does not match',
                ),
                base_score=self.TOTAL_KEYWORD_SCORE,
                first_match_only=True,
                claims_lines=True,
            ),
            AmountPass(
                spec=PatternSpec(
                    name='currency_symbol',
                    pattern=CURRENCY_SYMBOL_CLASS + r'\s*(' + MONEY_NUMBER + r')',
                    example='₱ 1,250.00',
                    notes='Every symbol-prefixed amount on lines without a keyword total',
                ),
                base_score=self.CURRENCY_SYMBOL_SCORE,
                skips_claimed_lines=True,
            ),
            AmountPass(
                spec=PatternSpec(
                    name='decimal_heuristic',
                    pattern=r'(?<![\d,.])(\d{1,6}\.\d{2})(?!\d)',
                    example='Amount to pay 18.75',
                    notes='Classic money formatting on total-like lines',
                ),
                base_score=self.DECIMAL_HEURISTIC_SCORE,
                line_keywords=('total', 'amount', 'balance', 'pay'),
            ),
        )

        # Date patterns, in priority order.
        # MM/DD and DD/MM share a pattern; strict parsing only lets DD/MM win
        # when the MM/DD reading is invalid (e.g. 15/01/2024).
        self.date_patterns = (
            PatternSpec(
                name='us_numeric',
                pattern=r'(?<!\d)(\d{1,2}/\d{1,2}/\d{4})(?!\d)',
                example='01/15/2024',
                parse_format='%m/%d/%Y',
            ),
            PatternSpec(
                name='day_first_numeric',
                pattern=r'(?<!\d)(\d{1,2}/\d{1,2}/\d{4})(?!\d)',
                example='15/01/2024',
                parse_format='%d/%m/%Y',
            ),
            PatternSpec(
                name='iso_date',
                pattern=r'(?<!\d)(\d{4}-\d{1,2}-\d{1,2})(?!\d)',
                example='2024-01-15',
                parse_format='%Y-%m-%d',
            ),
            PatternSpec(
                name='us_short_year',
                pattern=r'(?<!\d)(\d{1,2}/\d{1,2}/\d{2})(?![\d/])',
                example='01/15/24',
                parse_format='%m/%d/%y',
            ),
            PatternSpec(
                name='month_name_date',
                pattern=r'\b([A-Za-z]{3})\.?\s+(\d{1,2}),\s*(\d{4})(?!\d)',
                example='Jan 15, 2024',
                parse_format='%m %d %Y',
                month_group=1,
            ),
            PatternSpec(
                name='day_month_name_date',
                pattern=r'(?<!\d)(\d{1,2})\s+([A-Za-z]{3})\.?\s+(\d{4})(?!\d)',
                example='15 Jan 2024',
                parse_format='%d %m %Y',
                month_group=2,
            ),
        )

        # Time patterns; 12-hour is tried first so "2:05 PM" is not read as 02:05
        self.time_patterns = (
            PatternSpec(
                name='twelve_hour_time',
                pattern=r'(?<![\d:])(\d{1,2}:\d{2})\s*([AP]M)\b',
                example='2:05 PM',
                parse_format='%I:%M',
                meridiem_group=2,
            ),
            PatternSpec(
                name='twenty_four_hour_time',
                pattern=r'(?<![\d:])(\d{1,2}:\d{2})(?!\d)',
                example='14:05',
                parse_format='%H:%M',
            ),
        )

        self.item_pattern = PatternSpec(
            name='name_then_price',
            pattern=r'^(.+?)\s+(\d[\d,]*(?:\.\d+)?)$',
            example='Iced Latte 4.50',
            flags=0,
        )

        self.currency_pattern = re.compile(CURRENCY_SYMBOL_CLASS)

    def parse(self, text: str) -> ExtractionResult:
        """
        Parse receipt text and extract all available fields.

        Args:
            text: OCR-extracted text from receipt

        Returns:
            ExtractionResult carrying the original text unchanged
        """
        if not isinstance(text, str):
            raise TypeError(f"Receipt text must be str, not {type(text).__name__}")

        lines = normalize_lines(text)
        ranked = self.rank_amounts(lines, top_n=None)

        result = ExtractionResult(
            amount=ranked[0].value if ranked else None,
            date=self.extract_datetime(lines),
            merchant=self.extract_merchant(lines),
            items=tuple(self.extract_items(lines)),
            raw_text=text,
            currency=self.extract_currency(lines),
            amount_candidates=tuple(
                AmountOption(value=entry.value, score=entry.score)
                for entry in ranked[:self.settings.REVIEW_CANDIDATES]
            ),
        )

        logger.debug(
            "Parsed %d lines: amount=%s merchant=%r items=%d",
            len(lines), result.amount, result.merchant, len(result.items)
        )
        return result

    # Amount

    def _collect_amount_candidates(self, lines: Sequence[Line]) -> List[AmountCandidate]:
        candidates: List[AmountCandidate] = []
        claimed: Set[int] = set()

        for amount_pass in self.amount_passes:
            for line in lines:
                if not amount_pass.applies_to(line, claimed):
                    continue
                found = list(amount_pass.scan(line))
                if found and amount_pass.claims_lines:
                    claimed.add(line.index)
                for candidate in found:
                    logger.debug(
                        "Pass %s: %r -> %s on line %d (+%d)",
                        candidate.pass_name, candidate.raw_text, candidate.value,
                        candidate.line_index, candidate.score
                    )
                candidates.extend(found)

        return candidates

    def rank_amounts(self, lines: Iterable[LineInput], top_n: Optional[int] = 3) -> List[AmountScore]:
        """
        Rank accumulated amount candidates, best first.

        Args:
            lines: Normalized lines or plain strings
            top_n: Number of entries to return, or None for all

        Returns:
            Up to top_n AmountScore entries
        """
        return select_top_amounts(self._collect_amount_candidates(as_lines(lines)), top_n=top_n)

    def extract_amount(self, lines: Iterable[LineInput]) -> Optional[Decimal]:
        """
        Extract total amount using the three scoring passes.

        Args:
            lines: Normalized lines or plain strings

        Returns:
            Amount as Decimal or None
        """
        ranked = self.rank_amounts(lines, top_n=1)
        return ranked[0].value if ranked else None

    # Date

    def _match_first(self, specs: Sequence[PatternSpec], text: str) -> Optional[datetime]:
        for spec in specs:
            for match in spec.compiled.finditer(text):
                parsed = spec.parse_datetime(match)
                if parsed is not None:
                    logger.debug("Pattern %s matched %r", spec.name, match.group(0))
                    return parsed
        return None

    def _match_time(self, text: str) -> Optional[Tuple[int, int]]:
        parsed = self._match_first(self.time_patterns, text)
        if parsed is None:
            return None
        return parsed.hour, parsed.minute

    def extract_datetime(self, lines: Iterable[LineInput]) -> datetime:
        """
        Extract the transaction date and time.

        The first line within the scan window holding a parseable date wins;
        a time on that same line replaces midnight. Without any date the
        window is searched for a time alone, applied to today. Falls back to
        the current time, so the result is never None.

        Args:
            lines: Normalized lines or plain strings

        Returns:
            Naive local datetime
        """
        window = as_lines(lines)[:self.settings.DATE_SCAN_LINES]

        for line in window:
            base = self._match_first(self.date_patterns, line.text)
            if base is None:
                continue
            time_of_day = self._match_time(line.text)
            if time_of_day is not None:
                hour, minute = time_of_day
                base = base.replace(hour=hour, minute=minute)
            return base

        now = self._clock()
        for line in window:
            time_of_day = self._match_time(line.text)
            if time_of_day is not None:
                hour, minute = time_of_day
                return now.replace(hour=hour, minute=minute, second=0, microsecond=0)

        logger.debug("No date or time found, using current time")
        return now

    # Merchant

    def extract_merchant(self, lines: Iterable[LineInput]) -> Optional[str]:
        """
        Pick the merchant name from the top of the receipt.

        Lines mentioning receipt bookkeeping words are skipped; the first
        remaining line that is mostly letters is the merchant.
        """
        for line in as_lines(lines)[:self.settings.MERCHANT_SCAN_LINES]:
            lower = line.text.lower()
            if any(keyword in lower for keyword in self.MERCHANT_EXCLUDE_KEYWORDS):
                continue

            alpha_count = sum(1 for char in line.text if char.isalpha())
            total_count = len(line.text)
            if total_count > 3 and alpha_count / total_count > self.settings.MERCHANT_MIN_ALPHA_RATIO:
                return line.text

        return None

    # Items

    def extract_items(self, lines: Iterable[LineInput]) -> List[str]:
        """Collect "name - price" entries from lines ending in a number."""
        items: List[str] = []

        for line in as_lines(lines):
            match = self.item_pattern.compiled.match(line.text)
            if not match:
                continue

            name = match.group(1).strip()
            price = match.group(2)
            lower_name = name.lower()
            if any(keyword in lower_name for keyword in self.ITEM_EXCLUDE_KEYWORDS):
                continue
            if len(name) <= 2:
                continue

            if len(items) >= self.settings.MAX_ITEMS:
                break
            items.append(f"{name} - {price}")

        return items

    # Currency

    def extract_currency(self, lines: Iterable[LineInput]) -> Optional[str]:
        """
        Detect the dominant currency symbol.

        Returns:
            ISO code of the most frequent symbol (first seen on ties), or None
        """
        counts = Counter(
            symbol
            for line in as_lines(lines)
            for symbol in self.currency_pattern.findall(line.text)
        )
        if not counts:
            return None
        symbol, _ = counts.most_common(1)[0]
        return currency_code(symbol)


def extract(text: str) -> ExtractionResult:
    """Parse receipt text with default settings."""
    return ReceiptParser().parse(text)
