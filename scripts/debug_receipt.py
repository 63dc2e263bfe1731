"""
Debug script to see what the parser extracts from OCR text.

Usage:
    python scripts/debug_receipt.py receipt.txt
    cat receipt.txt | python scripts/debug_receipt.py -
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from receipt_engine.config import settings
from receipt_engine.services.parser import ReceiptParser
from receipt_engine.utils.lines import normalize_lines


def main(argv=None):
    arg_parser = argparse.ArgumentParser(description="Run receipt extraction on a text file")
    arg_parser.add_argument('path', help="OCR text file, or - for stdin")
    arg_parser.add_argument('--debug', action='store_true', help="Log every pass and pattern match")
    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else settings.LOG_LEVEL,
        format='%(levelname)s [%(name)s] %(message)s',
    )

    if args.path == '-':
        text = sys.stdin.read()
    else:
        with open(args.path, encoding='utf-8') as f:
            text = f.read()

    print("=" * 60)
    print("NORMALIZED LINES:")
    print("-" * 60)
    for line in normalize_lines(text):
        print(f"{line.index:3d}  {line.text}")
    print("-" * 60)

    parser = ReceiptParser()
    result = parser.parse(text)

    print("\n" + "=" * 60)
    print("PARSING RESULT:")
    print("=" * 60)
    print(f"\nMerchant: {result.merchant}")
    print(f"Amount: {result.amount}")
    print(f"Currency: {result.currency}")
    print(f"Date: {result.date}")
    print("Items:")
    for item in result.items:
        print(f"  - {item}")
    print("Amount candidates:")
    for option in result.amount_candidates:
        print(f"  {option.value}  (score {option.score})")

    return 0


if __name__ == '__main__':
    sys.exit(main())
