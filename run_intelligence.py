"""
Market Intelligence - Command Line Runner
Builds the intelligence report for one or more symbols and prints it as JSON.

Usage:
    python run_intelligence.py AAPL
    python run_intelligence.py AAPL btc-usd --deadline 90 --compact
"""

import argparse
import json
import logging
import os
import sys

# Add project root to path
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.insert(0, current_dir)

from config.settings import ConfigurationError
from fundamentals.intelligence import build_intelligence_service
from utils.logger import LoggingContext, set_logging_mode, setup_logger, quiet_loggers
from utils.unified_schema import NotFound

logger = setup_logger('run_intelligence')

# Loggers muted by --quiet
SUB_MODULE_LOGGERS = [
    'http_utils', 'base_adapter', 'alphavantage_adapter', 'finnhub_adapter',
    'coingecko_adapter', 'aggregator', 'risk_assessor', 'intelligence_service',
    'service_factory',
]


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Market intelligence report (quote, technicals, sentiment, risk).")
    parser.add_argument('symbols', nargs='+', help='Tickers or crypto ids (e.g. AAPL MSFT BTC bitcoin)')
    parser.add_argument('--deadline', type=float, default=None,
                        help='Seconds allowed per symbol (default: INTELLIGENCE_DEADLINE_SECONDS)')
    parser.add_argument('--compact', action='store_true', help='Single-line JSON output')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only warnings and errors on stderr')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    if args.quiet:
        set_logging_mode(LoggingContext.ORCHESTRATED)
        quiet_loggers(SUB_MODULE_LOGGERS, logging.WARNING)

    try:
        service = build_intelligence_service()
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    indent = None if args.compact else 2
    not_found = 0
    for symbol in args.symbols:
        try:
            result = service.get_intelligence(symbol, deadline_seconds=args.deadline)
        except ValueError as e:
            logger.error(f"Invalid symbol {symbol!r}: {e}")
            not_found += 1
            continue

        if isinstance(result, NotFound):
            not_found += 1
            logger.warning(f"{result.symbol}: {result.reason}")

        print(json.dumps(result.model_dump(mode='json'), indent=indent))

    return 2 if not_found == len(args.symbols) else 0


if __name__ == "__main__":
    sys.exit(main())
