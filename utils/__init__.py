"""
Utilities module for the Market Intelligence engine.

--- Quick Reference ---

1. Numeric handling (numeric_utils.py) - used by every adapter
   from utils.numeric_utils import clean_numeric, clean_non_negative, safe_divide, round_half_up
   - clean_numeric(value)        NaN/Inf/None/"None"/"" -> None
   - clean_percent("1.5%")       -> 0.015
   - safe_divide(a, b)           division with zero/None protection
   - round_half_up(70.5)         -> 71 (round() would give 70)

2. Conversion helpers (helpers.py)
   from utils.helpers import safe_int, format_large_number, parse_timestamp

3. Logging (logger.py)
   from utils.logger import setup_logger
   - logger = setup_logger('module_name')
   - LoggingContext: standalone / orchestrated / silent

4. HTTP (http_utils.py)
   from utils.http_utils import RateLimitedClient
   - one client per provider: pacing, retry with exponential backoff,
     deadlines; returns JSON or ProviderFailure, never raises

5. Results (result.py)
   from utils.result import ProviderFailure, FailureKind, is_failure

6. Data models (unified_schema.py)
   Quote, Fundamentals, TechnicalIndicators, SentimentFragment,
   ProviderResult, CompositeRecord, IntelligenceReport, NotFound, ...

=== Notes ===
- Do numeric work through clean_numeric() / safe_divide(), not bare division
- Do HTTP through RateLimitedClient, not requests.get()
- Log through setup_logger(), not print()
"""

from .logger import setup_logger, LoggingContext, set_logging_mode, get_logging_mode
from .helpers import safe_int, format_large_number, parse_timestamp
from .result import FailureKind, ProviderFailure, is_failure

__all__ = [
    'setup_logger',
    'LoggingContext',
    'set_logging_mode',
    'get_logging_mode',
    'safe_int',
    'format_large_number',
    'parse_timestamp',
    'FailureKind',
    'ProviderFailure',
    'is_failure',
]
