"""
Unified Data Schema - Shared Market Intelligence Models
=======================================================

Provider-agnostic data models used from the adapters through to the final
report. Provider-specific key names never leave the adapters; everything
downstream speaks these models.

Unit Conventions (CRITICAL for Accuracy)
----------------------------------------
- **Prices / Monetary Values**: raw USD (market cap $1.5B = 1_500_000_000.0)
- **Volumes**: raw share (or coin) counts, NOT millions
- **Ratio Values** (margins, growth, dividend yield):
  - Unit: Decimal (NOT percentage)
  - Example: 15% = 0.15, not 15.0
- **Percent Displays** (change_percent, percent_from_high): whole numbers
  (2.5 means 2.5%), derived here, never taken from a provider
- **Sentiment Scores**: -100 (max bearish) .. 100 (max bullish)

Absence
-------
Every optional numeric field is either a finite number or None. None means
"the provider did not report it", never zero.

Immutability
------------
All models are frozen; the Aggregator's CompositeRecord is built once and
consumed once by the score synthesizer.
"""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from utils.result import ProviderFailure

AssetType = Literal['STOCK', 'PENNY_STOCK', 'CRYPTO', 'ETF']
SentimentLabel = Literal['BULLISH', 'BEARISH', 'NEUTRAL']
RiskLevel = Literal['LOW', 'MODERATE', 'HIGH', 'VERY_HIGH', 'EXTREME']
FragmentSource = Literal['news', 'social', 'insider', 'analyst', 'community']


class FrozenModel(BaseModel):
    """Base for all schema models: immutable after construction."""
    model_config = ConfigDict(frozen=True)


# =============================================================================
# Provider-level records
# =============================================================================

class Quote(FrozenModel):
    """
    Latest price record for one symbol.

    change / change_percent are always recomputed from current_price and
    previous_close; a provider-reported percentage is never stored.
    """
    symbol: str
    current_price: float = Field(..., description="Last traded price")
    open_price: Optional[float] = Field(None, description="Session open")
    high_price: Optional[float] = Field(None, description="Session high")
    low_price: Optional[float] = Field(None, description="Session low")
    previous_close: Optional[float] = Field(None, description="Previous session close")
    volume: Optional[float] = Field(None, description="Session volume")
    average_volume: Optional[float] = Field(None, description="Average daily volume")
    timestamp: Optional[str] = Field(None, description="Provider timestamp (ISO-8601)")
    source: Optional[str] = Field(None, description="Provider that produced this quote")

    @field_validator('current_price', 'open_price', 'high_price', 'low_price', 'previous_close')
    @classmethod
    def _non_negative_price(cls, value):
        if value is not None and value < 0:
            raise ValueError("prices must be >= 0")
        return value

    @computed_field
    @property
    def change(self) -> Optional[float]:
        if self.previous_close is None:
            return None
        return round(self.current_price - self.previous_close, 4)

    @computed_field
    @property
    def change_percent(self) -> Optional[float]:
        if self.previous_close is None or self.previous_close == 0:
            return None
        return round((self.current_price - self.previous_close) / self.previous_close * 100, 4)


class Fundamentals(FrozenModel):
    """Company fundamentals. Ratios are decimal fractions."""
    market_cap: Optional[float] = None
    pe_ratio: Optional[float] = None
    forward_pe: Optional[float] = None
    eps: Optional[float] = None
    dividend_yield: Optional[float] = None
    beta: Optional[float] = None
    profit_margin: Optional[float] = None
    operating_margin: Optional[float] = None
    revenue_growth: Optional[float] = None
    earnings_growth: Optional[float] = None


class MACD(FrozenModel):
    value: float
    signal: float
    histogram: float


class BollingerBands(FrozenModel):
    upper: float
    middle: float
    lower: float

    @model_validator(mode='after')
    def _ordered(self):
        if not (self.lower <= self.middle <= self.upper):
            raise ValueError("Bollinger bands must satisfy lower <= middle <= upper")
        return self


class Stochastic(FrozenModel):
    k: float
    d: float


class TechnicalIndicators(FrozenModel):
    """Latest value of each indicator; any of them may be absent."""
    rsi: Optional[float] = Field(None, ge=0, le=100)
    macd: Optional[MACD] = None
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    ema12: Optional[float] = None
    ema26: Optional[float] = None
    bollinger: Optional[BollingerBands] = None
    stochastic: Optional[Stochastic] = None
    adx: Optional[float] = None
    obv: Optional[float] = None
    vwap: Optional[float] = None
    atr: Optional[float] = None


class SentimentFragment(FrozenModel):
    """One provider's normalized sentiment contribution."""
    source: FragmentSource
    provider: str
    score: float = Field(..., description="-100 (bearish) .. 100 (bullish)")
    evidence_count: int = Field(0, ge=0, description="Articles / mentions / votes behind the score")

    @field_validator('score', mode='before')
    @classmethod
    def _clamp_score(cls, value):
        return max(-100.0, min(100.0, float(value)))


class Headline(FrozenModel):
    title: str
    sentiment: Literal['positive', 'negative', 'neutral'] = 'neutral'
    source: Optional[str] = None
    url: Optional[str] = None
    published_at: Optional[str] = None


class CompanyProfile(FrozenModel):
    name: Optional[str] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    exchange: Optional[str] = None
    currency: Optional[str] = None


class ProviderResult(FrozenModel):
    """
    Partial record returned by one adapter.

    `failure` is set only when the adapter's required call(s) failed and it
    contributes nothing; `warnings` note partial internal failures.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    provider: str
    quote: Optional[Quote] = None
    fundamentals: Optional[Fundamentals] = None
    technicals: Optional[TechnicalIndicators] = None
    fragments: List[SentimentFragment] = Field(default_factory=list)
    headlines: List[Headline] = Field(default_factory=list)
    news_count: Optional[int] = None
    profile: Optional[CompanyProfile] = None
    year_high: Optional[float] = None
    year_low: Optional[float] = None
    average_volume: Optional[float] = None
    asset_type: Optional[AssetType] = None
    failure: Optional[ProviderFailure] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failure is None

    def has_data(self) -> bool:
        """True if anything in this result can be merged."""
        return any((
            self.quote is not None,
            self.fundamentals is not None,
            self.technicals is not None,
            bool(self.fragments),
            bool(self.headlines),
            self.profile is not None,
            self.year_high is not None,
            self.year_low is not None,
            self.average_volume is not None,
        ))


class CompositeRecord(FrozenModel):
    """Merged, provider-agnostic view of one symbol after aggregation."""
    symbol: str
    asset_type: AssetType
    quote: Quote
    fundamentals: Optional[Fundamentals] = None
    technicals: TechnicalIndicators = Field(default_factory=TechnicalIndicators)
    fragments: List[SentimentFragment] = Field(default_factory=list)
    headlines: List[Headline] = Field(default_factory=list)
    news_count: int = 0
    profile: CompanyProfile = Field(default_factory=CompanyProfile)
    year_high: Optional[float] = None
    year_low: Optional[float] = None
    sources: List[str] = Field(default_factory=list, description="Contributing providers, priority order")
    failed_sources: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


# =============================================================================
# Synthesized outputs
# =============================================================================

class TechnicalSummary(FrozenModel):
    rsi: Optional[float] = None
    rsi_signal: Optional[Literal['OVERSOLD', 'NEUTRAL', 'OVERBOUGHT']] = None
    macd_trend: Optional[SentimentLabel] = None
    price_vs_sma50: Optional[Literal['ABOVE', 'BELOW']] = None
    price_vs_sma200: Optional[Literal['ABOVE', 'BELOW']] = None
    golden_cross: bool = False
    death_cross: bool = False
    bollinger_position: Optional[Literal['UPPER', 'MIDDLE', 'LOWER']] = None
    bullish_signals: int = 0
    bearish_signals: int = 0
    overall: SentimentLabel = 'NEUTRAL'


class SentimentVerdict(FrozenModel):
    overall: SentimentLabel = 'NEUTRAL'
    score: float = 0.0
    sources: Dict[str, float] = Field(default_factory=dict, description="Fragment source -> score")
    evidence: Dict[str, int] = Field(default_factory=dict, description="Fragment source -> evidence count")
    news_count: int = 0
    positive_news: int = 0
    negative_news: int = 0
    top_headlines: List[Headline] = Field(default_factory=list)


class RiskFactors(FrozenModel):
    """Each factor is normalized to 0-100 before weighting."""
    volatility: float = 0.0
    liquidity: float = 0.0
    market_cap: float = 0.0
    news_volatility: float = 0.0
    technical_risk: float = 0.0


class RiskAssessment(FrozenModel):
    overall_score: int = Field(..., ge=0, le=100)
    risk_level: RiskLevel
    factors: RiskFactors
    warnings: List[str] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list, description="Factors whose input was absent")


class YearRange(FrozenModel):
    high: Optional[float] = None
    low: Optional[float] = None
    percent_from_high: Optional[float] = None
    percent_from_low: Optional[float] = None


class DataQuality(FrozenModel):
    """
    Completeness heuristic: points per contributing provider, capped at 100.
    This counts sources; it is NOT a statistical confidence measure.
    """
    score: int = Field(..., ge=0, le=100)
    sources: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class IntelligenceReport(FrozenModel):
    symbol: str
    name: Optional[str] = None
    asset_type: AssetType
    sector: Optional[str] = None
    industry: Optional[str] = None
    quote: Quote
    fundamentals: Optional[Fundamentals] = None
    technicals: TechnicalIndicators
    technical_summary: TechnicalSummary
    sentiment: SentimentVerdict
    risk: RiskAssessment
    year_range: YearRange
    data_quality: DataQuality
    generated_at: str


class NotFound(FrozenModel):
    """No provider produced a usable quote. Returned, never raised."""
    symbol: str
    reason: str
    warnings: List[str] = Field(default_factory=list)
