from typing import List, Optional, Tuple, Type, Dict, Any
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource
import yaml
import os

class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """
    A simple settings source that loads variables from a YAML file
    at the project's config/config.yaml location.
    """
    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        pass

    def __call__(self) -> Dict[str, Any]:
        config_file = os.getenv("CONFIG_FILE", "config/config.yaml")
        if os.path.exists(config_file):
            with open(config_file) as f:
                return yaml.safe_load(f) or {}
        return {}

class Config(BaseSettings):
    # Environment
    env: str = Field("development", description="Environment: development, staging, production")
    debug: bool = False

    # Worker pool for pairwise computations
    max_workers: int = Field(4, ge=1)

    # Orderbook features
    orderbook_top_n: int = Field(10, ge=1)
    slippage_sizes: Tuple[float, float, float] = (100.0, 500.0, 1000.0)
    reject_crossed_books: bool = False
    very_tight_spread_pct: float = 0.5
    tight_spread_pct: float = 2.0
    moderate_spread_pct: float = 5.0
    imbalance_pressure: float = 0.3
    deep_depth: float = 1000.0
    adequate_depth: float = 100.0
    high_slippage: float = 0.05

    # Correlation / lead-lag
    alignment_mode: str = Field("exact", description="exact or nearest")
    alignment_tolerance_seconds: float = 0.0
    max_lead_lag: int = 5
    min_reported_lag: int = 2
    min_aligned_points: int = Field(2, ge=1)
    cointegration_min_points: int = 100
    high_confidence_correlation: float = 0.7
    high_confidence_pvalue: float = 0.05
    medium_confidence_correlation: float = 0.5
    medium_confidence_pvalue: float = 0.10

    # Inefficiency detection
    momentum_window: int = 10
    momentum_threshold: float = 0.1
    momentum_confidence: float = 0.7
    zscore_threshold: float = 1.5
    zscore_scale: float = Field(3.0, gt=0)
    mean_reversion_confidence: float = 0.6
    pair_correlation_threshold: float = 0.7
    pair_divergence_ratio: float = 1.5
    arbitrage_confidence: float = 0.8
    detect_extreme_prices: bool = False
    extreme_low: float = 0.05
    extreme_high: float = 0.95
    mispricing_confidence: float = 0.3
    detect_residual_divergence: bool = False
    residual_correlation_floor: float = 0.5
    residual_min_points: int = Field(3, ge=3)
    residual_zscore_threshold: float = 2.0
    residual_medium_zscore: float = 2.5
    residual_high_zscore: float = 3.0
    detect_spread_opportunities: bool = False
    spread_correlation_ceiling: float = -0.5
    spread_deviation_threshold: float = 0.05
    spread_medium_deviation: float = 0.07
    spread_high_deviation: float = 0.10
    spread_typical_deviation: float = Field(0.02, gt=0)
    high_confidence: float = 0.8
    medium_confidence: float = 0.6
    low_confidence: float = 0.4

    # Consistency scanning
    overround_ceiling: float = 1.03
    underround_floor: float = 0.97
    parity_tolerance: float = 0.04
    term_structure_tolerance: float = 0.01
    wide_spread_threshold: float = 0.05
    thin_liquidity_floor: float = 60000
    stale_book_minutes: float = 15
    max_findings: int = 6

    # Strategy / projection
    default_correlation_weight: float = 0.5
    min_entry_price: float = Field(0.01, gt=0)
    hedge_correlation_ceiling: float = -0.3
    spread_trade_correlation_floor: float = 0.7
    hedge_confidence: float = 0.6
    spread_trade_confidence: float = 0.8
    max_suggestions: int = 5
    ev_grid_step: float = 0.05
    time_decay_horizons: List[int] = [7, 30, 90, 180]
    default_half_life_days: float = Field(45.0, gt=0)

    # Execution simulation (synthetic depth)
    synthetic_depth_levels: int = Field(5, ge=1)
    synthetic_liquidity_fraction: float = 0.08
    synthetic_tick_fraction: float = 0.02
    synthetic_size_growth: float = 0.35
    synthetic_base_size_floor: float = 1000.0
    synthetic_min_tick: float = Field(0.0001, gt=0)
    synthetic_min_price: float = Field(0.0001, gt=0)

    # Market metrics
    base_health: float = 0.5
    calm_volatility: float = 0.1
    shallow_drawdown: float = 0.1
    healthy_bid_depth: float = 100.0
    volatile_threshold: float = 0.15
    trend_threshold: float = 0.05

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

# Singleton instance
config = Config()
