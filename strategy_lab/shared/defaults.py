"""
Centralized default values for indicators, components and the scorecard.

This is the SINGLE SOURCE OF TRUTH for parameter defaults.
Config loaders and component constructors import from here.
"""

# Indicator defaults
ATR_PERIOD = 14
RSI_PERIOD = 14
RSI_OVERSOLD = 30
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
BOLLINGER_PERIOD = 20
BOLLINGER_STD = 2.0
KELTNER_EMA_PERIOD = 20
KELTNER_ATR_PERIOD = 10
KELTNER_MULTIPLIER = 2.0
STOCHASTIC_K_PERIOD = 14
STOCHASTIC_D_PERIOD = 3
MOMENTUM_PERIOD = 10

# Selector defaults
TOP_N = 10
ATR_LOOKBACK_DAYS = 100
ATR_WEIGHT = 0.4
VOLUME_WEIGHT = 0.3
TREND_WEIGHT = 0.3
BREAKTHROUGH_LOOKBACK_DAYS = 10
MIN_BREAKTHROUGH_PERCENT = 5.0
MAX_PULLBACK_PERCENT = 5.0
PULLBACK_VOLUME_DECLINE_RATIO = 0.7
VOLUME_DECLINE_LOOKBACK_DAYS = 30
MIN_CONSECUTIVE_DECLINE_DAYS = 3
MIN_VOLUME_DECLINE_RATIO = 0.1
SUPPORT_PRICE_PERIOD = 20
MAX_SUPPORT_RATIO = 0.05

# Signal defaults
LIMIT_PRICE_RATIO = 0.98  # Limit order at 98% of the evaluation close
MIN_BODY_RATIO = 0.5
SURGE_VOLUME_RATIO = 2.0
SURGE_AVERAGE_DAYS = 5
DECLINE_SIGNAL_DAYS = 3
DECLINE_SIGNAL_RATIO = 0.8

# Exit target defaults: (target_return, stop_loss, in_days)
RETURN_TARGETS = (
    (0.02, 0.01, 1),
    (0.06, 0.01, 3),
    (0.01, 0.01, 5),
)

# Scorecard defaults
BACK_DAYS = 12  # Number of historical evaluation offsets per combination
MIN_TRADES = 5  # Combinations with fewer trades stay unranked
BEST_N = 2
SUCCESS_WEIGHT = 0.7
RETURN_WEIGHT = 0.3
RECOMMENDATIONS_PER_STRATEGY = 5

# Data universe defaults
MIN_BARS = 120
EXCLUDED_PREFIXES = ("688", "300", "301", "302")
