"""
Indicator engine: pure functions over daily closes.  No I/O, no state.

Modules
-------
moving_average : sma(), latest_sma(), ema_series().
oscillators    : rsi_series(), rsi(), macd_series(), macd(), MacdResult,
                 classify_macd_signal(), up_streak().
volatility     : true_ranges(), atr().
snapshot       : build_snapshot() - quote + history → IndicatorSnapshot.
"""
