"""
Scoring engine: rule-based strategies that score, qualify and rank stocks.

Modules
-------
rules      : Rule / RuleGroup / Strategy building blocks + ScoringContext.
strategies : MEDIUM_TERM, DAY_TRADE, MOMENTUM rule tables, get_strategy(),
             UnknownStrategyError.
scorer     : score_stock(), score_all_strategies(), normalized_score() -
             pure functions, no I/O.
targets    : compute_trade_targets() - ATR entry / exit / stop levels.
ranker     : base_symbol(), deduplicate_listings(), apply_universe_filters(),
             rank_strategy().
"""
