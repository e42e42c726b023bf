"""
Event detection over indicator output.

Modules
-------
crossover : detect_crossovers(), latest_crossover(), current_crossover_state(),
            build_crossover_report() - golden / death cross history.
breakout  : classify_breakouts(), group_alerts_by_category(),
            count_by_severity() - point-in-time alerts for one snapshot.
"""
