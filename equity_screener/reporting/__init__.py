"""
Reporting helpers: terminal formatting and file export of scan results.

Modules
-------
formatters : ASCII tables for ranked picks, score breakdowns, alerts and
             crossover histories (plain strings for ``typer.echo()``).
export     : export_to_csv(), export_to_json(), flatten_*_for_export().
"""
