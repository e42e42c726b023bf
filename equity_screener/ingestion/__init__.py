"""
Input adapters: turn already-fetched market data files into core models.

Modules
-------
chart_loader : load_chart_file(), load_chart_paths(), build_series(),
               ChartData, ChartFormatError.
"""
