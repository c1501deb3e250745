"""cps_report package initializer.

This package turns a CPS microdata extract into the tables, charts and
findings of the wage and labor-force participation report.  Modules cover
recoding, weighted aggregation, deflation, reshaping and presentation.
See individual module docstrings for details.
"""
