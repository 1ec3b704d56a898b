"""Measurement and statistics engine for runstat.

Executes commands repeatedly with precise timing and resource-usage
capture, stores every run in a write-once sample store, and reduces the
samples to summary statistics with confidence intervals.
"""
