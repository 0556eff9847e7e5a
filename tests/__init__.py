"""
Test Suite for the Random Walk Workbench

Tests live beside each package:
- analysis/tests: variance ratios, volatility scaling, config and CLI
- ingestion/tests: yfinance and delimited-file adapters, validation
- reports/tests: writers, formatters and charts
"""
