"""
Data Ingestion Module

Handles fetching and validating price data:
- yfinance for adjusted close prices by ticker and date range
- Delimited text files with explicit column mapping
"""

__version__ = "0.1.0"
