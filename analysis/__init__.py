"""
Analysis Engine Module

Tests the random walk hypothesis on a price series:
- Log returns and descriptive statistics
- Lo-MacKinlay variance ratios, z-statistics and p-values
- Annualized volatility scaling across sampling intervals
"""

__version__ = "0.1.0"
