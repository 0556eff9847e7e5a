"""
Report Output Module

Writes analysis results for people and other tools:
- Atomic JSON and Markdown writers
- Number formatting and sweep tables
- Matplotlib charts of prices, z-statistics and scaled volatility
"""
