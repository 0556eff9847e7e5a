"""
Pure calculation functions for return-series analysis.
"""
