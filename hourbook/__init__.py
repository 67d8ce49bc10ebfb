"""
hourbook - publish a daily availability window and book hourly slots in it.
"""

__version__ = "0.1.0"
