"""
sentiwatch — Customer Sentiment Watchdog.

Aggregates, filters and raises alerts on customer-support interaction
records that arrive already tagged with sentiment.
"""

__version__ = "1.0.0"
