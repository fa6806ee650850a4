"""
metricql - natural-language questions to Datadog metric queries.
"""

__version__ = "0.3.0"
