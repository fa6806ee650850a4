from metricql.datadog.client import DatadogClient

__all__ = ["DatadogClient"]
