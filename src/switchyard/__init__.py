"""switchyard: interceptor-based HTTP client layer."""

__version__ = "0.1.0"
