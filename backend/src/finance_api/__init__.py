"""Finance API: bookkeeping backend with portable backup export and import."""

__version__ = "1.0.0"
