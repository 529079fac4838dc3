"""Turn EVM blocks, transactions, logs, traces and state data into columnar tables."""

__version__ = "0.1.0"