"""TradeSense - paper-trading simulator with AI price predictions."""

__version__ = "0.1.0"
