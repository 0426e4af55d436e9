"""Personal net-worth tracker: holdings, live quotes, valuation and history."""

__version__ = "0.1.0"
