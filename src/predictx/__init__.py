"""PredictX - simulated prediction-market trading and valuation engine."""

__version__ = "0.1.0"
