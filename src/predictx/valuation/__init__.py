"""Mark-to-market valuation."""
