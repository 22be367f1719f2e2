"""Short link store with click budgets, expiry and a background sweeper."""

__version__ = "1.0.0"
