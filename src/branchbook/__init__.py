"""branchbook: a story graph engine for branching gamebooks."""

__version__ = "0.1.0"
