"""Building blocks for an Electroneum blockchain explorer: formatting, transaction summaries, daemon RPC, emission and mempool monitoring."""

__version__ = "0.1.0"