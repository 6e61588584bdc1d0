"""Client-side gateway between a wallet and its risk/analysis backend."""

__version__ = "0.1.0"
