"""Cryptofolio backend: portfolio balances, prices and session gating."""

__version__ = "1.0.0"
