"""
cryptofolio.domain.enums: enumerations used across the service.

Keep this module import-clean (stdlib only).
"""

from enum import Enum


class Network(str, Enum):
    """Provider/chain tag carried on every normalized balance."""
    ETHEREUM = "ethereum"
    COINBASE = "coinbase"
