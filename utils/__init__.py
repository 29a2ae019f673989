"""
Utility modules for the price monitor application.
"""

from .clock import format_timestamp, now_in_timezone, observation_timestamp
from .number_parsing import convert_brl_to_float, parse_price, parse_quantity

__all__ = [
    'convert_brl_to_float',
    'format_timestamp',
    'now_in_timezone',
    'observation_timestamp',
    'parse_price',
    'parse_quantity',
]
