"""
Utility modules for the feed ranking service
"""

from .dates import EPOCH, ensure_utc, hours_between, parse_dt, utc_now

__all__ = [
    'EPOCH',
    'ensure_utc',
    'hours_between',
    'parse_dt',
    'utc_now',
]
