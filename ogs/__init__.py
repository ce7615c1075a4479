"""
OGS attendance backend.

Tracks student presence in after-school care rooms and activity groups,
with checkin/checkout workflows for supervising staff.
"""

__version__ = "1.0.0"
