"""
Timecard - Source Package

A personal time-and-earnings tracker. Work sessions are logged either
by minutes at an hourly rate or as a flat-rate service, and every
calendar month is sealed into an append-only archive when it ends.

DESIGN PRINCIPLES:
1. Archive before mutate - no entry is ever recorded against a sealed month
2. Amounts are computed once and stored
3. Corrupt storage never takes the whole tracker down
4. Notifications are best-effort and never block a write
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Timecard Team"
