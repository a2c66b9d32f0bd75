"""
Practicum: internship practice workflow core.

Lifecycle state machine, weighted final-grade closure and deadline
alert classification for student internship records.
"""

__version__ = "0.1.0"
