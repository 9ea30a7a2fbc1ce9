"""
Perfect number search over the 32-bit range.

Exhaustive trial division over candidates of the form 2^h - 2^l, with
checkpoint/resume support for multi-day runs.
"""

__version__ = "1.15.0"
