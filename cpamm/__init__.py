"""
cpamm: accounting and pricing core of a two-asset constant-product AMM.
"""

__version__ = "0.1.0"
