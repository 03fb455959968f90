"""
Utilities for factorstats.
"""
