"""
Matrix statistics for factorstats.

Submodules are imported directly; this package does not re-export them.
"""
