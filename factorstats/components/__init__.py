"""
System components for factorstats.

This module provides configuration handling for the analysis.
"""

from factorstats.components.config import Config, ConfigManager
