"""
System components for mlsims.

This module provides the configuration and HTTP server components.
"""

from mlsims.components.config import Config, ConfigManager
from mlsims.components.server import Server, ServerManager
