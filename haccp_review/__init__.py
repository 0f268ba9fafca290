"""
HACCP review lifecycle and notification dispatch engine.
"""

__version__ = "0.1.0"
