"""
licensekeeper - license key lifecycle management for a hosted plugin.
"""

__version__ = "1.0.0"
