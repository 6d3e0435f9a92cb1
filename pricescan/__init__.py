"""
Competitive price intelligence crawler for the storefront catalog.
"""

__version__ = "1.0.0"
