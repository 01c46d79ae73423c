"""
IPGOT - IP information lookup with synthetic threat analysis
"""

__version__ = "1.0.0"
