"""
repotidy - reversible repository tree reorganization
"""

__version__ = "0.1.0"
