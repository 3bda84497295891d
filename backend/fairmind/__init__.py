"""
FairMind - two-party dispute mediation backend
"""

__version__ = "1.0.0"
