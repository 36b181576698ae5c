"""
repo-pulse: GitHub repository analytics and scoring.
"""

__version__ = "0.1.0"
