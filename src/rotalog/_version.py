"""
Version module read by hatchling during builds.

Bump together with the changelog when tagging a release.
"""

__version__ = "0.1.0"
