"""
Animal Share API

A RESTful backend for sharing animal photos annotated with tags from a
fixed taxonomy, with tag-filtered feeds, favorites and personal zoning.
"""

__version__ = "1.0.0"
