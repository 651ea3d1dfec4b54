"""
Domain-level helpers shared by infrastructure utilities.
"""
