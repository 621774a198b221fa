"""
Core routing components for waypath.
"""
