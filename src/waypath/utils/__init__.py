"""
Utility helpers for waypath.
"""
