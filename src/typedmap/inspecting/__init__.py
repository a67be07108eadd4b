"""
Type inspection utilities.
"""
