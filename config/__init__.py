"""
Configuration package for Whispers.
"""
