"""
Utilities: configuration management and error handling.
"""
