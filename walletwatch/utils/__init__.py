"""
Shared utilities: logging, signing and retry helpers.
"""
