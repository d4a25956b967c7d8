"""Utility package for tokenlens.

Shared helpers that do not belong to a more specific domain like metadata
parsing, classification or querying.
"""
