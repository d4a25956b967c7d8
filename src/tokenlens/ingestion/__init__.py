"""Ingestion package for tokenlens.

Helpers that shape already-fetched wallet data into balance records before
classification. Nothing here performs I/O.
"""
