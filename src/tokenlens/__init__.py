"""tokenlens: normalization and classification of blockchain token metadata.

This package turns loosely structured token metadata (several community
standards, free-text descriptions and malformed input) and wallet balance
records into one consistent representation for display, search and filtering.
"""
