"""
API server package: HTTP interface for wallet inspection and sweeping.

Validates the inbound request, delegates to the sweep pipeline, and maps
pipeline errors to consistent JSON responses and HTTP status codes.
"""
