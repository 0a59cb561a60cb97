"""
Shared error handling package.

Centralizes the mapping of faults and engine statuses to responses so
that every failure reaches the client as the response envelope.
"""
