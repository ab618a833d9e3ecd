"""
Shared-secret authentication.
"""
