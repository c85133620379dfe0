"""Storage layer for local history.

This module persists immutable snapshot files and per-resource indexes.
It powers history capture, listing and retention for the service layer.
"""
