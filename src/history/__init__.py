"""Working copy history service.

This module captures snapshots of working copies through the content
store and notifies subscribers about committed history changes.
"""
