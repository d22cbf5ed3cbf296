"""Storage layer.

This module persists snapshots in a single JSON backing document.
It serves fetch and save requests for the object-graph framework.
"""
