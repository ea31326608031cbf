"""State/store layer.

This package holds the dashboard view-model: the single owned object
that channel updates from the feed are applied to and that renderers
read snapshots from.
"""
