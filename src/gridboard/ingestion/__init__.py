"""Ingestion layer.

This package turns raw feed frames into typed messages (:mod:`.decode`)
and typed messages into channel updates for the state store
(:mod:`.project`).
"""

__all__: list[str] = []
