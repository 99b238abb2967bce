"""Image service: position-addressed media asset storage.

Assets are stored in slots keyed by ``(entityId, position)`` with a per-entity
metadata aggregate; each company additionally owns a single logo slot.
"""
