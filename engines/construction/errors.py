"""
Structa Construction — Store Errors
=====================================
Referential errors surface as exceptions, consistently across
all five entity types. A failed mutation leaves every collection
untouched.
"""

from __future__ import annotations

from core.policy import RejectionReason


class StoreError(Exception):
    """Base error for aggregate store operations."""
    pass


class EntityNotFoundError(StoreError):
    """update_* / delete_* targeted an id that is not in the store."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} '{entity_id}' not found.")


class MutationRejectedError(StoreError):
    """A domain policy refused the mutation."""

    def __init__(self, rejection: RejectionReason):
        self.rejection = rejection
        super().__init__(rejection.describe())
