"""
Structa Bootstrap — Integrity Errors
======================================
If a seeded dataset breaks a store invariant, the store must not
start serving queries from it.
"""


class StoreIntegrityError(Exception):
    """
    Raised when a store invariant is violated by a dataset.

    The message names the invariant and the offending record,
    so a broken seed can be fixed at its source.
    """

    def __init__(self, invariant: str, detail: str):
        self.invariant = invariant
        self.detail = detail
        super().__init__(
            f"STRUCTA INTEGRITY FAILURE — {invariant}: {detail}"
        )
