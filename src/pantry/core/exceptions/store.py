"""
Record Store Exceptions

Errors raised by record store adapters when the backing store query fails.
"""

from pantry.core.exceptions.base import PantryError


class RecordStoreError(PantryError):
    """
    Raised when the backing record store cannot answer a query.

    The SQLAlchemy store wraps SQLAlchemyError in this exception, keeping the
    original error name and message in details.
    """
    pass
