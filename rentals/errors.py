"""Exception types raised by the rentals services."""

from __future__ import annotations


class RentalsError(Exception):
    """Base class for marketplace errors."""


class ListingStoreError(RentalsError):
    """The backing document store could not be reached or refused the request."""


class PropertyNotFoundError(RentalsError):
    def __init__(self, property_id: str) -> None:
        super().__init__(f"Property not found: {property_id}")
        self.property_id = property_id


class PermissionDeniedError(RentalsError):
    """An owner tried to modify a listing that belongs to someone else."""


class AuthError(RentalsError):
    """Identity provider rejected the credentials or the registration."""


__all__ = [
    "RentalsError",
    "ListingStoreError",
    "PropertyNotFoundError",
    "PermissionDeniedError",
    "AuthError",
]
