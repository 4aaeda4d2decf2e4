"""Database models"""
from jobboard.models.session import AnonymousSession
from jobboard.models.listing import Listing, ListingVariant

__all__ = [
    "AnonymousSession",
    "Listing",
    "ListingVariant",
]
