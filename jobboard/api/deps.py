"""
Shared dependencies for API routes.

The store and identity provider are process-wide handles built in the app
lifespan and kept on ``app.state``.
"""
from fastapi import Request

from jobboard.services.identity import IdentityProvider
from jobboard.services.store import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity
