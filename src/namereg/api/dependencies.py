"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the domain
service and infrastructure adapters into routes.
"""

import secrets
import threading

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from namereg.adapters.rpc.namecoin import NamecoinRpc
from namereg.config.settings import Settings, get_settings
from namereg.domain.ports import CheckpointStore
from namereg.domain.service import RegistrationService


def get_rpc(request: Request) -> NamecoinRpc:
    """
    Get the daemon RPC adapter from app state.

    The adapter is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.rpc


def get_store(request: Request) -> CheckpointStore:
    """Get the checkpoint store from app state."""
    return request.app.state.store


def get_batch_lock(request: Request) -> threading.Lock:
    """
    Get the lock serializing checkpointed batches.

    Every batch loads, mutates and saves the whole checkpoint, so two
    batches must never interleave.
    """
    return request.app.state.batch_lock


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the RPC adapter and the checkpoint store.
    """
    return RegistrationService(rpc=get_rpc(request), store=get_store(request))


# HTTP BASIC AUTH security scheme; enforced only when a password is configured
http_basic = HTTPBasic(auto_error=False)


def require_api_credentials(
    credentials: HTTPBasicCredentials | None = Depends(http_basic),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Check HTTP BASIC AUTH credentials against the configured API user.

    Open access when no api_password is set. Both comparisons always run
    and use secrets.compare_digest for constant-time behavior.
    """
    if not settings.api_password:
        return

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials",
        headers={"WWW-Authenticate": "Basic"},
    )
    if credentials is None:
        raise unauthorized

    user_valid = secrets.compare_digest(
        credentials.username.encode(), settings.api_user.encode()
    )
    password_valid = secrets.compare_digest(
        credentials.password.encode(), settings.api_password.encode()
    )
    if not (user_valid and password_valid):
        raise unauthorized
