"""
API v1 routes.

Defines REST endpoints for the name registration API. Every mutating
endpoint runs one checkpointed batch while holding the batch lock.

Routes are plain functions: the daemon calls block, so FastAPI runs
them in its threadpool.
"""

import threading
from contextlib import nullcontext

from fastapi import APIRouter, Depends, HTTPException, status

from namereg.adapters.rpc.namecoin import NamecoinRpc
from namereg.api.dependencies import (
    get_batch_lock,
    get_registration_service,
    get_rpc,
    require_api_credentials,
)
from namereg.api.models import (
    AdvanceRequest,
    AdvanceResponse,
    BatchRegisterRequest,
    BatchRegisterResponse,
    CleanupResponse,
    ErrorResponse,
    RegisterRequest,
    RegistrationListResponse,
    RegistrationResponse,
    RegistrationStatus,
)
from namereg.domain.exceptions import (
    BatchError,
    NameAlreadyReserved,
    RecordFormatError,
    RpcError,
    WalletLocked,
    WalletPassphraseIncorrect,
)
from namereg.domain.service import RegistrationService

router = APIRouter(tags=["v1"], dependencies=[Depends(require_api_credentials)])

_RPC_ERRORS = {
    423: {"model": ErrorResponse, "description": "Wallet is locked"},
    403: {"model": ErrorResponse, "description": "Wallet passphrase rejected"},
    502: {"model": ErrorResponse, "description": "Naming service call failed"},
}


def _to_http(exc: Exception) -> HTTPException:
    """Translate a domain error into the matching HTTP error."""
    if isinstance(exc, NameAlreadyReserved):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, WalletLocked):
        return HTTPException(status_code=status.HTTP_423_LOCKED, detail=str(exc))
    if isinstance(exc, WalletPassphraseIncorrect):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, RecordFormatError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Stored registrations are unreadable: {exc}",
        )
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


def _batch_failure(exc: BatchError, **outcome: object) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail={
            "message": str(exc),
            "failures": [{"name": name, "error": str(err)} for name, err in exc.failures],
            **outcome,
        },
    )


def _wallet(rpc: NamecoinRpc, passphrase: str | None):
    return rpc.unlocked_wallet(passphrase) if passphrase else nullcontext()


@router.get(
    "/registrations",
    response_model=RegistrationListResponse,
    responses={502: _RPC_ERRORS[502]},
    summary="List tracked registrations",
)
def list_registrations(
    service: RegistrationService = Depends(get_registration_service),
    lock: threading.Lock = Depends(get_batch_lock),
) -> RegistrationListResponse:
    """
    Show every tracked registration with its state.

    Reserved names report whether they can be finalized yet, finalized
    names whether the reveal transaction has confirmed.
    """
    try:
        with lock:
            entries = service.status()
    except (RpcError, RecordFormatError) as e:
        raise _to_http(e) from e
    return RegistrationListResponse(
        registrations=[
            RegistrationStatus(
                name=entry.name,
                state=entry.state,
                can_finalize=entry.can_finalize,
                settled=entry.settled,
            )
            for entry in entries
        ]
    )


@router.post(
    "/registrations",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Name already reserved"},
        422: {"description": "Validation error"},
        **_RPC_ERRORS,
    },
    summary="Start registering a name",
    description="Issue name_new for the name and remember the value to publish "
    "once the commitment has enough confirmations.",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
    rpc: NamecoinRpc = Depends(get_rpc),
    lock: threading.Lock = Depends(get_batch_lock),
) -> RegistrationResponse:
    """
    Start registration of one name.

    - **name**: Name to claim
    - **value**: Value published by the later name_firstupdate
    - **passphrase**: Optional wallet passphrase
    """
    try:
        with lock, _wallet(rpc, request_data.passphrase):
            started = service.register(request_data.name, request_data.value)
    except (RpcError, NameAlreadyReserved, RecordFormatError) as e:
        raise _to_http(e) from e
    return RegistrationResponse(name=started.name, state=started.state)


@router.post(
    "/registrations/batch",
    response_model=BatchRegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse, "description": "Name already reserved"},
        422: {"description": "Validation error"},
        **_RPC_ERRORS,
    },
    summary="Start registering several names",
    description="Registers the names in order with the same value and stops at "
    "the first failure. Names started before the failure stay tracked.",
)
def register_batch(
    request_data: BatchRegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
    rpc: NamecoinRpc = Depends(get_rpc),
    lock: threading.Lock = Depends(get_batch_lock),
) -> BatchRegisterResponse:
    try:
        with lock, _wallet(rpc, request_data.passphrase):
            started = service.register_many(request_data.names, request_data.value)
    except (RpcError, NameAlreadyReserved, RecordFormatError) as e:
        raise _to_http(e) from e
    return BatchRegisterResponse(
        registrations=[RegistrationResponse(name=s.name, state=s.state) for s in started]
    )


@router.post(
    "/registrations/advance",
    response_model=AdvanceResponse,
    responses={
        502: {"description": "Some registrations failed; body lists partial progress"},
    },
    summary="Finalize ready registrations",
    description="Issue name_firstupdate for every reserved name whose commitment "
    "has at least 12 confirmations.",
)
def advance(
    request_data: AdvanceRequest | None = None,
    service: RegistrationService = Depends(get_registration_service),
    rpc: NamecoinRpc = Depends(get_rpc),
    lock: threading.Lock = Depends(get_batch_lock),
) -> AdvanceResponse:
    request_data = request_data or AdvanceRequest()
    try:
        with lock, _wallet(rpc, request_data.passphrase):
            finalized = service.advance(fail_fast=request_data.fail_fast)
    except BatchError as e:
        raise _batch_failure(e, finalized=[p.name for p in e.finalized]) from e
    except (RpcError, RecordFormatError) as e:
        raise _to_http(e) from e
    return AdvanceResponse(finalized=finalized)


@router.post(
    "/registrations/cleanup",
    response_model=CleanupResponse,
    responses={
        502: {"description": "Some checks failed; body lists partial progress"},
    },
    summary="Forget settled registrations",
)
def clean_up(
    service: RegistrationService = Depends(get_registration_service),
    lock: threading.Lock = Depends(get_batch_lock),
) -> CleanupResponse:
    """Drop finalized registrations whose reveal transaction confirmed."""
    try:
        with lock:
            removed = service.clean_up()
    except BatchError as e:
        raise _batch_failure(e, removed=e.removed) from e
    except (RpcError, RecordFormatError) as e:
        raise _to_http(e) from e
    return CleanupResponse(removed=removed)
