"""
Murmur Backend — Registration and Login Routes
================================================

What:  POST /api/register and POST /api/login.
How:   Parse the JSON body, delegate to IdentityService, return its result.
       Failures are raised as MurmurError subclasses and rendered by the
       global exception handlers.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from murmur.dependencies import get_identity_service
from murmur.schemas.auth import CredentialsRequest, TokenResponse, UserResponse
from murmur.schemas.common import ErrorResponse
from murmur.services.identity_service import IdentityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Identity"])


@router.post(
    "/register",
    status_code=201,
    response_model=UserResponse,
    responses={
        201: {"description": "User created", "model": UserResponse},
        400: {"description": "Missing username or password", "model": ErrorResponse},
        409: {"description": "Username already exists", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    payload: Optional[CredentialsRequest] = None,
    service: IdentityService = Depends(get_identity_service),
) -> UserResponse:
    payload = payload or CredentialsRequest()
    return await service.register(payload.username, payload.password)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={
        200: {"description": "Signed access token", "model": TokenResponse},
        400: {"description": "Missing username or password", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Exchange credentials for a one-hour bearer token",
)
async def login(
    payload: Optional[CredentialsRequest] = None,
    service: IdentityService = Depends(get_identity_service),
) -> TokenResponse:
    payload = payload or CredentialsRequest()
    return await service.login(payload.username, payload.password)
