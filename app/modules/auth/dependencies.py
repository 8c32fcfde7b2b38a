# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/dependencies.py

Dependencias de autenticación JWT para FastAPI.

Provee:
- validate_jwt_token: valida un token y extrae el user_id (claim 'sub')
- get_current_user_id: dependencia con oauth2_scheme
- get_current_user: carga el AppUser (401 si no existe)
- require_admin: exige rol admin (403)

Autor: ClubFit
Fecha: 2026-02-11
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database import get_async_session
from .models import AppUser
from .security import oauth2_scheme, decode_access_token, TokenDecodeError

logger = logging.getLogger(__name__)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": "invalid_token", "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def validate_jwt_token(token: str) -> uuid.UUID:
    """
    Valida un JWT y extrae el user_id.

    Raises:
        HTTPException 401: token inválido, expirado o con 'sub' no UUID.
    """
    try:
        payload = decode_access_token(token)
    except TokenDecodeError as e:
        raise _unauthorized(str(e)) from e

    try:
        return uuid.UUID(str(payload["sub"]))
    except ValueError as e:
        raise _unauthorized("Token does not contain a valid user identifier") from e


async def get_current_user_id(
    token: str = Depends(oauth2_scheme),
) -> uuid.UUID:
    """Dependencia de autenticación para endpoints protegidos."""
    return validate_jwt_token(token)


async def get_current_user(
    user_id: uuid.UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_async_session),
) -> AppUser:
    """Devuelve el AppUser del token; 401 si el usuario ya no existe."""
    user = await session.get(AppUser, user_id)
    if user is None:
        logger.warning("Token válido para usuario inexistente: %s", user_id)
        raise _unauthorized("User not found")
    return user


async def require_admin(
    user: AppUser = Depends(get_current_user),
) -> AppUser:
    """
    Dependencia que requiere rol admin.

    Raises:
        HTTPException 403: Usuario no es admin
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "forbidden", "message": "Admin access required"},
        )
    return user


__all__ = [
    "validate_jwt_token",
    "get_current_user_id",
    "get_current_user",
    "require_admin",
]
