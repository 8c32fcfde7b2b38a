# -*- coding: utf-8 -*-
"""
backend/app/shared/integrations/email_sender.py

Factory unificado para EmailSender.
Soporta dos modos:
- console: stub que solo loguea (desarrollo/tests)
- api: envío via API (MailerSend)

El envío de correos es un efecto secundario best-effort: los llamadores
capturan y registran cualquier excepción (ver side_effects.py).

Autor: ClubFit
Fecha: 2026-02-12
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from app.shared.config.settings_base import BaseAppSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/pdf"


class IEmailSender(Protocol):
    """Protocolo para implementaciones de email sender."""

    async def send_welcome_email(
        self,
        to_email: str,
        full_name: str,
        plan_name: str,
        attachments: Optional[Sequence[EmailAttachment]] = None,
    ) -> None: ...


class StubEmailSender:
    """Implementación que no envía correos; solo hace logging (modo console)."""

    def __init__(self) -> None:
        self.sent: List[dict] = []

    async def send_welcome_email(
        self,
        to_email: str,
        full_name: str,
        plan_name: str,
        attachments: Optional[Sequence[EmailAttachment]] = None,
    ) -> None:
        names = [a.filename for a in attachments or []]
        self.sent.append({"to": to_email, "plan": plan_name, "attachments": names})
        logger.info("[CONSOLE EMAIL] Bienvenida -> %s | plan=%s | adjuntos=%s", to_email, plan_name, names)


class EmailSender:
    """
    Factory de email sender.

    Variables de entorno (via settings):
    - email_mode: console | api
    - email_provider: mailersend (usado cuando email_mode=api)
    """

    @staticmethod
    def from_settings(settings: BaseAppSettings) -> IEmailSender:
        """
        Raises:
            ValueError: si email_mode=api pero faltan credenciales o el proveedor no existe
        """
        mode = (settings.email_mode or "console").strip().lower()
        provider = (settings.email_provider or "").strip().lower()

        logger.info("[EmailSender] mode=%r provider=%r", mode, provider)

        if mode == "api":
            if provider in ("mailersend", ""):
                from app.shared.integrations.mailersend_email_sender import MailerSendEmailSender

                return MailerSendEmailSender.from_settings(settings)
            raise ValueError(
                f"EMAIL_PROVIDER '{provider}' no soportado. "
                f"Configure EMAIL_PROVIDER=mailersend o cambie EMAIL_MODE."
            )

        return StubEmailSender()


def get_email_sender() -> IEmailSender:
    """Sender según la configuración global."""
    from app.shared.config import get_settings

    return EmailSender.from_settings(get_settings())


__all__ = [
    "EmailAttachment",
    "IEmailSender",
    "StubEmailSender",
    "EmailSender",
    "get_email_sender",
]

# Fin del archivo backend/app/shared/integrations/email_sender.py
