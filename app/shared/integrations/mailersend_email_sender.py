# -*- coding: utf-8 -*-
"""
backend/app/shared/integrations/mailersend_email_sender.py

Implementación de envío de correos usando MailerSend API.

Notas:
- MailerSend responde 202 Accepted cuando acepta el envío.
- Los adjuntos viajan en base64 (recibo PDF de la suscripción).

Autor: ClubFit
Fecha: 2026-02-12
"""

from __future__ import annotations

import base64
import html
import logging
from typing import TYPE_CHECKING, Optional, Sequence, Tuple

import httpx

from .email_sender import EmailAttachment

if TYPE_CHECKING:
    from app.shared.config.settings_base import BaseAppSettings

logger = logging.getLogger(__name__)

# MailerSend API endpoint
MAILERSEND_API_URL = "https://api.mailersend.com/v1/email"


class MailerSendEmailSender:
    """Envío de correos usando MailerSend API."""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: str = "ClubFit",
        timeout: int = 30,
        frontend_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("MAILERSEND_API_KEY es requerido")
        if not from_email:
            raise ValueError("MAILERSEND_FROM_EMAIL es requerido")

        self.api_key = api_key
        self.from_email = from_email
        self.from_name = from_name
        self.timeout = timeout
        self.frontend_url = (frontend_url or "").strip().rstrip("/") or None
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: BaseAppSettings) -> "MailerSendEmailSender":
        """
        Raises:
            ValueError: si faltan credenciales requeridas
        """
        api_key = ""
        if settings.mailersend_api_key:
            api_key = settings.mailersend_api_key.get_secret_value().strip()

        from_email = (settings.mailersend_from_email or "").strip()
        from_name = (settings.mailersend_from_name or "ClubFit").strip()

        if not api_key:
            raise ValueError("[MailerSend] MAILERSEND_API_KEY es requerido.")
        if not from_email:
            raise ValueError("[MailerSend] MAILERSEND_FROM_EMAIL es requerido.")

        logger.info("[MailerSend] config: from=%s (%s) timeout=%ss", from_email, from_name, settings.email_timeout_sec)

        return cls(
            api_key=api_key,
            from_email=from_email,
            from_name=from_name,
            timeout=settings.email_timeout_sec or 30,
            frontend_url=settings.frontend_url,
        )

    def _build_welcome_body(self, full_name: str, plan_name: str) -> Tuple[str, str]:
        """Cuerpo (html, texto) del correo de bienvenida."""
        user_name = full_name or "Miembro"
        text = (
            f"Hola {user_name},\n\n"
            f"Tu suscripción al plan {plan_name} está activa. "
            "Adjuntamos el comprobante de tu pago.\n"
        )
        if self.frontend_url:
            text += f"\nIngresa a tu cuenta: {self.frontend_url}\n"
        body = "<br>".join(html.escape(line) for line in text.splitlines())
        return f"<p>{body}</p>", text

    async def _send_email(
        self,
        to_email: str,
        subject: str,
        html_body: str,
        text_body: str,
        attachments: Optional[Sequence[EmailAttachment]] = None,
    ) -> str:
        """Envía email via MailerSend API. Retorna message_id."""
        payload = {
            "from": {"email": self.from_email, "name": self.from_name},
            "to": [{"email": to_email}],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }
        if attachments:
            payload["attachments"] = [
                {
                    "filename": a.filename,
                    "content": base64.b64encode(a.content).decode("ascii"),
                    "disposition": "attachment",
                }
                for a in attachments
            ]

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.info("[MailerSend] sending: to=%s subject=%s", to_email, subject)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(MAILERSEND_API_URL, json=payload, headers=headers)
            except httpx.TimeoutException as e:
                logger.error("[MailerSend] timeout: to=%s error=%s", to_email, e)
                raise RuntimeError(f"MailerSend timeout: {e}") from e
            except httpx.RequestError as e:
                logger.error("[MailerSend] request error: to=%s error=%s", to_email, e)
                raise RuntimeError(f"MailerSend request error: {e}") from e

        # MailerSend returns 202 Accepted on success
        if response.status_code == 202:
            message_id = response.headers.get("X-Message-Id", "accepted")
            logger.info("[MailerSend] sent ok: to=%s message_id=%s", to_email, message_id)
            return message_id

        error_body = response.text
        logger.error(
            "[MailerSend] send failed: to=%s status=%d body=%s",
            to_email,
            response.status_code,
            error_body[:500],
        )
        raise RuntimeError(f"MailerSend API error: {response.status_code} - {error_body[:200]}")

    async def send_welcome_email(
        self,
        to_email: str,
        full_name: str,
        plan_name: str,
        attachments: Optional[Sequence[EmailAttachment]] = None,
    ) -> None:
        """Envía el correo de bienvenida con el recibo adjunto."""
        html_body, text_body = self._build_welcome_body(full_name, plan_name)
        await self._send_email(
            to_email,
            f"Bienvenido a {self.from_name}: plan {plan_name}",
            html_body,
            text_body,
            attachments=attachments,
        )


__all__ = ["MailerSendEmailSender", "MAILERSEND_API_URL"]

# Fin del archivo backend/app/shared/integrations/mailersend_email_sender.py
