# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/utils/pdf_receipt_generator.py

Generador de recibos PDF para pagos de suscripción confirmados.

Utiliza ReportLab (Helvetica embebida en el estándar PDF). El recibo se
adjunta al correo de bienvenida; si la generación falla, el llamador lo
registra y continúa sin adjunto.

Autor: ClubFit
Fecha: 2026-02-13
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from io import BytesIO
from typing import Optional

from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.modules.subscriptions.utils.amounts import quantize_for_currency


@dataclass
class ReceiptData:
    """Datos necesarios para generar un recibo PDF."""

    payment_id: str
    subscription_id: str
    customer_name: str
    customer_email: str
    plan_name: str
    amount: Decimal
    currency: str
    provider: str
    transaction_id: str
    paid_at: datetime
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None


def _format_amount(amount: Decimal, currency: str) -> str:
    value = quantize_for_currency(amount, currency)
    return f"${value:,} {currency.upper()}"


def _fmt_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else "N/A"


def generate_subscription_receipt_pdf(data: ReceiptData) -> bytes:
    """
    Genera el PDF del recibo.

    Returns:
        bytes del PDF generado
    """
    paid_str = data.paid_at.strftime("%Y-%m-%d %H:%M:%S UTC")
    generated_str = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    hash_input = f"{data.payment_id}:{data.transaction_id}:{data.amount}:{paid_str}"
    doc_hash = hashlib.sha256(hash_input.encode()).hexdigest()[:16].upper()

    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=letter)
    width, height = letter

    font_name = "Helvetica"
    y = height - 50
    line_height = 16
    left_margin = 50

    def draw_line(text: str, size: int = 11):
        nonlocal y
        c.setFont(font_name, size)
        c.drawString(left_margin, y, text)
        y -= line_height

    def draw_section(title: str):
        nonlocal y
        c.setStrokeColorRGB(0.7, 0.7, 0.7)
        c.line(left_margin, y + 5, width - left_margin, y + 5)
        y -= line_height
        c.setFont(font_name, 12)
        c.drawString(left_margin, y, title)
        y -= line_height + 4

    # === ENCABEZADO ===
    c.setFont(font_name, 16)
    c.drawString(left_margin, y, "Recibo de suscripción")
    y -= 24
    c.setFont(font_name, 10)
    c.setFillColorRGB(0.4, 0.4, 0.4)
    c.drawString(left_margin, y, "Documento generado electrónicamente")
    y -= line_height * 2
    c.setFillColorRGB(0, 0, 0)
    draw_line(f"Fecha de emisión: {generated_str}")
    y -= line_height

    # === CLIENTE ===
    draw_section("DATOS DEL CLIENTE")
    draw_line(f"Nombre: {data.customer_name}")
    draw_line(f"Email: {data.customer_email}")
    y -= line_height

    # === TRANSACCIÓN ===
    draw_section("DETALLES DEL PAGO")
    draw_line(f"Plan: {data.plan_name}")
    draw_line(f"Período: {_fmt_date(data.period_start)} a {_fmt_date(data.period_end)}")
    draw_line(f"Fecha de pago: {paid_str}")
    draw_line(f"Medio de pago: {data.provider.upper()}")
    draw_line(f"Transacción: {data.transaction_id[:60]}")
    draw_line(f"Importe pagado: {_format_amount(data.amount, data.currency)}")
    y -= line_height

    # === AVISO ===
    draw_section("AVISO LEGAL")
    c.setFont(font_name, 9)
    c.setFillColorRGB(0.3, 0.3, 0.3)
    c.drawString(left_margin, y, "Este recibo no constituye una boleta ni factura electrónica.")
    y -= line_height * 2
    c.setFillColorRGB(0, 0, 0)
    draw_line(f"Suscripción: {data.subscription_id}", size=9)
    draw_line(f"Hash de verificación: {doc_hash}", size=9)

    c.showPage()
    c.save()

    pdf_bytes = buffer.getvalue()
    buffer.close()
    return pdf_bytes


__all__ = ["ReceiptData", "generate_subscription_receipt_pdf"]

# Fin del archivo backend/app/modules/subscriptions/utils/pdf_receipt_generator.py
