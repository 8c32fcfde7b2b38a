# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/services/__init__.py

Servicios del módulo Subscriptions. Se importan por ruta completa
(p.ej. app.modules.subscriptions.services.checkout_service) para evitar
ciclos entre reconciliación y webhooks.
"""
