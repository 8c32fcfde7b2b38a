"""
backend/app/modules/subscriptions/__init__.py

Suscripciones: catálogo de planes, checkout por pasarela, reconciliación
de pagos y webhooks de Mercado Pago.
"""
