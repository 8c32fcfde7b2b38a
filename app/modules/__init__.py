"""
backend/app/modules/__init__.py

Módulos de dominio: subscriptions, market y auth.
"""
