# -*- coding: utf-8 -*-
"""
backend/app/modules/market/__init__.py

Market de productos digitales por creador. Reutiliza los adaptadores de
pasarela del módulo de suscripciones con credenciales del creador.
"""
