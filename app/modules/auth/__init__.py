# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/__init__.py

Módulo auth: modelo AppUser y dependencias de verificación JWT.
"""
