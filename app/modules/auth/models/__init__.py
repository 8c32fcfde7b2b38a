# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/models/__init__.py
"""

from .user_models import AppUser

__all__ = ["AppUser"]
