# -*- coding: utf-8 -*-
"""
backend/app/__init__.py

Paquete principal del backend ClubFit.
"""
