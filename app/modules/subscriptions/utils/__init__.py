# -*- coding: utf-8 -*-
"""
backend/app/modules/subscriptions/utils/__init__.py
"""
