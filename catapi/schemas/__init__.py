# Schemas package init
"""
Cat API — Pydantic Schemas
============================

    - cat.py:     GeoJSON point, owner reference, cat payloads
    - user.py:    public user projection, sign-up/update/login bodies
    - common.py:  error and health payloads
"""
