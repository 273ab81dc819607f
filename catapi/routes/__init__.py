"""
Cat API — Routes Package
==========================

Route inventory:
    - cats.py:    /cats, /cats/area, /cats/user, /cats/{id}, /cats/admin/{id}
    - users.py:   /users, /users/token, /users/{id}, /users/current
    - auth.py:    POST /auth/login
    - files.py:   GET  /uploads/{filename}
    - health.py:  GET  /health

Routes stay thin: read the request, resolve the caller, call a service.
"""
