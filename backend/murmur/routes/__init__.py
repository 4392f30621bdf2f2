# Routes package init
"""
Murmur Backend — API Routes Package
=====================================

Route Inventory:
    - auth.py:    POST   /api/register, POST /api/login
    - posts.py:   POST   /api/posts                (Bearer)
    - follows.py: POST   /api/follow/{userid}      (Bearer)
                  DELETE /api/follow/{userid}      (Bearer)
    - feed.py:    GET    /api/feed?page&limit      (Bearer)
    - health.py:  GET    /, /api, /health

Routes stay thin: read the request, call a service, return its result.
"""
