# Routes package init
"""
RedSocial Backend — API Routes Package
========================================

Route Inventory:
    - users.py:        /api/register, /api/login, /api/me, /api/user/all,
                       /api/profile/{username}, /api/user/{id},
                       /api/{id}/edit/details
    - follows.py:      /api/user/{followerId}/follow|unfollow/{followedId},
                       /api/user/{id}/followers, /api/user/{id}/following
    - publications.py: /api/publication[/{id}], /api/user/{id}/publications,
                       /api/user/{id}/feed, /api/user/{id}/publication[/{pubId}]
    - comments.py:     /api/publication/{id}/comments[/user/{userId}]
    - auth.py:         /auth/register, /auth/login (API gate secret)
    - health.py:       /health

Routes are thin: extract path/body, resolve the caller, call one service
method, return its schema. Ownership and existence rules live in services.
"""
