# Services package init
"""
RedSocial Backend — Services Layer
====================================

What:  Business logic between the routes (HTTP) and the models (persistence).
How:   Each service is a stateless class with a module-level singleton.
       Methods take the request's AsyncSession, raise typed exceptions from
       app.exceptions and return Pydantic response schemas.

Service Inventory:
    - UserService:        registration, login, lookups, profile edits
    - FollowService:      follow / unfollow, followers and following lists
    - PublicationService: publications and feeds
    - CommentService:     comments on publications
    - AuthService:        token resolution and the /auth gate
    - permissions:        ensure_acting_user(), the ownership rule

Services never commit. The session dependency (app.database.get_db_session)
commits once the route returns and rolls back if anything raised.
"""
