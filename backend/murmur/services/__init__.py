# Services package init
"""
Murmur Backend — Services Layer
=================================

What:  Business rules between routes (HTTP) and the database handle.

Service Inventory:
    - IdentityService: register (hash + unique username), login (verify + token)
    - TokenService:    sign and verify HS256 access tokens
    - PasswordHasher:  bcrypt via passlib, run in the threadpool
    - PostService:     create 1-200 character posts owned by the caller
    - FollowService:   create/remove directed follow edges
    - FeedService:     paginated posts by followees, newest first

Services receive the Database handle in their constructor and open one
session per operation. They raise MurmurError subclasses; they never build
HTTP responses.
"""
