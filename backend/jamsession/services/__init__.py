"""
Jam Session Backend — Services Layer
======================================

What:  Business logic between routes (HTTP) and the database.
How:   Stateless service singletons; every method receives the request's
       AsyncSession and returns Pydantic response models or raises an
       application exception.

Service Inventory:
    - UserService: profiles, availability, duplicate e-mail checks
    - JamService: jams, proximity search, joining, author-only deletion
"""
