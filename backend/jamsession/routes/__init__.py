"""
Jam Session Backend — API Routes Package
==========================================

Route Inventory (all but /health need a bearer token):
    - users.py:   GET/POST /users, GET/PUT/DELETE /users/{id},
                  PUT /me/availability, DELETE /testusers
    - jams.py:    GET/POST /jams, GET/PUT/DELETE /jams/{id},
                  PUT /jams/{id}/join, DELETE /testjams
    - health.py:  GET /health

Routes stay thin: read the request, call the service, pick the status code.
"""
