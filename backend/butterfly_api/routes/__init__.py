"""
Butterfly API — API Routes Package
====================================

Route Inventory:
    - health.py:       GET  /                    (liveness message)
                       GET  /health              (service health check)
    - butterflies.py:  GET  /butterflies/{id}    POST /butterflies
    - users.py:        GET  /users/{id}          POST /users
    - ratings.py:      GET  /ratings/{user_id}   PUT  /ratings

Routes stay thin: validate the body, call ButterflyService, turn an empty
lookup into a NotFoundError.
"""
