# Routes package init
"""
IP Reverser: API Routes Package
=================================

Route Inventory:
    - ip.py:      GET /                (reverse and store the caller's IP)
                  GET /ips             (recent records, newest first)
    - health.py:  GET /health          (process liveness)
                  GET /health/store    (record store reachability)

Routes stay thin: they adapt the request, call ReversalService or the
record store, and choose the status code.
"""
