# Routes package init
"""
TimeRelay Backend — API Routes Package
========================================

What:  HTTP route handlers that accept requests and return responses.
How:   Each route module handles one resource and delegates to a service.

Route Inventory:
    - health.py:        GET  /                     (liveness text)
                        GET  /health               (JSON status)
    - clients.py:       GET  /api/clients
    - demands.py:       GET  /api/demands
                        POST /api/demands
    - time_entries.py:  POST /api/time-entries
    - reports.py:       POST /api/generate-report

Design Principle:
    Routes are THIN. Remote failures are raised by the services and turned
    into `{"error": …}` 500 responses by the global handler in main.py.
"""
