"""
Schemas module - Request/Response schemas for API endpoints.

Services work on plain camelCase dicts; schemas are the API contract
(what clients send and receive).
"""
