"""
Faultline: centralized fault handling for FastAPI services.

Application package root. Every failed request, whatever raised the
fault, is answered with one canonical JSON error shape.

Layers:
    - core: Configuration.
    - interfaces: FastAPI routers, Pydantic schemas.
    - shared: Cross-cutting concerns (errors, security, logging, uploads).
"""
