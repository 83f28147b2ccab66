"""
Shared utilities for the delegate pool gateway.

This package aggregates common building blocks consumed by gateway services:

- config: Layered configuration (defaults, config files, environment)
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- retry / circuit_breaker: Resilient calls to the blockchain node
- server: Listener binding and uvicorn serving
- base_service: FastAPI application scaffolding

Do not import from service_* packages into shared/.
"""
