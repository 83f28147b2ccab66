"""
Delegate pool gateway service.

The gateway fronts the delegate's reward-sharing pool, enforcing:
- Service mode: public read traffic is rejected while the pool is suspended
- Local control: service mode can only be toggled from the server host
- CORS: uniform cross-origin headers for browser dashboards

Structure:
- app.main: GatewayService, application factory and process entry point.
- app.routing: Route groups and the guard attached to each.
- app.domain: Service mode state, access guards and CORS policy.
- app.handlers: Handler contract and the default implementation.
- app.adapters: HTTP client for the blockchain node.
"""

__version__ = "0.3.1"
