"""
HTTP gateway.

- endpoints.py: the Endpoint interface and MCP transport endpoints
- gate.py: dual-mode (machine key / delegated OAuth) dispatch gate
- router.py: top-level router and ASGI application assembly
"""
