# HTTP layer: FastAPI app factory, login and webhook routers.
# Created: 2026-10-12
