"""HTTP layer: FastAPI application, middleware, schemas and routes."""
