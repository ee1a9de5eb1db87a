"""HTTP layer: routers, authentication dependencies, and request helpers."""
