"""Pure ASGI middlewares and the middleware chain executor."""
