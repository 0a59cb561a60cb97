"""
Application entry point.

Creates the FastAPI application and wires together, outermost first:
- Trace id (when enabled)
- Panic recovery
- Bad-status resolution (deferred status writer)
- Global middleware chain (body limit first, then configured middlewares)
- Engine error handlers
- Route groups

No business logic belongs here.
"""

from fastapi import FastAPI

from webstarter.core.config import StarterConfig
from webstarter.interfaces.routing import register_routers
from webstarter.shared.errors.handlers import register_error_handlers
from webstarter.shared.logging import configure_logging
from webstarter.shared.middleware.chain import GlobalMiddlewareChain
from webstarter.shared.middleware.recovery import RecoveryMiddleware
from webstarter.shared.middleware.status import BadHttpCodeMiddleware
from webstarter.shared.middleware.trace import TraceIdMiddleware
from webstarter.shared.security.limits import body_limit_middleware


def create_app(config: StarterConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the composition root: ``config`` is read here once and
    handed to each component.

    Args:
        config: The application configuration; defaults are used if omitted.

    Returns:
        A fully configured FastAPI application instance.
    """
    config = config or StarterConfig()
    settings = config.settings
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        debug=settings.debug,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.starter_config = config

    if config.init_func is not None:
        config.init_func(app)

    # --- Engine Error Handlers ---
    register_error_handlers(app)

    # --- Middleware (added innermost first) ---
    global_middlewares = list(config.global_middlewares)
    if settings.max_request_size_bytes > 0:
        global_middlewares.insert(0, body_limit_middleware(settings.max_request_size_bytes))
    app.add_middleware(
        GlobalMiddlewareChain,
        middlewares=global_middlewares,
        decoder=config.decoder,
        forwarded_by_client_ip=not settings.disable_forwarded_by_client_ip,
    )
    if not settings.disable_bad_http_code_resolver:
        app.add_middleware(BadHttpCodeMiddleware, config=config)
    app.add_middleware(RecoveryMiddleware, config=config)
    if settings.enable_trace_id_response:
        app.add_middleware(TraceIdMiddleware)

    # --- Routers ---
    register_routers(app, config)

    return app
