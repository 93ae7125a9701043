from fastapi import FastAPI

from Security.activity_logging import ActivityLoggingMiddleware
from Security.nonce import NonceSigner
from Security.redirect_errors import RedirectWithError
from Security.request_context import RequestContextMiddleware
from Security.xss_protection import XSSProtectionMiddleware

from .app_context import build_redirect_errors
from .error_handlers import register_error_handlers
from .web_routes import register_web_routes


def create_app(
    redirect_errors: RedirectWithError | None = None,
    signer: NonceSigner | None = None,
) -> FastAPI:
    app = FastAPI(title="Redirect with error")
    app.state.redirect_errors = redirect_errors or build_redirect_errors(signer)

    # Starlette runs the last added middleware first
    app.add_middleware(XSSProtectionMiddleware)
    app.add_middleware(ActivityLoggingMiddleware)
    app.add_middleware(RequestContextMiddleware)

    register_web_routes(app)
    register_error_handlers(app)
    return app
