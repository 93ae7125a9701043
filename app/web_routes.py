from fastapi import Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from Security.input_validation import sanitize_text_field, validate_allowlist
from .app_context import templates, get_redirect_errors

EMAIL_PATTERN = r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"
SUBSCRIBE_URL = "/subscribe"


def register_web_routes(app, subscribers: set[str] | None = None):
    subscribers = subscribers if subscribers is not None else set()

    @app.get("/subscribe", response_class=HTMLResponse)
    async def subscribe_page(request: Request):
        return templates.TemplateResponse(
            request,
            "subscribe.html",
            {"subscribed": request.query_params.get("subscribed") == "1"},
        )

    @app.post("/subscribe")
    async def subscribe_submit(request: Request, email: str = Form("")):
        redirect_errors = get_redirect_errors(request)
        email = sanitize_text_field(email).lower()
        if not email:
            return RedirectResponse(redirect_errors.add_error(SUBSCRIBE_URL, "missing-email"), status_code=303)
        if not validate_allowlist(email, EMAIL_PATTERN):
            return RedirectResponse(redirect_errors.add_error(SUBSCRIBE_URL, "invalid-email"), status_code=303)
        if email in subscribers:
            return RedirectResponse(redirect_errors.add_error(SUBSCRIBE_URL, "already-subscribed"), status_code=303)

        subscribers.add(email)
        return RedirectResponse(f"{SUBSCRIBE_URL}?subscribed=1", status_code=303)

    @app.get("/subscribe/error")
    async def subscribe_error(request: Request, code: str | None = None):
        """JSON view of the redirected error, for clients that render it themselves."""
        redirect_errors = get_redirect_errors(request)
        return {
            "html": redirect_errors.show_error(code, echo=False),
            "canonical_url": redirect_errors.remove_error(str(request.url)),
        }
