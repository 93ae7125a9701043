from __future__ import annotations

from pathlib import Path

from fastapi.templating import Jinja2Templates
from jinja2 import pass_context
from markupsafe import Markup

from Security.nonce import NonceSigner
from Security.redirect_errors import RedirectWithError

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))

SUBSCRIBE_ERRORS = {
    "missing-email": "Please enter your <strong>email address</strong>.",
    "invalid-email": "<b>Bad</b> email, please check it and try again.",
    "already-subscribed": "This email is already subscribed.",
}


def build_redirect_errors(signer: NonceSigner | None = None) -> RedirectWithError:
    redirect_errors = RedirectWithError.from_settings(signer)
    redirect_errors.register_errors(SUBSCRIBE_ERRORS)
    return redirect_errors


def get_redirect_errors(request) -> RedirectWithError:
    return request.app.state.redirect_errors


@pass_context
def show_redirect_error(context, code: str | None = None) -> Markup:
    """Jinja global: render the redirected error for the page being served."""
    request = context["request"]
    html = get_redirect_errors(request).show_error(code, echo=False)
    # show_error output is already escaped and kses-filtered
    return Markup(html or "")


templates.env.globals["show_redirect_error"] = show_redirect_error
