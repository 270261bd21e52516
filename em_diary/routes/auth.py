from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from em_diary.auth import (
    AuthSession,
    authenticate_manager,
    get_auth_session,
    is_signed_in,
    set_session_cookie,
)
from em_diary.template_config import templates
from em_diary.utils.safe_redirect import safe_redirect_url

router = APIRouter(tags=["auth"])


@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    next: str = "/",
    error: str = None,
    session: AuthSession = Depends(get_auth_session),
):
    """Display sign-in page."""
    next_url = safe_redirect_url(next)

    # Already signed in (or demo mode)
    if is_signed_in(request):
        return RedirectResponse(url=next_url, status_code=303)

    return templates.TemplateResponse(request, "auth/login.html", {
        "session": session,
        "next": next_url,
        "error": error,
    })


@router.post("/login")
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form("/"),
    session: AuthSession = Depends(get_auth_session),
):
    """Process sign-in form."""
    next_url = safe_redirect_url(next)
    if is_signed_in(request):
        return RedirectResponse(url=next_url, status_code=303)

    manager = authenticate_manager(email, password)
    if not manager:
        return templates.TemplateResponse(request, "auth/login.html", {
            "session": session,
            "next": next_url,
            "error": "Invalid email or password",
        }, status_code=401)

    response = RedirectResponse(url=next_url, status_code=303)
    set_session_cookie(response, manager.email)
    return response


@router.get("/logout")
async def logout(
    request: Request, session: AuthSession = Depends(get_auth_session)
):
    """Sign out and return to the sign-in page."""
    response = RedirectResponse(url="/login", status_code=303)
    return session.sign_out(response)
