from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from em_diary.auth import AuthSession, get_auth_session, require_auth
from em_diary.dependencies import get_note_state, get_summaries, get_team
from em_diary.models import TeamMemberCreate, TeamMemberUpdate
from em_diary.routes.common import raise_if_permission_denied
from em_diary.services.summary_service import NotesSummaryTracker
from em_diary.services.validators import validate_team_member
from em_diary.state import NoteState, StateError, TeamMemberState
from em_diary.template_config import templates

router = APIRouter(tags=["team"], dependencies=[Depends(require_auth)])

MEMBER_FIELDS = ("name", "role", "birthday", "hiring_date", "location")


def _member_form_context(session, member=None, form=None, error=None):
    return {
        "session": session,
        "member": member,
        "is_new": member is None,
        "form": form or {},
        "error": error,
    }


async def _get_member_or_404(team: TeamMemberState, member_id: str):
    member, error = await team.lookup(member_id)
    if member is None:
        status = 404 if error == "User not found" else 503
        raise HTTPException(status_code=status, detail=error)
    return member


@router.get("/", response_class=HTMLResponse)
async def list_members(
    request: Request,
    team: TeamMemberState = Depends(get_team),
    summaries: NotesSummaryTracker = Depends(get_summaries),
    session: AuthSession = Depends(get_auth_session),
):
    """Team roster with per-member note summaries."""
    # Render this request's fetch; the shared roster may be refetched meanwhile
    roster = await team.fetch_all()
    summary = {}
    if not roster.error:
        summary = await summaries.refresh([member.id for member in roster.items])

    return templates.TemplateResponse(
        request,
        "members/list.html",
        {
            "session": session,
            "roster": roster,
            "summary": summary,
        },
    )


@router.get("/members/new", response_class=HTMLResponse)
async def new_member_form(
    request: Request, session: AuthSession = Depends(get_auth_session)
):
    """Display add team member form."""
    return templates.TemplateResponse(
        request, "members/form.html", _member_form_context(session)
    )


@router.post("/members/new")
async def create_member(
    request: Request,
    name: str = Form(None),
    role: str = Form(None),
    birthday: str = Form(None),
    hiring_date: str = Form(None),
    location: str = Form(None),
    team: TeamMemberState = Depends(get_team),
    session: AuthSession = Depends(get_auth_session),
):
    """Create a team member, then go back to the roster."""
    form = dict(zip(MEMBER_FIELDS, (name, role, birthday, hiring_date, location)))

    result = validate_team_member(form)
    if not result.is_valid:
        return templates.TemplateResponse(
            request,
            "members/form.html",
            _member_form_context(session, form=form, error=result.message),
            status_code=400,
        )

    data = TeamMemberCreate(
        name=name.strip(),
        role=role.strip(),
        birthday=birthday.strip(),
        hiring_date=hiring_date.strip(),
        location=location.strip(),
    )
    try:
        await team.create(data)
    except StateError as e:
        raise_if_permission_denied(e, request)
        return templates.TemplateResponse(
            request,
            "members/form.html",
            _member_form_context(
                session, form=form,
                error="Failed to add team member. Please try again.",
            ),
            status_code=502,
        )

    return RedirectResponse(url="/", status_code=303)


@router.get("/members/{member_id}", response_class=HTMLResponse)
async def view_member(
    request: Request,
    member_id: str,
    team: TeamMemberState = Depends(get_team),
    notes: NoteState = Depends(get_note_state),
    session: AuthSession = Depends(get_auth_session),
):
    """Member details and their one-on-one notes."""
    member, error = await team.lookup(member_id)
    if member is None:
        return templates.TemplateResponse(
            request,
            "members/view.html",
            {"session": session, "member": None, "notes": notes, "error": error},
            status_code=404 if error == "User not found" else 503,
        )

    await notes.fetch_all()

    return templates.TemplateResponse(
        request,
        "members/view.html",
        {"session": session, "member": member, "notes": notes, "error": None},
    )


@router.get("/members/{member_id}/edit", response_class=HTMLResponse)
async def edit_member_form(
    request: Request,
    member_id: str,
    team: TeamMemberState = Depends(get_team),
    session: AuthSession = Depends(get_auth_session),
):
    """Display edit team member form."""
    member = await _get_member_or_404(team, member_id)
    form = {
        "name": member.name,
        "role": member.role,
        "birthday": member.birthday.isoformat(),
        "hiring_date": member.hiring_date.isoformat(),
        "location": member.location,
    }
    return templates.TemplateResponse(
        request, "members/form.html", _member_form_context(session, member, form)
    )


@router.post("/members/{member_id}/edit")
async def update_member(
    request: Request,
    member_id: str,
    name: str = Form(None),
    role: str = Form(None),
    birthday: str = Form(None),
    hiring_date: str = Form(None),
    location: str = Form(None),
    team: TeamMemberState = Depends(get_team),
    session: AuthSession = Depends(get_auth_session),
):
    """Replace the member's five editable fields."""
    member = await _get_member_or_404(team, member_id)
    form = dict(zip(MEMBER_FIELDS, (name, role, birthday, hiring_date, location)))

    result = validate_team_member(form)
    if not result.is_valid:
        return templates.TemplateResponse(
            request,
            "members/form.html",
            _member_form_context(session, member, form, error=result.message),
            status_code=400,
        )

    changes = TeamMemberUpdate(
        name=name.strip(),
        role=role.strip(),
        birthday=birthday.strip(),
        hiring_date=hiring_date.strip(),
        location=location.strip(),
    )
    try:
        await team.update(member_id, changes)
    except StateError as e:
        raise_if_permission_denied(e, request)
        return templates.TemplateResponse(
            request,
            "members/form.html",
            _member_form_context(
                session, member, form,
                error="Failed to update team member. Please try again.",
            ),
            status_code=502,
        )

    return RedirectResponse(url=f"/members/{member_id}", status_code=303)


@router.get("/members/{member_id}/delete", response_class=HTMLResponse)
async def confirm_delete_member(
    request: Request,
    member_id: str,
    team: TeamMemberState = Depends(get_team),
    session: AuthSession = Depends(get_auth_session),
):
    """Ask before deleting a member."""
    member = await _get_member_or_404(team, member_id)
    return templates.TemplateResponse(
        request,
        "confirm.html",
        _delete_member_context(session, member),
    )


def _delete_member_context(session, member, error=None):
    return {
        "session": session,
        "title": "Delete Team Member",
        "message": (
            f"Are you sure you want to delete {member.name}? "
            "Their one-on-one notes are kept."
        ),
        "action": f"/members/{member.id}/delete",
        "confirm_text": "Delete",
        "cancel_url": f"/members/{member.id}",
        "error": error,
    }


@router.post("/members/{member_id}/delete")
async def delete_member(
    request: Request,
    member_id: str,
    team: TeamMemberState = Depends(get_team),
    session: AuthSession = Depends(get_auth_session),
):
    """Delete a member. Their notes are left in place."""
    member = await _get_member_or_404(team, member_id)
    try:
        await team.delete(member_id)
    except StateError as e:
        raise_if_permission_denied(e, request)
        return templates.TemplateResponse(
            request,
            "confirm.html",
            _delete_member_context(
                session, member, error="Failed to delete team member. Please try again."
            ),
            status_code=502,
        )

    return RedirectResponse(url="/", status_code=303)
