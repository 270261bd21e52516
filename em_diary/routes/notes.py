from itertools import zip_longest
from typing import List

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from em_diary.auth import AuthSession, get_auth_session, require_auth
from em_diary.dependencies import get_note_state, get_team
from em_diary.models import (
    ActionItem,
    Mood,
    OneOnOneNote,
    OneOnOneNoteCreate,
    OneOnOneNoteUpdate,
    TeamMember,
)
from em_diary.routes.common import parse_bool, parse_date, raise_if_permission_denied
from em_diary.services.validators import validate_note
from em_diary.state import NoteState, StateError, TeamMemberState
from em_diary.template_config import local_today, templates

router = APIRouter(
    prefix="/members/{member_id}/notes",
    tags=["notes"],
    dependencies=[Depends(require_auth)],
)

SAVE_FAILED = "Failed to save note. Please try again."


def _collect_action_items(
    descriptions: List[str], due_dates: List[str], done_flags: List[str]
) -> List[dict]:
    """Zip the repeated action item inputs into rows, dropping blank rows."""
    rows = []
    for description, due_date, done in zip_longest(
        descriptions, due_dates, done_flags, fillvalue=""
    ):
        description = (description or "").strip()
        due_date = (due_date or "").strip()
        if not description and not due_date:
            continue
        rows.append({"description": description, "due_date": due_date, "done": parse_bool(done)})
    return rows


def _note_form(
    date: str,
    talking_points: str,
    mood: str,
    flag: str,
    flag_description: str,
    action_items: List[dict],
) -> dict:
    is_flagged = parse_bool(flag)
    return {
        "date": (date or "").strip(),
        "talking_points": talking_points or "",
        "mood": mood or "",
        "flag": is_flagged,
        # The description only exists while the note is flagged
        "flag_description": (flag_description or "").strip() if is_flagged else "",
        "action_items": action_items,
    }


def _form_from_note(note: OneOnOneNote) -> dict:
    return {
        "date": note.date.isoformat(),
        "talking_points": note.talking_points,
        "mood": note.mood.value,
        "flag": note.flag,
        "flag_description": note.flag_description,
        "action_items": [
            {
                "description": item.description,
                "due_date": item.due_date.isoformat() if item.due_date else "",
                "done": item.done,
            }
            for item in note.action_items
        ],
    }


def _action_items_from_form(rows: List[dict]) -> List[ActionItem]:
    return [
        ActionItem(
            description=row["description"],
            done=row["done"],
            due_date=parse_date(row["due_date"]),
        )
        for row in rows
    ]


def _note_form_context(session, member, note=None, form=None, error=None):
    return {
        "session": session,
        "member": member,
        "note": note,
        "is_new": note is None,
        "form": form,
        "moods": list(Mood),
        "error": error,
    }


async def _get_member(team: TeamMemberState, member_id: str) -> TeamMember:
    member, error = await team.lookup(member_id)
    if member is None:
        raise HTTPException(
            status_code=404 if error == "User not found" else 503, detail=error
        )
    return member


async def _get_note(notes: NoteState, note_id: str) -> OneOnOneNote:
    await notes.fetch_all()
    if notes.error:
        raise HTTPException(status_code=503, detail=notes.error)
    note = notes.get(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found")
    return note


# -----------------------------
# Create / edit
# -----------------------------

@router.get("/new", response_class=HTMLResponse)
async def new_note_form(
    request: Request,
    member_id: str,
    team: TeamMemberState = Depends(get_team),
    session: AuthSession = Depends(get_auth_session),
):
    """Display new note form; date defaults to today, mood to Happy."""
    member = await _get_member(team, member_id)
    form = _note_form(local_today().isoformat(), "", Mood.HAPPY.value, "", "", [])
    return templates.TemplateResponse(
        request, "notes/form.html", _note_form_context(session, member, form=form)
    )


@router.post("/new")
async def create_note(
    request: Request,
    member_id: str,
    date: str = Form(None),
    talking_points: str = Form(None),
    mood: str = Form(None),
    flag: str = Form(None),
    flag_description: str = Form(None),
    action_item_description: List[str] = Form([]),
    action_item_due_date: List[str] = Form([]),
    action_item_done: List[str] = Form([]),
    team: TeamMemberState = Depends(get_team),
    notes: NoteState = Depends(get_note_state),
    session: AuthSession = Depends(get_auth_session),
):
    """Record a one-on-one for the member."""
    member = await _get_member(team, member_id)
    rows = _collect_action_items(action_item_description, action_item_due_date, action_item_done)
    form = _note_form(date, talking_points, mood, flag, flag_description, rows)

    result = validate_note(form)
    if not result.is_valid:
        return templates.TemplateResponse(
            request,
            "notes/form.html",
            _note_form_context(session, member, form=form, error=result.message),
            status_code=400,
        )

    data = OneOnOneNoteCreate(
        user_id=member_id,
        date=form["date"],
        talking_points=form["talking_points"],
        mood=Mood(form["mood"]),
        flag=form["flag"],
        flag_description=form["flag_description"],
        action_items=_action_items_from_form(rows),
    )
    try:
        await notes.create(data)
    except StateError as e:
        raise_if_permission_denied(e, request)
        return templates.TemplateResponse(
            request,
            "notes/form.html",
            _note_form_context(session, member, form=form, error=SAVE_FAILED),
            status_code=502,
        )

    return RedirectResponse(url=f"/members/{member_id}", status_code=303)


@router.get("/{note_id}/edit", response_class=HTMLResponse)
async def edit_note_form(
    request: Request,
    member_id: str,
    note_id: str,
    team: TeamMemberState = Depends(get_team),
    notes: NoteState = Depends(get_note_state),
    session: AuthSession = Depends(get_auth_session),
):
    """Display edit note form."""
    member = await _get_member(team, member_id)
    note = await _get_note(notes, note_id)
    return templates.TemplateResponse(
        request,
        "notes/form.html",
        _note_form_context(session, member, note, _form_from_note(note)),
    )


@router.post("/{note_id}/edit")
async def update_note(
    request: Request,
    member_id: str,
    note_id: str,
    date: str = Form(None),
    talking_points: str = Form(None),
    mood: str = Form(None),
    flag: str = Form(None),
    flag_description: str = Form(None),
    action_item_description: List[str] = Form([]),
    action_item_due_date: List[str] = Form([]),
    action_item_done: List[str] = Form([]),
    team: TeamMemberState = Depends(get_team),
    notes: NoteState = Depends(get_note_state),
    session: AuthSession = Depends(get_auth_session),
):
    """Save edits to a note; createdAt and the member link never change."""
    member = await _get_member(team, member_id)
    note = await _get_note(notes, note_id)
    rows = _collect_action_items(action_item_description, action_item_due_date, action_item_done)
    form = _note_form(date, talking_points, mood, flag, flag_description, rows)

    result = validate_note(form)
    if not result.is_valid:
        return templates.TemplateResponse(
            request,
            "notes/form.html",
            _note_form_context(session, member, note, form, error=result.message),
            status_code=400,
        )

    changes = OneOnOneNoteUpdate(
        date=form["date"],
        talking_points=form["talking_points"],
        mood=Mood(form["mood"]),
        flag=form["flag"],
        flag_description=form["flag_description"],
        action_items=_action_items_from_form(rows),
    )
    try:
        await notes.update(note_id, changes)
    except StateError as e:
        raise_if_permission_denied(e, request)
        return templates.TemplateResponse(
            request,
            "notes/form.html",
            _note_form_context(session, member, note, form, error=SAVE_FAILED),
            status_code=502,
        )

    return RedirectResponse(url=f"/members/{member_id}", status_code=303)


# -----------------------------
# Delete / resolve flag (confirmed)
# -----------------------------

def _delete_note_context(session, member, note, error=None):
    return {
        "session": session,
        "title": "Remove Note",
        "message": (
            f"Are you sure you want to remove the note from "
            f"{note.date.strftime('%B %d, %Y')}? This cannot be undone."
        ),
        "action": f"/members/{member.id}/notes/{note.id}/delete",
        "confirm_text": "Remove",
        "cancel_url": f"/members/{member.id}",
        "error": error,
    }


def _resolve_flag_context(session, member, note, error=None):
    return {
        "session": session,
        "title": "Resolve Flag",
        "message": (
            f'Are you sure you want to resolve the flag "{note.flag_description}"? '
            "This will remove the flag from the note."
        ),
        "action": f"/members/{member.id}/notes/{note.id}/resolve-flag",
        "confirm_text": "Confirm",
        "cancel_url": f"/members/{member.id}",
        "error": error,
    }


@router.get("/{note_id}/delete", response_class=HTMLResponse)
async def confirm_delete_note(
    request: Request,
    member_id: str,
    note_id: str,
    team: TeamMemberState = Depends(get_team),
    notes: NoteState = Depends(get_note_state),
    session: AuthSession = Depends(get_auth_session),
):
    member = await _get_member(team, member_id)
    note = await _get_note(notes, note_id)
    return templates.TemplateResponse(
        request, "confirm.html", _delete_note_context(session, member, note)
    )


@router.post("/{note_id}/delete")
async def delete_note(
    request: Request,
    member_id: str,
    note_id: str,
    team: TeamMemberState = Depends(get_team),
    notes: NoteState = Depends(get_note_state),
    session: AuthSession = Depends(get_auth_session),
):
    member = await _get_member(team, member_id)
    note = await _get_note(notes, note_id)
    try:
        await notes.delete(note_id)
    except StateError as e:
        raise_if_permission_denied(e, request)
        return templates.TemplateResponse(
            request,
            "confirm.html",
            _delete_note_context(
                session, member, note, error="Failed to remove note. Please try again."
            ),
            status_code=502,
        )

    return RedirectResponse(url=f"/members/{member_id}", status_code=303)


@router.get("/{note_id}/resolve-flag", response_class=HTMLResponse)
async def confirm_resolve_flag(
    request: Request,
    member_id: str,
    note_id: str,
    team: TeamMemberState = Depends(get_team),
    notes: NoteState = Depends(get_note_state),
    session: AuthSession = Depends(get_auth_session),
):
    member = await _get_member(team, member_id)
    note = await _get_note(notes, note_id)
    if not note.flag:
        return RedirectResponse(url=f"/members/{member_id}", status_code=303)
    return templates.TemplateResponse(
        request, "confirm.html", _resolve_flag_context(session, member, note)
    )


@router.post("/{note_id}/resolve-flag")
async def resolve_flag(
    request: Request,
    member_id: str,
    note_id: str,
    team: TeamMemberState = Depends(get_team),
    notes: NoteState = Depends(get_note_state),
    session: AuthSession = Depends(get_auth_session),
):
    """Clear the flag without opening the full edit form."""
    member = await _get_member(team, member_id)
    note = await _get_note(notes, note_id)
    try:
        await notes.resolve_flag(note_id)
    except StateError as e:
        raise_if_permission_denied(e, request)
        return templates.TemplateResponse(
            request,
            "confirm.html",
            _resolve_flag_context(
                session, member, note, error="Failed to resolve flag. Please try again."
            ),
            status_code=502,
        )

    return RedirectResponse(url=f"/members/{member_id}", status_code=303)


@router.post("/{note_id}/action-items/{index}")
async def toggle_action_item(
    request: Request,
    member_id: str,
    note_id: str,
    index: int,
    done: str = Form("true"),
    team: TeamMemberState = Depends(get_team),
    notes: NoteState = Depends(get_note_state),
    session: AuthSession = Depends(get_auth_session),
):
    """Mark one action item done or not done."""
    member = await _get_member(team, member_id)
    await _get_note(notes, note_id)
    try:
        await notes.set_action_item_done(note_id, index, parse_bool(done))
    except StateError as e:
        raise_if_permission_denied(e, request)
        return templates.TemplateResponse(
            request,
            "members/view.html",
            {
                "session": session,
                "member": member,
                "notes": notes,
                "error": None,
                "action_error": "Failed to update action item. Please try again.",
            },
            status_code=502,
        )

    return RedirectResponse(url=f"/members/{member_id}", status_code=303)
