from em_diary.routes.auth import router as auth_router
from em_diary.routes.team import router as team_router
from em_diary.routes.notes import router as notes_router

__all__ = [
    'auth_router',
    'team_router',
    'notes_router',
]
