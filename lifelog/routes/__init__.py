from lifelog.routes.auth import router as auth_router
from lifelog.routes.entries import router as entries_router
from lifelog.routes.tags import router as tags_router
from lifelog.routes.settings import router as settings_router
from lifelog.routes.dashboard import router as dashboard_router

__all__ = [
    'auth_router',
    'entries_router',
    'tags_router',
    'settings_router',
    'dashboard_router',
]
