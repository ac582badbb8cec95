# Workflow Routers Module
# Exports all modular API routers for the campaign workflow

from routers.campaigns import router as campaigns_router
from routers.negotiation import router as negotiation_router
from routers.scripts import router as scripts_router
from routers.content import router as content_router
from routers.engagements import router as engagements_router
from routers.notifications import router as notifications_router

__all__ = [
    'campaigns_router',
    'negotiation_router',
    'scripts_router',
    'content_router',
    'engagements_router',
    'notifications_router',
]
