"""API router collecting every route module under its prefix."""
from fastapi import APIRouter

from .routes import bookmarks, cache, companies, session, stats, view

api_router = APIRouter()

for module, prefix, tag in (
    (companies, "/companies", "Companies"),
    (view, "/view", "View"),
    (bookmarks, "/bookmarks", "Bookmarks"),
    (cache, "/cache", "Cache"),
    (session, "/session", "Session"),
    (stats, "/stats", "Statistics"),
):
    api_router.include_router(module.router, prefix=prefix, tags=[tag])
