# File: layout_editor/api/api.py
from fastapi import APIRouter

from layout_editor.api.endpoints import documents

api_router = APIRouter(prefix="/api")
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
