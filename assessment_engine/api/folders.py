"""
Folder tree and material API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from assessment_engine.database import get_db
from assessment_engine.errors import (
    FolderCycleError,
    FolderNotEmptyError,
    FolderNotFoundError,
    FolderValidationError,
)
from assessment_engine.schemas.folder import (
    FolderCreate, FolderUpdate, FolderResponse,
    MaterialCreate, MaterialResponse
)
from assessment_engine.schemas.quiz import QuizSummary
from assessment_engine.services.folder_service import folder_service
from assessment_engine.services.quiz_service import quiz_service

router = APIRouter(prefix="/api/folders", tags=["folders"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[FolderResponse])
async def list_folders(
    namespace: str = Query(..., pattern="^(quiz|material)$"),
    parent_id: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """List active folders under parent_id (root folders when omitted)"""
    return folder_service.list_children(db, namespace, parent_id)


@router.post("", response_model=FolderResponse, status_code=201)
async def create_folder(request: FolderCreate, db: Session = Depends(get_db)):
    """Create a folder at the end of its siblings"""
    try:
        return folder_service.create_folder(
            db,
            namespace=request.namespace,
            title=request.title,
            description=request.description,
            parent_id=request.parent_id
        )
    except FolderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FolderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/breadcrumb", response_model=List[FolderResponse])
async def get_breadcrumb(folder_id: Optional[int] = None, db: Session = Depends(get_db)):
    """
    Root-to-leaf path ending at folder_id

    Returns an empty list when folder_id is omitted.
    """
    try:
        return folder_service.breadcrumb(db, folder_id)
    except FolderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FolderCycleError as e:
        logger.error(f"Corrupted folder tree: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/{folder_id}", response_model=FolderResponse)
async def rename_folder(folder_id: int, request: FolderUpdate, db: Session = Depends(get_db)):
    try:
        return folder_service.rename_folder(db, folder_id, request.title, request.description)
    except FolderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FolderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{folder_id}", status_code=204)
async def delete_folder(folder_id: int, db: Session = Depends(get_db)):
    """Delete a folder that has no subfolders, quizzes or materials"""
    try:
        folder_service.delete_folder(db, folder_id)
    except FolderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FolderNotEmptyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return Response(status_code=204)


@router.get("/{folder_id}/quizzes", response_model=List[QuizSummary])
async def list_folder_quizzes(folder_id: int, db: Session = Depends(get_db)):
    try:
        folder_service.get_folder(db, folder_id)
    except FolderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return quiz_service.list_quizzes(db, folder_id=folder_id)


@router.get("/{folder_id}/materials", response_model=List[MaterialResponse])
async def list_folder_materials(folder_id: int, db: Session = Depends(get_db)):
    try:
        return folder_service.list_materials(db, folder_id)
    except FolderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{folder_id}/materials", response_model=MaterialResponse, status_code=201)
async def add_material(folder_id: int, request: MaterialCreate, db: Session = Depends(get_db)):
    try:
        return folder_service.add_material(db, folder_id, request.title, request.file_ref)
    except FolderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FolderValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
