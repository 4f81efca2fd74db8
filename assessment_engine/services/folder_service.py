"""
Folder tree service - listing, breadcrumbs and guarded mutations
"""
import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from assessment_engine.config import settings
from assessment_engine.errors import (
    FolderCycleError,
    FolderNotEmptyError,
    FolderNotFoundError,
    FolderValidationError,
)
from assessment_engine.models import Folder, Material, Quiz

logger = logging.getLogger(__name__)


class FolderService:
    """
    Service for the quiz and material folder trees

    Both namespaces share one table and one algorithm; a folder only ever
    has a parent from its own namespace.
    """

    NAMESPACES = ("quiz", "material")

    def __init__(self, max_depth: int = 64):
        self.max_depth = max_depth

    def get_folder(self, db: Session, folder_id: int) -> Folder:
        folder = db.query(Folder).filter(Folder.id == folder_id).first()
        if not folder:
            raise FolderNotFoundError(f"Folder {folder_id} not found")
        return folder

    def list_children(
        self,
        db: Session,
        namespace: str,
        parent_id: Optional[int] = None
    ) -> List[Folder]:
        """
        List active folders directly under parent_id

        Args:
            db: Database session
            namespace: "quiz" or "material"
            parent_id: Parent folder, None for the roots

        Returns:
            Folders ordered by position
        """
        query = db.query(Folder).filter(
            Folder.namespace == namespace,
            Folder.active.is_(True)
        )

        if parent_id is None:
            query = query.filter(Folder.parent_id.is_(None))
        else:
            query = query.filter(Folder.parent_id == parent_id)

        return query.order_by(Folder.position, Folder.id).all()

    def breadcrumb(self, db: Session, folder_id: Optional[int]) -> List[Folder]:
        """
        Rebuild the root-to-leaf path ending at folder_id

        Walks parent references one fetch at a time. A visited set and the
        depth limit stop the walk on corrupted trees.

        Raises:
            FolderNotFoundError: start folder or an ancestor is missing
            FolderCycleError: parent references loop or nest too deep
        """
        path: List[Folder] = []
        visited = set()
        cursor = folder_id

        while cursor is not None:
            if cursor in visited:
                logger.error(f"Folder cycle detected at {cursor} while resolving {folder_id}")
                raise FolderCycleError(
                    f"Folder {cursor} appears twice in the ancestry of folder {folder_id}",
                    context={"folder_id": folder_id, "repeated": cursor}
                )
            if len(path) >= self.max_depth:
                logger.error(f"Folder ancestry of {folder_id} exceeds {self.max_depth} levels")
                raise FolderCycleError(
                    f"Folder {folder_id} is nested deeper than {self.max_depth} levels",
                    context={"folder_id": folder_id}
                )

            visited.add(cursor)
            folder = self.get_folder(db, cursor)
            path.insert(0, folder)
            cursor = folder.parent_id

        return path

    def create_folder(
        self,
        db: Session,
        namespace: str,
        title: str,
        description: Optional[str] = None,
        parent_id: Optional[int] = None
    ) -> Folder:
        """Create a folder at the end of its siblings"""

        if namespace not in self.NAMESPACES:
            raise FolderValidationError(f"Unknown folder namespace '{namespace}'")
        if not title or not title.strip():
            raise FolderValidationError("Folder title is required")

        if parent_id is not None:
            parent = self.get_folder(db, parent_id)
            if parent.namespace != namespace:
                raise FolderValidationError(
                    f"Folder {parent_id} belongs to the {parent.namespace} tree, not {namespace}"
                )

        sibling_count = len(self.list_children(db, namespace, parent_id))

        folder = Folder(
            namespace=namespace,
            title=title.strip(),
            description=description,
            parent_id=parent_id,
            position=sibling_count
        )

        db.add(folder)
        db.commit()
        db.refresh(folder)

        logger.info(f"Folder created: {folder.id} ({namespace}) under {parent_id}")
        return folder

    def rename_folder(
        self,
        db: Session,
        folder_id: int,
        title: str,
        description: Optional[str] = None
    ) -> Folder:
        if not title or not title.strip():
            raise FolderValidationError("Folder title is required")

        folder = self.get_folder(db, folder_id)
        folder.title = title.strip()
        folder.description = description

        db.commit()
        db.refresh(folder)

        logger.info(f"Folder renamed: {folder_id} -> {folder.title}")
        return folder

    def delete_folder(self, db: Session, folder_id: int) -> None:
        """
        Delete an empty folder

        The same guard applies to both trees: a folder with child folders,
        quizzes or materials is kept.
        """
        folder = self.get_folder(db, folder_id)

        child_count = db.query(Folder).filter(Folder.parent_id == folder_id).count()
        if child_count:
            raise FolderNotEmptyError(
                f"Folder '{folder.title}' still contains {child_count} subfolder(s)",
                context={"folder_id": folder_id}
            )

        item_count = self._count_items(db, folder)
        if item_count:
            kind = "quiz(zes)" if folder.namespace == "quiz" else "material(s)"
            raise FolderNotEmptyError(
                f"Folder '{folder.title}' still contains {item_count} {kind}",
                context={"folder_id": folder_id}
            )

        db.delete(folder)
        db.commit()

        logger.info(f"Folder deleted: {folder_id}")

    def _count_items(self, db: Session, folder: Folder) -> int:
        if folder.namespace == "quiz":
            return db.query(Quiz).filter(Quiz.folder_id == folder.id).count()
        return db.query(Material).filter(Material.folder_id == folder.id).count()

    def add_material(
        self,
        db: Session,
        folder_id: int,
        title: str,
        file_ref: str
    ) -> Material:
        """File a material reference under a material folder"""

        folder = self.get_folder(db, folder_id)
        if folder.namespace != "material":
            raise FolderValidationError(f"Folder {folder_id} is not a material folder")
        if not title or not title.strip():
            raise FolderValidationError("Material title is required")
        if not file_ref or not file_ref.strip():
            raise FolderValidationError("Material file reference is required")

        position = db.query(Material).filter(Material.folder_id == folder_id).count()

        material = Material(
            folder_id=folder_id,
            title=title.strip(),
            file_ref=file_ref.strip(),
            position=position
        )

        db.add(material)
        db.commit()
        db.refresh(material)

        logger.info(f"Material created: {material.id} in folder {folder_id}")
        return material

    def list_materials(self, db: Session, folder_id: int) -> List[Material]:
        self.get_folder(db, folder_id)

        return db.query(Material).filter(
            Material.folder_id == folder_id,
            Material.active.is_(True)
        ).order_by(Material.position, Material.id).all()


# Global instance
folder_service = FolderService(max_depth=settings.FOLDER_MAX_DEPTH)
