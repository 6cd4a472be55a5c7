"""
File download redirect.

Resolves an attachment's object key to a short-lived presigned URL and
redirects to it. The caller must be able to access the lead that owns the
file.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..core.auth import ensure_access, get_staff_user
from ..core.database import get_db
from ..core.exceptions import NotFoundError
from ..models.lead import LeadFile
from ..models.user import User
from ..services.storage import FileStorage, get_storage


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/files", tags=["Files"])


@router.get("/{file_id:path}", response_class=RedirectResponse, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
async def download_file(
    file_id: str,
    user: User = Depends(get_staff_user),
    db: Session = Depends(get_db),
    storage: FileStorage = Depends(get_storage),
):
    lead_file = db.query(LeadFile).filter(LeadFile.file_id == file_id).first()
    if lead_file is None:
        raise NotFoundError("File not found")
    ensure_access(user, lead_file.lead.assigned_to, "You do not have access to this file")
    return RedirectResponse(url=storage.download_url(file_id), status_code=status.HTTP_307_TEMPORARY_REDIRECT)
