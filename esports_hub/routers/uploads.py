from fastapi import APIRouter, Depends, File, UploadFile

from ..config import UPLOAD_DIR
from ..dependencies import require_user
from ..models.user import User
from ..services.uploads import save_upload

router = APIRouter(prefix="/api", tags=["uploads"])


@router.post("/upload")
async def upload_file(
    file: UploadFile = File(...),
    current_user: User = Depends(require_user)
):
    """Store a team logo (or any image) and return its URL."""
    url = await save_upload(file, UPLOAD_DIR)
    return {"url": url}
