# /formify-backend/app/services/group_helpers/upload_storage.py

import os
import uuid
from typing import Dict, Optional
from fastapi import UploadFile

from app.config import UPLOADS_DIR


def save_upload(upload: Optional[UploadFile]) -> Optional[Dict]:
    """
    Writes one uploaded file to `UPLOADS_DIR` under a collision-free name and
    returns its file reference. Returns None when nothing was attached.
    """
    if upload is None or not upload.filename:
        return None

    os.makedirs(UPLOADS_DIR, exist_ok=True)
    safe_filename = f"{uuid.uuid4().hex[:12]}_{os.path.basename(upload.filename)}"
    path = os.path.join(UPLOADS_DIR, safe_filename)
    content = upload.file.read()
    with open(path, "wb") as buffer:
        buffer.write(content)

    return {
        "originalName": upload.filename,
        "filename": safe_filename,
        "mimetype": upload.content_type,
        "size": len(content),
        "path": f"/uploads/{safe_filename}",
    }
