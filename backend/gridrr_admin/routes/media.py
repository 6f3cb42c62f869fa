from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query
from gridrr_admin.auth.deps import require_user
from gridrr_admin.errors import StorageError
from gridrr_admin.schemas.auth import AuthUser
from gridrr_admin.schemas.upload import MediaObject, UploadResult
from gridrr_admin.services.storage import ObjectStorage, get_storage
from gridrr_admin.services.uploads import delete_file

router = APIRouter(prefix="/media", tags=["media"])


@router.get("", response_model=list[MediaObject])
async def list_media(
    prefix: str = Query(default=""),
    user: AuthUser = Depends(require_user),
    storage: ObjectStorage = Depends(get_storage),
):
    try:
        objs = storage.list(prefix)
    except StorageError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return [MediaObject(path=o.path, size=o.size, url=o.url) for o in objs]


@router.delete("/{path:path}", response_model=UploadResult)
async def remove_media(
    path: str,
    user: AuthUser = Depends(require_user),
    storage: ObjectStorage = Depends(get_storage),
):
    result = delete_file(storage, path)
    if not result.success:
        raise HTTPException(status_code=502, detail=result.error)
    return result
