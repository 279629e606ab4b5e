from typing import Annotated, Literal
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import PlainTextResponse, Response

from blobdrive.core.auth import require_api_key
from blobdrive.core.services.drive_service import (
    delete_object,
    download_object,
    get_object,
    get_tree,
    get_tree_text,
    list_children,
    list_containers,
    upload_object,
)
from blobdrive.models import (
    ChildrenResponse,
    ContainerListResponse,
    DeleteResult,
    ErrorResponse,
    ObjectInfo,
    TreeResponse,
    UploadResult,
)
from blobdrive.upload_utils import max_upload_bytes, parse_boolish, read_upload_limited, upload_filename

router = APIRouter(
    prefix="/containers",
    tags=["containers"],
    dependencies=[Depends(require_api_key)],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}

ObjectPath = Annotated[str, Query(min_length=1, description="Full object key")]


@router.get("", response_model=ContainerListResponse, responses=ERROR_RESPONSES)
def containers_endpoint() -> ContainerListResponse:
    return list_containers()


@router.get(
    "/{container}/tree",
    response_model=TreeResponse,
    responses={**ERROR_RESPONSES, 200: {"content": {"text/plain": {}}}},
)
def tree_endpoint(container: str, format: Literal["json", "text"] = "json"):
    if format == "text":
        return PlainTextResponse(get_tree_text(container))
    return get_tree(container)


@router.get("/{container}/children", response_model=ChildrenResponse, responses=ERROR_RESPONSES)
def children_endpoint(
    container: str,
    path: str = Query(default="", description="Directory path; empty for the container root"),
) -> ChildrenResponse:
    return list_children(container, path)


@router.get("/{container}/objects", response_model=ObjectInfo, responses=ERROR_RESPONSES)
def object_endpoint(container: str, path: ObjectPath) -> ObjectInfo:
    return get_object(container, path)


@router.get(
    "/{container}/objects/download",
    responses={**ERROR_RESPONSES, 200: {"content": {"application/octet-stream": {}}}},
)
def download_endpoint(container: str, path: ObjectPath) -> Response:
    filename, data, content_type = download_object(container, path)
    return Response(
        content=data,
        media_type=content_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@router.post(
    "/{container}/objects",
    response_model=UploadResult,
    responses={**ERROR_RESPONSES, 413: {"model": ErrorResponse}},
)
def upload_endpoint(
    container: str,
    file: UploadFile | None = File(default=None, description="File to store"),
    directory: str = Form(default="", description="Existing directory path; empty for the container root"),
    overwrite: str | None = Form(default=None, description="Truthy values: 1,true,yes,on (default true)"),
) -> UploadResult:
    filename = upload_filename(file)
    data = read_upload_limited(file, max_upload_bytes())
    return upload_object(
        container,
        directory,
        filename,
        data,
        content_type=file.content_type,
        overwrite=parse_boolish(overwrite, default=True),
    )


@router.delete("/{container}/objects", response_model=DeleteResult, responses=ERROR_RESPONSES)
def delete_endpoint(container: str, path: ObjectPath) -> DeleteResult:
    return delete_object(container, path)
