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

__all__ = [
    "delete_object",
    "download_object",
    "get_object",
    "get_tree",
    "get_tree_text",
    "list_children",
    "list_containers",
    "upload_object",
]
