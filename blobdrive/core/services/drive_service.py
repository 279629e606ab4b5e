from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from blobdrive.content_tree import Node, build_tree, find_node, path_of, render_tree_text, walk
from blobdrive.core.errors import APIError, KeyTreeError
from blobdrive.core.keys import segments, upload_key
from blobdrive.models import (
    ChildrenResponse,
    ContainerListResponse,
    DeleteResult,
    ObjectInfo,
    TreeNode,
    TreeResponse,
    TreeStats,
    UploadResult,
)
from blobdrive.storage_client import BlobStorageClient, ObjectRef, StorageError

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    404: "not_found",
    409: "conflict",
    503: "not_configured",
}


def map_storage_error(err: StorageError) -> APIError:
    return APIError(err.status, _STATUS_CODES.get(err.status, "upstream_error"), err.message)


def _client(client: BlobStorageClient | None) -> BlobStorageClient:
    if client is not None:
        return client
    try:
        return BlobStorageClient.from_env()
    except StorageError as e:
        raise map_storage_error(e)


def load_forest(container: str, client: BlobStorageClient | None = None) -> tuple[Node, ...]:
    """List ``container`` and fold it into a fresh forest.

    A listing the builder rejects yields no forest at all.
    """
    storage = _client(client)
    started = time.perf_counter()
    try:
        entries = storage.list_objects(container)
    except StorageError as e:
        raise map_storage_error(e)
    try:
        forest = build_tree(entries)
    except KeyTreeError as e:
        logger.warning("tree build failed for container %s: %s", container, e.message)
        status = 409 if e.code == "duplicate_key" else 400
        raise APIError(status, e.code, e.message, {"container": container, "key": e.key})
    logger.info(
        "built tree for container %s: %d objects, %d roots in %.1fms",
        container,
        len(entries),
        len(forest),
        (time.perf_counter() - started) * 1000,
    )
    return forest


def object_info(ref: ObjectRef) -> ObjectInfo:
    return ObjectInfo(
        container=ref.container,
        key=ref.key,
        size=ref.size,
        etag=ref.etag,
        content_type=ref.content_type,
        last_modified=ref.last_modified,
    )


def to_tree_nodes(nodes: Sequence[Node], ancestors: Sequence[str] = ()) -> list[TreeNode]:
    # parents are listed before their descendants, so converting in reverse
    # always finds a node's children already built
    order: list[tuple[tuple[str, ...], Node, int | None]] = []
    stack = [(tuple(ancestors), node, None) for node in nodes]
    while stack:
        node_ancestors, node, parent_idx = stack.pop()
        idx = len(order)
        order.append((node_ancestors, node, parent_idx))
        child_ancestors = (*node_ancestors, node.name)
        stack.extend((child_ancestors, child, idx) for child in node.children)

    built: dict[int, list[TreeNode]] = {}
    roots: list[TreeNode] = []
    for idx in range(len(order) - 1, -1, -1):
        node_ancestors, node, parent_idx = order[idx]
        converted = TreeNode(
            name=node.name,
            path=path_of(node_ancestors, node),
            is_directory=node.is_directory,
            is_object=node.is_object,
            object=object_info(node.ref) if node.is_object else None,
            children=built.pop(idx, []),
        )
        (roots if parent_idx is None else built.setdefault(parent_idx, [])).append(converted)
    return roots


def tree_stats(forest: Sequence[Node]) -> TreeStats:
    object_count = 0
    directory_count = 0
    root_counts: dict[str, int] = {}
    for ancestors, node in walk(forest):
        root = ancestors[0] if ancestors else node.name
        if node.is_object:
            object_count += 1
            root_counts[root] = root_counts.get(root, 0) + 1
        if node.is_directory:
            directory_count += 1
    return TreeStats(object_count=object_count, directory_count=directory_count, root_counts=root_counts)


def _resolve(forest: Sequence[Node], path: str) -> Node | None:
    try:
        return find_node(forest, path)
    except KeyTreeError as e:
        raise APIError(400, e.code, e.message)


def _require_object(container: str, path: str, client: BlobStorageClient | None) -> Node:
    node = _resolve(load_forest(container, client), path)
    if node is None or not node.is_object:
        raise APIError(404, "not_found", f"Object not found: {path}", {"container": container})
    return node


def list_containers(client: BlobStorageClient | None = None) -> ContainerListResponse:
    storage = _client(client)
    try:
        names = storage.list_containers()
    except StorageError as e:
        raise map_storage_error(e)
    return ContainerListResponse(count=len(names), containers=names)


def get_tree(container: str, client: BlobStorageClient | None = None) -> TreeResponse:
    forest = load_forest(container, client)
    return TreeResponse(container=container, roots=to_tree_nodes(forest), stats=tree_stats(forest))


def get_tree_text(container: str, client: BlobStorageClient | None = None) -> str:
    return render_tree_text(load_forest(container, client), root_label=container)


def list_children(container: str, path: str = "", client: BlobStorageClient | None = None) -> ChildrenResponse:
    forest = load_forest(container, client)
    if not path:
        return ChildrenResponse(container=container, path="", children=to_tree_nodes(forest))
    node = _resolve(forest, path)
    if node is None:
        raise APIError(404, "not_found", f"Path not found: {path}", {"container": container})
    children = to_tree_nodes(node.children, segments(path))
    return ChildrenResponse(container=container, path=path, children=children)


def get_object(container: str, path: str, client: BlobStorageClient | None = None) -> ObjectInfo:
    return object_info(_require_object(container, path, client).ref)


def download_filename(node: Node) -> str:
    # keys ending in the delimiter resolve to a node with an empty name
    if node.name:
        return node.name
    named = [part for part in segments(node.ref.key) if part]
    return named[-1] if named else "download"


def download_object(
    container: str, path: str, client: BlobStorageClient | None = None
) -> tuple[str, bytes, str]:
    storage = _client(client)
    node = _require_object(container, path, storage)
    try:
        data = storage.download(node.ref)
    except StorageError as e:
        raise map_storage_error(e)
    logger.info("downloaded %s/%s (%d bytes)", container, path, len(data))
    return download_filename(node), data, node.ref.content_type or "application/octet-stream"


def upload_object(
    container: str,
    directory: str,
    filename: str,
    data: bytes,
    content_type: str | None = None,
    overwrite: bool = True,
    client: BlobStorageClient | None = None,
) -> UploadResult:
    storage = _client(client)
    forest = load_forest(container, storage)
    names: list[str] = []
    if directory:
        target = _resolve(forest, directory)
        if target is None or not target.is_directory:
            raise APIError(404, "not_found", f"Directory not found: {directory}", {"container": container})
        names = segments(directory)
    try:
        key = upload_key(names, filename)
    except KeyTreeError as e:
        raise APIError(400, e.code, e.message)

    existing = _resolve(forest, key)
    if existing is not None and existing.is_object and not overwrite:
        raise APIError(409, "conflict", f"Object already exists: {key}", {"container": container})

    try:
        ref = storage.upload(container, key, data, content_type)
    except StorageError as e:
        raise map_storage_error(e)
    logger.info("uploaded %s/%s (%d bytes)", container, key, len(data))
    return UploadResult(ok=True, directory=directory, object=object_info(ref))


def delete_object(container: str, path: str, client: BlobStorageClient | None = None) -> DeleteResult:
    storage = _client(client)
    node = _require_object(container, path, storage)
    try:
        storage.delete(node.ref)
    except StorageError as e:
        raise map_storage_error(e)
    logger.info("deleted %s/%s", container, path)
    return DeleteResult(ok=True, container=container, key=node.ref.key)
