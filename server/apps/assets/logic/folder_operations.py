"""Business logic for the folder tree."""

import logging
import uuid

from server.apps.assets.models import Folder

logger = logging.getLogger(__name__)


def get_descendant_folder_ids(folder_id: uuid.UUID) -> set[uuid.UUID]:
    """Collect a folder and every folder below it.

    Walks the tree breadth-first with one query per level. Folders
    already seen are not expanded again, so a corrupted tree with a
    cycle still terminates.

    Args:
        folder_id: Root of the subtree.

    Returns:
        Ids of the folder and all its descendants. Contains at least
        ``folder_id``, even for an unknown folder.
    """
    collected = {folder_id}
    frontier = {folder_id}
    depth = 0

    while frontier:
        children = set(
            Folder.objects
            .filter(parent_id__in=frontier)
            .values_list('id', flat=True),
        )
        frontier = children - collected
        collected |= frontier
        depth += 1

    logger.debug(
        'Resolved folder %s to %d folders over %d levels',
        folder_id,
        len(collected),
        depth,
    )
    return collected
