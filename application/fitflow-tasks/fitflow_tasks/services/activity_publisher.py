"""
Activity publishing collaborator.

The import orchestrator hands every imported activity to an ActivityPublisher,
which turns it into a status and attaches its media. StoreActivityPublisher is
the local implementation: it keeps media blobs and Media rows so they count
against the account's storage quota.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import List, Protocol

from fitflow.archive import StravaArchiveActivity
from fitflow.processors import ActivityData
from fitflow.storage import BlobStorage

from ..database.models import FitnessFile, Media
from ..database.repository import FitnessStore

logger = logging.getLogger(__name__)


@dataclass
class MediaAttachment:
    """A media file read from the archive, ready to attach to a status"""
    name: str
    mime_type: str
    data: bytes
    source_path: str


class ActivityPublisher(Protocol):

    def publish_activity(self, actor_id: str, fitness_file: FitnessFile, activity: StravaArchiveActivity,
                         activity_data: ActivityData, visibility: str) -> str:
        """Publish an imported activity and return its status id"""
        ...

    def attach_media(self, actor_id: str, status_id: str, media: List[MediaAttachment]) -> None:
        """Attach media to a published status; raises when any attachment fails"""
        ...


class StoreActivityPublisher:
    """Publishes activities as local statuses backed by the fitness store"""

    def __init__(self, store: FitnessStore, storage: BlobStorage):
        self.store = store
        self.storage = storage

    def publish_activity(self, actor_id: str, fitness_file: FitnessFile, activity: StravaArchiveActivity,
                         activity_data: ActivityData, visibility: str) -> str:
        status_id = str(uuid.uuid4())
        logger.info(
            f"Published activity {activity.activity_id} for {actor_id} as status {status_id} "
            f"({activity_data.activity_type or 'unknown'}, {activity_data.total_distance_meters:.0f} m, {visibility})"
        )
        return status_id

    def attach_media(self, actor_id: str, status_id: str, media: List[MediaAttachment]) -> None:
        for attachment in media:
            path = self.storage.save(attachment.data, attachment.name, attachment.mime_type)
            self.store.create_media(Media(
                actor_id=actor_id,
                status_id=status_id,
                name=attachment.name,
                mime_type=attachment.mime_type,
                path=path,
                original_bytes=len(attachment.data),
            ))
        logger.debug(f"Attached {len(media)} media to status {status_id}")
