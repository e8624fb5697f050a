"""Restore a message template to one of its recorded versions."""

from __future__ import annotations

import structlog

from herald.common.errors import RestorationFailedError
from herald.core.templates.store import TemplateStore
from herald.core.templates.types import Template
from herald.core.versions.log import VersionLog

logger = structlog.stdlib.get_logger()


class RestoreService:
    def __init__(self, store: TemplateStore, versions: VersionLog | None = None) -> None:
        self.store = store
        self.versions = versions or store.versions

    async def restore(self, template_id: int, version_id: int) -> Template:
        """
        Copy the versioned fields of ``version_id`` back onto the template.

        Only conditions and message markup are restored; name and intent stay
        as they are now. The result is validated like any other write and is
        itself recorded as a new version.

        Raises:
            NotFoundError: the template does not exist
            RestorationFailedError: no such version for this template
            ValidationFailedError: the restored state is no longer valid
        """
        current = await self.store.fetch(template_id)

        snapshot = await self.versions.find(template_id, version_id)
        if snapshot is None:
            await logger.aerror(
                "template.restore_failed", template_id=template_id, version_id=version_id
            )
            raise RestorationFailedError(
                "Could not find a previous version for restoration.",
                details={"template_id": template_id, "version_id": version_id},
            )

        restored = await self.store.commit(current.with_snapshot(snapshot))
        await logger.ainfo(
            "template.restored",
            template_id=template_id,
            from_version=version_id,
            version_id=restored.latest_version.id if restored.latest_version else None,
        )
        return restored
