"""Promotion reconciler.

Reconciles the file references held by a record with object storage:
temp uploads referenced by the new version of a record are promoted to
permanent keys, and references the old version held but no field of the
new one still holds are deleted. All promotions run before any cleanup.

Failure semantics:
1. A promotion failure raises PromotionError immediately. Remaining fields
   are not processed, no cleanup runs, and fields already rewritten in the
   same call are not rolled back.
2. A cleanup failure is logged and recorded in the report, never raised.
3. Field values are written only after their storage calls succeeded.
"""

import logging
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from .config import PromoterSettings
from .content import extract_urls, replace_urls
from .errors import PromotionError
from .events import EventPublisher, FileEvent, FileOperation
from .fields import FieldDescriptor, scan_fields
from .meta import MetaType
from .storage import StorageService, is_temp_key

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT")


class Scenario(str, Enum):
    """Which versions of a record were supplied."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "noop"

    @classmethod
    def detect(cls, new: Any, old: Any) -> "Scenario":
        if new is not None and old is not None:
            return cls.UPDATE
        if new is not None:
            return cls.CREATE
        if old is not None:
            return cls.DELETE
        return cls.NOOP


class CleanupFailure(BaseModel):
    """An obsolete reference that could not be deleted."""

    key: str
    field: str
    message: str


class PromotionReport(BaseModel):
    """Outcome of a successful reconciliation."""

    scenario: Scenario = Scenario.NOOP
    promoted: dict[str, str] = Field(default_factory=dict)
    """Temp key -> permanent key, in promotion order."""
    deleted: list[str] = Field(default_factory=list)
    cleanup_failures: list[CleanupFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every obsolete reference was deleted."""
        return not self.cleanup_failures


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


class Promoter(Generic[RecordT]):
    """
    Reconciles file references of one record type with storage.

    Usage:
        promoter = Promoter(Article, storage, publisher)

        await promoter.promote(article)                 # create
        await promoter.promote(updated, previous)       # update
        await promoter.promote(None, deleted_article)   # delete
    """

    def __init__(
        self,
        record_type: type[RecordT],
        storage: StorageService,
        publisher: EventPublisher | None = None,
        settings: PromoterSettings | None = None,
    ):
        """Create Promoter.

        Args:
            record_type: pydantic model or dataclass with Meta-annotated fields
            storage: Storage collaborator used to promote and delete objects
            publisher: Optional event publisher, one FileEvent per reference
            settings: Promoter settings (default: loaded from environment)
        """
        self._record_type = record_type
        self._storage = storage
        self._publisher = publisher
        self._settings = settings if settings is not None else PromoterSettings()
        self._descriptors = scan_fields(record_type)

    @property
    def descriptors(self) -> tuple[FieldDescriptor, ...]:
        """Get descriptors of the promotable fields."""
        return self._descriptors

    async def promote(
        self,
        new: RecordT | None,
        old: RecordT | None = None,
    ) -> PromotionReport:
        """
        Reconcile a record's file references with storage.

        Args:
            new: Record as it will be saved (mutated in place), None on delete
            old: Record as previously saved, None on create

        Returns:
            PromotionReport with promoted keys, deleted keys and cleanup failures

        Raises:
            PromotionError: A temp reference could not be promoted
        """
        report = PromotionReport(scenario=Scenario.detect(new, old))
        if report.scenario is Scenario.NOOP:
            return report

        record_name = self._record_type.__name__
        logger.info(
            "Reconciling file references",
            extra={"record_type": record_name, "scenario": report.scenario.value},
        )

        # References held anywhere in the final record are never deleted
        kept: set[str] = set()
        if new is not None:
            for descriptor in self._descriptors:
                kept |= await self._promote_field(new, descriptor, report)

        if old is not None:
            for descriptor in self._descriptors:
                obsolete = [
                    ref for ref in self._references(old, descriptor) if ref not in kept
                ]
                await self._cleanup(descriptor, obsolete, report)

        logger.info(
            "File references reconciled",
            extra={
                "record_type": record_name,
                "promoted": len(report.promoted),
                "deleted": len(report.deleted),
                "cleanup_failures": len(report.cleanup_failures),
            },
        )
        return report

    def _references(self, record: Any, descriptor: FieldDescriptor) -> list[str]:
        """Collect the distinct storage references held by a field."""
        values = descriptor.candidates(record)
        if descriptor.meta_type is MetaType.UPLOADED_FILE:
            return _unique(values)

        refs: set[str] = set()
        for body in values:
            refs |= extract_urls(body, descriptor.meta_type)
        return sorted(refs)

    async def _promote_field(
        self,
        record: Any,
        descriptor: FieldDescriptor,
        report: PromotionReport,
    ) -> set[str]:
        """Promote a field's temp references and rewrite the field.

        Returns the field's references after promotion.
        """
        values = descriptor.candidates(record)

        if descriptor.meta_type is MetaType.UPLOADED_FILE:
            final = [await self._promote_key(key, descriptor, report) for key in values]
            if descriptor.is_array:
                if final != descriptor.read(record):
                    descriptor.write(record, final)
            elif final != values:
                descriptor.write(record, final)
            return set(final)

        if not values:
            return set()

        body = values[0]
        urls = sorted(extract_urls(body, descriptor.meta_type))
        mapping: dict[str, str] = {}
        for url in urls:
            if is_temp_key(url):
                mapping[url] = await self._promote_key(url, descriptor, report)

        if mapping:
            descriptor.write(record, [replace_urls(body, mapping, descriptor.meta_type)])

        return {mapping.get(url, url) for url in urls}

    async def _promote_key(
        self,
        key: str,
        descriptor: FieldDescriptor,
        report: PromotionReport,
    ) -> str:
        """Promote one temp key, returning its permanent key."""
        if not is_temp_key(key):
            return key

        # Same temp key referenced twice in one call
        if key in report.promoted:
            return report.promoted[key]

        try:
            info = await self._storage.promote_object(key)
        except Exception as exc:
            logger.error(
                f"Failed to promote {key}: {exc}",
                extra={"field": descriptor.name, "key": key},
            )
            raise PromotionError(key, descriptor.name, str(exc)) from exc

        new_key = info.key if info is not None else key
        report.promoted[key] = new_key
        self._publish(FileOperation.PROMOTE, descriptor, new_key)
        return new_key

    async def _cleanup(
        self,
        descriptor: FieldDescriptor,
        keys: list[str],
        report: PromotionReport,
    ) -> None:
        """Delete obsolete references. Failures are recorded, not raised."""
        # Same key held by several fields of the old record
        handled = set(report.deleted)
        handled.update(failure.key for failure in report.cleanup_failures)
        keys = [key for key in keys if key not in handled]
        if not keys:
            return

        if self._settings.batch_cleanup:
            size = self._settings.cleanup_batch_size
            for start in range(0, len(keys), size):
                chunk = keys[start : start + size]
                try:
                    await self._storage.delete_objects(chunk)
                except Exception as exc:
                    for key in chunk:
                        self._record_failure(descriptor, key, exc, report)
                    continue
                for key in chunk:
                    self._record_deleted(descriptor, key, report)
            return

        for key in keys:
            try:
                await self._storage.delete_object(key)
            except Exception as exc:
                self._record_failure(descriptor, key, exc, report)
                continue
            self._record_deleted(descriptor, key, report)

    def _record_deleted(
        self, descriptor: FieldDescriptor, key: str, report: PromotionReport
    ) -> None:
        report.deleted.append(key)
        self._publish(FileOperation.DELETE, descriptor, key)

    def _record_failure(
        self,
        descriptor: FieldDescriptor,
        key: str,
        exc: Exception,
        report: PromotionReport,
    ) -> None:
        logger.warning(
            f"Failed to delete obsolete file {key}: {exc}",
            extra={"field": descriptor.name, "key": key},
        )
        report.cleanup_failures.append(
            CleanupFailure(key=key, field=descriptor.name, message=str(exc))
        )

    def _publish(
        self, operation: FileOperation, descriptor: FieldDescriptor, key: str
    ) -> None:
        if self._publisher is None:
            return
        self._publisher.publish(
            FileEvent(
                operation=operation,
                meta_type=descriptor.meta_type,
                file_key=key,
                attrs=dict(descriptor.attrs),
                source=self._settings.event_source,
            )
        )
