"""Decides whether and what to notify about outdated packages.

Two notifications exist:

- the specific one, sent by the background check when the outdated set
  grows, naming the newly outdated packages;
- the generic one, sent whenever the repository's outdated count changes.

The specific notification suppresses the generic one for the same
change. Suppression is entered before the specific notification is sent
and before the repository is written, so the count-change observer always
sees it.
"""

import logging

from brewctl.core.repository import PackageSetRepository
from brewctl.core.settings import Settings, SettingsStore
from brewctl.core.suppression import NotificationSuppressionState
from brewctl.models.package import OutdatedPackage
from brewctl.notifications.base import NotificationSink, Urgency
from brewctl.utils.formatting import format_list, plural

logger = logging.getLogger(__name__)

NEW_OUTDATED_TITLE = "New outdated packages found"
OUTDATED_TITLE = "Outdated packages found"


class NotificationDispatcher:
    """Routes outdated-package events to the notification sink."""

    def __init__(
        self,
        repository: PackageSetRepository,
        settings: SettingsStore,
        sink: NotificationSink,
        suppression: NotificationSuppressionState,
    ) -> None:
        self._repository = repository
        self._settings = settings
        self._sink = sink
        self._suppression = suppression
        self._unsubscribe = repository.subscribe(self.on_outdated_count_changed)
        settings.subscribe(self.on_settings_changed)

    @property
    def suppression(self) -> NotificationSuppressionState:
        return self._suppression

    @property
    def sink(self) -> NotificationSink:
        return self._sink

    def close(self) -> None:
        """Stop observing the repository."""
        self._unsubscribe()

    def announce_new_outdated(self, added: frozenset[OutdatedPackage]) -> None:
        """Send the specific notification for newly outdated packages.

        Enters suppression first so the generic notification triggered by
        the following repository write is skipped.
        """
        self._suppression.suppress()

        settings = self._settings.current
        if not (
            settings.are_notifications_enabled
            and settings.outdated_package_notification_type.sends_notifications
        ):
            logger.debug("Notifications disabled; not announcing %d new packages", len(added))
            return

        names = sorted(p.name for p in added)
        logger.info("New outdated packages: %s", ", ".join(names))
        self._sink.notify(NEW_OUTDATED_TITLE, format_list(names), Urgency.ACTIVE)

    def on_outdated_count_changed(self, count: int) -> None:
        """Repository observer: update the badge and send the generic notification."""
        settings = self._settings.current
        self.apply_badge(settings)

        if count == 0:
            return
        if not (
            settings.are_notifications_enabled
            and settings.outdated_package_notification_type.sends_notifications
        ):
            return
        if self._suppression.consume():
            logger.debug("Generic notification skipped; a specific one was sent")
            return

        self._sink.notify(
            OUTDATED_TITLE,
            f"{plural(count, 'package')} can be updated",
            Urgency.ACTIVE,
        )

    def on_settings_changed(self, old: Settings, new: Settings) -> None:
        """Settings listener: re-apply the badge when notification settings change."""
        if (
            old.are_notifications_enabled != new.are_notifications_enabled
            or old.outdated_package_notification_type != new.outdated_package_notification_type
        ):
            self.apply_badge(new)
        if old.suppression_grace_seconds != new.suppression_grace_seconds:
            self._suppression.grace_seconds = new.suppression_grace_seconds

    def apply_badge(self, settings: Settings | None = None) -> None:
        """Set the badge to the outdated count, or clear it. Idempotent."""
        settings = settings or self._settings.current
        count = self._repository.outdated_count
        if (
            settings.are_notifications_enabled
            and settings.outdated_package_notification_type.shows_badge
            and count > 0
        ):
            self._sink.set_badge(count)
        else:
            self._sink.set_badge(None)
