"""Unit tests for the notification dispatcher."""

import pytest
from brewctl.core.clock import ManualClock
from brewctl.core.dispatcher import NEW_OUTDATED_TITLE, OUTDATED_TITLE, NotificationDispatcher
from brewctl.core.repository import PackageSetRepository
from brewctl.core.settings import NotificationType, Settings, SettingsStore
from brewctl.core.suppression import NotificationSuppressionState
from brewctl.models.package import OutdatedPackage, Package, PackageKind


def outdated(*names: str) -> frozenset[OutdatedPackage]:
    return frozenset(OutdatedPackage(Package(n, PackageKind.FORMULA, "1.0"), "2.0") for n in names)


@pytest.fixture
def repository() -> PackageSetRepository:
    return PackageSetRepository()


@pytest.fixture
def dispatcher(repository, notifying_settings, sink, manual_clock) -> NotificationDispatcher:
    suppression = NotificationSuppressionState(clock=manual_clock)
    return NotificationDispatcher(repository, notifying_settings, sink, suppression)


class TestGenericNotification:
    """Tests for the count-change notification."""

    def test_sent_on_count_change(self, dispatcher, repository, sink) -> None:
        """A count change posts the generic notification and sets the badge."""
        repository.replace_outdated(outdated("a", "b"))

        assert sink.titles == [OUTDATED_TITLE]
        assert sink.notifications[0].body == "2 packages can be updated"
        assert sink.badge == 2

    def test_singular_body(self, dispatcher, repository, sink) -> None:
        """The body uses the singular for one package."""
        repository.replace_outdated(outdated("a"))
        assert sink.notifications[0].body == "1 package can be updated"

    def test_not_sent_for_zero(self, dispatcher, repository, sink) -> None:
        """Dropping to zero clears the badge without a notification."""
        repository.replace_outdated(outdated("a"))
        repository.replace_outdated([])

        assert sink.titles == [OUTDATED_TITLE]
        assert sink.badge is None

    def test_disabled_sends_nothing(self, dispatcher, repository, sink, notifying_settings) -> None:
        """With notifications disabled there is no badge and no notification."""
        notifying_settings.update(are_notifications_enabled=False)
        repository.replace_outdated(outdated("a"))

        assert sink.notifications == []
        assert sink.badge is None

    def test_badge_only(self, dispatcher, repository, sink, notifying_settings) -> None:
        """Badge type sets the badge but posts nothing."""
        notifying_settings.update(outdated_package_notification_type=NotificationType.BADGE)
        repository.replace_outdated(outdated("a"))

        assert sink.notifications == []
        assert sink.badge == 1

    def test_notification_only(self, dispatcher, repository, sink, notifying_settings) -> None:
        """Notification type posts but keeps the badge cleared."""
        notifying_settings.update(outdated_package_notification_type=NotificationType.NOTIFICATION)
        repository.replace_outdated(outdated("a"))

        assert sink.titles == [OUTDATED_TITLE]
        assert sink.badge is None


class TestSpecificNotification:
    """Tests for announcing newly outdated packages."""

    def test_suppresses_following_generic(self, dispatcher, repository, sink) -> None:
        """The specific notification replaces the generic one for the same change."""
        added = outdated("b", "a")
        dispatcher.announce_new_outdated(added)
        repository.replace_outdated(added)

        assert sink.titles == [NEW_OUTDATED_TITLE]
        assert sink.notifications[0].body == "a and b"
        assert sink.badge == 2

    def test_generic_resumes_after_grace(
        self, dispatcher, repository, sink, manual_clock: ManualClock
    ) -> None:
        """Once the grace period is over, count changes notify again."""
        dispatcher.announce_new_outdated(outdated("a"))
        manual_clock.advance(1.0)
        repository.replace_outdated(outdated("a"))

        assert sink.titles == [NEW_OUTDATED_TITLE, OUTDATED_TITLE]

    def test_generic_resumes_after_skip(self, dispatcher, repository, sink) -> None:
        """Only one generic notification is swallowed per announcement."""
        dispatcher.announce_new_outdated(outdated("a"))
        repository.replace_outdated(outdated("a"))
        repository.replace_outdated(outdated("a", "b"))

        assert sink.titles == [NEW_OUTDATED_TITLE, OUTDATED_TITLE]

    def test_disabled_still_suppresses(
        self, dispatcher, sink, notifying_settings: SettingsStore
    ) -> None:
        """Suppression is entered even when nothing is posted."""
        notifying_settings.update(outdated_package_notification_type=NotificationType.BADGE)
        dispatcher.announce_new_outdated(outdated("a"))

        assert sink.notifications == []
        assert dispatcher.suppression.is_suppressed


class TestSettingsChanges:
    """Tests for reacting to settings changes."""

    def test_disabling_clears_badge(self, dispatcher, repository, sink, notifying_settings) -> None:
        """Turning notifications off clears the badge immediately."""
        repository.replace_outdated(outdated("a", "b"))
        notifying_settings.update(are_notifications_enabled=False)

        assert sink.badge is None

    def test_enabling_shows_badge(self, repository, sink, manual_clock) -> None:
        """Turning notifications on shows the current count."""
        store = SettingsStore(Settings())
        NotificationDispatcher(
            repository, store, sink, NotificationSuppressionState(clock=manual_clock)
        )
        repository.replace_outdated(outdated("a", "b", "c"))
        assert sink.badge is None

        store.update(are_notifications_enabled=True)

        assert sink.badge == 3

    def test_grace_period_follows_settings(self, dispatcher, notifying_settings) -> None:
        """The suppression grace period tracks the setting."""
        notifying_settings.update(suppression_grace_seconds=2.5)
        assert dispatcher.suppression.grace_seconds == 2.5

    def test_close_stops_observing(self, dispatcher, repository, sink) -> None:
        """A closed dispatcher ignores repository changes."""
        dispatcher.close()
        repository.replace_outdated(outdated("a"))
        assert sink.notifications == []
