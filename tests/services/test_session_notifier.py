from unittest.mock import AsyncMock, MagicMock

from xoauth.services.notifications import SessionNotifier


class TestSessionNotifier:
    async def test_sync_callback_receives_old_new_and_session_id(self):
        # Arrange
        callback = MagicMock(return_value=None)
        notifier = SessionNotifier(callback)
        old_data, new_data = {"old": "data"}, {"new": "data"}

        # Act
        await notifier.notify(old_data, new_data, "session123")

        # Assert
        callback.assert_called_once_with(old_data, new_data, "session123")

    async def test_async_callback_is_awaited(self):
        # Arrange
        notifier = SessionNotifier()
        callback = AsyncMock()
        notifier.on_session_update(callback)

        # Act
        await notifier.notify(None, {"id": "u1"}, "s1")

        # Assert
        callback.assert_awaited_once_with(None, {"id": "u1"}, "s1")

    async def test_does_nothing_when_no_callback_registered(self):
        # Arrange
        notifier = SessionNotifier()

        # Act
        await notifier.notify({"old": "data"}, {"new": "data"}, "session123")

        # Assert - Test passes if we reach this point without exception
        assert True

    async def test_does_not_raise_user_callback_exceptions(self):
        # Arrange
        callback = AsyncMock(side_effect=RuntimeError("User callback failed"))
        notifier = SessionNotifier(callback)

        # Act
        await notifier.notify(None, None, "s1")

        # Assert
        callback.assert_awaited_once_with(None, None, "s1")

    async def test_registering_replaces_previous_callback(self):
        # Arrange
        first, second = MagicMock(return_value=None), MagicMock(return_value=None)
        notifier = SessionNotifier(first)

        # Act
        notifier.on_session_update(second)
        await notifier.notify(None, None, "s1")

        # Assert
        first.assert_not_called()
        second.assert_called_once()

    async def test_registering_none_clears_callback(self):
        callback = MagicMock(return_value=None)
        notifier = SessionNotifier(callback)

        notifier.on_session_update(None)
        await notifier.notify(None, None, "s1")

        callback.assert_not_called()
