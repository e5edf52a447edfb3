# ABOUTME: Tests for the subscription lifecycle service.
# ABOUTME: Validates subscribe, confirm, unsubscribe and the token generator.

import re
from unittest.mock import AsyncMock, MagicMock

import pytest

from weather_notify.db.models import Subscription
from weather_notify.db.repository import SubscriptionRepository
from weather_notify.exceptions import (
    AlreadyConfirmedError,
    AlreadyExistsError,
    NotFoundError,
    StorageError,
    SubscriptionValidationError,
    UpdateFailedError,
)
from weather_notify.services.subscription_service import SubscriptionService, generate_token


class TestGenerateToken:
    """Tests for the token generator."""

    def test_token_is_32_hex_chars(self) -> None:
        """Tokens carry 128 bits as 32 lowercase hex characters."""
        assert re.fullmatch(r"[0-9a-f]{32}", generate_token())

    def test_tokens_are_unique(self) -> None:
        """Consecutive tokens never collide."""
        tokens = {generate_token() for _ in range(1000)}
        assert len(tokens) == 1000


class TestSubscribe:
    """Tests for SubscriptionService.subscribe."""

    @pytest.fixture
    def mock_repo(self) -> AsyncMock:
        """Create a mock SubscriptionRepository that stores nothing."""
        repo = AsyncMock(spec=SubscriptionRepository)
        repo.find_by_email.return_value = None

        async def create(sub: Subscription) -> Subscription:
            sub.id = 1
            return sub

        repo.create.side_effect = create
        return repo

    @pytest.fixture
    def mock_mailer(self) -> MagicMock:
        return MagicMock()

    @pytest.fixture
    def service(self, mock_repo: AsyncMock, mock_mailer: MagicMock) -> SubscriptionService:
        return SubscriptionService(mock_repo, mock_mailer)

    async def test_subscribe_creates_unconfirmed_with_two_tokens(
        self, service: SubscriptionService, mock_repo: AsyncMock
    ) -> None:
        """A new subscription is unconfirmed and has two distinct tokens."""
        result = await service.subscribe("a@x.com", "Kyiv", "daily")

        assert result.id == 1
        assert result.email == "a@x.com"
        assert result.city == "Kyiv"
        assert result.frequency == "daily"
        assert result.confirmed is False
        assert result.confirm_token
        assert result.unsubscribe_token
        assert result.confirm_token != result.unsubscribe_token
        assert result.last_sent_at is None
        mock_repo.create.assert_awaited_once()

    async def test_subscribe_sends_confirmation_with_confirm_token(
        self, service: SubscriptionService, mock_mailer: MagicMock
    ) -> None:
        """The confirmation email carries the confirm token, not the unsubscribe one."""
        result = await service.subscribe("a@x.com", "Kyiv", "hourly")

        mock_mailer.send_confirmation.assert_called_once_with("a@x.com", result.confirm_token)

    async def test_subscribe_duplicate_email_raises(
        self, service: SubscriptionService, mock_repo: AsyncMock, make_subscription
    ) -> None:
        """A second subscription for the same email is rejected before insert."""
        mock_repo.find_by_email.return_value = make_subscription(email="a@x.com")

        with pytest.raises(AlreadyExistsError):
            await service.subscribe("a@x.com", "Oslo", "hourly")

        mock_repo.create.assert_not_awaited()

    async def test_subscribe_unique_constraint_backstop_propagates(
        self, service: SubscriptionService, mock_repo: AsyncMock, mock_mailer: MagicMock
    ) -> None:
        """A concurrent insert caught by the database still surfaces as AlreadyExists."""
        mock_repo.create.side_effect = AlreadyExistsError("a@x.com")

        with pytest.raises(AlreadyExistsError):
            await service.subscribe("a@x.com", "Kyiv", "daily")

        mock_mailer.send_confirmation.assert_not_called()

    async def test_subscribe_invalid_frequency_raises(
        self, service: SubscriptionService, mock_repo: AsyncMock
    ) -> None:
        """Only hourly and daily are accepted."""
        with pytest.raises(SubscriptionValidationError):
            await service.subscribe("a@x.com", "Kyiv", "weekly")

        mock_repo.find_by_email.assert_not_awaited()

    async def test_subscribe_mail_failure_keeps_subscription(
        self, service: SubscriptionService, mock_repo: AsyncMock, mock_mailer: MagicMock
    ) -> None:
        """A failed confirmation email is logged, not raised, and the row stays."""
        mock_mailer.send_confirmation.side_effect = OSError("connection refused")

        result = await service.subscribe("a@x.com", "Kyiv", "daily")

        assert result.confirmed is False
        mock_repo.create.assert_awaited_once()
        mock_repo.unsubscribe_by_token.assert_not_awaited()

    async def test_subscribe_strips_email_whitespace(
        self, service: SubscriptionService, mock_repo: AsyncMock
    ) -> None:
        """Surrounding whitespace is stripped but case is kept."""
        result = await service.subscribe("  A@X.com ", "Kyiv", "daily")

        assert result.email == "A@X.com"
        mock_repo.find_by_email.assert_awaited_once_with("A@X.com")

    async def test_subscribe_storage_error_propagates(
        self, service: SubscriptionService, mock_repo: AsyncMock
    ) -> None:
        """Repository failures reach the caller."""
        mock_repo.find_by_email.side_effect = StorageError("db down")

        with pytest.raises(StorageError):
            await service.subscribe("a@x.com", "Kyiv", "daily")


class TestConfirmSubscription:
    """Tests for SubscriptionService.confirm_subscription."""

    @pytest.fixture
    def mock_repo(self) -> AsyncMock:
        repo = AsyncMock(spec=SubscriptionRepository)
        repo.update.side_effect = lambda sub: sub
        return repo

    @pytest.fixture
    def service(self, mock_repo: AsyncMock) -> SubscriptionService:
        return SubscriptionService(mock_repo, MagicMock())

    async def test_confirm_sets_confirmed(
        self, service: SubscriptionService, mock_repo: AsyncMock, make_subscription
    ) -> None:
        """Confirming a fresh subscription flips confirmed and persists it."""
        subscription = make_subscription(confirmed=False)
        mock_repo.get_by_token.return_value = subscription

        result = await service.confirm_subscription(subscription.confirm_token)

        assert result.confirmed is True
        mock_repo.update.assert_awaited_once_with(subscription)

    async def test_confirm_twice_rejects_second_call(
        self, service: SubscriptionService, mock_repo: AsyncMock, make_subscription
    ) -> None:
        """The second confirmation raises AlreadyConfirmed without another write."""
        subscription = make_subscription(confirmed=False)
        mock_repo.get_by_token.return_value = subscription

        await service.confirm_subscription(subscription.confirm_token)
        with pytest.raises(AlreadyConfirmedError):
            await service.confirm_subscription(subscription.confirm_token)

        assert subscription.confirmed is True
        mock_repo.update.assert_awaited_once()

    async def test_confirm_unknown_token_raises_not_found(
        self, service: SubscriptionService, mock_repo: AsyncMock
    ) -> None:
        mock_repo.get_by_token.return_value = None

        with pytest.raises(NotFoundError):
            await service.confirm_subscription("0" * 32)

        mock_repo.update.assert_not_awaited()

    async def test_confirm_update_failure_raises_update_failed(
        self, service: SubscriptionService, mock_repo: AsyncMock, make_subscription
    ) -> None:
        """A storage failure while persisting surfaces as UpdateFailedError."""
        mock_repo.get_by_token.return_value = make_subscription(confirmed=False)
        mock_repo.update.side_effect = StorageError("write failed")

        with pytest.raises(UpdateFailedError):
            await service.confirm_subscription("0" * 32)


class TestUnsubscribe:
    """Tests for SubscriptionService.unsubscribe."""

    @pytest.fixture
    def mock_repo(self) -> AsyncMock:
        return AsyncMock(spec=SubscriptionRepository)

    @pytest.fixture
    def service(self, mock_repo: AsyncMock) -> SubscriptionService:
        return SubscriptionService(mock_repo, MagicMock())

    async def test_unsubscribe_deletes_by_token(
        self, service: SubscriptionService, mock_repo: AsyncMock
    ) -> None:
        await service.unsubscribe("a" * 32)

        mock_repo.unsubscribe_by_token.assert_awaited_once_with("a" * 32)

    async def test_unsubscribe_unknown_token_raises_not_found(
        self, service: SubscriptionService, mock_repo: AsyncMock
    ) -> None:
        mock_repo.unsubscribe_by_token.side_effect = NotFoundError("subscription not found")

        with pytest.raises(NotFoundError):
            await service.unsubscribe("a" * 32)


class TestPassThroughs:
    """Tests for the operations used by the weather update job."""

    async def test_get_all_confirmed_delegates(self, make_subscription) -> None:
        repo = AsyncMock(spec=SubscriptionRepository)
        subscriptions = [make_subscription(id=1), make_subscription(id=2, email="b@x.com")]
        repo.get_all_confirmed.return_value = subscriptions
        service = SubscriptionService(repo, MagicMock())

        assert await service.get_all_confirmed() == subscriptions

    async def test_send_weather_update_uses_mailer(self) -> None:
        mailer = MagicMock()
        service = SubscriptionService(AsyncMock(spec=SubscriptionRepository), mailer)

        await service.send_weather_update("a@x.com", "body text")

        mailer.send_weather_update.assert_called_once_with("a@x.com", "body text")
