"""
Testes da lista de espera: ordenação, entrada/saída e expiração de ofertas.
"""

import uuid
from datetime import timedelta

import pytest
from fastapi import HTTPException
from sqlalchemy import select

from circulation.models.enums import (
    BookStatus,
    NotificationType,
    UserRole,
    WaitlistStatus,
)
from circulation.models.notification import Notification
from circulation.models.waitlist import WaitlistEntry
from circulation.repositories.waitlist import WaitlistRepository
from circulation.services.checkout import CheckoutService
from circulation.services.waitlist import WaitlistService, queue_position_of


async def count_notifications(db, user_id, notification_type) -> int:
    result = await db.execute(
        select(Notification).where(
            Notification.user_id == user_id,
            Notification.type == notification_type,
        )
    )
    return len(result.scalars().all())


# ==========================================
# Ranking
# ==========================================

class TestRanking:
    """Testes da ordem da fila (WaitlistRepository.get_ranked)."""

    @pytest.fixture
    def add_entries(self, db, make_user, make_book):
        """Grava entradas (position, is_priority[, status]) em um livro emprestado."""

        async def _add_entries(*rows):
            book = await make_book(status=BookStatus.CHECKED_OUT)
            entries = []
            for row in rows:
                position, is_priority, *rest = row
                user = await make_user(UserRole.PREMIUM if is_priority else UserRole.STANDARD)
                entry = WaitlistEntry(
                    book_id=book.id,
                    user_id=user.id,
                    position=position,
                    is_priority=is_priority,
                    status=rest[0] if rest else WaitlistStatus.WAITING,
                )
                db.add(entry)
                entries.append(entry)
            await db.commit()
            return book, entries

        return _add_entries

    @pytest.mark.anyio
    async def test_priority_first_regardless_of_position(self, db, add_entries):
        book, (early_standard, late_priority) = await add_entries((1, False), (9, True))

        ranked = await WaitlistRepository(db).get_ranked(book.id)

        assert [e.id for e in ranked] == [late_priority.id, early_standard.id]

    @pytest.mark.anyio
    async def test_position_breaks_ties(self, db, add_entries):
        book, _ = await add_entries((3, False), (2, True), (1, False), (5, True))

        ranked = await WaitlistRepository(db).get_ranked(book.id)

        assert [(e.is_priority, e.position) for e in ranked] == [
            (True, 2),
            (True, 5),
            (False, 1),
            (False, 3),
        ]

    @pytest.mark.anyio
    async def test_stable_under_repeated_evaluation(self, db, add_entries):
        book, _ = await add_entries(*[(i, i % 2 == 0) for i in (7, 2, 5, 1, 6, 3, 4)])
        repo = WaitlistRepository(db)

        first = [e.id for e in await repo.get_ranked(book.id)]
        second = [e.id for e in await repo.get_ranked(book.id)]

        assert first == second
        assert len(first) == 7

    @pytest.mark.anyio
    async def test_only_requested_statuses(self, db, add_entries):
        book, (waiting, notified, _) = await add_entries(
            (1, False),
            (2, True, WaitlistStatus.NOTIFIED),
            (3, True, WaitlistStatus.CANCELLED),
        )
        repo = WaitlistRepository(db)

        assert [e.id for e in await repo.get_ranked(book.id)] == [waiting.id]
        notified_only = await repo.get_ranked(book.id, WaitlistStatus.NOTIFIED)
        assert [e.id for e in notified_only] == [notified.id]

    @pytest.mark.anyio
    async def test_queue_position(self, db, clock, add_entries):
        book, (standard, priority, outsider) = await add_entries(
            (1, False),
            (2, True),
            (3, False, WaitlistStatus.EXPIRED),
        )
        service = WaitlistService(db, clock)

        assert await service.queue_position(priority) == 1
        assert await service.queue_position(standard) == 2
        assert await service.queue_position(outsider) is None

        ranked = await WaitlistRepository(db).get_ranked(book.id)
        assert queue_position_of(standard, ranked) == 2


# ==========================================
# Join / Leave
# ==========================================

class TestJoinLeave:
    """Testes para entrar e sair da fila."""

    @pytest.fixture
    async def borrowed_book(self, db, clock, make_user, make_book):
        """Livro emprestado a um leitor standard."""
        holder = await make_user(UserRole.STANDARD)
        book = await make_book()
        await CheckoutService(db, clock).create_checkout(holder, book.id)
        return book

    @pytest.mark.anyio
    async def test_join_assigns_positions_and_priority(self, db, clock, make_user, borrowed_book):
        standard = await make_user(UserRole.STANDARD)
        premium = await make_user(UserRole.PREMIUM)
        service = WaitlistService(db, clock)

        first = await service.join(standard, borrowed_book.id)
        second = await service.join(premium, borrowed_book.id)

        assert first.position == 1
        assert first.is_priority is False
        assert first.queue_position == 1
        assert first.book_title == borrowed_book.title

        # Prioritário entra depois mas fica na frente
        assert second.position == 2
        assert second.is_priority is True
        assert second.queue_position == 1

        entries = await service.get_user_entries(standard.id)
        assert [e.queue_position for e in entries] == [2]

        assert await count_notifications(db, standard.id, NotificationType.WAITLIST_JOINED) == 1

    @pytest.mark.anyio
    async def test_join_available_book_rejected(self, db, clock, make_user, make_book):
        user = await make_user()
        book = await make_book()

        with pytest.raises(HTTPException) as exc:
            await WaitlistService(db, clock).join(user, book.id)

        assert exc.value.status_code == 400

    @pytest.mark.anyio
    async def test_join_inactive_book_rejected(self, db, clock, make_user, make_book):
        user = await make_user()
        book = await make_book(status=BookStatus.INACTIVE)

        with pytest.raises(HTTPException) as exc:
            await WaitlistService(db, clock).join(user, book.id)

        assert exc.value.status_code == 400

    @pytest.mark.anyio
    async def test_join_unknown_book(self, db, clock, make_user):
        user = await make_user()

        with pytest.raises(HTTPException) as exc:
            await WaitlistService(db, clock).join(user, uuid.uuid4())

        assert exc.value.status_code == 404

    @pytest.mark.anyio
    async def test_join_twice_rejected(self, db, clock, make_user, borrowed_book):
        user = await make_user()
        service = WaitlistService(db, clock)
        await service.join(user, borrowed_book.id)

        with pytest.raises(HTTPException) as exc:
            await service.join(user, borrowed_book.id)

        assert exc.value.status_code == 400
        assert "já está na lista" in exc.value.detail

    @pytest.mark.anyio
    async def test_leave_cancels_entry(self, db, clock, make_user, borrowed_book):
        user = await make_user()
        service = WaitlistService(db, clock)
        await service.join(user, borrowed_book.id)

        entry = await service.leave(user, borrowed_book.id)

        assert entry.status == WaitlistStatus.CANCELLED
        assert await service.get_user_entries(user.id) == []

    @pytest.mark.anyio
    async def test_position_not_reused_after_leave(self, db, clock, make_user, borrowed_book):
        first = await make_user()
        second = await make_user()
        service = WaitlistService(db, clock)

        await service.join(first, borrowed_book.id)
        await service.leave(first, borrowed_book.id)
        entry = await service.join(second, borrowed_book.id)

        assert entry.position == 2
        assert entry.queue_position == 1

    @pytest.mark.anyio
    async def test_leave_without_entry(self, db, clock, make_user, borrowed_book):
        user = await make_user()

        with pytest.raises(HTTPException) as exc:
            await WaitlistService(db, clock).leave(user, borrowed_book.id)

        assert exc.value.status_code == 404


# ==========================================
# Holds + saída da fila + expiração
# ==========================================

class TestOffersAndExpiry:
    """Testes de ofertas em hold e expiração de prazo de retirada."""

    @pytest.fixture
    async def waitlist_phase(self, db, clock, make_user, make_book):
        """
        Livro em ON_HOLD_WAITLIST com um leitor standard avisado.

        Devolvido sem prioritários na fila, o livro vai direto para a fase
        da lista de espera.
        """
        holder = await make_user(UserRole.STANDARD)
        waiter = await make_user(UserRole.STANDARD)
        book = await make_book()

        checkouts = CheckoutService(db, clock)
        checkout = await checkouts.create_checkout(holder, book.id)
        await WaitlistService(db, clock).join(waiter, book.id)
        await checkouts.return_checkout(checkout.id, holder)

        return book, waiter

    @pytest.mark.anyio
    async def test_return_without_priority_opens_waitlist_phase(self, db, clock, waitlist_phase):
        book, waiter = waitlist_phase
        now = await clock.now()

        assert book.status == BookStatus.ON_HOLD_WAITLIST
        assert book.hold_until == now + timedelta(hours=24)

        result = await db.execute(select(WaitlistEntry).where(WaitlistEntry.user_id == waiter.id))
        entry = result.scalar_one()
        assert entry.status == WaitlistStatus.NOTIFIED
        assert entry.expires_at == now + timedelta(hours=24)
        assert await count_notifications(db, waiter.id, NotificationType.WAITLIST_AVAILABLE) == 1

    @pytest.mark.anyio
    async def test_leave_last_entry_frees_held_book(self, db, clock, waitlist_phase):
        book, waiter = waitlist_phase

        await WaitlistService(db, clock).leave(waiter, book.id)

        assert book.status == BookStatus.AVAILABLE
        assert book.hold_until is None

    @pytest.mark.anyio
    async def test_expire_entries_after_claim_window(self, db, clock, waitlist_phase):
        book, waiter = waitlist_phase
        service = WaitlistService(db, clock)

        clock.advance(hours=23)
        assert (await service.expire_entries()).processed == 0

        clock.advance(hours=2)
        result = await service.expire_entries()

        assert result.processed == 1
        entries = await db.execute(select(WaitlistEntry).where(WaitlistEntry.user_id == waiter.id))
        assert entries.scalar_one().status == WaitlistStatus.EXPIRED
        assert await count_notifications(db, waiter.id, NotificationType.WAITLIST_EXPIRED) == 1
        # A expiração não mexe no status do livro
        assert book.status == BookStatus.ON_HOLD_WAITLIST

        # Idempotente
        assert (await service.expire_entries()).processed == 0
