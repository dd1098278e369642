"""
Testes para retirada de títulos do acervo.
"""

import uuid

import pytest

from circulation.core.exceptions import CopyUnavailable, EntityNotFound, InvalidState
from circulation.models.enums import ReservationStatus
from circulation.services.catalog import CatalogService
from circulation.services.loan import LoanLedger
from circulation.services.reservation import ReservationQueue
from tests.conftest import TODAY


class TestRetireBook:
    """Testes para CatalogService.retire_book."""

    @pytest.mark.anyio
    async def test_retire_withdraws_copies_and_cancels_queue(self, test_db, factory):
        book = await factory.book()
        first = await factory.copy(book=book)
        second = await factory.copy(book=book)
        member = await factory.member()
        reservation = await ReservationQueue(test_db).enqueue(member.id, book.id, TODAY, TODAY)

        result = await CatalogService(test_db).retire_book(book.id)

        assert result.withdrawn_copies == 2
        assert result.cancelled_reservations == 1
        assert result.book.is_retired is True
        assert first.is_available is False
        assert second.is_available is False
        assert reservation.status == ReservationStatus.CANCELLED

    @pytest.mark.anyio
    async def test_retired_copy_cannot_be_loaned(self, test_db, factory, staff):
        book = await factory.book()
        copy = await factory.copy(book=book)
        member = await factory.member()
        await CatalogService(test_db).retire_book(book.id)

        with pytest.raises(CopyUnavailable):
            await LoanLedger(test_db).checkout(member.id, copy.id, staff.id, TODAY)

    @pytest.mark.anyio
    async def test_book_with_open_loan_cannot_be_retired(self, test_db, factory, staff):
        book = await factory.book()
        copy = await factory.copy(book=book)
        member = await factory.member()
        await LoanLedger(test_db).checkout(member.id, copy.id, staff.id, TODAY)

        with pytest.raises(InvalidState):
            await CatalogService(test_db).retire_book(book.id)

        assert book.is_retired is False

    @pytest.mark.anyio
    async def test_retire_twice(self, test_db, factory):
        book = await factory.book()
        service = CatalogService(test_db)
        await service.retire_book(book.id)

        with pytest.raises(InvalidState):
            await service.retire_book(book.id)

    @pytest.mark.anyio
    async def test_retire_unknown_book(self, test_db):
        with pytest.raises(EntityNotFound):
            await CatalogService(test_db).retire_book(uuid.uuid4())
