"""
Testes de integração dos endpoints da API v1.

Testa fluxos completos via HTTP:
    - Empréstimo, devolução com multa e pagamento
    - Reservas e repasse da cópia na devolução
    - Tradução dos erros de circulação para 404/409/422
    - Varreduras
"""

import uuid
from decimal import Decimal

import pytest
from httpx import AsyncClient


async def checkout(client: AsyncClient, member, copy, staff, now: str = "2024-03-01") -> dict:
    response = await client.post(
        "/api/v1/loans",
        json={
            "member_id": str(member.id),
            "copy_id": str(copy.id),
            "staff_id": str(staff.id),
            "now": now,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


# ==========================================
# Test: Loans
# ==========================================

class TestLoanEndpoints:
    """Testes para /api/v1/loans."""

    @pytest.mark.anyio
    async def test_checkout(self, client: AsyncClient, factory, staff):
        member = await factory.member()
        copy = await factory.copy()

        loan = await checkout(client, member, copy, staff)

        assert loan["status"] == "ACTIVE"
        assert loan["loan_date"] == "2024-03-01"
        assert loan["due_date"] == "2024-03-15"
        assert Decimal(loan["outstanding_fine"]) == Decimal("0")

    @pytest.mark.anyio
    async def test_checkout_ineligible_member(self, client: AsyncClient, factory, staff):
        member = await factory.member(is_active=False)
        copy = await factory.copy()

        response = await client.post(
            "/api/v1/loans",
            json={
                "member_id": str(member.id),
                "copy_id": str(copy.id),
                "staff_id": str(staff.id),
            },
        )

        assert response.status_code == 409
        assert response.json()["error"] == "policy_violation"

    @pytest.mark.anyio
    async def test_checkout_copy_twice(self, client: AsyncClient, factory, staff):
        copy = await factory.copy()
        await checkout(client, await factory.member(), copy, staff)

        response = await client.post(
            "/api/v1/loans",
            json={
                "member_id": str((await factory.member()).id),
                "copy_id": str(copy.id),
                "staff_id": str(staff.id),
            },
        )

        assert response.status_code == 409
        assert response.json()["error"] == "copy_unavailable"

    @pytest.mark.anyio
    async def test_get_unknown_loan(self, client: AsyncClient):
        response = await client.get(f"/api/v1/loans/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.anyio
    async def test_list_loans_by_member_and_status(self, client: AsyncClient, factory, staff):
        member = await factory.member()
        first = await checkout(client, member, await factory.copy(), staff)
        await checkout(client, member, await factory.copy(), staff)
        await client.patch(
            f"/api/v1/loans/{first['id']}/return",
            json={"staff_id": str(staff.id), "now": "2024-03-02"},
        )

        response = await client.get(
            "/api/v1/loans",
            params={"member_id": str(member.id), "status": "ACTIVE"},
        )

        assert response.status_code == 200
        assert len(response.json()) == 1

    @pytest.mark.anyio
    async def test_late_return_and_payment(self, client: AsyncClient, factory, staff):
        """Devolução 3 dias atrasada gera 1,50; pagar além disso é recusado."""
        loan = await checkout(client, await factory.member(), await factory.copy(), staff)

        response = await client.patch(
            f"/api/v1/loans/{loan['id']}/return",
            json={"staff_id": str(staff.id), "now": "2024-03-18"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["loan"]["status"] == "RETURNED"
        assert Decimal(body["fine_applied"]) == Decimal("1.50")
        assert body["hold_loan"] is None

        response = await client.post(
            f"/api/v1/loans/{loan['id']}/payments",
            json={"amount": "1.00", "staff_id": str(staff.id), "now": "2024-03-18"},
        )
        assert response.status_code == 201
        assert Decimal(response.json()["payment_amount"]) == Decimal("1.00")

        response = await client.post(
            f"/api/v1/loans/{loan['id']}/payments",
            json={"amount": "0.60", "staff_id": str(staff.id)},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "over_payment"

        response = await client.get(f"/api/v1/loans/{loan['id']}/payments")
        assert len(response.json()) == 1

        response = await client.get(f"/api/v1/loans/{loan['id']}")
        assert Decimal(response.json()["outstanding_fine"]) == Decimal("0.50")

    @pytest.mark.anyio
    async def test_negative_payment(self, client: AsyncClient, factory, staff):
        loan = await checkout(client, await factory.member(), await factory.copy(), staff)

        response = await client.post(
            f"/api/v1/loans/{loan['id']}/payments",
            json={"amount": "-1.00", "staff_id": str(staff.id)},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "invalid_payment_amount"

    @pytest.mark.anyio
    async def test_renew(self, client: AsyncClient, factory, staff):
        loan = await checkout(client, await factory.member(), await factory.copy(), staff)

        response = await client.patch(
            f"/api/v1/loans/{loan['id']}/renew",
            params={"now": "2024-03-10"},
        )

        assert response.status_code == 200
        assert response.json()["due_date"] == "2024-03-29"
        assert response.json()["renewal_count"] == 1

    @pytest.mark.anyio
    async def test_renew_with_pending_reservation(self, client: AsyncClient, factory, staff):
        book = await factory.book()
        loan = await checkout(client, await factory.member(), await factory.copy(book=book), staff)
        waiting = await factory.member()
        await client.post(
            "/api/v1/reservations",
            json={"member_id": str(waiting.id), "book_id": str(book.id), "now": "2024-03-02"},
        )

        response = await client.patch(
            f"/api/v1/loans/{loan['id']}/renew",
            params={"now": "2024-03-08"},
        )

        assert response.status_code == 409
        assert response.json()["error"] == "not_renewable"

    @pytest.mark.anyio
    async def test_mark_damaged(self, client: AsyncClient, factory, staff):
        loan = await checkout(client, await factory.member(), await factory.copy(), staff)

        response = await client.patch(
            f"/api/v1/loans/{loan['id']}/damaged",
            json={"staff_id": str(staff.id), "now": "2024-03-05"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "DAMAGED"

        response = await client.patch(
            f"/api/v1/loans/{loan['id']}/lost",
            json={"staff_id": str(staff.id), "now": "2024-03-06"},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "invalid_state"


# ==========================================
# Test: Reservations
# ==========================================

class TestReservationEndpoints:
    """Testes para /api/v1/reservations."""

    @pytest.mark.anyio
    async def test_create_with_default_expiry(self, client: AsyncClient, factory):
        book = await factory.book()
        member = await factory.member()

        response = await client.post(
            "/api/v1/reservations",
            json={"member_id": str(member.id), "book_id": str(book.id), "now": "2024-03-01"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "ACTIVE"
        assert body["priority_number"] == 1
        assert body["expiry_date"] == "2024-03-08"

    @pytest.mark.anyio
    async def test_create_duplicate(self, client: AsyncClient, factory):
        book = await factory.book()
        member = await factory.member()
        payload = {"member_id": str(member.id), "book_id": str(book.id), "now": "2024-03-01"}
        await client.post("/api/v1/reservations", json=payload)

        response = await client.post("/api/v1/reservations", json=payload)

        assert response.status_code == 409
        assert response.json()["error"] == "duplicate_reservation"

    @pytest.mark.anyio
    async def test_create_with_past_expiry(self, client: AsyncClient, factory):
        book = await factory.book()
        member = await factory.member()

        response = await client.post(
            "/api/v1/reservations",
            json={
                "member_id": str(member.id),
                "book_id": str(book.id),
                "expiry_date": "2024-02-01",
                "now": "2024-03-01",
            },
        )

        assert response.status_code == 422
        assert response.json()["error"] == "invalid_reservation"

    @pytest.mark.anyio
    async def test_queue_and_cancel(self, client: AsyncClient, factory):
        book = await factory.book()
        first = await factory.member()
        second = await factory.member()
        created = []
        for member in (first, second):
            response = await client.post(
                "/api/v1/reservations",
                json={"member_id": str(member.id), "book_id": str(book.id), "now": "2024-03-01"},
            )
            created.append(response.json())

        response = await client.patch(f"/api/v1/reservations/{created[0]['id']}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"

        response = await client.get(f"/api/v1/reservations/queue/{book.id}")
        assert [r["id"] for r in response.json()] == [created[1]["id"]]

    @pytest.mark.anyio
    async def test_return_hands_copy_to_reservation(self, client: AsyncClient, factory, staff):
        book = await factory.book()
        copy = await factory.copy(book=book)
        waiting = await factory.member()
        loan = await checkout(client, await factory.member(), copy, staff)
        await client.post(
            "/api/v1/reservations",
            json={"member_id": str(waiting.id), "book_id": str(book.id), "now": "2024-03-02"},
        )

        response = await client.patch(
            f"/api/v1/loans/{loan['id']}/return",
            json={"staff_id": str(staff.id), "now": "2024-03-05"},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["reservation"]["status"] == "FULFILLED"
        assert body["hold_loan"]["member_id"] == str(waiting.id)
        assert body["hold_loan"]["copy_id"] == str(copy.id)
        assert body["reservation"]["fulfilled_loan_id"] == body["hold_loan"]["id"]

    @pytest.mark.anyio
    async def test_offer_available_copy(self, client: AsyncClient, factory, staff):
        book = await factory.book()
        copy = await factory.copy(book=book)
        member = await factory.member()
        await client.post(
            "/api/v1/reservations",
            json={"member_id": str(member.id), "book_id": str(book.id), "now": "2024-03-01"},
        )

        response = await client.post(
            f"/api/v1/reservations/offer/{copy.id}",
            json={"staff_id": str(staff.id), "now": "2024-03-01"},
        )

        assert response.status_code == 200
        assert response.json()["hold_loan"]["member_id"] == str(member.id)


# ==========================================
# Test: Books / System
# ==========================================

class TestSystemEndpoints:
    """Testes para varreduras e retirada de título."""

    @pytest.mark.anyio
    async def test_overdue_sweep(self, client: AsyncClient, factory, staff):
        loan = await checkout(client, await factory.member(), await factory.copy(), staff)

        response = await client.post("/api/v1/system/sweep-overdue", params={"as_of": "2024-03-20"})
        assert response.status_code == 200
        assert response.json()["updated"] == [loan["id"]]

        response = await client.post("/api/v1/system/sweep-overdue", params={"as_of": "2024-03-20"})
        assert response.json()["updated"] == []

        response = await client.get(f"/api/v1/loans/{loan['id']}")
        assert response.json()["status"] == "OVERDUE"
        assert Decimal(response.json()["fine_amount"]) == Decimal("2.50")

    @pytest.mark.anyio
    async def test_expire_reservations(self, client: AsyncClient, factory):
        book = await factory.book()
        member = await factory.member()
        created = await client.post(
            "/api/v1/reservations",
            json={"member_id": str(member.id), "book_id": str(book.id), "now": "2024-03-01"},
        )

        response = await client.post(
            "/api/v1/system/expire-reservations",
            params={"as_of": "2024-03-09"},
        )

        assert response.status_code == 200
        assert response.json()["updated"] == [created.json()["id"]]

    @pytest.mark.anyio
    async def test_retire_book(self, client: AsyncClient, factory):
        book = await factory.book()
        await factory.copy(book=book)

        response = await client.post(f"/api/v1/books/{book.id}/retire")

        assert response.status_code == 200
        assert response.json()["book"]["is_retired"] is True
        assert response.json()["withdrawn_copies"] == 1

        response = await client.post(f"/api/v1/books/{book.id}/retire")
        assert response.status_code == 409
