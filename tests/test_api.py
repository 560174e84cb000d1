"""
Testes de integração dos endpoints.

Testa fluxos completos via HTTP:
    - Autorização (401/403)
    - Formato camelCase das respostas
    - Empréstimo, devolução, lista de espera, notificações e dashboard
    - Endpoints administrativos de simulação
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from circulation.models.enums import UserRole

API = "/api/v1"


@pytest.fixture
async def staff(make_user):
    return await make_user(UserRole.LIBRARIAN)


@pytest.fixture
async def reader(make_user):
    return await make_user(UserRole.STANDARD)


async def create_book(client: AsyncClient, headers: dict, title: str = "Dom Casmurro") -> dict:
    response = await client.post(
        f"{API}/books",
        json={"title": title, "author": "Machado de Assis"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


# ==========================================
# Autorização
# ==========================================

class TestAuthorization:
    """Testes de autenticação e permissão."""

    @pytest.mark.anyio
    async def test_missing_token(self, client: AsyncClient):
        response = await client.get(f"{API}/dashboard")
        assert response.status_code in (401, 403)

    @pytest.mark.anyio
    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get(
            f"{API}/dashboard",
            headers={"Authorization": "Bearer invalid-token"},
        )
        assert response.status_code == 401

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/admin/simulated-date"),
            ("delete", "/admin/simulated-date"),
            ("get", "/admin/auto-returns"),
            ("get", "/admin/checkouts"),
            ("post", "/waitlist/expire"),
        ],
    )
    async def test_admin_routes_forbidden_for_readers(
        self, client: AsyncClient, reader, auth_headers, method, path
    ):
        response = await client.request(method.upper(), f"{API}{path}", headers=auth_headers(reader))
        assert response.status_code == 403

    @pytest.mark.anyio
    async def test_reader_cannot_create_book(self, client: AsyncClient, reader, auth_headers):
        response = await client.post(
            f"{API}/books",
            json={"title": "Livro", "author": "Autor"},
            headers=auth_headers(reader),
        )
        assert response.status_code == 403


# ==========================================
# Simulação (admin)
# ==========================================

class TestSimulatedDateEndpoints:
    """Testes dos endpoints /admin/simulated-date."""

    @pytest.mark.anyio
    async def test_get_status_camel_case(self, client: AsyncClient, staff, auth_headers):
        response = await client.get(f"{API}/admin/simulated-date", headers=auth_headers(staff))

        assert response.status_code == 200
        data = response.json()
        assert data["simulatedDate"] is None
        assert data["isSimulating"] is False
        assert "realDate" in data

    @pytest.mark.anyio
    async def test_set_and_clear(self, client: AsyncClient, staff, auth_headers):
        headers = auth_headers(staff)

        response = await client.post(
            f"{API}/admin/simulated-date",
            json={"date": "2030-01-10T12:00:00Z"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["simulatedDate"].startswith("2030-01-10T12:00:00")
        assert data["isSimulating"] is True
        for key in ("notificationsGenerated", "autoReturnsProcessed", "autoReturnsReverted"):
            assert data[key] == 0

        status_response = await client.get(f"{API}/admin/simulated-date", headers=headers)
        assert status_response.json()["isSimulating"] is True

        clear_response = await client.delete(f"{API}/admin/simulated-date", headers=headers)
        assert clear_response.status_code == 200
        assert clear_response.json() == {"notificationsDeleted": 0, "autoReturnsReverted": 0}

        status_response = await client.get(f"{API}/admin/simulated-date", headers=headers)
        assert status_response.json()["isSimulating"] is False

    @pytest.mark.anyio
    async def test_invalid_date(self, client: AsyncClient, staff, auth_headers):
        response = await client.post(
            f"{API}/admin/simulated-date",
            json={"date": "ontem"},
            headers=auth_headers(staff),
        )

        assert response.status_code == 400
        assert "ISO 8601" in response.json()["detail"]


# ==========================================
# Fluxo do leitor
# ==========================================

class TestReaderFlow:
    """Fluxo completo: empréstimo, fila, devolução, notificações e dashboard."""

    @pytest.mark.anyio
    async def test_checkout_and_return(self, client: AsyncClient, staff, reader, auth_headers):
        book = await create_book(client, auth_headers(staff))
        assert book["status"] == "available"
        assert book["holdUntil"] is None
        headers = auth_headers(reader)

        response = await client.post(f"{API}/checkouts", json={"bookId": book["id"]}, headers=headers)

        assert response.status_code == 201
        checkout = response.json()
        assert checkout["bookTitle"] == "Dom Casmurro"
        assert checkout["status"] == "active"
        assert checkout["isOverdue"] is False

        my = await client.get(f"{API}/checkouts/my", headers=headers)
        assert [c["id"] for c in my.json()] == [checkout["id"]]

        response = await client.patch(f"{API}/checkouts/{checkout['id']}/return", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["bookStatus"] == "available"
        assert data["waitlistNotified"] is False
        assert Decimal(str(data["lateFee"])) == 0

        response = await client.patch(f"{API}/checkouts/{checkout['id']}/return", headers=headers)
        assert response.status_code == 400

    @pytest.mark.anyio
    async def test_waitlist_and_hold(
        self, client: AsyncClient, staff, reader, make_user, auth_headers
    ):
        premium = await make_user(UserRole.PREMIUM)
        book = await create_book(client, auth_headers(staff))

        checkout = (
            await client.post(
                f"{API}/checkouts", json={"bookId": book["id"]}, headers=auth_headers(reader)
            )
        ).json()

        response = await client.post(
            f"{API}/waitlist", json={"bookId": book["id"]}, headers=auth_headers(premium)
        )
        assert response.status_code == 201
        assert response.json()["queuePosition"] == 1
        assert response.json()["isPriority"] is True

        response = await client.patch(
            f"{API}/checkouts/{checkout['id']}/return", headers=auth_headers(reader)
        )
        assert response.json()["bookStatus"] == "on_hold_premium"
        assert response.json()["waitlistNotified"] is True

        # Leitor fora da fila não pode retirar
        detail = await client.get(f"{API}/books/{book['id']}", headers=auth_headers(reader))
        assert detail.json()["canCheckout"] is False
        assert detail.json()["holdEnds"]["premiumEnds"] is not None

        detail = await client.get(f"{API}/books/{book['id']}", headers=auth_headers(premium))
        assert detail.json()["canCheckout"] is True
        assert detail.json()["waitlistPosition"] == 1

        response = await client.post(
            f"{API}/checkouts", json={"bookId": book["id"]}, headers=auth_headers(premium)
        )
        assert response.status_code == 201

        waitlist = await client.get(f"{API}/waitlist/my", headers=auth_headers(premium))
        assert waitlist.json() == []

    @pytest.mark.anyio
    async def test_notifications_inbox(self, client: AsyncClient, staff, reader, auth_headers):
        book = await create_book(client, auth_headers(staff))
        headers = auth_headers(reader)
        await client.post(f"{API}/checkouts", json={"bookId": book["id"]}, headers=headers)

        response = await client.get(f"{API}/notifications", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["unreadCount"] == 1
        notification = data["items"][0]
        assert notification["type"] == "checkout_confirmed"
        assert notification["isRead"] is False

        response = await client.patch(
            f"{API}/notifications/{notification['id']}/read", headers=headers
        )
        assert response.json()["isRead"] is True

        # Notificação de outro leitor
        response = await client.patch(
            f"{API}/notifications/{notification['id']}/read", headers=auth_headers(staff)
        )
        assert response.status_code == 403

        response = await client.post(f"{API}/notifications/read-all", headers=headers)
        assert response.json() == {"updated": 0}

    @pytest.mark.anyio
    async def test_dashboard(self, client: AsyncClient, staff, reader, auth_headers):
        book = await create_book(client, auth_headers(staff))
        headers = auth_headers(reader)
        await client.post(f"{API}/checkouts", json={"bookId": book["id"]}, headers=headers)

        response = await client.get(f"{API}/dashboard", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data["checkouts"]) == 1
        assert data["waitlist"] == []
        assert data["unreadNotifications"] == 1
        assert Decimal(str(data["totalLateFees"])) == 0
        assert data["transitions"]["premiumToWaitlist"] == 0
        assert data["entriesExpired"] == 0

    @pytest.mark.anyio
    async def test_admin_extend_and_list(self, client: AsyncClient, staff, reader, auth_headers):
        book = await create_book(client, auth_headers(staff))
        checkout = (
            await client.post(
                f"{API}/checkouts", json={"bookId": book["id"]}, headers=auth_headers(reader)
            )
        ).json()

        response = await client.patch(
            f"{API}/admin/checkouts/{checkout['id']}",
            json={"action": "extend", "extendDays": 3},
            headers=auth_headers(staff),
        )
        assert response.status_code == 200
        assert response.json()["dueDate"] > checkout["dueDate"]

        response = await client.get(
            f"{API}/admin/checkouts", params={"status": "active"}, headers=auth_headers(staff)
        )
        assert response.json()["total"] == 1

        response = await client.patch(
            f"{API}/admin/checkouts/{checkout['id']}",
            json={"action": "destroy"},
            headers=auth_headers(staff),
        )
        assert response.status_code == 400

    @pytest.mark.anyio
    async def test_deactivate_book(self, client: AsyncClient, staff, reader, auth_headers):
        book = await create_book(client, auth_headers(staff))

        response = await client.patch(
            f"{API}/books/{book['id']}/status",
            json={"active": False},
            headers=auth_headers(staff),
        )
        assert response.json()["status"] == "inactive"

        response = await client.post(
            f"{API}/checkouts", json={"bookId": book["id"]}, headers=auth_headers(reader)
        )
        assert response.status_code == 400
