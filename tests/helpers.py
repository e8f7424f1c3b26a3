"""Request helpers shared by the API tests."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from httpx import AsyncClient, Response


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def future(days: int = 30) -> str:
    return (_now() + timedelta(days=days)).replace(microsecond=0).isoformat()


def past(days: int = 10) -> str:
    return (_now() - timedelta(days=days)).replace(microsecond=0).isoformat()


@dataclass
class Tenant:
    """A provisioned company plus an authenticated staff session."""

    client: AsyncClient
    company_id: int
    headers: dict[str, str]

    async def get(self, path: str, **kwargs) -> Response:
        return await self.client.get(path, headers=self.headers, **kwargs)

    async def post(self, path: str, json: dict) -> Response:
        return await self.client.post(path, json=json, headers=self.headers)

    async def put(self, path: str, json: dict) -> Response:
        return await self.client.put(path, json=json, headers=self.headers)

    async def delete(self, path: str) -> Response:
        return await self.client.delete(path, headers=self.headers)

    async def create_client(self, name: str = "Globex") -> dict:
        resp = await self.post("/api/clients", {
            "name": name,
            "email": f"{name.lower().replace(' ', '')}@clients.com",
        })
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def create_invoice(
        self,
        client_id: int,
        items: list[tuple[str, str]] | None = None,
        tax_rate: str = "0",
        due_date: str | None = None,
        **invoice_fields,
    ) -> dict:
        """Create an invoice from (quantity, rate) pairs and return its JSON."""
        items = items or [("1", "100")]
        resp = await self.post("/api/invoices", {
            "invoice": {
                "client_id": client_id,
                "tax_rate": tax_rate,
                "due_date": due_date or future(),
                **invoice_fields,
            },
            "items": [
                {"description": f"Line {i}", "quantity": qty, "rate": rate}
                for i, (qty, rate) in enumerate(items, start=1)
            ],
        })
        assert resp.status_code == 201, resp.text
        return resp.json()

    async def pay(self, invoice_id: int, amount: str, **extra) -> Response:
        return await self.post("/api/payments", {
            "invoice_id": invoice_id,
            "amount": amount,
            **extra,
        })
