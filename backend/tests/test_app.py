import asyncio
import json
import os
import unittest

os.environ.setdefault("ADDRESS_FIX_USE_IN_MEMORY_BACKENDS", "true")

from fastapi.testclient import TestClient

from backend.app import create_app
from backend.db import InMemoryVerificationStore
from backend.dependencies import get_session, get_store_client, get_verification_store
from backend.routes import stream_verifications
from shared.constants import MAX_NAME_LENGTH

CUSTOMER_FIELDS = {
    "order_id": "EX-123",
    "name": "Maria",
    "address": "Rua Exemplo,10",
}


class _DisconnectingRequest:
    """Reports the client as gone after a number of polls."""

    def __init__(self, polls):
        self.polls = polls

    async def is_disconnected(self):
        self.polls -= 1
        return self.polls < 0


async def _collect(iterator):
    return [chunk async for chunk in iterator]


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.store = get_verification_store()
        if isinstance(self.store, InMemoryVerificationStore):
            self.store.reset()
        self.client = TestClient(create_app())
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)

    def _documents(self):
        return [data for _, data in self.store.list_all()]

    def test_session_is_bootstrapped_on_startup(self):
        response = self.client.get("/api/session")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertTrue(payload["authenticated"])
        self.assertTrue(payload["is_anonymous"])
        self.assertTrue(payload["uid"])

    def test_view_resolves_customer_parameters(self):
        response = self.client.get(
            "/api/view", params={"view": "customer", "orderId": "EX-123"}
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["screen"], "customer")
        self.assertEqual(payload["customer"]["order_id"], "EX-123")
        self.assertEqual(payload["customer"]["name"], "Cliente")
        self.assertEqual(payload["customer"]["address"], "Confirme seu endereço abaixo")

    def test_view_defaults_to_admin(self):
        response = self.client.get("/api/view")
        self.assertEqual(response.json(), {"screen": "admin", "customer": None})

    def test_submit_and_list(self):
        response = self.client.post(
            "/api/verifications",
            json={
                "order_id": "EX-123",
                "name": "Maria",
                "original_address": "Rua Exemplo, 10",
                "status": "needs_change",
                "updated_address": "Rua Nova 55, Apto 2",
            },
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertTrue(payload["submitted"])
        self.assertIsNotNone(payload["id"])

        listing = self.client.get("/api/verifications").json()
        self.assertFalse(listing["loading"])
        self.assertEqual(listing["summary"]["total"], 1)
        self.assertEqual(listing["summary"]["needs_change"], 1)
        record = listing["records"][0]
        self.assertEqual(record["id"], payload["id"])
        self.assertEqual(record["status"], "needs_change")
        self.assertEqual(record["updatedAddress"], "Rua Nova 55, Apto 2")
        self.assertFalse(record["syncedWithCarrier"])

    def test_submit_rejects_short_updated_address(self):
        response = self.client.post(
            "/api/verifications",
            json={
                "order_id": "EX-123",
                "name": "Maria",
                "original_address": "Rua Exemplo, 10",
                "status": "needs_change",
                "updated_address": "Rua 1",
            },
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"submitted": False, "id": None})
        self.assertEqual(self._documents(), [])

    def test_submit_rejects_unknown_status(self):
        response = self.client.post(
            "/api/verifications",
            json={
                "order_id": "EX-123",
                "name": "Maria",
                "original_address": "Rua Exemplo, 10",
                "status": "maybe",
            },
        )
        self.assertEqual(response.status_code, 422)

    def test_list_is_sorted_and_filtered(self):
        for order_id, name, created_at in (
            ("EX-1", "Maria", 1000),
            ("EX-3", "Joana", 3000),
            ("AB-2", "Mariana", 2000),
        ):
            self.store.add(
                {
                    "orderId": order_id,
                    "customerName": name,
                    "originalAddress": "Rua A, 1",
                    "status": "confirmed",
                    "updatedAddress": "",
                    "syncedWithCarrier": False,
                    "createdAt": created_at,
                }
            )

        listing = self.client.get("/api/verifications").json()
        self.assertEqual(
            [r["orderId"] for r in listing["records"]], ["EX-3", "AB-2", "EX-1"]
        )

        filtered = self.client.get("/api/verifications", params={"q": "MAR"}).json()
        self.assertEqual([r["orderId"] for r in filtered["records"]], ["AB-2", "EX-1"])
        self.assertEqual(filtered["summary"]["total"], 3)

    def test_mark_synced_is_idempotent(self):
        record_id = self.client.post(
            "/api/verifications",
            json={
                "order_id": "EX-123",
                "name": "Maria",
                "original_address": "Rua Exemplo, 10",
                "status": "confirmed",
            },
        ).json()["id"]

        for _ in range(2):
            response = self.client.post(f"/api/verifications/{record_id}/synced")
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json(), {"id": record_id, "synced": True})
        self.assertTrue(self._documents()[0]["syncedWithCarrier"])

    def test_mark_synced_unknown_record(self):
        response = self.client.post("/api/verifications/missing/synced")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["synced"])

    def test_customer_link(self):
        response = self.client.get("/api/customer-link")
        self.assertEqual(response.status_code, 200)
        url = response.json()["url"]
        self.assertTrue(url.startswith("http://testserver/?view=customer"))
        self.assertIn("orderId=EX-123", url)
        self.assertIn("name=Maria", url)

    def test_stream_sends_filtered_snapshot_and_closes_feed(self):
        for order_id, name in (("EX-1", "Maria"), ("ZZ-9", "Joana")):
            self.store.add(
                {
                    "orderId": order_id,
                    "customerName": name,
                    "originalAddress": "Rua A, 1",
                    "status": "confirmed",
                    "updatedAddress": "",
                    "syncedWithCarrier": False,
                    "createdAt": 1000,
                }
            )
        watchers = self.store.watcher_count

        response = stream_verifications(
            _DisconnectingRequest(polls=1),
            q="mar",
            client=get_store_client(),
            session=get_session(),
        )
        self.assertEqual(response.media_type, "text/event-stream")
        self.assertEqual(self.store.watcher_count, watchers + 1)

        chunks = asyncio.run(_collect(response.body_iterator))
        self.assertEqual(len(chunks), 1)
        self.assertTrue(chunks[0].startswith("data: "))
        self.assertTrue(chunks[0].endswith("\n\n"))
        payload = json.loads(chunks[0][len("data: "):])
        self.assertEqual([r["orderId"] for r in payload], ["EX-1"])
        self.assertEqual(self.store.watcher_count, watchers)


class CustomerPageTests(unittest.TestCase):
    def setUp(self):
        self.store = get_verification_store()
        if isinstance(self.store, InMemoryVerificationStore):
            self.store.reset()
        self.client = TestClient(create_app())
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)

    def test_customer_page_uses_url_parameters(self):
        response = self.client.get(
            "/?view=customer&orderId=EX-123&name=Maria&address=Rua+Exemplo,10"
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("Maria", response.text)
        self.assertIn("Endereço do Pedido EX-123", response.text)
        self.assertIn("Rua Exemplo,10", response.text)
        self.assertIn("SIM, ESTÁ CORRETO!", response.text)

    def test_customer_page_fallbacks(self):
        response = self.client.get("/?view=customer&name=")
        self.assertIn("Endereço do Pedido S/N", response.text)
        self.assertIn("<strong>Cliente</strong>", response.text)
        self.assertIn("Confirme seu endereço abaixo", response.text)

    def test_edit_and_back(self):
        response = self.client.post("/customer", data={"action": "edit", **CUSTOMER_FIELDS})
        self.assertIn("Qual o endereço correto?", response.text)

        response = self.client.post("/customer", data={"action": "back", **CUSTOMER_FIELDS})
        self.assertIn("Tudo certo com a entrega?", response.text)
        self.assertEqual(self.store.list_all(), [])

    def test_confirm_submits_once(self):
        response = self.client.post(
            "/customer", data={"action": "confirm", **CUSTOMER_FIELDS}
        )
        self.assertIn("Confirmado!", response.text)
        self.assertNotIn("<form", response.text)

        documents = [data for _, data in self.store.list_all()]
        self.assertEqual(len(documents), 1)
        self.assertEqual(documents[0]["status"], "confirmed")
        self.assertEqual(documents[0]["updatedAddress"], "")

    def test_update_with_short_address_stays_on_edit(self):
        response = self.client.post(
            "/customer",
            data={"action": "update", "updated_address": "Rua 1", **CUSTOMER_FIELDS},
        )
        self.assertIn("Qual o endereço correto?", response.text)
        self.assertIn("Rua 1", response.text)
        self.assertEqual(self.store.list_all(), [])

    def test_overlong_form_fields_are_rejected(self):
        response = self.client.post(
            "/customer",
            data={
                **CUSTOMER_FIELDS,
                "action": "confirm",
                "name": "M" * (MAX_NAME_LENGTH + 1),
            },
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(self.store.list_all(), [])

    def test_admin_feed_holds_only_latest_snapshot(self):
        for _ in range(50):
            self.client.post("/customer", data={"action": "confirm", **CUSTOMER_FIELDS})
        feed = self.client.app.state.admin_feed
        self.assertEqual(len(feed.latest), 50)
        self.assertLessEqual(feed.pending, 1)

    def test_unknown_action(self):
        response = self.client.post("/customer", data={"action": "delete"})
        self.assertEqual(response.status_code, 400)

    def test_change_request_reaches_admin_feed(self):
        self.client.get("/?view=customer&orderId=EX-123&name=Maria&address=Rua+Exemplo,10")
        self.client.post("/customer", data={"action": "edit", **CUSTOMER_FIELDS})
        response = self.client.post(
            "/customer",
            data={
                "action": "update",
                "updated_address": "Rua Nova 55, Apto 2",
                **CUSTOMER_FIELDS,
            },
        )
        self.assertIn("Confirmado!", response.text)
        self.assertNotIn("ATUALIZAR ENDEREÇO", response.text)

        feed = self.client.app.state.admin_feed
        self.assertEqual(len(feed.latest), 1)
        record = feed.latest[0]
        self.assertEqual(record.status, "needs_change")
        self.assertEqual(record.updated_address, "Rua Nova 55, Apto 2")
        self.assertFalse(record.synced_with_carrier)

        admin = self.client.get("/")
        self.assertIn("Rua Nova 55, Apto 2", admin.text)
        self.assertIn('<span id="needs-change">1</span>', admin.text)


class AdminPageTests(unittest.TestCase):
    def setUp(self):
        self.store = get_verification_store()
        if isinstance(self.store, InMemoryVerificationStore):
            self.store.reset()
        self.client = TestClient(create_app())
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)

    def _add(self, order_id, name, created_at):
        return self.store.add(
            {
                "orderId": order_id,
                "customerName": name,
                "originalAddress": "Rua A, 1",
                "status": "confirmed",
                "updatedAddress": "",
                "syncedWithCarrier": False,
                "createdAt": created_at,
            }
        )

    def test_empty_dashboard(self):
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("Verificação de Entregas", response.text)
        self.assertIn("Nenhuma resposta encontrada.", response.text)
        self.assertIn("Testar Link Cliente", response.text)

    def test_dashboard_filters(self):
        self._add("EX-123", "Maria", 1)
        self._add("ZZ-9", "Joana", 2)

        response = self.client.get("/", params={"q": "ex-1"})
        self.assertIn("#EX-123", response.text)
        self.assertNotIn("#ZZ-9", response.text)
        self.assertIn('<span id="total">2</span>', response.text)

    def test_mark_synced_redirects(self):
        record_id = self._add("EX-123", "Maria", 1)
        response = self.client.post(
            f"/admin/verifications/{record_id}/synced", follow_redirects=False
        )
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/")
        self.assertIn("CONFERIDO", self.client.get("/").text)


if __name__ == "__main__":
    unittest.main()
