import unittest
from urllib.parse import parse_qs, urlparse

from backend.views import (
    Screen,
    back_to_confirm,
    build_customer_link,
    can_submit_update,
    mark_submitted,
    resolve_view,
    start_edit,
)


class ResolveViewTests(unittest.TestCase):
    def test_admin_by_default(self):
        self.assertEqual(resolve_view({}).screen, Screen.ADMIN)
        self.assertEqual(resolve_view({"view": "admin"}).screen, Screen.ADMIN)

    def test_customer_parameters(self):
        state = resolve_view(
            {"view": "customer", "orderId": "EX-123", "name": "Maria", "address": "Rua Exemplo, 10"}
        )
        self.assertEqual(state.screen, Screen.CUSTOMER_CONFIRM)
        self.assertEqual(state.customer.order_id, "EX-123")
        self.assertEqual(state.customer.name, "Maria")
        self.assertEqual(state.customer.address, "Rua Exemplo, 10")
        self.assertFalse(state.submitted)

    def test_fallbacks_for_missing_or_empty_parameters(self):
        cases = [
            {"view": "customer"},
            {"view": "customer", "orderId": "", "name": "", "address": ""},
        ]
        for params in cases:
            customer = resolve_view(params).customer
            self.assertEqual(customer.order_id, "S/N")
            self.assertEqual(customer.name, "Cliente")
            self.assertEqual(customer.address, "Confirme seu endereço abaixo")

    def test_partial_fallbacks(self):
        customer = resolve_view({"view": "customer", "name": "Maria"}).customer
        self.assertEqual(customer.order_id, "S/N")
        self.assertEqual(customer.name, "Maria")
        self.assertEqual(customer.address, "Confirme seu endereço abaixo")


class TransitionTests(unittest.TestCase):
    def test_edit_and_back(self):
        state = resolve_view({"view": "customer", "name": "Maria"})
        edit = start_edit(state)
        self.assertEqual(edit.screen, Screen.CUSTOMER_EDIT)
        self.assertEqual(edit.customer, state.customer)
        self.assertEqual(back_to_confirm(edit).screen, Screen.CUSTOMER_CONFIRM)

    def test_mark_submitted(self):
        state = mark_submitted(start_edit(resolve_view({"view": "customer"})))
        self.assertTrue(state.submitted)

    def test_admin_has_no_customer_transitions(self):
        admin = resolve_view({})
        for transition in (start_edit, back_to_confirm, mark_submitted):
            with self.assertRaises(ValueError):
                transition(admin)


class HelperTests(unittest.TestCase):
    def test_can_submit_update(self):
        self.assertFalse(can_submit_update(None))
        self.assertFalse(can_submit_update(""))
        self.assertFalse(can_submit_update("123456789"))
        self.assertTrue(can_submit_update("1234567890"))

    def test_build_customer_link(self):
        url = build_customer_link(
            "https://example.test/app?view=admin", "EX-123", "Maria", "Rua Exemplo, 10"
        )
        parsed = urlparse(url)
        self.assertEqual(parsed.path, "/app")
        query = {key: values[0] for key, values in parse_qs(parsed.query).items()}
        self.assertEqual(
            query,
            {
                "view": "customer",
                "orderId": "EX-123",
                "name": "Maria",
                "address": "Rua Exemplo, 10",
            },
        )
        self.assertEqual(resolve_view(query).customer.address, "Rua Exemplo, 10")


if __name__ == "__main__":
    unittest.main()
