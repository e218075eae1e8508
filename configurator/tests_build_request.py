from django.db import DatabaseError
from django.test import SimpleTestCase

from catalog.schema import Component
from configurator.services import build_request as flow
from configurator.services.selection import BuildSelection


def part(category, id, **attrs):
    return Component(id=str(id), category=category, name=f"{category} {id}", **attrs)


GOOD = BuildSelection([part("cpu", 1, socket="AM5"), part("motherboard", 2, socket="AM5")])
BAD = BuildSelection([part("cpu", 1, socket="AM5"), part("motherboard", 2, socket="LGA1700")])


def contact_state():
    return flow.confirm_components(flow.BuildRequestFlow(), GOOD)


class TestBuildRequestFlow(SimpleTestCase):
    def test_happy_path(self):
        state = flow.BuildRequestFlow()
        self.assertEqual(state.state, flow.COLLECTING_COMPONENTS)
        state = flow.confirm_components(state, GOOD)
        self.assertEqual(state.state, flow.COLLECTING_CONTACT_INFO)
        self.assertEqual(state.selection, {"motherboard": "2", "cpu": "1"})
        state = flow.provide_contact(state, " Ada ", "ada@example.com", notes="White case please")
        self.assertEqual(state.state, flow.SUBMITTING)
        self.assertEqual(state.contact["name"], "Ada")
        state = flow.submit(state, lambda s: "REF123")
        self.assertEqual(state.state, flow.SUBMITTED)
        self.assertEqual(state.reference, "REF123")
        self.assertTrue(state.is_finished)

    def test_empty_selection_cannot_be_confirmed(self):
        with self.assertRaises(flow.InvalidTransition):
            flow.confirm_components(flow.BuildRequestFlow(), BuildSelection())

    def test_critical_issue_blocks_confirmation(self):
        with self.assertRaises(flow.InvalidTransition) as ctx:
            flow.confirm_components(flow.BuildRequestFlow(), BAD)
        self.assertIn("Socket", ctx.exception.reason)

    def test_invalid_email(self):
        state = contact_state()
        with self.assertRaises(flow.InvalidTransition):
            flow.provide_contact(state, "Ada", "not-an-email")
        # the original flow object is untouched
        self.assertEqual(state.state, flow.COLLECTING_CONTACT_INFO)

    def test_back_returns_to_components(self):
        state = flow.back(contact_state())
        self.assertEqual(state.state, flow.COLLECTING_COMPONENTS)

    def test_illegal_transitions(self):
        start = flow.BuildRequestFlow()
        with self.assertRaises(flow.InvalidTransition):
            flow.back(start)
        with self.assertRaises(flow.InvalidTransition):
            flow.provide_contact(start, "Ada", "ada@example.com")
        with self.assertRaises(flow.InvalidTransition):
            flow.retry(start)
        with self.assertRaises(flow.InvalidTransition):
            flow.submit(start, lambda s: "REF")

    def test_failure_and_retry(self):
        state = flow.provide_contact(contact_state(), "Ada", "ada@example.com")

        def broken(_):
            raise DatabaseError("disk full")

        failed = flow.submit(state, broken)
        self.assertEqual(failed.state, flow.FAILED)
        self.assertIn("disk full", failed.error)
        retried = flow.retry(failed)
        self.assertEqual(retried.state, flow.SUBMITTING)
        self.assertEqual(retried.error, "")
        done = flow.submit(retried, lambda s: "REF9")
        self.assertEqual(done.state, flow.SUBMITTED)
