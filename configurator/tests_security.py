from allauth.account.signals import user_signed_up
from django.contrib.auth import get_user_model
from django.test import Client, RequestFactory, TestCase
from django.urls import reverse

from catalog.models import CPU, GPU, Motherboard

from .models import SESSION_KEY, SavedConfiguration


class SecurityTests(TestCase):
    def setUp(self):
        # A normal user and a superuser for admin access checks
        User = get_user_model()
        self.user = User.objects.create_user(username="tester", password="pass1234")
        self.admin = User.objects.create_superuser(
            username="admin", password="adminpass", email="admin@example.com"
        )

        self.cpu = CPU.objects.create(name="CPU1", socket="AM5", cores=8, price=100)
        self.gpu = GPU.objects.create(name="GPU1", vram_gb=16, price=150)
        self.mobo = Motherboard.objects.create(name="Mobo1", socket="AM5", price=80)

        self.client = Client()

    def _set_session_selection(self):
        session = self.client.session
        session[SESSION_KEY] = {
            "cpu": str(self.cpu.pk),
            "gpu": str(self.gpu.pk),
            "motherboard": str(self.mobo.pk),
        }
        session.save()

    def test_save_configuration_requires_login(self):
        """Saving without authentication redirects to login and stores nothing."""
        self._set_session_selection()

        resp = self.client.post(reverse("save_configuration"), follow=False)

        self.assertEqual(resp.status_code, 302)
        self.assertIn("/accounts/login/", resp.url)
        self.assertEqual(SavedConfiguration.objects.count(), 0)

    def test_saved_configurations_requires_login(self):
        resp = self.client.get(reverse("saved_configurations"))
        self.assertEqual(resp.status_code, 302)
        self.assertIn("/accounts/login/", resp.url)

    def test_admin_panel_requires_superuser(self):
        """Anonymous and normal users cannot reach the admin, a superuser can."""
        resp = self.client.get("/admin/", follow=False)
        self.assertEqual(resp.status_code, 302)

        self.client.login(username="tester", password="pass1234")
        resp2 = self.client.get("/admin/", follow=False)
        self.assertNotEqual(resp2.status_code, 200)

        self.client.logout()
        self.client.login(username="admin", password="adminpass")
        resp3 = self.client.get("/admin/", follow=False)
        self.assertEqual(resp3.status_code, 200)

    def test_save_configuration_authenticated(self):
        """A logged-in save is owned by that user with totals filled in."""
        self._set_session_selection()
        self.assertTrue(self.client.login(username="tester", password="pass1234"))

        resp = self.client.post(reverse("save_configuration"), {"name": "Mine"})

        self.assertEqual(resp.status_code, 201)
        configs = SavedConfiguration.objects.filter(user__username="tester")
        self.assertEqual(configs.count(), 1)
        config = configs.first()
        self.assertEqual(float(config.total_price), 330.0)
        self.assertEqual(config.selection["cpu"], str(self.cpu.pk))

    def test_saved_list_only_shows_own_configurations(self):
        SavedConfiguration.objects.create(user=self.admin, name="Admin build", selection={})
        SavedConfiguration.objects.create(user=self.user, name="My build", selection={})
        self.client.login(username="tester", password="pass1234")
        data = self.client.get(reverse("saved_configurations")).json()
        self.assertEqual([c["name"] for c in data["configurations"]], ["My build"])


class SignupMigrationTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="newbie", password="pass1234")
        self.cpu = CPU.objects.create(name="CPU1", cores=8, price=100)

    def _request(self, session):
        request = RequestFactory().get("/")
        request.session = session
        return request

    def test_session_selection_becomes_saved_configuration(self):
        request = self._request({SESSION_KEY: {"cpu": str(self.cpu.pk)}})
        user_signed_up.send(sender=self.user.__class__, request=request, user=self.user)

        config = SavedConfiguration.objects.get(user=self.user)
        self.assertEqual(config.name, "My first build")
        self.assertEqual(config.selection, {"cpu": str(self.cpu.pk)})
        self.assertEqual(float(config.total_price), 100.0)

    def test_empty_session_creates_nothing(self):
        user_signed_up.send(sender=self.user.__class__, request=self._request({}), user=self.user)
        self.assertFalse(SavedConfiguration.objects.exists())
