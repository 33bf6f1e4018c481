"""
User Model Tests
================

Test Coverage:
1. UserManager - create_user / create_superuser / agents()
2. Display helpers - full name, initials
3. Role checks

Run tests:
    python manage.py test apps.accounts.tests.test_models
"""

from django.contrib.auth import get_user_model
from django.test import TestCase

User = get_user_model()


class UserManagerTest(TestCase):

    def test_create_user_defaults_to_agent(self):
        user = User.objects.create_user(email='Maria@Realty.COM', password='testpass123')

        self.assertEqual(user.role, User.ROLE_AGENT)
        self.assertEqual(user.email, 'Maria@realty.com')
        self.assertTrue(user.check_password('testpass123'))
        self.assertFalse(user.is_staff)

    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email='', password='testpass123')

    def test_superuser_is_manager(self):
        user = User.objects.create_superuser(email='root@realty.com', password='testpass123')

        self.assertEqual(user.role, User.ROLE_MANAGER)
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_manager())

    def test_agents(self):
        """
        Test: agents() queryset

        Expected: Active agents only, no managers
        """
        agent = User.objects.create_user(email='agent@realty.com', role='agent')
        User.objects.create_user(email='gone@realty.com', role='agent', is_active=False)
        User.objects.create_user(email='boss@realty.com', role='manager')

        self.assertEqual(list(User.objects.agents()), [agent])

    def test_table_name(self):
        self.assertEqual(User._meta.db_table, 'profiles')


class UserDisplayTest(TestCase):

    def test_full_name_and_initials(self):
        user = User(email='maria@realty.com', first_name='Maria', last_name='Silva')

        self.assertEqual(user.get_full_name(), 'Maria Silva')
        self.assertEqual(user.get_initials(), 'MS')
        self.assertEqual(str(user), 'Maria Silva (maria@realty.com)')

    def test_fallback_to_email(self):
        user = User(email='maria@realty.com')

        self.assertEqual(user.get_full_name(), 'maria@realty.com')
        self.assertEqual(user.get_short_name(), 'maria@realty.com')
        self.assertEqual(user.get_initials(), 'M')

    def test_role_checks(self):
        self.assertTrue(User(role='manager').is_manager())
        self.assertFalse(User(role='manager').is_agent())
        self.assertTrue(User(role='agent').is_agent())
        self.assertFalse(User(role='agent').is_manager())
