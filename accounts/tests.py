"""Accounts app tests."""

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from accounts.permissions import actor_role
from accounts.serializers import normalize_phone
from orders.models import Order


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class RegistrationAndLoginTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.user = User.objects.create_user(username='existing', email='existing@example.com', password='12345678')
		cls.locked = User.objects.create_user(username='locked_user', password='12345678', is_locked=True)

	def setUp(self):
		self.client = APIClient()

	def test_register_normalizes_phone_and_ignores_role(self):
		res = self.client.post('/api/accounts/register/', {
			'username': 'new_shopper',
			'password': 'secret123',
			'email': 'New@Example.com',
			'phone_number': '090 123 4567',
			'role': 'admin',
		}, format='json')
		self.assertEqual(res.status_code, 201, res.data)

		user = get_user_model().objects.get(username='new_shopper')
		self.assertEqual(user.role, 'user')
		self.assertEqual(user.email, 'new@example.com')
		self.assertEqual(user.phone_number, '+84901234567')
		self.assertTrue(user.check_password('secret123'))

	def test_register_rejects_duplicate_email(self):
		res = self.client.post('/api/accounts/register/', {
			'username': 'another',
			'password': 'secret123',
			'email': 'EXISTING@example.com',
		}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertFalse(res.data['success'])
		self.assertIn('email', res.data['message'])

	def test_login_returns_tokens_and_profile(self):
		res = self.client.post('/api/accounts/login/', {'username': 'existing', 'password': '12345678'}, format='json')
		self.assertEqual(res.status_code, 200, res.data)
		self.assertIn('access', res.data)
		self.assertIn('refresh', res.data)
		self.assertEqual(res.data['user']['role'], 'user')

	def test_locked_account_cannot_login(self):
		res = self.client.post('/api/accounts/login/', {'username': 'locked_user', 'password': '12345678'}, format='json')
		self.assertEqual(res.status_code, 403)

	def test_profile_update(self):
		self.client.force_authenticate(user=self.user)
		res = self.client.put('/api/accounts/profile/me/', {'address': '12 Tran Hung Dao', 'role': 'admin'}, format='json')
		self.assertEqual(res.status_code, 200, res.data)
		self.assertEqual(res.data['address'], '12 Tran Hung Dao')
		self.assertEqual(res.data['role'], 'user')


class RoleTests(TestCase):
	def test_actor_role(self):
		User = get_user_model()
		shopper = User(username='a')
		admin = User(username='b', role=User.ROLE_ADMIN)
		superuser = User(username='c', is_superuser=True)
		self.assertEqual(actor_role(shopper), 'customer')
		self.assertEqual(actor_role(admin), 'admin')
		self.assertEqual(actor_role(superuser), 'admin')

	def test_normalize_phone_international(self):
		self.assertEqual(normalize_phone('+84 90 123 4567'), '+84901234567')
		self.assertEqual(normalize_phone('0084901234567'), '+84901234567')


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class CustomerAdminTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(username='manager', password='12345678', role='admin')
		cls.shopper = User.objects.create_user(username='regular', email='regular@example.com', password='12345678')
		cls.idle = User.objects.create_user(username='idle_one', password='12345678')
		Order.objects.create(
			user=cls.shopper, code='MS700001', full_name='Regular', phone='0900000000', address='Somewhere',
			sub_total=10, total=10, grand_total=10,
		)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.admin)

	def test_list_includes_order_count(self):
		res = self.client.get('/api/accounts/customers/')
		self.assertEqual(res.status_code, 200)
		counts = {row['username']: row['order_count'] for row in res.data}
		self.assertEqual(counts['regular'], 1)
		self.assertEqual(counts['idle_one'], 0)
		self.assertNotIn('password', res.data[0])

	def test_shoppers_are_refused(self):
		self.client.force_authenticate(user=self.shopper)
		self.assertEqual(self.client.get('/api/accounts/customers/').status_code, 403)

	def test_lock_requires_boolean(self):
		url = f'/api/accounts/customers/{self.shopper.id}/lock/'
		res = self.client.patch(url, {'is_locked': 'yes'}, format='json')
		self.assertEqual(res.status_code, 400)

		res = self.client.patch(url, {'is_locked': True}, format='json')
		self.assertEqual(res.status_code, 200, res.data)
		self.assertTrue(res.data['data']['is_locked'])
		self.shopper.refresh_from_db()
		self.assertTrue(self.shopper.is_locked)

	def test_admin_cannot_lock_self(self):
		res = self.client.patch(f'/api/accounts/customers/{self.admin.id}/lock/', {'is_locked': True}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_update_normalizes_phone(self):
		res = self.client.patch(f'/api/accounts/customers/{self.idle.id}/', {'phone_number': '0901234567'}, format='json')
		self.assertEqual(res.status_code, 200, res.data)
		self.assertEqual(res.data['phone_number'], '+84901234567')

	def test_delete_only_without_orders(self):
		res = self.client.delete(f'/api/accounts/customers/{self.shopper.id}/')
		self.assertEqual(res.status_code, 409)
		self.assertTrue(get_user_model().objects.filter(pk=self.shopper.id).exists())

		res = self.client.delete(f'/api/accounts/customers/{self.idle.id}/')
		self.assertEqual(res.status_code, 204)
		self.assertFalse(get_user_model().objects.filter(pk=self.idle.id).exists())
