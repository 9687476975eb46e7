"""Coupons app tests."""

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIClient

from coupons.evaluator import discount_for, find_coupon, increment_used_count
from coupons.models import Coupon


def make_coupon(code, type_, value, **kwargs):
	now = timezone.now()
	kwargs.setdefault('valid_from', now - timedelta(days=1))
	kwargs.setdefault('valid_to', now + timedelta(days=1))
	return Coupon.objects.create(code=code, type=type_, value=Decimal(value), **kwargs)


class CouponRulesTests(TestCase):
	"""Validity window, usage cap and discount arithmetic."""

	def test_code_is_normalized_on_save(self):
		coupon = make_coupon(' sale10 ', Coupon.TYPE_PERCENT, 10)
		self.assertEqual(coupon.code, 'SALE10')
		self.assertEqual(find_coupon('Sale10'), coupon)
		self.assertIsNone(find_coupon(''))

	def test_validity_window_is_inclusive(self):
		coupon = make_coupon('WINDOW', Coupon.TYPE_FIXED, 5)
		self.assertTrue(coupon.is_valid(coupon.valid_from))
		self.assertTrue(coupon.is_valid(coupon.valid_to))
		self.assertFalse(coupon.is_valid(coupon.valid_to + timedelta(seconds=1)))
		self.assertFalse(coupon.is_valid(coupon.valid_from - timedelta(seconds=1)))

	def test_inactive_coupon_is_invalid(self):
		coupon = make_coupon('OFF', Coupon.TYPE_FIXED, 5, is_active=False)
		self.assertFalse(coupon.is_valid())
		self.assertEqual(coupon.calculate_discount(1000), 0)

	def test_usage_cap(self):
		coupon = make_coupon('TWICE', Coupon.TYPE_FIXED, 5, max_uses=2)
		increment_used_count(coupon.id)
		coupon.refresh_from_db()
		self.assertTrue(coupon.is_valid())
		increment_used_count(coupon.id)
		coupon.refresh_from_db()
		self.assertEqual(coupon.used_count, 2)
		self.assertFalse(coupon.is_valid())

	def test_percent_discount(self):
		coupon = make_coupon('SALE10', Coupon.TYPE_PERCENT, 10, min_order_value=Decimal('100000'))
		self.assertEqual(coupon.calculate_discount(Decimal('500000')), Decimal('50000'))
		self.assertEqual(coupon.calculate_discount(Decimal('99999')), 0)

	def test_fixed_discount_capped_at_total(self):
		coupon = make_coupon('FLAT50K', Coupon.TYPE_FIXED, 50000)
		self.assertEqual(coupon.calculate_discount(Decimal('30000')), Decimal('30000'))
		self.assertEqual(discount_for(None, 30000), 0)

	def test_fixed_below_minimum(self):
		coupon = make_coupon('FLAT50K', Coupon.TYPE_FIXED, 50000, min_order_value=Decimal('100000'))
		self.assertEqual(coupon.calculate_discount(Decimal('40000')), 0)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class CouponApiTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(username='coupon_admin', password='12345678', role='admin')
		cls.shopper = User.objects.create_user(username='coupon_user', password='12345678')

	def setUp(self):
		self.client = APIClient()

	def test_admin_creates_coupon_with_default_window(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/coupons/', {'code': 'new10', 'type': 'percent', 'value': '10'}, format='json')
		self.assertEqual(res.status_code, 201, res.data)

		coupon = Coupon.objects.get(code='NEW10')
		self.assertEqual(coupon.valid_to - coupon.valid_from, timedelta(days=30))
		self.assertTrue(res.data['is_valid_now'])

	def test_duplicate_code_conflicts(self):
		make_coupon('TAKEN', Coupon.TYPE_FIXED, 5)
		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/coupons/', {'code': 'taken', 'type': 'fixed', 'value': '5'}, format='json')
		self.assertEqual(res.status_code, 409)
		self.assertFalse(res.data['success'])

	def test_invalid_values_rejected(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/coupons/', {'code': 'BAD', 'type': 'percent', 'value': '150'}, format='json')
		self.assertEqual(res.status_code, 400)
		res = self.client.post('/api/coupons/', {'code': 'BAD', 'type': 'fixed', 'value': '0'}, format='json')
		self.assertEqual(res.status_code, 400)
		res = self.client.post('/api/coupons/', {'code': 'BAD', 'type': 'bogus', 'value': '5'}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_shopper_cannot_manage_coupons(self):
		self.client.force_authenticate(user=self.shopper)
		res = self.client.get('/api/coupons/')
		self.assertEqual(res.status_code, 403)

	def test_validate_reports_discount(self):
		make_coupon('SALE10', Coupon.TYPE_PERCENT, 10, min_order_value=Decimal('100000'))
		res = self.client.post('/api/coupons/validate/', {'code': 'sale10', 'orderTotal': '500000'}, format='json')
		self.assertEqual(res.status_code, 200, res.data)
		self.assertTrue(res.data['success'])
		self.assertEqual(res.data['coupon']['code'], 'SALE10')
		self.assertEqual(Decimal(res.data['discount']), Decimal('50000'))

	def test_validate_unknown_code(self):
		res = self.client.post('/api/coupons/validate/', {'code': 'NOPE', 'orderTotal': '1'}, format='json')
		self.assertEqual(res.status_code, 404)
		self.assertFalse(res.data['success'])

	def test_validate_below_minimum(self):
		make_coupon('FLAT50K', Coupon.TYPE_FIXED, 50000, min_order_value=Decimal('100000'))
		res = self.client.post('/api/coupons/validate/', {'code': 'FLAT50K', 'orderTotal': 40000}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_validate_exhausted(self):
		make_coupon('USED', Coupon.TYPE_FIXED, 5, max_uses=1, used_count=1)
		res = self.client.post('/api/coupons/validate/', {'code': 'USED', 'orderTotal': '100'}, format='json')
		self.assertEqual(res.status_code, 400)
