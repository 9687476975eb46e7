"""Orders app tests."""

import re
import threading
from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.db import connection
from django.test import TestCase, TransactionTestCase, override_settings, skipUnlessDBFeature
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.test import APIClient

from cart.models import ShoppingCart, ShoppingCartItem
from core.exceptions import InvalidTransition
from coupons.models import Coupon
from orders import lifecycle, sequence
from orders.models import Counter, Order, OrderStatus, OrderStatusHistory
from orders.sequence import next_value
from orders.totals import compute, to_number
from products.models import Product, ProductColor


SHIPPING = {
	'fullName': '  Nguyen Van A ',
	'phone': '0901234567',
	'email': 'a@example.com',
	'address': '1 Le Loi',
	'city': 'HCMC',
}


def make_coupon(code, type_, value, **kwargs):
	now = timezone.now()
	kwargs.setdefault('valid_from', now - timedelta(days=1))
	kwargs.setdefault('valid_to', now + timedelta(days=1))
	return Coupon.objects.create(code=code, type=type_, value=Decimal(value), **kwargs)


def make_order(user, code, status=OrderStatus.PENDING, **kwargs):
	fields = {
		'full_name': 'Test', 'phone': '0900000000', 'address': 'Somewhere',
		'sub_total': 100, 'total': 100, 'grand_total': 100,
	}
	fields.update(kwargs)
	return Order.objects.create(user=user, code=code, status=status, **fields)


class SequenceTests(TestCase):
	"""Database-backed counters."""

	def test_fresh_counter_starts_at_one(self):
		self.assertEqual(next_value('invoice'), 1)
		self.assertEqual(next_value('invoice'), 2)

	def test_counters_are_independent(self):
		Counter.objects.create(name='order', seq=41)
		self.assertEqual(next_value('other'), 1)
		self.assertEqual(next_value('order'), 42)

	def test_code_format(self):
		self.assertEqual(lifecycle.format_code(42), 'MS000042')
		self.assertEqual(lifecycle.format_code(1234567), 'MS1234567')


class TotalsTests(TestCase):
	"""Pure totals arithmetic."""

	def test_to_number_coercion(self):
		self.assertEqual(to_number(5), Decimal('5'))
		self.assertEqual(to_number('12.5'), Decimal('12.5'))
		self.assertEqual(to_number({'$numberDecimal': '99.90'}), Decimal('99.90'))
		self.assertEqual(to_number('abc'), 0)
		self.assertEqual(to_number(None), 0)
		self.assertEqual(to_number(['1']), 0)
		self.assertEqual(to_number(float('nan')), 0)

	def test_percent_coupon_with_shipping(self):
		coupon = make_coupon('SALE10', Coupon.TYPE_PERCENT, 10, min_order_value=Decimal('100000'))
		totals = compute(
			[{'price': '500000', 'old_price': '600000', 'quantity': 1}],
			coupon=coupon,
			shipping_fee=30000,
		)
		self.assertEqual(totals.sub_total, Decimal('500000'))
		self.assertEqual(totals.total, Decimal('500000'))
		self.assertEqual(totals.savings, Decimal('100000'))
		self.assertEqual(totals.discount, Decimal('50000'))
		self.assertEqual(totals.grand_total, Decimal('480000'))

	def test_fixed_coupon_below_minimum_gives_nothing(self):
		coupon = make_coupon('FLAT50K', Coupon.TYPE_FIXED, 50000, min_order_value=Decimal('100000'))
		totals = compute([{'price': 40000, 'old_price': 40000, 'quantity': 1}], coupon=coupon)
		self.assertEqual(totals.discount, 0)
		self.assertEqual(totals.grand_total, Decimal('40000'))

	def test_savings_floored_per_item_and_fee_not_negative(self):
		totals = compute(
			[
				{'price': 100, 'old_price': 50, 'quantity': 2},
				{'price': 10, 'old_price': 15, 'quantity': 3},
			],
			shipping_fee='-20',
		)
		self.assertEqual(totals.sub_total, Decimal('230'))
		self.assertEqual(totals.savings, Decimal('15'))
		self.assertEqual(totals.shipping_fee, 0)
		self.assertEqual(totals.grand_total, Decimal('230'))

	def test_discount_never_exceeds_total(self):
		coupon = make_coupon('BIG', Coupon.TYPE_FIXED, 1000000)
		totals = compute([{'price': 200, 'old_price': 200, 'quantity': 1}], coupon=coupon, shipping_fee=30)
		self.assertEqual(totals.discount, Decimal('200'))
		self.assertEqual(totals.grand_total, Decimal('30'))

	def test_half_cent_discount_keeps_grand_total_consistent(self):
		coupon = make_coupon('HALF', Coupon.TYPE_PERCENT, 50)
		totals = compute([{'price': '1.01', 'old_price': '1.01', 'quantity': 1}], coupon=coupon, shipping_fee='0.333')
		self.assertEqual(totals.discount, Decimal('0.50'))
		self.assertEqual(totals.shipping_fee, Decimal('0.33'))
		self.assertEqual(totals.grand_total, totals.total + totals.shipping_fee - totals.discount)
		self.assertEqual(totals.grand_total, Decimal('0.84'))


class TransitionTableTests(TestCase):
	"""The (status, role) table alone."""

	def test_customer_rules(self):
		allowed = lifecycle.is_allowed
		self.assertTrue(allowed('pending', 'cancelled', 'customer'))
		self.assertTrue(allowed('processing', 'cancelled', 'customer'))
		self.assertTrue(allowed('delivered', 'received', 'customer'))
		self.assertFalse(allowed('shipping', 'cancelled', 'customer'))
		self.assertFalse(allowed('pending', 'processing', 'customer'))
		self.assertFalse(allowed('shipping', 'received', 'customer'))

	def test_admin_rules(self):
		allowed = lifecycle.is_allowed
		self.assertTrue(allowed('pending', 'delivered', 'admin'))
		self.assertTrue(allowed('shipping', 'cancelled', 'admin'))
		self.assertFalse(allowed('shipping', 'processing', 'admin'))
		self.assertFalse(allowed('pending', 'pending', 'admin'))
		self.assertFalse(allowed('cancelled', 'pending', 'admin'))
		self.assertFalse(allowed('received', 'cancelled', 'admin'))


class OrderLifecycleTests(TestCase):
	"""create_order / transition against the database."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(username='buyer', password='12345678')
		cls.admin = User.objects.create_user(username='boss', password='12345678', role='admin')
		cls.phone = Product.objects.create(
			name='Phone X', price=Decimal('500000'), old_price=Decimal('600000'), stock=5,
		)
		cls.case = Product.objects.create(name='Case', price=Decimal('40000'), stock=10)
		ProductColor.objects.create(product=cls.case, name='Black', stock=3)
		ProductColor.objects.create(product=cls.case, name='White', stock=7)

	def fill_cart(self, *lines):
		cart, _ = ShoppingCart.objects.get_or_create(user=self.customer)
		for product, qty, color in lines:
			ShoppingCartItem.objects.create(cart=cart, product=product, qty=qty, selected_color=color)
		return cart

	def place(self, **kwargs):
		kwargs.setdefault('shipping_info', SHIPPING)
		return lifecycle.create_order(self.customer, **kwargs)

	def test_create_order_snapshots_cart(self):
		cart = self.fill_cart((self.phone, 1, ''), (self.case, 2, 'Black'))
		Counter.objects.create(name='order', seq=41)

		order = self.place(payment_method='momo', shipping_fee=30000)

		self.assertEqual(order.code, 'MS000042')
		self.assertEqual(order.full_name, 'Nguyen Van A')
		self.assertEqual(order.payment_method, 'momo')
		self.assertEqual(order.payment_status, 'unpaid')
		self.assertEqual(order.status, 'pending')
		self.assertEqual(order.sub_total, Decimal('580000'))
		self.assertEqual(order.savings, Decimal('100000'))
		self.assertEqual(order.grand_total, Decimal('610000'))

		phone_line = order.items.get(product=self.phone)
		self.assertEqual(phone_line.old_price, Decimal('600000'))
		case_line = order.items.get(product=self.case)
		self.assertEqual(case_line.old_price, case_line.price)
		self.assertEqual(case_line.selected_color, 'Black')

		self.assertEqual(order.status_history.count(), 1)
		self.assertEqual(order.status_history.get().status, 'pending')
		self.assertFalse(cart.items.exists())

		self.case.refresh_from_db()
		self.assertEqual(self.case.stock, 8)
		self.assertEqual(self.case.colors.get(name='Black').stock, 1)

	def test_unknown_payment_method_falls_back_to_cod(self):
		self.fill_cart((self.phone, 1, ''))
		order = self.place(payment_method='bitcoin')
		self.assertEqual(order.payment_method, 'cod')

	def test_missing_shipping_fields_rejected(self):
		self.fill_cart((self.phone, 1, ''))
		with self.assertRaises(ValidationError):
			self.place(shipping_info={'fullName': 'A', 'phone': ' ', 'address': 'x'})
		self.assertFalse(Order.objects.exists())

	def test_empty_cart_rejected(self):
		with self.assertRaises(ValidationError):
			self.place()

	def test_insufficient_colour_stock_rejected(self):
		self.fill_cart((self.case, 4, 'Black'))
		with self.assertRaises(ValidationError):
			self.place()
		self.case.refresh_from_db()
		self.assertEqual(self.case.stock, 10)

	def test_unknown_colour_rejected(self):
		self.fill_cart((self.case, 1, 'Pink'))
		with self.assertRaises(ValidationError):
			self.place()

	def test_stock_hitting_zero_marks_out_of_stock(self):
		self.fill_cart((self.phone, 5, ''))
		self.place()
		self.phone.refresh_from_db()
		self.assertEqual(self.phone.stock, 0)
		self.assertFalse(self.phone.in_stock)

	@mock.patch('orders.lifecycle.time.sleep')
	def test_code_collision_retries_next_sequence(self, sleep):
		make_order(self.admin, 'MS000001')
		self.fill_cart((self.phone, 1, ''))

		order = self.place()

		self.assertEqual(order.code, 'MS000002')
		sleep.assert_called_once_with(0.1)

	@override_settings(ORDER_CODE_MAX_ATTEMPTS=10)
	@mock.patch('orders.lifecycle.time.sleep')
	@mock.patch('orders.lifecycle.next_value', return_value=7)
	def test_code_falls_back_after_exhausting_retries(self, next_value_mock, sleep):
		make_order(self.admin, 'MS000007')
		self.fill_cart((self.phone, 1, ''))

		order = self.place()

		self.assertEqual(next_value_mock.call_count, 10)
		self.assertEqual(sleep.call_count, 10)
		self.assertRegex(order.code, r'^MS\d{11}$')
		self.assertEqual(Order.objects.filter(code='MS000007').count(), 1)

	def test_fallback_code_shape(self):
		self.assertTrue(re.fullmatch(r'MS\d{8}\d{3}', lifecycle.fallback_code()))

	def test_coupon_applied_and_counted_after_commit(self):
		coupon = make_coupon('SALE10', Coupon.TYPE_PERCENT, 10, min_order_value=Decimal('100000'))
		self.fill_cart((self.phone, 1, ''))

		with self.captureOnCommitCallbacks(execute=True) as callbacks:
			order = self.place(shipping_fee=30000, coupon_code=' sale10 ')
			coupon.refresh_from_db()
			self.assertEqual(coupon.used_count, 0)

		self.assertEqual(len(callbacks), 1)
		coupon.refresh_from_db()
		self.assertEqual(coupon.used_count, 1)
		self.assertEqual(order.coupon, coupon)
		self.assertEqual(order.discount, Decimal('50000'))
		self.assertEqual(order.grand_total, Decimal('480000'))

	def test_stored_grand_total_matches_rounded_parts(self):
		make_coupon('HALF', Coupon.TYPE_PERCENT, 50)
		gum = Product.objects.create(name='Gum', price=Decimal('1.01'), stock=3)
		self.fill_cart((gum, 1, ''))

		order = self.place(coupon_code='HALF')

		order.refresh_from_db()
		self.assertEqual(order.discount, Decimal('0.50'))
		self.assertEqual(order.grand_total, order.total + order.shipping_fee - order.discount)

	def test_coupon_exhausted_after_max_uses(self):
		coupon = make_coupon('ONCE', Coupon.TYPE_FIXED, 10000, max_uses=1)

		self.fill_cart((self.case, 1, 'White'))
		with self.captureOnCommitCallbacks(execute=True):
			first = self.place(coupon_code='ONCE')
		self.fill_cart((self.case, 1, 'White'))
		with self.captureOnCommitCallbacks(execute=True):
			second = self.place(coupon_code='ONCE')

		coupon.refresh_from_db()
		self.assertEqual(first.discount, Decimal('10000'))
		self.assertEqual(second.discount, 0)
		self.assertIsNone(second.coupon)
		self.assertEqual(coupon.used_count, 1)
		self.assertFalse(coupon.is_valid())

	def test_coupon_usage_is_not_returned_on_cancel(self):
		coupon = make_coupon('KEEP', Coupon.TYPE_FIXED, 10000)
		self.fill_cart((self.phone, 1, ''))
		with self.captureOnCommitCallbacks(execute=True):
			order = self.place(coupon_code='KEEP')

		lifecycle.transition(order.pk, 'cancelled', self.customer, 'customer')

		coupon.refresh_from_db()
		self.assertEqual(coupon.used_count, 1)

	def test_customer_cannot_cancel_shipping_order(self):
		order = make_order(self.customer, 'MS100001', status=OrderStatus.SHIPPING)
		with self.assertRaises(InvalidTransition):
			lifecycle.transition(order.pk, 'cancelled', self.customer, 'customer')
		order.refresh_from_db()
		self.assertEqual(order.status, 'shipping')
		self.assertEqual(order.status_history.count(), 0)

	def test_each_accepted_transition_appends_one_history_entry(self):
		order = make_order(self.customer, 'MS100002')
		steps = ['processing', 'handover_to_carrier', 'shipping', 'delivered']
		for count, step in enumerate(steps, start=1):
			lifecycle.transition(order.pk, step, self.admin, 'admin')
			self.assertEqual(order.status_history.count(), count)

		lifecycle.transition(order.pk, 'received', self.customer, 'customer', note='Thanks')
		history = list(order.status_history.values_list('status', flat=True))
		self.assertEqual(history, steps + ['received'])
		last = order.status_history.last()
		self.assertEqual(last.note, 'Thanks')
		self.assertEqual(last.updated_by, str(self.customer.pk))

	def test_default_note_is_status_label(self):
		order = make_order(self.customer, 'MS100003')
		lifecycle.transition(order.pk, 'processing', self.admin, 'admin')
		self.assertEqual(order.status_history.get().note, lifecycle.STATUS_LABELS['processing'])

	def test_admin_cannot_move_backwards(self):
		order = make_order(self.customer, 'MS100004', status=OrderStatus.SHIPPING)
		with self.assertRaises(InvalidTransition):
			lifecycle.transition(order.pk, 'processing', self.admin, 'admin')

	def test_unknown_order_and_status(self):
		with self.assertRaises(NotFound):
			lifecycle.transition(999999, 'processing', self.admin, 'admin')
		order = make_order(self.customer, 'MS100005')
		with self.assertRaises(ValidationError):
			lifecycle.transition(order.pk, 'lost', self.admin, 'admin')

	def test_cancel_restores_stock(self):
		self.fill_cart((self.phone, 5, ''), (self.case, 3, 'Black'))
		order = self.place()

		lifecycle.transition(order.pk, 'cancelled', self.customer, 'customer')

		self.phone.refresh_from_db()
		self.case.refresh_from_db()
		self.assertEqual(self.phone.stock, 5)
		self.assertTrue(self.phone.in_stock)
		self.assertEqual(self.case.stock, 10)
		self.assertEqual(self.case.colors.get(name='Black').stock, 3)

	def test_history_entries_are_immutable(self):
		order = make_order(self.customer, 'MS100006')
		lifecycle.transition(order.pk, 'processing', self.admin, 'admin')
		entry = OrderStatusHistory.objects.get(order=order)
		entry.note = 'edited'
		with self.assertRaises(ValueError):
			entry.save()
		with self.assertRaises(ValueError):
			entry.delete()


class OrderCodeConcurrencyTests(TransactionTestCase):
	"""Order codes under real commits, without the per-test transaction."""

	def setUp(self):
		self.product = Product.objects.create(name='Cable', price=Decimal('10000'), stock=100)

	def make_buyer(self, n):
		user = get_user_model().objects.create_user(username=f'concurrent_{n}', password='12345678')
		cart = ShoppingCart.objects.create(user=user)
		ShoppingCartItem.objects.create(cart=cart, product=self.product, qty=1)
		return user

	def test_sequence_is_drawn_outside_the_checkout_transaction(self):
		in_transaction = []

		def draw(name):
			in_transaction.append(connection.in_atomic_block)
			return sequence.next_value(name)

		buyer = self.make_buyer(0)
		with mock.patch('orders.lifecycle.next_value', side_effect=draw):
			order = lifecycle.create_order(buyer, SHIPPING)

		self.assertEqual(in_transaction, [False])
		self.assertEqual(order.code, 'MS000001')
		self.assertEqual(Counter.objects.get(name='order').seq, 1)

	@skipUnlessDBFeature('has_select_for_update')
	def test_concurrent_checkouts_get_distinct_codes(self):
		buyers = [self.make_buyer(n) for n in range(6)]
		codes, errors = [], []

		def checkout(user):
			try:
				codes.append(lifecycle.create_order(user, SHIPPING).code)
			except Exception as exc:
				errors.append(exc)
			finally:
				connection.close()

		threads = [threading.Thread(target=checkout, args=(buyer,)) for buyer in buyers]
		for thread in threads:
			thread.start()
		for thread in threads:
			thread.join()

		self.assertEqual(errors, [])
		self.assertEqual(len(set(codes)), len(buyers))
		self.product.refresh_from_db()
		self.assertEqual(self.product.stock, 100 - len(buyers))


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class OrderApiTests(TestCase):
	"""HTTP surface of the orders API."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(username='api_buyer', password='12345678')
		cls.other = User.objects.create_user(username='api_other', password='12345678')
		cls.admin = User.objects.create_user(username='api_admin', password='12345678', role='admin')
		cls.product = Product.objects.create(name='Headphones', price=Decimal('500000'), stock=10)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.customer)

	def add_to_cart(self, qty=1):
		res = self.client.post('/api/cart/cart-items/', {'product': self.product.id, 'quantity': qty}, format='json')
		self.assertEqual(res.status_code, 201, res.data)

	def test_checkout_creates_order_and_ignores_client_discount(self):
		self.add_to_cart(2)
		res = self.client.post('/api/orders/', {
			'shippingInfo': SHIPPING,
			'paymentMethod': 'cod',
			'shippingFee': '30000',
			'discount': 999999,
		}, format='json')

		self.assertEqual(res.status_code, 201, res.data)
		self.assertTrue(res.data['success'])
		data = res.data['data']
		self.assertTrue(data['code'].startswith('MS'))
		self.assertEqual(Decimal(data['discount']), 0)
		self.assertEqual(Decimal(data['grand_total']), Decimal('1030000'))
		self.assertEqual(len(data['items']), 1)
		self.assertEqual(data['shipping_info']['fullName'], 'Nguyen Van A')
		self.assertEqual(len(data['status_history']), 1)

	def test_checkout_with_empty_cart_returns_envelope(self):
		res = self.client.post('/api/orders/', {'shippingInfo': SHIPPING}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertFalse(res.data['success'])
		self.assertIn('empty', res.data['message'])

	def test_list_only_own_orders_newest_first(self):
		first = make_order(self.customer, 'MS200001')
		second = make_order(self.customer, 'MS200002')
		make_order(self.other, 'MS200003')

		res = self.client.get('/api/orders/')
		self.assertEqual(res.status_code, 200)
		codes = [o['code'] for o in res.data['results']]
		self.assertEqual(codes, [second.code, first.code])

	def test_detail_forbidden_for_other_customer(self):
		order = make_order(self.other, 'MS200004')
		res = self.client.get(f'/api/orders/{order.id}/')
		self.assertEqual(res.status_code, 403)
		self.assertFalse(res.data['success'])

	def test_detail_visible_to_admin(self):
		order = make_order(self.other, 'MS200005')
		self.client.force_authenticate(user=self.admin)
		res = self.client.get(f'/api/orders/{order.id}/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['code'], 'MS200005')

	def test_customer_cancel(self):
		order = make_order(self.customer, 'MS200006', status=OrderStatus.PROCESSING)
		res = self.client.post(f'/api/orders/{order.id}/cancel/')
		self.assertEqual(res.status_code, 200, res.data)
		self.assertEqual(res.data['data']['status'], 'cancelled')

	def test_customer_cancel_shipping_order_rejected(self):
		order = make_order(self.customer, 'MS200007', status=OrderStatus.SHIPPING)
		res = self.client.post(f'/api/orders/{order.id}/cancel/')
		self.assertEqual(res.status_code, 400)
		self.assertFalse(res.data['success'])
		order.refresh_from_db()
		self.assertEqual(order.status, 'shipping')

	def test_confirm_received_only_after_delivery(self):
		order = make_order(self.customer, 'MS200008', status=OrderStatus.SHIPPING)
		res = self.client.post(f'/api/orders/{order.id}/confirm-received/')
		self.assertEqual(res.status_code, 400)

		Order.objects.filter(pk=order.pk).update(status=OrderStatus.DELIVERED)
		res = self.client.post(f'/api/orders/{order.id}/confirm-received/')
		self.assertEqual(res.status_code, 200, res.data)
		self.assertEqual(res.data['data']['status'], 'received')

	def test_admin_cannot_cancel_on_behalf_through_customer_endpoint(self):
		order = make_order(self.customer, 'MS200009')
		self.client.force_authenticate(user=self.admin)
		res = self.client.post(f'/api/orders/{order.id}/cancel/')
		self.assertEqual(res.status_code, 403)

	def test_status_update_requires_admin(self):
		order = make_order(self.customer, 'MS200010')
		res = self.client.patch(f'/api/orders/{order.id}/status/', {'status': 'processing'}, format='json')
		self.assertEqual(res.status_code, 403)

	def test_admin_status_update(self):
		order = make_order(self.customer, 'MS200011')
		self.client.force_authenticate(user=self.admin)
		res = self.client.patch(
			f'/api/orders/{order.id}/status/', {'status': 'shipping', 'note': 'Picked up'}, format='json',
		)
		self.assertEqual(res.status_code, 200, res.data)
		self.assertEqual(res.data['data']['status'], 'shipping')
		self.assertEqual(res.data['data']['status_history'][-1]['note'], 'Picked up')
		self.assertEqual(res.data['data']['status_history'][-1]['updated_by'], str(self.admin.pk))

	def test_admin_status_update_unknown_order(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.patch('/api/orders/999999/status/', {'status': 'shipping'}, format='json')
		self.assertEqual(res.status_code, 404)

	def test_admin_list_filters_by_status(self):
		make_order(self.customer, 'MS200012', status=OrderStatus.PENDING)
		make_order(self.other, 'MS200013', status=OrderStatus.SHIPPING)
		self.client.force_authenticate(user=self.admin)

		res = self.client.get('/api/orders/all/', {'status': 'shipping'})
		self.assertEqual(res.status_code, 200)
		self.assertEqual([o['code'] for o in res.data['results']], ['MS200013'])

		res = self.client.get('/api/orders/all/')
		self.assertEqual(res.data['count'], 2)

	def test_admin_list_forbidden_for_customer(self):
		res = self.client.get('/api/orders/all/')
		self.assertEqual(res.status_code, 403)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class OrderStatsTests(TestCase):
	"""Admin dashboard figures."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(username='stats_buyer', password='12345678')
		cls.other = User.objects.create_user(username='stats_other', password='12345678')
		cls.admin = User.objects.create_user(username='stats_admin', password='12345678', role='admin')
		make_order(cls.customer, 'MS400001', grand_total=100)
		make_order(cls.customer, 'MS400002', status=OrderStatus.CANCELLED, grand_total=50)
		make_order(cls.other, 'MS400003', status=OrderStatus.DELIVERED, grand_total=300)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.admin)

	def test_dashboard_totals(self):
		res = self.client.get('/api/orders/stats/')
		self.assertEqual(res.status_code, 200)
		data = res.data['data']

		self.assertEqual(data['users']['total'], 2)
		self.assertEqual(data['orders']['total'], 3)
		self.assertEqual(data['orders']['today'], 3)
		self.assertEqual(data['orders']['by_status']['cancelled'], 1)
		self.assertEqual(data['orders']['by_status']['shipping'], 0)
		self.assertEqual(data['revenue']['total'], Decimal('400'))
		self.assertEqual(data['revenue']['orders'], 2)
		self.assertEqual(data['revenue']['average'], Decimal('200.00'))

		self.assertEqual(len(data['last_days']), 7)
		self.assertEqual(data['last_days'][-1]['date'], timezone.localdate().isoformat())
		self.assertEqual(data['last_days'][-1]['orders'], 2)
		self.assertEqual(data['last_days'][0]['orders'], 0)

	def test_date_range_limits_counts(self):
		res = self.client.get('/api/orders/stats/', {'startDate': '2000-01-01', 'endDate': '2000-01-31'})
		data = res.data['data']
		self.assertEqual(data['orders']['in_range'], 0)
		self.assertEqual(data['orders']['total'], 3)
		self.assertEqual(data['revenue']['orders'], 0)
		self.assertEqual(data['revenue']['total'], 0)

	def test_bad_dates_rejected(self):
		res = self.client.get('/api/orders/stats/', {'startDate': '2024-02-30', 'endDate': '2024-03-01'})
		self.assertEqual(res.status_code, 400)
		res = self.client.get('/api/orders/stats/', {'startDate': '2024-03-02', 'endDate': '2024-03-01'})
		self.assertEqual(res.status_code, 400)

	def test_customers_cannot_see_dashboard(self):
		self.client.force_authenticate(user=self.customer)
		self.assertEqual(self.client.get('/api/orders/stats/').status_code, 403)
