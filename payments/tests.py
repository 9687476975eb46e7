"""Payments app tests."""

from decimal import Decimal
from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from core.exceptions import PaymentGatewayError
from orders import lifecycle
from orders.models import Order, OrderStatus
from payments import momo
from payments.models import PaymentTransaction


MOMO_TEST = {
	'ENDPOINT': 'https://momo.test/v2/gateway/api/create',
	'PARTNER_CODE': 'MOMOTEST',
	'ACCESS_KEY': 'test-access',
	'SECRET_KEY': 'test-secret',
	'REDIRECT_URL': 'http://testserver/api/payments/momo/return/',
	'IPN_URL': 'http://testserver/api/payments/momo/ipn/',
	'FRONTEND_RESULT_URL': 'http://shop.test/order-success',
	'REQUEST_TYPE': 'payWithATM',
	'TIMEOUT': 5,
}


def make_order(user, code, **kwargs):
	fields = {
		'full_name': 'Test', 'phone': '0900000000', 'address': 'Somewhere',
		'sub_total': Decimal('480000'), 'total': Decimal('480000'), 'grand_total': Decimal('480000.00'),
		'payment_method': 'momo',
	}
	fields.update(kwargs)
	return Order.objects.create(user=user, code=code, **fields)


def signed_result(order_ref, result_code=0, trans_id='2800000001', **overrides):
	payload = {
		'partnerCode': MOMO_TEST['PARTNER_CODE'],
		'orderId': order_ref,
		'requestId': '1700000000000',
		'amount': 480000,
		'orderInfo': momo.ORDER_INFO,
		'orderType': 'momo_wallet',
		'transId': trans_id,
		'resultCode': result_code,
		'message': 'Successful.',
		'payType': 'napas',
		'responseTime': 1700000005000,
		'extraData': '',
	}
	payload['signature'] = momo.build_result_signature(payload, MOMO_TEST)
	payload.update(overrides)
	return payload


class SignatureTests(TestCase):
	def test_sign_is_hex_hmac_sha256(self):
		# RFC 4231 test case 2
		self.assertEqual(
			momo.sign('what do ya want for nothing?', 'Jefe'),
			'5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843',
		)

	def test_create_signature_uses_alphabetical_fields(self):
		payload = {
			'amount': 1000, 'extraData': '', 'ipnUrl': 'i', 'orderId': 'MS000001', 'orderInfo': 'o',
			'partnerCode': 'P', 'redirectUrl': 'r', 'requestId': '1', 'requestType': 'payWithATM',
		}
		raw = (
			'accessKey=test-access&amount=1000&extraData=&ipnUrl=i&orderId=MS000001&orderInfo=o'
			'&partnerCode=P&redirectUrl=r&requestId=1&requestType=payWithATM'
		)
		self.assertEqual(momo.build_create_signature(payload, MOMO_TEST), momo.sign(raw, 'test-secret'))

	def test_verify_result_rejects_tampering(self):
		payload = signed_result('MS000001')
		self.assertTrue(momo.verify_result(payload, MOMO_TEST))
		payload['amount'] = 1
		self.assertFalse(momo.verify_result(payload, MOMO_TEST))
		self.assertFalse(momo.verify_result({'orderId': 'x'}, MOMO_TEST))


@override_settings(MOMO=MOMO_TEST, ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class MomoFlowTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(username='momo_buyer', password='12345678')
		cls.other = User.objects.create_user(username='momo_other', password='12345678')

	def setUp(self):
		self.client = APIClient()
		self.order = make_order(self.customer, 'MS000042')

	def post_ipn(self, payload):
		return self.client.post('/api/payments/momo/ipn/', payload, format='json')

	def test_find_order_by_code_then_id(self):
		self.assertEqual(momo.find_order('MS000042'), self.order)
		self.assertEqual(momo.find_order(str(self.order.id)), self.order)
		self.assertIsNone(momo.find_order('MS999999'))
		self.assertIsNone(momo.find_order(''))

	def test_find_order_prefers_code_over_id(self):
		numeric = make_order(self.other, str(self.order.id))
		self.assertEqual(momo.find_order(str(self.order.id)), numeric)

	@mock.patch('payments.momo.requests.post')
	def test_create_payment_returns_pay_url(self, post):
		post.return_value.json.return_value = {'payUrl': 'https://pay.momo.test/abc', 'resultCode': 0}
		post.return_value.raise_for_status.return_value = None
		self.client.force_authenticate(user=self.customer)

		res = self.client.post('/api/payments/momo/create/', {'orderId': 'MS000042'}, format='json')

		self.assertEqual(res.status_code, 200, res.data)
		self.assertEqual(res.data['payUrl'], 'https://pay.momo.test/abc')
		args, kwargs = post.call_args
		self.assertEqual(args[0], MOMO_TEST['ENDPOINT'])
		sent = kwargs['json']
		self.assertEqual(sent['amount'], 480000)
		self.assertEqual(sent['orderId'], 'MS000042')
		self.assertEqual(sent['requestType'], 'payWithATM')
		self.assertEqual(sent['signature'], momo.build_create_signature(sent, MOMO_TEST))
		self.assertEqual(kwargs['timeout'], 5)

	@mock.patch('payments.momo.requests.post', side_effect=requests.ConnectionError('down'))
	def test_create_payment_network_error_is_gateway_error(self, post):
		self.client.force_authenticate(user=self.customer)
		res = self.client.post('/api/payments/momo/create/', {'orderId': 'MS000042'}, format='json')
		self.assertEqual(res.status_code, 502)
		self.assertFalse(res.data['success'])
		self.assertEqual(post.call_count, 1)
		self.order.refresh_from_db()
		self.assertEqual(self.order.payment_status, 'unpaid')

	@mock.patch('payments.momo.requests.post')
	def test_create_payment_without_pay_url_is_gateway_error(self, post):
		post.return_value.json.return_value = {'resultCode': 11, 'message': 'Access denied'}
		with self.assertRaises(PaymentGatewayError):
			momo.create_payment(self.order)

	@mock.patch('payments.momo.requests.post')
	def test_create_payment_http_error_is_gateway_error(self, post):
		post.return_value.raise_for_status.side_effect = requests.HTTPError('500')
		with self.assertRaises(PaymentGatewayError):
			momo.create_payment(self.order)

	def test_create_payment_for_someone_elses_order_forbidden(self):
		self.client.force_authenticate(user=self.other)
		res = self.client.post('/api/payments/momo/create/', {'orderId': 'MS000042'}, format='json')
		self.assertEqual(res.status_code, 403)

	def test_ipn_marks_order_paid(self):
		res = self.post_ipn(signed_result('MS000042'))

		self.assertEqual(res.status_code, 204)
		self.order.refresh_from_db()
		self.assertEqual(self.order.payment_status, 'paid')
		self.assertEqual(self.order.status, 'pending')
		note = self.order.status_history.get().note
		self.assertIn('2800000001', note)
		tx = PaymentTransaction.objects.get(order=self.order)
		self.assertEqual(tx.kind, 'payment')
		self.assertEqual(tx.trans_id, '2800000001')
		self.assertEqual(tx.amount, Decimal('480000'))

	def test_ipn_with_bad_signature_changes_nothing(self):
		res = self.post_ipn(signed_result('MS000042', signature='0' * 64))

		self.assertEqual(res.status_code, 401)
		self.assertFalse(res.data['success'])
		self.order.refresh_from_db()
		self.assertEqual(self.order.payment_status, 'unpaid')
		self.assertFalse(self.order.status_history.exists())
		self.assertFalse(PaymentTransaction.objects.exists())

	def test_repeated_ipn_is_idempotent(self):
		payload = signed_result('MS000042')
		self.assertEqual(self.post_ipn(payload).status_code, 204)
		self.assertEqual(self.post_ipn(payload).status_code, 204)

		self.order.refresh_from_db()
		self.assertEqual(self.order.payment_status, 'paid')
		self.assertEqual(self.order.status_history.count(), 1)
		self.assertEqual(PaymentTransaction.objects.filter(order=self.order).count(), 1)

	def test_payment_link_refused_for_cancelled_order(self):
		make_order(self.customer, 'MS000043', status=OrderStatus.CANCELLED)
		self.client.force_authenticate(user=self.customer)
		with mock.patch('payments.momo.requests.post') as post:
			res = self.client.post('/api/payments/momo/create/', {'orderId': 'MS000043'}, format='json')
		self.assertEqual(res.status_code, 400)
		post.assert_not_called()

	def test_ipn_for_cancelled_order_records_refund(self):
		cancelled = make_order(self.customer, 'MS900001', status=OrderStatus.CANCELLED)
		payload = signed_result('MS900001')

		self.assertEqual(self.post_ipn(payload).status_code, 204)
		self.assertEqual(self.post_ipn(payload).status_code, 204)

		cancelled.refresh_from_db()
		self.assertEqual(cancelled.status, 'cancelled')
		self.assertEqual(cancelled.payment_status, 'refunded')
		kinds = sorted(PaymentTransaction.objects.filter(order=cancelled).values_list('kind', flat=True))
		self.assertEqual(kinds, ['payment', 'refund'])
		self.assertEqual(cancelled.status_history.count(), 1)

	def test_ipn_failure_result_leaves_order_unpaid(self):
		res = self.post_ipn(signed_result('MS000042', result_code=1006))
		self.assertEqual(res.status_code, 204)
		self.order.refresh_from_db()
		self.assertEqual(self.order.payment_status, 'unpaid')

	def test_ipn_by_internal_id(self):
		res = self.post_ipn(signed_result(str(self.order.id)))
		self.assertEqual(res.status_code, 204)
		self.order.refresh_from_db()
		self.assertEqual(self.order.payment_status, 'paid')

	def test_return_redirect_never_marks_paid(self):
		res = self.client.get('/api/payments/momo/return/', signed_result('MS000042'))

		self.assertEqual(res.status_code, 302)
		self.assertTrue(res['Location'].startswith('http://shop.test/order-success?'))
		self.assertIn(f'orderId={self.order.id}', res['Location'])
		self.order.refresh_from_db()
		self.assertEqual(self.order.payment_status, 'unpaid')

	def test_return_redirect_reports_errors(self):
		res = self.client.get('/api/payments/momo/return/', signed_result('MS000042', signature='bad'))
		self.assertEqual(res.status_code, 302)
		self.assertIn('error=', res['Location'])

		res = self.client.get('/api/payments/momo/return/', signed_result('MS000042', result_code=1006))
		self.assertIn('error=', res['Location'])


class PaymentStatusSyncTests(TestCase):
	"""Payment side effects of order transitions."""

	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(username='sync_buyer', password='12345678')
		cls.admin = User.objects.create_user(username='sync_admin', password='12345678', role='admin')

	def test_cancelling_paid_order_records_refund(self):
		order = make_order(self.customer, 'MS300001', payment_status='paid')

		lifecycle.transition(order.pk, 'cancelled', self.customer, 'customer')

		order.refresh_from_db()
		self.assertEqual(order.payment_status, 'refunded')
		refund = PaymentTransaction.objects.get(order=order)
		self.assertEqual(refund.kind, 'refund')
		self.assertEqual(refund.amount, order.grand_total)

	def test_cancelling_unpaid_order_needs_no_refund(self):
		order = make_order(self.customer, 'MS300002')
		lifecycle.transition(order.pk, 'cancelled', self.customer, 'customer')
		order.refresh_from_db()
		self.assertEqual(order.payment_status, 'unpaid')
		self.assertFalse(PaymentTransaction.objects.exists())

	def test_delivery_collects_cash(self):
		order = make_order(self.customer, 'MS300003', payment_method='cod', status=OrderStatus.SHIPPING)
		lifecycle.transition(order.pk, 'delivered', self.admin, 'admin')
		order.refresh_from_db()
		self.assertEqual(order.payment_status, 'paid')
		self.assertEqual(PaymentTransaction.objects.get(order=order).provider, 'cod')

	def test_already_paid_order_not_charged_twice_on_receipt(self):
		order = make_order(self.customer, 'MS300004', payment_status='paid', status=OrderStatus.DELIVERED)
		lifecycle.transition(order.pk, 'received', self.customer, 'customer')
		order.refresh_from_db()
		self.assertEqual(order.payment_status, 'paid')
		self.assertFalse(PaymentTransaction.objects.exists())
