"""Cart app tests."""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from cart.models import ShoppingCartItem
from products.models import ProductCategory, Product, ProductColor


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class CartStockValidationTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.customer = User.objects.create_user(
			username='cart_customer',
			email='cart_customer@example.com',
			password='12345678',
		)

		cls.category = ProductCategory.objects.create(category_name='TestCat')
		cls.product = Product.objects.create(
			category=cls.category,
			name='CartProduct',
			description='Test',
			price=Decimal('10.00'),
			stock=2,
		)
		cls.shirt = Product.objects.create(name='Shirt', price=Decimal('25.00'), stock=5)
		ProductColor.objects.create(product=cls.shirt, name='Red', stock=1)
		ProductColor.objects.create(product=cls.shirt, name='Blue', stock=4)

	def setUp(self):
		self.client = APIClient()
		self.client.force_authenticate(user=self.customer)

	def test_cannot_add_more_than_stock(self):
		res = self.client.post('/api/cart/cart-items/', data={'product': self.product.id, 'quantity': 3}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertFalse(res.data['success'])

	def test_cannot_update_quantity_more_than_stock(self):
		# add 1
		res1 = self.client.post('/api/cart/cart-items/', data={'product': self.product.id, 'quantity': 1}, format='json')
		self.assertEqual(res1.status_code, 201)
		item_id = res1.data.get('id')
		self.assertIsNotNone(item_id)

		# update to 3 (exceeds stock=2)
		res2 = self.client.patch(f'/api/cart/cart-items/{item_id}/', data={'quantity': 3}, format='json')
		self.assertEqual(res2.status_code, 400)

	def test_adding_same_line_merges_quantity(self):
		self.client.post('/api/cart/cart-items/', data={'product': self.shirt.id, 'quantity': 1, 'selected_color': 'Blue'}, format='json')
		res = self.client.post('/api/cart/cart-items/', data={'product': self.shirt.id, 'quantity': 2, 'selected_color': 'Blue'}, format='json')
		self.assertEqual(res.status_code, 201, res.data)
		self.assertEqual(res.data['quantity'], 3)
		self.assertEqual(ShoppingCartItem.objects.filter(cart__user=self.customer).count(), 1)

	def test_merged_quantity_checked_against_colour_stock(self):
		self.client.post('/api/cart/cart-items/', data={'product': self.shirt.id, 'quantity': 1, 'selected_color': 'Red'}, format='json')
		res = self.client.post('/api/cart/cart-items/', data={'product': self.shirt.id, 'quantity': 1, 'selected_color': 'Red'}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_changing_line_colour_rejected(self):
		red = self.client.post('/api/cart/cart-items/', data={'product': self.shirt.id, 'quantity': 1, 'selected_color': 'Red'}, format='json')
		self.client.post('/api/cart/cart-items/', data={'product': self.shirt.id, 'quantity': 1, 'selected_color': 'Blue'}, format='json')

		res = self.client.patch(f"/api/cart/cart-items/{red.data['id']}/", data={'selected_color': 'Blue'}, format='json')

		self.assertEqual(res.status_code, 400)
		colours = sorted(ShoppingCartItem.objects.filter(cart__user=self.customer).values_list('selected_color', flat=True))
		self.assertEqual(colours, ['Blue', 'Red'])

	def test_unknown_colour_rejected(self):
		res = self.client.post('/api/cart/cart-items/', data={'product': self.shirt.id, 'quantity': 1, 'selected_color': 'Green'}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_inactive_product_rejected(self):
		hidden = Product.objects.create(name='Hidden', price=Decimal('1.00'), stock=5, is_active=False)
		res = self.client.post('/api/cart/cart-items/', data={'product': hidden.id, 'quantity': 1}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_cart_total_and_clear(self):
		self.client.post('/api/cart/cart-items/', data={'product': self.product.id, 'quantity': 2}, format='json')
		self.client.post('/api/cart/cart-items/', data={'product': self.shirt.id, 'quantity': 1, 'selected_color': 'Blue'}, format='json')

		res = self.client.get('/api/cart/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(len(res.data['items']), 2)
		self.assertEqual(Decimal(res.data['total_price']), Decimal('45.00'))

		res = self.client.post('/api/cart/clear/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['items'], [])

	def test_cart_requires_login(self):
		res = APIClient().get('/api/cart/')
		self.assertEqual(res.status_code, 401)
