"""Products app tests."""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from products.models import Brand, Product, ProductCategory


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ProductApiTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(username='catalog_admin', password='12345678', role='admin')
		cls.shopper = User.objects.create_user(username='catalog_user', password='12345678')
		cls.category = ProductCategory.objects.create(category_name='Phones')
		cls.visible = Product.objects.create(
			category=cls.category, name='Visible', price=Decimal('90'), old_price=Decimal('120'), stock=3,
		)
		cls.hidden = Product.objects.create(name='Hidden', price=Decimal('10'), stock=3, is_active=False)

	def setUp(self):
		self.client = APIClient()

	def test_public_sees_active_products_only(self):
		res = self.client.get('/api/products/')
		self.assertEqual(res.status_code, 200)
		names = [p['name'] for p in res.data['results']]
		self.assertEqual(names, ['Visible'])
		self.assertEqual(res.data['results'][0]['sale_percent'], 25)

	def test_admin_sees_everything(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.get('/api/products/')
		self.assertEqual(res.data['count'], 2)

	def test_shopper_cannot_create(self):
		self.client.force_authenticate(user=self.shopper)
		res = self.client.post('/api/products/', {'name': 'X', 'price': '1.00'}, format='json')
		self.assertEqual(res.status_code, 403)

	def test_admin_create_with_colours_sums_stock(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/products/', {
			'name': 'Earbuds',
			'price': '150.00',
			'category': self.category.id,
			'colors': [{'name': 'Black', 'stock': 2}, {'name': 'White', 'stock': 0}],
		}, format='json')
		self.assertEqual(res.status_code, 201, res.data)

		product = Product.objects.get(name='Earbuds')
		self.assertEqual(product.stock, 2)
		self.assertTrue(product.in_stock)
		self.assertEqual(product.colors.count(), 2)

	def test_update_to_zero_stock_marks_out_of_stock(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.patch(f'/api/products/{self.visible.id}/', {'stock': 0}, format='json')
		self.assertEqual(res.status_code, 200, res.data)
		self.visible.refresh_from_db()
		self.assertFalse(self.visible.in_stock)

	def test_delete_is_soft(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.delete(f'/api/products/{self.visible.id}/')
		self.assertEqual(res.status_code, 204)
		self.visible.refresh_from_db()
		self.assertFalse(self.visible.is_active)

	def test_categories_are_public(self):
		res = self.client.get('/api/categories/')
		self.assertEqual(res.status_code, 200)


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class BrandApiTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(username='brand_admin', password='12345678', role='admin')
		cls.apple = Brand.objects.create(name='Apple', sort_order=1)
		cls.retired = Brand.objects.create(name='Old Brand', is_active=False)

	def setUp(self):
		self.client = APIClient()

	def test_public_sees_active_brands_only(self):
		res = self.client.get('/api/brands/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual([b['name'] for b in res.data], ['Apple'])

	def test_lookup_by_slug(self):
		res = self.client.get('/api/brands/slug/apple/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['id'], self.apple.id)
		self.assertEqual(self.client.get('/api/brands/slug/old-brand/').status_code, 404)

	def test_admin_create_derives_slug_and_rejects_duplicates(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/brands/', {'name': '  Sony Mobile '}, format='json')
		self.assertEqual(res.status_code, 201, res.data)
		self.assertEqual(res.data['slug'], 'sony-mobile')

		res = self.client.post('/api/brands/', {'name': 'sony mobile'}, format='json')
		self.assertEqual(res.status_code, 400)

	def test_delete_hides_brand(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.delete(f'/api/brands/{self.apple.id}/')
		self.assertEqual(res.status_code, 204)
		self.apple.refresh_from_db()
		self.assertFalse(self.apple.is_active)

	def test_products_filter_by_brand(self):
		Product.objects.create(name='iPhone', price=Decimal('100'), stock=1, brand=self.apple)
		Product.objects.create(name='Generic', price=Decimal('10'), stock=1)
		res = self.client.get('/api/products/', {'brand': self.apple.id})
		self.assertEqual([p['name'] for p in res.data['results']], ['iPhone'])
		self.assertEqual(res.data['results'][0]['brand_name'], 'Apple')
