"""Reviews app tests."""

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from products.models import Product
from reviews.models import Review


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ReviewApiTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.author = User.objects.create_user(username='reviewer', password='12345678')
		cls.other = User.objects.create_user(username='reviewer_two', password='12345678')
		cls.admin = User.objects.create_user(username='review_admin', password='12345678', role='admin')
		cls.product = Product.objects.create(name='Speaker', price=Decimal('300000'), stock=5)

	def setUp(self):
		self.client = APIClient()

	def write(self, user, rating, comment=''):
		return Review.objects.create(product=self.product, user=user, rating=rating, comment=comment)

	def test_create_review(self):
		self.client.force_authenticate(user=self.author)
		res = self.client.post('/api/reviews/', {'product': self.product.id, 'rating': 4, 'comment': 'Loud'}, format='json')
		self.assertEqual(res.status_code, 201, res.data)
		self.assertEqual(res.data['username'], 'reviewer')
		self.assertEqual(Review.objects.get().user, self.author)

	def test_rating_must_be_one_to_five(self):
		self.client.force_authenticate(user=self.author)
		res = self.client.post('/api/reviews/', {'product': self.product.id, 'rating': 6}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertFalse(res.data['success'])

	def test_one_review_per_product(self):
		self.write(self.author, 5)
		self.client.force_authenticate(user=self.author)
		res = self.client.post('/api/reviews/', {'product': self.product.id, 'rating': 3}, format='json')
		self.assertEqual(res.status_code, 400)
		self.assertEqual(Review.objects.count(), 1)

	def test_anonymous_cannot_review(self):
		res = self.client.post('/api/reviews/', {'product': self.product.id, 'rating': 3}, format='json')
		self.assertEqual(res.status_code, 401)

	def test_product_reviews_skip_hidden_and_average(self):
		self.write(self.author, 5)
		self.write(self.other, 2)
		hidden = self.write(self.admin, 1)
		Review.objects.filter(pk=hidden.pk).update(is_visible=False)

		res = self.client.get(f'/api/reviews/product/{self.product.id}/')

		self.assertEqual(res.status_code, 200)
		self.assertEqual(res.data['data']['total_reviews'], 2)
		self.assertEqual(res.data['data']['average_rating'], 3.5)
		self.assertEqual(len(res.data['data']['reviews']), 2)

	def test_only_author_edits(self):
		review = self.write(self.author, 3)
		self.client.force_authenticate(user=self.other)
		res = self.client.patch(f'/api/reviews/{review.id}/', {'rating': 1}, format='json')
		self.assertEqual(res.status_code, 403)

		self.client.force_authenticate(user=self.author)
		res = self.client.patch(f'/api/reviews/{review.id}/', {'rating': 4, 'comment': 'Better now'}, format='json')
		self.assertEqual(res.status_code, 200, res.data)
		review.refresh_from_db()
		self.assertEqual(review.rating, 4)

	def test_author_or_admin_deletes(self):
		first = self.write(self.author, 3)
		second = self.write(self.other, 3)

		self.client.force_authenticate(user=self.other)
		self.assertEqual(self.client.delete(f'/api/reviews/{first.id}/').status_code, 403)

		self.client.force_authenticate(user=self.admin)
		self.assertEqual(self.client.delete(f'/api/reviews/{first.id}/').status_code, 204)
		self.client.force_authenticate(user=self.other)
		self.assertEqual(self.client.delete(f'/api/reviews/{second.id}/').status_code, 204)
		self.assertFalse(Review.objects.exists())

	def test_admin_reply_and_toggle_visibility(self):
		review = self.write(self.author, 2)
		self.client.force_authenticate(user=self.admin)

		res = self.client.post(f'/api/reviews/{review.id}/reply/', {'text': '  Sorry about that  '}, format='json')
		self.assertEqual(res.status_code, 200, res.data)
		self.assertEqual(res.data['data']['reply_text'], 'Sorry about that')
		self.assertEqual(res.data['data']['replied_by_name'], 'review_admin')

		res = self.client.patch(f'/api/reviews/{review.id}/visibility/')
		self.assertFalse(res.data['data']['is_visible'])
		res = self.client.patch(f'/api/reviews/{review.id}/visibility/')
		self.assertTrue(res.data['data']['is_visible'])

	def test_moderation_is_admin_only(self):
		review = self.write(self.author, 2)
		self.client.force_authenticate(user=self.author)
		self.assertEqual(self.client.get('/api/reviews/').status_code, 403)
		self.assertEqual(self.client.post(f'/api/reviews/{review.id}/reply/', {'text': 'x'}, format='json').status_code, 403)
		self.assertEqual(self.client.patch(f'/api/reviews/{review.id}/visibility/').status_code, 403)

	def test_admin_list_filters_by_visibility(self):
		self.write(self.author, 4)
		hidden = self.write(self.other, 1)
		hidden.is_visible = False
		hidden.save()
		self.client.force_authenticate(user=self.admin)

		res = self.client.get('/api/reviews/', {'is_visible': 'false'})
		self.assertEqual(res.status_code, 200)
		self.assertEqual([r['id'] for r in res.data['results']], [hidden.id])

	def test_my_reviews(self):
		self.write(self.author, 4)
		self.write(self.other, 1)
		self.client.force_authenticate(user=self.author)
		res = self.client.get('/api/reviews/my-reviews/')
		self.assertEqual(len(res.data['data']), 1)
		self.assertEqual(res.data['data'][0]['username'], 'reviewer')
