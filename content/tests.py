"""Content app tests."""

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from content.models import Banner, News


@override_settings(ALLOWED_HOSTS=['testserver', 'localhost', '127.0.0.1'])
class ContentApiTests(TestCase):
	@classmethod
	def setUpTestData(cls):
		User = get_user_model()
		cls.admin = User.objects.create_user(username='editor', password='12345678', role='admin')
		cls.shopper = User.objects.create_user(username='reader', password='12345678')
		cls.published = News.objects.create(title='Sale week', content='Everything is cheaper', is_featured=True)
		cls.draft = News.objects.create(title='Draft', content='Not yet', is_active=False)
		Banner.objects.create(title='Second', image='b.jpg', sort_order=2)
		Banner.objects.create(title='First', image='a.jpg', sort_order=1)
		Banner.objects.create(title='Off', image='c.jpg', is_active=False)

	def setUp(self):
		self.client = APIClient()

	def test_public_news_hides_drafts(self):
		res = self.client.get('/api/content/news/')
		self.assertEqual(res.status_code, 200)
		self.assertEqual([n['title'] for n in res.data['results']], ['Sale week'])
		self.assertEqual(self.client.get(f'/api/content/news/{self.draft.id}/').status_code, 404)

	def test_reading_news_counts_views(self):
		self.client.get(f'/api/content/news/{self.published.id}/')
		res = self.client.get(f'/api/content/news/{self.published.id}/')
		self.assertEqual(res.data['views'], 2)

	def test_featured_filter(self):
		News.objects.create(title='Plain', content='x')
		res = self.client.get('/api/content/news/', {'is_featured': 'true'})
		self.assertEqual([n['title'] for n in res.data['results']], ['Sale week'])

	def test_banners_in_display_order(self):
		res = self.client.get('/api/content/banners/')
		self.assertEqual([b['title'] for b in res.data], ['First', 'Second'])

	def test_only_admin_writes(self):
		self.client.force_authenticate(user=self.shopper)
		res = self.client.post('/api/content/news/', {'title': 'Hi', 'content': 'x'}, format='json')
		self.assertEqual(res.status_code, 403)

		self.client.force_authenticate(user=self.admin)
		res = self.client.post('/api/content/banners/', {'title': 'New', 'image': 'n.jpg'}, format='json')
		self.assertEqual(res.status_code, 201, res.data)
		self.assertEqual(res.data['link'], '#')

	def test_admin_sees_inactive(self):
		self.client.force_authenticate(user=self.admin)
		res = self.client.get('/api/content/banners/', {'is_active': 'false'})
		self.assertEqual([b['title'] for b in res.data], ['Off'])
