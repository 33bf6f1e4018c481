"""
Product Tests
=============

Test Coverage:
1. ProductForm - real-estate-only fields
2. ProductFilterForm - search, type, status and price range
3. Views - role scoping, create assigns agent, owner-or-manager edit/delete

Run tests:
    python manage.py test apps.products.tests
"""

from decimal import Decimal

from django.test import TestCase, Client
from django.urls import reverse

from apps.accounts.models import User
from apps.products.forms import ProductForm, ProductFilterForm
from apps.products.models import Product


class ProductTestCase(TestCase):

    def setUp(self):
        self.client = Client()

        self.manager = User.objects.create_user(email='manager@test.com', password='testpass123', role='manager')
        self.agent = User.objects.create_user(email='agent@test.com', password='testpass123', role='agent')
        self.other_agent = User.objects.create_user(email='other@test.com', password='testpass123', role='agent')

        self.apartment = Product.objects.create(
            title='Sea view apartment', product_type='apartment', price=Decimal('450000'),
            location='Santos', bedrooms=2, agent=self.agent
        )
        self.policy = Product.objects.create(
            title='Life insurance', description='Family coverage', product_type='insurance',
            price=Decimal('1200'), agent=self.other_agent
        )


class ProductFormTest(ProductTestCase):

    def test_bedrooms_rejected_for_insurance(self):
        """
        Test: Insurance product with bedrooms

        Expected: Form invalid
        """
        form = ProductForm(data={
            'title': 'Home insurance', 'product_type': 'insurance', 'price': '900',
            'status': 'available', 'bedrooms': 3,
        })
        self.assertFalse(form.is_valid())

    def test_valid_house(self):
        form = ProductForm(data={
            'title': 'House', 'product_type': 'house', 'price': '800000',
            'status': 'available', 'bedrooms': 3, 'bathrooms': 2, 'area': '180.5',
        })
        self.assertTrue(form.is_valid(), form.errors)


class ProductFilterFormTest(ProductTestCase):

    def _filter(self, data):
        return set(ProductFilterForm(data).filter_queryset(Product.objects.all()))

    def test_search_covers_description_and_location(self):
        self.assertEqual(self._filter({'search': 'santos'}), {self.apartment})
        self.assertEqual(self._filter({'search': 'family'}), {self.policy})

    def test_type_status_and_price_range(self):
        self.assertEqual(self._filter({'product_type': 'insurance'}), {self.policy})
        self.assertEqual(self._filter({'price_min': '10000'}), {self.apartment})
        self.assertEqual(self._filter({'price_max': '10000'}), {self.policy})
        self.assertEqual(self._filter({'status': 'sold'}), set())


class ProductViewTest(ProductTestCase):

    def test_agent_sees_own_products(self):
        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.get(reverse('products:product_list'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(list(response.context['products']), [self.apartment])

    def test_manager_sees_all(self):
        self.client.login(email='manager@test.com', password='testpass123')
        response = self.client.get(reverse('products:product_list'))

        self.assertEqual(response.context['total_count'], 2)

    def test_create_assigns_agent(self):
        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.post(reverse('products:product_create'), {
            'title': 'Downtown office', 'product_type': 'commercial', 'price': '300000',
            'status': 'available', 'area': '75',
        })

        self.assertRedirects(response, reverse('products:product_list'))
        self.assertEqual(Product.objects.get(title='Downtown office').agent, self.agent)

    def test_agent_cannot_edit_other_agents_product(self):
        self.client.login(email='agent@test.com', password='testpass123')
        response = self.client.get(reverse('products:product_edit', kwargs={'pk': self.policy.pk}))

        self.assertEqual(response.status_code, 404)

    def test_manager_can_delete_any_product(self):
        self.client.login(email='manager@test.com', password='testpass123')
        response = self.client.post(reverse('products:product_delete', kwargs={'pk': self.policy.pk}))

        self.assertRedirects(response, reverse('products:product_list'))
        self.assertFalse(Product.objects.filter(pk=self.policy.pk).exists())
