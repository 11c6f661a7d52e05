"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from travelmall.core.models import Setting
from travelmall.catalog.models import Category, TravelProduct, ProductImage
from travelmall.inventory.models import Inventory
from travelmall.promotions.models import Coupon
from travelmall.orders.models import Order, OrderItem, Payment
from travelmall.marketing.models import Notification, PushAd, DeviceToken
from travelmall.design.models import Banner, HeroSlide
from decimal import Decimal
from datetime import timedelta
from django.utils import timezone
import random
import string
import uuid

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )
        return user

    @staticmethod
    def create_staff(username=None, **kwargs):
        """Create a back-office user"""
        return TestDataFactory.create_user(username=username, is_staff=True, **kwargs)

    @staticmethod
    def create_setting(key=None, value='value'):
        if not key:
            key = f'setting_{TestDataFactory.random_string(6)}'
        return Setting.objects.create(key=key, value=value)

    @staticmethod
    def create_category(name=None, description=None):
        """Create a test category"""
        if not name:
            name = f'Category_{TestDataFactory.random_string(6)}'
        return Category.objects.create(
            name=name,
            description=description or f'Test category {name}'
        )

    @staticmethod
    def create_product(title=None, status='published', price_adult=Decimal('100000.00'),
                       price_child=Decimal('70000.00'), price_infant=Decimal('10000.00'),
                       region='Jeju', categories=None, **kwargs):
        """Create a test travel product"""
        if not title:
            title = f'Tour_{TestDataFactory.random_string(6)}'
        product = TravelProduct.objects.create(
            title=title,
            description=f'Test tour {title}',
            short_description=f'{title} in {region}',
            region=region,
            status=status,
            price_adult=price_adult,
            price_child=price_child,
            price_infant=price_infant,
            duration_days=kwargs.pop('duration_days', 3),
            duration_nights=kwargs.pop('duration_nights', 2),
            **kwargs
        )
        if categories:
            product.categories.set(categories)
        return product

    @staticmethod
    def create_product_image(product, image_url=None, order=0):
        return ProductImage.objects.create(
            product=product,
            image_url=image_url or f'https://cdn.test/{uuid.uuid4().hex}.jpg',
            alt=product.title,
            order=order
        )

    @staticmethod
    def create_inventory(product=None, date=None, total_stock=10, available_stock=None, reserved_stock=0, option=''):
        """Create an inventory slot (available defaults to total - reserved)"""
        if not product:
            product = TestDataFactory.create_product()
        if not date:
            date = timezone.localdate() + timedelta(days=30)
        if available_stock is None:
            available_stock = total_stock - reserved_stock
        return Inventory.objects.create(
            product=product,
            date=date,
            option=option,
            total_stock=total_stock,
            available_stock=available_stock,
            reserved_stock=reserved_stock
        )

    @staticmethod
    def create_coupon(code=None, discount_type='percentage', value=Decimal('10.00'), usage_limit=10,
                      min_order_amount=Decimal('0.00'), max_discount_amount=None,
                      start_date=None, end_date=None, **kwargs):
        """Create a coupon valid from yesterday for 30 days"""
        if not code:
            code = f'CPN{TestDataFactory.random_string(6).upper()}'
        now = timezone.now()
        return Coupon.objects.create(
            code=code,
            discount_type=discount_type,
            value=value,
            min_order_amount=min_order_amount,
            max_discount_amount=max_discount_amount,
            start_date=start_date or now - timedelta(days=1),
            end_date=end_date or now + timedelta(days=30),
            usage_limit=usage_limit,
            **kwargs
        )

    @staticmethod
    def create_order(user=None, product=None, status='pending', total_amount=Decimal('200000.00'),
                     adults=2, inventory=None, payment_method='credit_card'):
        """Create an order with one item and a payment record"""
        if not user:
            user = TestDataFactory.create_user()
        if not product:
            product = TestDataFactory.create_product()
        order = Order.objects.create(
            order_number=f'ORD-TEST-{uuid.uuid4().hex[:8].upper()}',
            user=user,
            customer_name=user.get_full_name() or user.username,
            customer_email=user.email or 'customer@test.com',
            status=status,
            subtotal=total_amount,
            total_amount=total_amount,
        )
        OrderItem.objects.create(
            order=order,
            product=product,
            product_title=product.title,
            inventory=inventory,
            adults=adults,
            price_adult=product.price_adult,
            subtotal=total_amount,
            start_date=inventory.date if inventory else None,
        )
        Payment.objects.create(order=order, method=payment_method)
        return order

    @staticmethod
    def create_notification(title=None, content='Test content', type='notice', is_published=True):
        if not title:
            title = f'Notice_{TestDataFactory.random_string(6)}'
        return Notification.objects.create(title=title, content=content, type=type, is_published=is_published)

    @staticmethod
    def create_push_ad(title=None, content='Big summer sale', target_type='all', status='draft',
                       scheduled_at=None, target_segment='', target_users=None):
        if not title:
            title = f'Push_{TestDataFactory.random_string(6)}'
        push_ad = PushAd.objects.create(
            title=title,
            content=content,
            target_type=target_type,
            target_segment=target_segment,
            status=status,
            scheduled_at=scheduled_at
        )
        if target_users:
            push_ad.target_users.set(target_users)
        return push_ad

    @staticmethod
    def create_device_token(user, token=None, is_active=True):
        return DeviceToken.objects.create(
            user=user,
            token=token or f'fcm-{uuid.uuid4().hex}',
            is_active=is_active
        )

    @staticmethod
    def create_banner(title=None, is_active=True, **kwargs):
        if not title:
            title = f'Banner_{TestDataFactory.random_string(6)}'
        return Banner.objects.create(
            title=title,
            background_color=kwargs.pop('background_color', '#ff6600'),
            image_url=kwargs.pop('image_url', 'https://cdn.test/banner.jpg'),
            link=kwargs.pop('link', '/products'),
            is_active=is_active,
            **kwargs
        )

    @staticmethod
    def create_hero_slide(title=None, order=1, is_active=True):
        if not title:
            title = f'Slide_{TestDataFactory.random_string(6)}'
        return HeroSlide.objects.create(
            title=title,
            image_url=f'https://cdn.test/{uuid.uuid4().hex}.jpg',
            description='Test slide',
            button_text='Book now',
            button_url='/products',
            order=order,
            is_active=is_active
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
