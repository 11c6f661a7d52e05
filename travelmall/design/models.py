from django.db import models


SECTION_TYPE_CHOICES = [
    ('HEADER', 'Header'),
    ('HERO', 'Hero'),
    ('SEARCH', 'Search'),
    ('BANNER', 'Banner'),
    ('REGIONAL_TRAVEL', 'Regional Travel'),
    ('TIME_DEAL', 'Time Deal'),
    ('THEME_TRAVEL', 'Theme Travel'),
    ('PROMOTION', 'Promotion'),
    ('REVIEW', 'Review'),
    ('FOOTER', 'Footer'),
]


class Banner(models.Model):
    """Storefront main banner"""
    title = models.CharField(max_length=255)
    background_color = models.CharField(max_length=20, default='#ffffff')
    image_url = models.URLField(max_length=1000, blank=True)
    link = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'banners'
        ordering = ['-created_at']


class HeroSlide(models.Model):
    """Slide of the storefront hero carousel"""
    image_url = models.URLField(max_length=1000)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    button_text = models.CharField(max_length=100, blank=True)
    button_url = models.CharField(max_length=500, blank=True)
    order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'hero_slides'
        ordering = ['order', 'id']


class MainPageSection(models.Model):
    """Orderable, show/hide-able block of the storefront home page"""
    key = models.CharField(max_length=50, unique=True)
    type = models.CharField(max_length=30, choices=SECTION_TYPE_CHOICES)
    title = models.CharField(max_length=100)
    is_fixed = models.BooleanField(default=False)
    is_visible = models.BooleanField(default=True)
    order = models.IntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.order}. {self.title}"

    class Meta:
        db_table = 'main_page_sections'
        ordering = ['order', 'id']
