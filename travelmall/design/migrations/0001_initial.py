from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Banner',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('background_color', models.CharField(default='#ffffff', max_length=20)),
                ('image_url', models.URLField(blank=True, max_length=1000)),
                ('link', models.CharField(blank=True, max_length=500)),
                ('is_active', models.BooleanField(default=True)),
                ('order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'banners',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='HeroSlide',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('image_url', models.URLField(max_length=1000)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True)),
                ('button_text', models.CharField(blank=True, max_length=100)),
                ('button_url', models.CharField(blank=True, max_length=500)),
                ('order', models.IntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'hero_slides',
                'ordering': ['order', 'id'],
            },
        ),
        migrations.CreateModel(
            name='MainPageSection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('key', models.CharField(max_length=50, unique=True)),
                ('type', models.CharField(choices=[('HEADER', 'Header'), ('HERO', 'Hero'), ('SEARCH', 'Search'), ('BANNER', 'Banner'), ('REGIONAL_TRAVEL', 'Regional Travel'), ('TIME_DEAL', 'Time Deal'), ('THEME_TRAVEL', 'Theme Travel'), ('PROMOTION', 'Promotion'), ('REVIEW', 'Review'), ('FOOTER', 'Footer')], max_length=30)),
                ('title', models.CharField(max_length=100)),
                ('is_fixed', models.BooleanField(default=False)),
                ('is_visible', models.BooleanField(default=True)),
                ('order', models.IntegerField(default=0)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'main_page_sections',
                'ordering': ['order', 'id'],
            },
        ),
    ]
