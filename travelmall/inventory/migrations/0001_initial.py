import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Inventory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField()),
                ('option', models.CharField(blank=True, default='', max_length=100)),
                ('total_stock', models.PositiveIntegerField(default=0)),
                ('available_stock', models.PositiveIntegerField(default=0)),
                ('reserved_stock', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='inventory', to='catalog.travelproduct')),
            ],
            options={
                'verbose_name_plural': 'inventory',
                'db_table': 'inventory',
                'ordering': ['date', 'option'],
                'indexes': [models.Index(fields=['product', 'date'], name='idx_inventory_product_date')],
                'unique_together': {('product', 'date', 'option')},
            },
        ),
    ]
