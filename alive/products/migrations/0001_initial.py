# Generated manually
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('kirana', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='AdvertisedProduct',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('brand', models.CharField(db_index=True, max_length=200)),
                ('category', models.CharField(db_index=True, max_length=100)),
                ('description', models.TextField(blank=True, null=True)),
                ('image_url', models.CharField(max_length=500)),
                ('mrp', models.DecimalField(decimal_places=2, max_digits=10)),
                ('discounted_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('discount_percent', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('stock_quantity', models.PositiveIntegerField(default=0)),
                ('min_order_qty', models.PositiveIntegerField(default=1)),
                ('max_order_qty', models.PositiveIntegerField(default=10)),
                ('commission_type', models.CharField(choices=[('percentage', 'Percentage of price'), ('fixed', 'Fixed per unit')], default='percentage', max_length=20)),
                ('commission_value', models.DecimalField(decimal_places=2, default=Decimal('5.00'), max_digits=10)),
                ('is_active', models.BooleanField(default=True)),
                ('is_available', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='products', to='kirana.kiranastore')),
            ],
            options={
                'db_table': 'advertised_products',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['store', 'is_active'], name='idx_product_store_active'),
                    models.Index(fields=['category', 'is_active'], name='idx_product_category'),
                ],
            },
        ),
    ]
