# Generated manually
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('kirana', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='RebateClaim',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('month', models.CharField(help_text='Billing month as YYYY-MM', max_length=7)),
                ('amount', models.DecimalField(decimal_places=2, help_text='Total amount on the bill', max_digits=10)),
                ('rebate_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('bill_image_url', models.CharField(max_length=500)),
                ('provider_name', models.CharField(blank=True, max_length=200)),
                ('billing_period', models.CharField(blank=True, max_length=100)),
                ('due_date', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], db_index=True, default='pending', max_length=20)),
                ('review_note', models.TextField(blank=True)),
                ('reviewed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('reviewed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviewed_rebate_claims', to=settings.AUTH_USER_MODEL)),
                ('store', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='rebate_claims', to='kirana.kiranastore')),
                ('submitted_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='rebate_claims', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'rebate_claims',
                'ordering': ['-month', '-created_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='rebateclaim',
            constraint=models.UniqueConstraint(fields=('store', 'month'), name='uniq_rebate_store_month'),
        ),
    ]
