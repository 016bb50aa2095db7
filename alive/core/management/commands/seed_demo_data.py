"""
Management command to create demo stores and sponsored products for local development
Usage: python manage.py seed_demo_data [--dry-run]
"""
from decimal import Decimal
from django.core.management.base import BaseCommand
from django.db import transaction
from alive.core.models import User
from alive.kirana.models import KiranaStore
from alive.products.models import AdvertisedProduct, calculate_discount_percent

DEMO_OWNER_PHONE = '9800000001'

STORES = [
    {
        'name': 'Sharma General Store',
        'owner_name': 'Ramesh Sharma',
        'owner_phone': '9800000101',
        'address': '14 Station Road, Dadar West',
        'city': 'Mumbai',
        'state': 'Maharashtra',
        'pincode': '400028',
        'latitude': 19.0760,
        'longitude': 72.8777,
        'store_type': 'general',
    },
    {
        'name': 'Matunga Grocery Mart',
        'owner_name': 'Ramesh Sharma',
        'owner_phone': '9800000102',
        'address': '3 King Circle, Matunga East',
        'city': 'Mumbai',
        'state': 'Maharashtra',
        'pincode': '400019',
        'latitude': 19.0825,
        'longitude': 72.8808,
        'store_type': 'grocery',
    },
]

# (name, brand, category, mrp, discounted price, stock, commission type, commission value)
PRODUCTS = [
    ('ALIVE Energy (Red)', 'ALIVE', 'Beverages', '480', '450', 12, 'percentage', '5'),
    ('Crunchy Oats Pack', 'Crunchy', 'Breakfast', '1300', '1200', 4, 'percentage', '12'),
    ('Dark Chocolate Bar', 'Cocoa Co', 'Confectionery', '850', '800', 2, 'percentage', '8'),
    ('Sparkling Water', 'Fizz', 'Beverages', '220', '200', 40, 'fixed', '4'),
]


class Command(BaseCommand):
    help = "Creates a demo store owner, stores around Mumbai and sponsored products"

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be created without writing to the database',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']

        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(self.style.SUCCESS("SEEDING DEMO DATA" + (" (DRY RUN)" if dry_run else "")))
        self.stdout.write(self.style.SUCCESS("=" * 60))

        if dry_run:
            self.stdout.write(f"Owner: {DEMO_OWNER_PHONE}")
            for store in STORES:
                self.stdout.write(f"  Store: {store['name']} ({store['latitude']}, {store['longitude']})")
                for product in PRODUCTS:
                    self.stdout.write(f"    Product: {product[0]}")
            return

        created_stores = 0
        created_products = 0

        with transaction.atomic():
            owner, created = User.objects.get_or_create(
                phone=DEMO_OWNER_PHONE,
                defaults={
                    'username': DEMO_OWNER_PHONE,
                    'name': 'Ramesh Sharma',
                    'role': User.ROLE_KIRANA,
                    'is_verified': True,
                },
            )
            if created:
                owner.set_unusable_password()
                owner.save()
                self.stdout.write(self.style.SUCCESS(f"  ✓ Created owner: {owner.phone}"))
            else:
                self.stdout.write(self.style.WARNING(f"  ⊘ Owner exists: {owner.phone}"))

            for data in STORES:
                store, created = KiranaStore.objects.get_or_create(
                    owner_phone=data['owner_phone'],
                    defaults={**data, 'owner': owner, 'is_verified': True},
                )
                if not created:
                    self.stdout.write(self.style.WARNING(f"  ⊘ Skipped (already exists): {store.name}"))
                    continue
                created_stores += 1
                self.stdout.write(self.style.SUCCESS(f"  ✓ Created store: {store.name}"))

                for name, brand, category, mrp, price, stock, commission_type, commission_value in PRODUCTS:
                    AdvertisedProduct.objects.create(
                        store=store,
                        name=name,
                        brand=brand,
                        category=category,
                        image_url=f'https://picsum.photos/seed/{brand.lower().replace(" ", "-")}/200/200',
                        mrp=Decimal(mrp),
                        discounted_price=Decimal(price),
                        discount_percent=calculate_discount_percent(mrp, price),
                        stock_quantity=stock,
                        commission_type=commission_type,
                        commission_value=Decimal(commission_value),
                    )
                    created_products += 1

        self.stdout.write(self.style.SUCCESS("\n" + "=" * 60))
        self.stdout.write(self.style.SUCCESS("SUMMARY"))
        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(f"Stores Created: {created_stores}")
        self.stdout.write(f"Products Created: {created_products}")
