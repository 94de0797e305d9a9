from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from modules.companies.models import Company, CompanyRole
from modules.orders.constants import OrderStatus
from modules.orders.delivery import calculate_estimated_delivery
from modules.orders.models import Order
from modules.quotations.models import Quotation, QuotationStatus

SEED_NFE_ACCESS_KEY = "35240312345678000195550010000014761000047680"

SEED_COMPANIES = [
    ("admin", "admin123", "Marketplace Operações", "98765432000198", CompanyRole.ADMIN),
    ("alfa", "alfa123", "Distribuidora Alfa", "12345678000195", CompanyRole.SUPPLIER),
    ("beta", "beta123", "Comercial Beta", "11444777000161", CompanyRole.SUPPLIER),
    ("gama", "gama123", "Mercado Gama", "11222333000181", CompanyRole.CUSTOMER),
]

ORDERS_PER_STATUS = 3


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    @transaction.atomic
    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        companies = self._seed_companies()
        suppliers = [c for c in companies if c.role == CompanyRole.SUPPLIER]
        buyers = [c for c in companies if c.role == CompanyRole.CUSTOMER]
        quotations = self._seed_quotations(buyers)
        orders_created = self._seed_orders(suppliers, quotations)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"companies={len(companies)}, "
                f"quotations={len(quotations)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_companies(self) -> list[Company]:
        self.stdout.write("Creating users and companies...")
        User = get_user_model()
        companies: list[Company] = []
        for username, password, name, cnpj, role in SEED_COMPANIES:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(
                    username,
                    password=password,
                    is_staff=role == CompanyRole.ADMIN,
                )
            company, _ = Company.objects.get_or_create(
                cnpj=cnpj,
                defaults={"user": user, "name": name, "role": role},
            )
            companies.append(company)
        self.stdout.write(self.style.SUCCESS("Creating users and companies... Done!"))
        return companies

    def _seed_quotations(self, buyers: list[Company]) -> list[Quotation]:
        self.stdout.write("Creating quotations...")
        quotations: list[Quotation] = []
        for buyer in buyers:
            existing = list(buyer.quotations.all())
            if existing:
                quotations.extend(existing)
                continue
            for _ in range(len(OrderStatus) * ORDERS_PER_STATUS):
                quotations.append(
                    Quotation.objects.create(
                        buyer=buyer,
                        status=QuotationStatus.COMPLETED,
                        total_amount=Decimal(random.randint(500, 50000)),
                        valid_until=timezone.now() + timedelta(days=30),
                    )
                )
        self.stdout.write(self.style.SUCCESS("Creating quotations... Done!"))
        return quotations

    def _seed_orders(
        self, suppliers: list[Company], quotations: list[Quotation]
    ) -> int:
        self.stdout.write("Creating orders...")
        if not suppliers or not quotations:
            self.stdout.write(
                self.style.WARNING("Skipping orders (no suppliers/quotations).")
            )
            return 0

        free_quotations = [q for q in quotations if not q.orders.exists()]
        orders_created = 0
        now = timezone.now()

        for status in OrderStatus:
            for _ in range(ORDERS_PER_STATUS):
                if not free_quotations:
                    break
                quotation = free_quotations.pop()
                created_at = now - timedelta(days=random.randint(5, 30))
                fields = {
                    "company": random.choice(suppliers),
                    "quotation": quotation,
                    "status": status,
                    "total_amount": quotation.total_amount,
                }
                if status in (OrderStatus.SHIPPED, OrderStatus.DELIVERED):
                    fields.update(
                        tracking_number=f"BR{random.randint(10**8, 10**9 - 1)}",
                        nfe_access_key=SEED_NFE_ACCESS_KEY,
                        estimated_delivery_date=calculate_estimated_delivery(
                            from_date=created_at
                        ),
                    )
                order = Order.objects.create(**fields)

                # auto_now fields can only be backdated through a queryset update
                updated_at = created_at
                if status != OrderStatus.PENDING:
                    updated_at = created_at + timedelta(days=random.randint(1, 4))
                Order.objects.filter(id=order.id).update(
                    created_at=created_at, updated_at=updated_at
                )
                orders_created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created
