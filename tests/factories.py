from decimal import Decimal

import factory

from products.models import Product, UploadJob


class ProductFactory(factory.django.DjangoModelFactory):
    """Factory for creating Product instances."""

    class Meta:
        model = Product

    unique_key = factory.Sequence(lambda n: f"SKU{n}")
    product_title = factory.Sequence(lambda n: f"Product {n}")
    product_description = factory.Sequence(lambda n: f"Description for product {n}")
    style_number = factory.Faker("random_element", elements=["PC61", "ST350", "K500", "DT6000"])
    sanmar_mainframe_color = factory.Faker("random_element", elements=["BLACK", "WHITE", "NAVY"])
    size = factory.Faker("random_element", elements=["S", "M", "L", "XL"])
    color_name = factory.Faker("random_element", elements=["Black", "White", "Navy"])
    piece_price = Decimal("9.99")


class UploadJobFactory(factory.django.DjangoModelFactory):
    """Factory for creating UploadJob instances."""

    class Meta:
        model = UploadJob

    file_name = factory.Sequence(lambda n: f"catalog_{n}.csv")
    file_path = factory.LazyAttribute(lambda job: f"/nonexistent/uploads/{job.file_name}")
    status = UploadJob.Status.PENDING
