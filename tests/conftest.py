from decimal import Decimal

import pytest

from tamkeen_cart.models import Package, PackageImage, Product
from tamkeen_cart.storage import LocalStorage


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "store")


@pytest.fixture
def messages():
    """Collects (level, message) notifications."""
    return []


@pytest.fixture
def notifier(messages):
    def notify(level, message):
        messages.append((level, message))

    return notify


@pytest.fixture
def shirt():
    return Product(id=1, name="Blue Shirt", description="Cotton", price=Decimal("20.00"), stock=5, store_id=3)


@pytest.fixture
def mug():
    return Product(id=2, name="Mug", description="Ceramic mug with shirt print", price=Decimal("7.50"), stock=10)


@pytest.fixture
def package():
    return Package(
        id=10,
        name="Gold Package",
        total_price=Decimal("30.00"),
        number_of_uses=12,
        profit_percentages=[Decimal("5"), Decimal("10")],
        store_id=4,
        images=[PackageImage(image="media/gold.png")],
    )
