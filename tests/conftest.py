import pytest

from outlate.schemas.outing import Outing, Person
from outlate.schemas.receipt import Receipt, ReceiptItem, SplitMethod

ALEX = "person-1"
JORDAN = "person-2"
SAM = "person-3"
MORGAN = "person-4"


@pytest.fixture
def people():
    return [
        Person(id=ALEX, name="Alex Johnson", color="#4F1787"),
        Person(id=JORDAN, name="Jordan Smith", color="#FB773C"),
        Person(id=SAM, name="Sam Wilson", color="#22C55E"),
        Person(id=MORGAN, name="Morgan Lee", color="#3B82F6"),
    ]


@pytest.fixture
def pizzeria_receipt():
    """Luigi's Pizzeria: $55.00 + $4.95 tax + $11.00 tip, split by item."""
    return Receipt(
        id="receipt-1",
        outing_id="outing-1",
        vendor_name="Luigi's Pizzeria",
        items=[
            ReceiptItem(id="item-1", name="Margherita Pizza", price=1800, quantity=1, assigned_to=[ALEX, JORDAN]),
            ReceiptItem(id="item-2", name="Craft Beer", price=800, quantity=2, assigned_to=[ALEX]),
            ReceiptItem(id="item-3", name="Caesar Salad", price=1200, quantity=1, assigned_to=[JORDAN, SAM]),
            ReceiptItem(id="item-4", name="Tiramisu", price=900, quantity=1, assigned_to=[SAM]),
        ],
        subtotal=5500,
        tax=495,
        tip=1100,
        total=7095,
        paid_by=ALEX,
        split_method=SplitMethod.by_item,
        included_people=[ALEX, JORDAN, SAM],
    )


@pytest.fixture
def bar_receipt():
    """The Night Owl Bar: $92.88 split equally four ways."""
    return Receipt(
        id="receipt-2",
        outing_id="outing-1",
        vendor_name="The Night Owl Bar",
        items=[
            ReceiptItem(id="item-5", name="Whiskey Sour", price=1400, quantity=2, assigned_to=[ALEX, MORGAN]),
            ReceiptItem(id="item-6", name="Margarita", price=1300, quantity=1, assigned_to=[JORDAN]),
            ReceiptItem(id="item-7", name="Nachos", price=1600, quantity=1, assigned_to=[ALEX, JORDAN, SAM, MORGAN]),
            ReceiptItem(id="item-8", name="Wings", price=1500, quantity=1, assigned_to=[SAM, MORGAN]),
        ],
        subtotal=7200,
        tax=648,
        tip=1440,
        total=9288,
        paid_by=JORDAN,
        split_method=SplitMethod.equal,
        included_people=[ALEX, JORDAN, SAM, MORGAN],
    )


@pytest.fixture
def outing(people, pizzeria_receipt, bar_receipt):
    return Outing(
        id="outing-1",
        name="Friday Night Dinner",
        created_by="user-1",
        people=people,
        receipts=[pizzeria_receipt, bar_receipt],
    )
