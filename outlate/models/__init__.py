from outlate.models.outing import Outing, Person
from outlate.models.receipt import Receipt, ReceiptItem
from outlate.models.settlement import Settlement

__all__ = [
    "Outing", "Person",
    "Receipt", "ReceiptItem",
    "Settlement",
]
