from . import models
from .models import Account, Customer, Category, Product, Review, Order, OrderItem, set_defaults

__all__ = [
    "models",
    "Account",
    "Customer",
    "Category",
    "Product",
    "Review",
    "Order",
    "OrderItem",
    "set_defaults",
]
