from .orders import Order, OrderItem
from .inventory import Stock, StockHistory
from .sales import SalesRecord
from .customers import Customer
from .tracking import TrackingOrder

__all__ = [
    'Order', 'OrderItem',
    'Stock', 'StockHistory',
    'SalesRecord',
    'Customer',
    'TrackingOrder',
]
