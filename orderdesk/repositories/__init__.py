from orderdesk.repositories.orders import OrderRepository

__all__ = ["OrderRepository"]
