"""
                        Order Desk

Food-ordering backend: customers submit orders with a payment receipt,
administrators review them and confirm payments.
"""

__version__ = "1.0.0"
