from herbmarket.models import OrderStatus, ProcessingStatus, UserRole
from herbmarket.services.workflow_service import (
    ProductNotFoundError,
    stock_status_for,
)
from herbmarket.utils import new_id, now_iso, same_id
import logging

logger = logging.getLogger(__name__)

# Post-purchase processing cost per unit of ordered quantity.
PROCESSING_RATES = {
    'slicing': 2.0,
    'grinding': 3.0,
    'packaging': 1.5,
}


class InsufficientStockError(ValueError):

    def __init__(self, product_name, available, requested):
        super().__init__(
            f'Product {product_name} has insufficient stock '
            f'({available} left, {requested} requested)')
        self.product_name = product_name
        self.available = available
        self.requested = requested


class OrderService:

    def __init__(self, manager):
        self.manager = manager
        self.repos = manager.repos

    def _check_stock(self, cart_items):
        products = []
        for item in cart_items:
            product = self.manager.find_product(item['product_id'])
            if product is None:
                raise ProductNotFoundError(
                    f"Product {item['product_id']} not found")
            available = product.get('stock', 0)
            if available < item['quantity']:
                raise InsufficientStockError(
                    product.get('name_cn') or item.get('product_name'),
                    available,
                    item['quantity'],
                )
            products.append(product)
        return products

    def checkout(self, buyer, cart):
        """Turn the cart into a pending order; returns the order id.

        Returns ``None`` for an empty cart. Every line is checked against
        current stock first, and nothing is written when one falls short.
        """
        cart_items = cart.items()
        if not cart_items:
            return None
        products = self._check_stock(cart_items)

        timestamp = now_iso()
        order_id = new_id()
        order_items = []
        for index, (item, product) in enumerate(
                zip(cart_items, products), start=1):
            seller_name = (
                (product.get('seller') or {}).get('business_name')
                or item.get('seller_name')
            )
            order_items.append({
                'id': f'{order_id}-{index}',
                'order_id': order_id,
                'product_id': item['product_id'],
                'quantity': item['quantity'],
                'unit_price': item['price'],
                'product': {
                    'name_cn': product.get('name_cn')
                    or item.get('product_name'),
                    'seller': {'business_name': seller_name},
                },
            })

            new_stock = product.get('stock', 0) - item['quantity']
            self.manager.update_product(item['product_id'], {
                'stock': new_stock,
                'stock_status': stock_status_for(new_stock),
            })

        order = {
            'id': order_id,
            'buyer_id': buyer['id'],
            'total_amount': sum(
                i['quantity'] * i['unit_price'] for i in order_items),
            'status': OrderStatus.PENDING.value,
            'created_at': timestamp,
            'updated_at': timestamp,
            'buyer': {
                'business_name': buyer.get('business_name'),
                'email': buyer.get('email') or buyer['id'],
            },
            'order_items': order_items,
        }
        self.repos.orders.append(order)
        cart.clear()
        logger.info(
            "Order %s created for buyer %s, total %.2f",
            order_id,
            buyer['id'],
            order['total_amount'],
        )
        return order_id

    def request_processing(self, order_id, options) -> bool:
        selected = {
            name: bool(options.get(name)) for name in PROCESSING_RATES}
        if not any(selected.values()):
            return False

        orders = self.repos.orders.get_all()
        for order in orders:
            if same_id(order.get('id'), order_id):
                break
        else:
            return False

        if order.get('processing'):
            return False

        total_quantity = sum(
            i.get('quantity', 0) for i in order.get('order_items', []))
        cost = sum(
            PROCESSING_RATES[name] * total_quantity
            for name, chosen in selected.items() if chosen
        )
        timestamp = now_iso()
        order['processing'] = {
            'options': selected,
            'cost': cost,
            'requested_at': timestamp,
            'status': ProcessingStatus.REQUESTED.value,
        }
        order['total_amount'] = order.get('total_amount', 0) + cost
        order['updated_at'] = timestamp
        self.repos.orders.set_all(orders)
        return True

    def get_order(self, order_id):
        return self.repos.orders.find(order_id)

    def can_view(self, user, order) -> bool:
        role = user.get('role')
        if role == UserRole.ADMIN.value:
            return True
        if role == UserRole.BUYER.value:
            return same_id(order.get('buyer_id'), user.get('id'))
        if role == UserRole.SELLER.value:
            return any(
                (i.get('product', {}).get('seller') or {}).get(
                    'business_name') == user.get('business_name')
                for i in order.get('order_items', [])
            )
        return False

    def list_orders_for(self, user):
        return [
            o for o in self.repos.orders.get_all() if self.can_view(user, o)
        ]
