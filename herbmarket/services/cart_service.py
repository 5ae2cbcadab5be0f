from herbmarket.repositories import JsonCollection
from herbmarket.storage import StorageKeys
from herbmarket.utils import same_id


class Cart:
    """Shopping cart, one line per product.

    Each client has its own cart stored under ``cart:<owner>``. Without an
    owner the cart uses the bare ``cart`` key.
    """

    def __init__(self, store, owner=None):
        self.owner = owner
        self._items = JsonCollection(store, StorageKeys.cart_for(owner))

    def items(self):
        return self._items.get_all()

    def add_item(self, product_id, product_name, price, quantity,
                 seller_name=None):
        items = self.items()
        for item in items:
            if same_id(item.get('product_id'), product_id):
                item['quantity'] += quantity
                break
        else:
            items.append({
                'product_id': product_id,
                'product_name': product_name,
                'price': price,
                'quantity': quantity,
                'seller_name': seller_name,
            })
        self._items.set_all(items)

    def remove_item(self, product_id):
        self._items.set_all([
            item for item in self.items()
            if not same_id(item.get('product_id'), product_id)
        ])

    def update_quantity(self, product_id, quantity):
        if quantity <= 0:
            self.remove_item(product_id)
            return
        items = self.items()
        for item in items:
            if same_id(item.get('product_id'), product_id):
                item['quantity'] = quantity
        self._items.set_all(items)

    def clear(self):
        self._items.set_all([])

    def total_amount(self):
        return sum(item['price'] * item['quantity'] for item in self.items())

    def item_count(self):
        return sum(item['quantity'] for item in self.items())

    def is_empty(self):
        return not self.items()
