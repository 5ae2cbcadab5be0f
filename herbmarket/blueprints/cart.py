from flask import Blueprint, jsonify
from herbmarket.utils import (
    error_response,
    get_cart,
    get_data_manager,
    json_body,
    parse_positive_number,
    same_id,
)
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('cart', __name__)


def _cart_payload(cart):
    return {
        'items': cart.items(),
        'total_amount': cart.total_amount(),
        'total_items': cart.item_count(),
    }


@bp.route('/api/cart', methods=['GET'])
def show_cart():
    return jsonify(_cart_payload(get_cart()))


@bp.route('/api/cart/items', methods=['POST'])
def add_cart_item():
    data = json_body()
    product_id = data.get('product_id')
    quantity = parse_positive_number(data.get('quantity', 1), int)

    if product_id is None:
        return error_response('Product ID cannot be empty')

    if quantity is None:
        return error_response('Quantity must be greater than 0')

    # Only products buyers can see may be added
    product = next(
        (p for p in get_data_manager().visible_products()
         if same_id(p.get('id'), product_id)),
        None,
    )
    if product is None:
        return error_response('Product not found', 404)

    cart = get_cart()
    in_cart = sum(
        i['quantity'] for i in cart.items()
        if same_id(i.get('product_id'), product_id))
    if product.get('stock', 0) < in_cart + quantity:
        return error_response('Insufficient stock')

    cart.add_item(
        product['id'],
        product.get('name_cn'),
        product.get('price'),
        quantity,
        (product.get('seller') or {}).get('business_name'),
    )
    return jsonify({'ok': True, **_cart_payload(cart)}), 201


@bp.route('/api/cart/items/<product_id>', methods=['PATCH'])
def update_cart_item(product_id):
    quantity = json_body().get('quantity')
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        return error_response('Quantity must be an integer')

    cart = get_cart()
    cart.update_quantity(product_id, quantity)
    return jsonify({'ok': True, **_cart_payload(cart)})


@bp.route('/api/cart/items/<product_id>', methods=['DELETE'])
def delete_cart_item(product_id):
    cart = get_cart()
    cart.remove_item(product_id)
    return jsonify({'ok': True, **_cart_payload(cart)})


@bp.route('/api/cart', methods=['DELETE'])
def clear_cart():
    cart = get_cart()
    cart.clear()
    return jsonify({'ok': True, **_cart_payload(cart)})
