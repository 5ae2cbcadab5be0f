from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from herbmarket.middleware import role_required
from herbmarket.services.audit_service import log_audit
from herbmarket.services.order_service import (
    InsufficientStockError,
    OrderService,
    PROCESSING_RATES,
)
from herbmarket.services.workflow_service import ProductNotFoundError
from herbmarket.utils import (
    error_response,
    get_cart,
    get_data_manager,
    json_body,
)
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('orders', __name__)


@bp.route('/api/orders', methods=['POST'])
@login_required
@role_required('buyer')
def checkout():
    cart = get_cart()
    if cart.is_empty():
        return error_response('Cart is empty')

    orders = OrderService(get_data_manager())
    try:
        order_id = orders.checkout(current_user.record, cart)
    except (InsufficientStockError, ProductNotFoundError) as e:
        logger.info(f"Checkout rejected for {current_user.id}: {e}")
        return error_response(str(e))
    order = orders.get_order(order_id)

    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='ORDER_CREATE',
        target_type='ORDER',
        target_id=order_id,
        payload={
            'total_amount': order['total_amount'],
            'item_count': len(order['order_items']),
        }
    )

    return jsonify({'ok': True, 'order': order}), 201


@bp.route('/api/orders', methods=['GET'])
@login_required
def list_orders():
    orders = OrderService(get_data_manager())
    items = orders.list_orders_for(current_user.record)
    items.sort(key=lambda o: o.get('created_at') or '', reverse=True)
    return jsonify({'items': items, 'total': len(items)})


@bp.route('/api/orders/<order_id>', methods=['GET'])
@login_required
def get_order(order_id):
    orders = OrderService(get_data_manager())
    order = orders.get_order(order_id)
    if order is None:
        return error_response('Order not found', 404)
    if not orders.can_view(current_user.record, order):
        return error_response('No permission to view this order', 403)
    return jsonify(order)


@bp.route('/api/orders/<order_id>/processing', methods=['POST'])
@login_required
@role_required('buyer')
def request_processing(order_id):
    data = json_body()
    options = {name: bool(data.get(name)) for name in PROCESSING_RATES}
    if not any(options.values()):
        return error_response('Select at least one processing option')

    orders = OrderService(get_data_manager())
    order = orders.get_order(order_id)
    if order is None:
        return error_response('Order not found', 404)
    if not orders.can_view(current_user.record, order):
        return error_response('No permission to modify this order', 403)

    if not orders.request_processing(order_id, options):
        return error_response('Processing already requested for this order')

    order = orders.get_order(order_id)
    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='ORDER_PROCESSING_REQUEST',
        target_type='ORDER',
        target_id=order_id,
        payload=order['processing']
    )
    return jsonify({'ok': True, 'order': order})
