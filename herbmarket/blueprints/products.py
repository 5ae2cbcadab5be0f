from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from herbmarket.middleware import role_required
from herbmarket.services.audit_service import log_audit
from herbmarket.services.workflow_service import WorkflowService
from herbmarket.utils import (
    error_response,
    get_data_manager,
    json_body,
    parse_positive_number,
    same_id,
)
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('products', __name__)


def _validate_listing(data, partial=False):
    """Return (fields, error) for a seller listing payload."""
    fields = {}
    name_cn = (data.get('name_cn') or '').strip()
    if name_cn:
        fields['name_cn'] = name_cn
    elif not partial or 'name_cn' in data:
        return None, 'name_cn cannot be empty'

    if 'price' in data or not partial:
        price = parse_positive_number(data.get('price'))
        if price is None:
            return None, 'Price must be greater than 0'
        fields['price'] = price

    if 'stock' in data or not partial:
        stock = data.get('stock')
        if isinstance(stock, bool) or not isinstance(stock, int) \
                or stock < 0:
            return None, 'Stock must be a non-negative integer'
        fields['stock'] = stock

    for key in ('name_en', 'description', 'image_url', 'quality_report'):
        if key in data:
            fields[key] = data.get(key) or None
    return fields, None


@bp.route('/api/products', methods=['GET'])
def list_products():
    products = get_data_manager().visible_products()
    return jsonify({'items': products, 'total': len(products)})


@bp.route('/api/products/<product_id>', methods=['GET'])
def get_product(product_id):
    for product in get_data_manager().visible_products():
        if same_id(product.get('id'), product_id):
            return jsonify(product)
    return error_response('Product not found', 404)


@bp.route('/api/group-buys', methods=['GET'])
def list_group_buys():
    activities = get_data_manager().repos.group_buys.get_all()
    return jsonify({'items': activities})


@bp.route('/api/seller/products', methods=['GET'])
@login_required
@role_required('seller')
def list_seller_products():
    workflow = WorkflowService(get_data_manager())
    return jsonify({'items': workflow.list_seller_products(current_user.id)})


@bp.route('/api/seller/products', methods=['POST'])
@login_required
@role_required('seller')
def create_seller_product():
    fields, error = _validate_listing(json_body())
    if error:
        return error_response(error)

    workflow = WorkflowService(get_data_manager())
    product_id, review_id = workflow.submit_seller_product(
        current_user.record, fields)

    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='PRODUCT_REVIEW_SUBMIT',
        target_type='PRODUCT',
        target_id=product_id,
        payload={'review_id': review_id, 'price': fields['price']}
    )

    return jsonify({
        'ok': True,
        'product_id': product_id,
        'review_id': review_id,
    }), 201


@bp.route('/api/seller/products/<product_id>', methods=['PATCH'])
@login_required
@role_required('seller')
def update_seller_product(product_id):
    fields, error = _validate_listing(json_body(), partial=True)
    if error:
        return error_response(error)

    workflow = WorkflowService(get_data_manager())
    if not workflow.update_seller_product(
            current_user.id, product_id, fields):
        return error_response('Product not found', 404)
    return jsonify({'ok': True})


@bp.route('/api/seller/products/<product_id>', methods=['DELETE'])
@login_required
@role_required('seller')
def delete_seller_product(product_id):
    workflow = WorkflowService(get_data_manager())
    if not workflow.delete_seller_product(current_user.id, product_id):
        return error_response('Product not found', 404)
    return jsonify({'ok': True})
