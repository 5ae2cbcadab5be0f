from flask import Blueprint, Response, request, jsonify
from flask_login import login_required, current_user
from herbmarket.middleware import role_required
from herbmarket.models import BuyingRequestStatus, ReviewStatus, UserRole
from herbmarket.services.audit_service import log_audit
from herbmarket.services.workflow_service import WorkflowService
from herbmarket.utils import (
    error_response,
    get_data_manager,
    json_body,
    parse_positive_number,
)
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('admin', __name__)

DEFAULT_APPROVAL_NOTE = '管理员已审核通过'


@bp.route('/api/admin/dashboard', methods=['GET'])
@login_required
@role_required('admin')
def dashboard():
    manager = get_data_manager()
    repos = manager.repos
    users = repos.users.get_all()
    reviews = repos.product_reviews.get_all()
    requests_ = repos.buying_requests.get_all()
    stats = {
        'total_users': len(users),
        'total_sellers': sum(
            1 for u in users if u.get('role') == UserRole.SELLER.value),
        'total_products': len(manager.all_products_including_pending()),
        'visible_products': len(manager.visible_products()),
        'total_orders': len(repos.orders.get_all()),
        'pending_reviews': sum(
            1 for r in reviews
            if r.get('status') == ReviewStatus.PENDING_REVIEW.value),
        'pending_buying_requests': sum(
            1 for r in requests_
            if r.get('status') == BuyingRequestStatus.PENDING.value),
    }
    return jsonify(stats)


@bp.route('/api/admin/products', methods=['GET'])
@login_required
@role_required('admin')
def list_all_products():
    products = get_data_manager().all_products_including_pending()
    return jsonify({'items': products, 'total': len(products)})


@bp.route('/api/admin/buying-requests', methods=['GET'])
@login_required
@role_required('admin')
def list_buying_requests():
    status = (request.args.get('status') or '').strip().lower() or None
    workflow = WorkflowService(get_data_manager())
    return jsonify({'items': workflow.list_buying_requests(status=status)})


@bp.route('/api/admin/buying-requests/<request_id>/approve',
          methods=['POST'])
@login_required
@role_required('admin')
def approve_buying_request(request_id):
    notes = (json_body().get('admin_notes') or '').strip() \
        or DEFAULT_APPROVAL_NOTE

    manager = get_data_manager()
    if manager.repos.buying_requests.find(request_id) is None:
        return error_response('Buying request not found', 404)

    workflow = WorkflowService(manager)
    if not workflow.approve_buying_request(request_id, notes):
        return error_response('Buying request has already been decided', 409)

    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='BUYING_REQUEST_APPROVE',
        target_type='BUYING_REQUEST',
        target_id=request_id,
        payload={'admin_notes': notes}
    )

    return jsonify({'ok': True})


@bp.route('/api/admin/product-reviews', methods=['GET'])
@login_required
@role_required('admin')
def list_product_reviews():
    status = (request.args.get('status') or '').strip().lower() or None
    workflow = WorkflowService(get_data_manager())
    return jsonify({'items': workflow.list_product_reviews(status=status)})


@bp.route('/api/admin/product-reviews/<review_id>/approve',
          methods=['POST'])
@login_required
@role_required('admin')
def approve_product_review(review_id):
    data = json_body()
    adjusted_price = None
    if data.get('adjusted_price') is not None:
        adjusted_price = parse_positive_number(data.get('adjusted_price'))
        if adjusted_price is None:
            return error_response('Adjusted price must be greater than 0')
    notes = (data.get('admin_notes') or '').strip() or DEFAULT_APPROVAL_NOTE

    manager = get_data_manager()
    if manager.repos.product_reviews.find(review_id) is None:
        return error_response('Product review not found', 404)

    workflow = WorkflowService(manager)
    if not workflow.approve_product_with_price_adjustment(
            review_id, adjusted_price, notes):
        return error_response('Product review has already been decided', 409)

    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='PRODUCT_REVIEW_APPROVE',
        target_type='PRODUCT_REVIEW',
        target_id=review_id,
        payload={'adjusted_price': adjusted_price, 'admin_notes': notes}
    )

    return jsonify({'ok': True})


@bp.route('/api/admin/data/export', methods=['GET'])
@login_required
@role_required('admin')
def export_data():
    body = get_data_manager().export_data()
    return Response(
        body, mimetype='application/json')


@bp.route('/api/admin/data/import', methods=['POST'])
@login_required
@role_required('admin')
def import_data():
    if not get_data_manager().import_data(request.get_data(as_text=True)):
        return error_response('Invalid backup data')

    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='DATA_IMPORT',
        target_type='DEMO_DATA',
    )
    return jsonify({'ok': True})


@bp.route('/api/admin/data/reset', methods=['POST'])
@login_required
@role_required('admin')
def reset_data():
    manager = get_data_manager()
    manager.clear_all()
    manager.initialize()

    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='DATA_RESET',
        target_type='DEMO_DATA',
    )
    return jsonify({'ok': True})
