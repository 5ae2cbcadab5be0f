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
)
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('buying_requests', __name__)


@bp.route('/api/buying-requests', methods=['POST'])
@login_required
@role_required('buyer')
def create_buying_request():
    data = json_body()
    product_name = (data.get('product_name') or '').strip()
    quantity = parse_positive_number(data.get('quantity'), int)
    target_price = parse_positive_number(data.get('target_price'))

    if not product_name:
        return error_response('product_name cannot be empty')
    if quantity is None:
        return error_response('Quantity must be greater than 0')
    if target_price is None:
        return error_response('Target price must be greater than 0')

    buyer = current_user.record
    workflow = WorkflowService(get_data_manager())
    request_id = workflow.create_buying_request({
        'buyer_id': buyer['id'],
        'product_name': product_name,
        'quantity': quantity,
        'target_price': target_price,
        'description': (data.get('description') or '').strip(),
        'buyer': {
            'business_name': buyer.get('business_name'),
            'email': buyer.get('email') or buyer['id'],
        },
    })

    log_audit(
        actor_id=current_user.id,
        actor_role=current_user.role.value,
        action='BUYING_REQUEST_CREATE',
        target_type='BUYING_REQUEST',
        target_id=request_id,
        payload={'product_name': product_name, 'quantity': quantity}
    )

    return jsonify({'ok': True, 'request_id': request_id}), 201


@bp.route('/api/buying-requests', methods=['GET'])
@login_required
@role_required('buyer')
def list_my_buying_requests():
    workflow = WorkflowService(get_data_manager())
    items = workflow.list_buying_requests(buyer_id=current_user.id)
    return jsonify({'items': items})
