"""Admin workflows: buying requests and seller product reviews.

Only the approve transitions are driven here. The other states declared on
``BuyingRequestStatus`` and ``ReviewStatus`` have stubs that raise
``NotImplementedError`` until their rules are settled.
"""
from herbmarket.models import (
    AuditStatus,
    BuyingRequestStatus,
    ReviewStatus,
    StockStatus,
)
from herbmarket.utils import new_id, now_iso, same_id
import logging

logger = logging.getLogger(__name__)

SELLER_PRODUCT_FIELDS = (
    'name_cn',
    'name_en',
    'price',
    'stock',
    'description',
    'image_url',
    'quality_report',
)


class ProductNotFoundError(LookupError):
    pass


def stock_status_for(stock):
    if stock and stock > 0:
        return StockStatus.IN_STOCK.value
    return StockStatus.OUT_OF_STOCK.value


class WorkflowService:

    def __init__(self, manager):
        self.manager = manager
        self.repos = manager.repos

    # ------------------------------------------------------------------
    # Buying requests
    # ------------------------------------------------------------------

    def create_buying_request(self, fields) -> str:
        timestamp = now_iso()
        new_request = dict(fields)
        new_request.setdefault('status', BuyingRequestStatus.PENDING.value)
        new_request.update({
            'id': new_id(),
            'created_at': timestamp,
            'updated_at': timestamp,
        })
        self.repos.buying_requests.append(new_request)
        logger.info(
            "Buying request %s created by %s",
            new_request['id'],
            new_request.get('buyer_id'),
        )
        return new_request['id']

    def approve_buying_request(self, request_id, admin_notes=None) -> bool:
        """Approve a pending request; unknown or decided ones give False."""
        requests = self.repos.buying_requests.get_all()
        for index, item in enumerate(requests):
            if same_id(item.get('id'), request_id):
                break
        else:
            return False
        if item.get('status') != BuyingRequestStatus.PENDING.value:
            logger.warning(
                "Buying request %s is already %s",
                request_id,
                item.get('status'),
            )
            return False

        timestamp = now_iso()
        requests[index] = {
            **item,
            'status': BuyingRequestStatus.ADMIN_APPROVED.value,
            'admin_approved_at': timestamp,
            'admin_notes': admin_notes,
            'updated_at': timestamp,
        }
        self.repos.buying_requests.set_all(requests)
        return True

    def reject_buying_request(self, request_id, admin_notes=None):
        raise NotImplementedError(
            'Rejecting buying requests is not yet implemented')

    def send_to_sellers(self, request_id):
        raise NotImplementedError(
            'Routing buying requests to sellers is not yet implemented')

    def list_buying_requests(self, buyer_id=None, status=None):
        requests = self.repos.buying_requests.get_all()
        if buyer_id is not None:
            requests = [
                r for r in requests if same_id(r.get('buyer_id'), buyer_id)]
        if status:
            requests = [r for r in requests if r.get('status') == status]
        return requests

    def list_seller_responses(self, request_id):
        return [
            r for r in self.repos.seller_responses.get_all()
            if same_id(r.get('request_id'), request_id)
        ]

    # ------------------------------------------------------------------
    # Product reviews
    # ------------------------------------------------------------------

    def create_product_review(
            self, product_id, seller_id, original_price) -> str:
        product = self.manager.find_product(product_id)
        if product is None:
            raise ProductNotFoundError(f'Product {product_id} not found')

        review = {
            'id': new_id(),
            'product_id': str(product_id),
            'seller_id': seller_id,
            'original_price': original_price,
            'status': ReviewStatus.PENDING_REVIEW.value,
            'created_at': now_iso(),
            'product': dict(product),
        }
        self.repos.product_reviews.append(review)
        return review['id']

    def approve_product_with_price_adjustment(
            self, review_id, adjusted_price=None, admin_notes=None) -> bool:
        reviews = self.repos.product_reviews.get_all()
        for index, review in enumerate(reviews):
            if same_id(review.get('id'), review_id):
                break
        else:
            return False
        if review.get('status') != ReviewStatus.PENDING_REVIEW.value:
            logger.warning(
                "Product review %s is already %s",
                review_id,
                review.get('status'),
            )
            return False

        reviews[index] = {
            **review,
            'status': ReviewStatus.APPROVED.value,
            'admin_adjusted_price': adjusted_price,
            'admin_notes': admin_notes,
            'reviewed_at': now_iso(),
        }
        self.repos.product_reviews.set_all(reviews)

        changes = {'audit_status': AuditStatus.APPROVED.value}
        if adjusted_price is not None:
            changes['price'] = adjusted_price
        if not self.manager.update_product(review['product_id'], changes):
            logger.warning(
                "Review %s approved but product %s no longer exists",
                review_id,
                review['product_id'],
            )
        return True

    def reject_product(self, review_id, admin_notes=None):
        raise NotImplementedError(
            'Rejecting product reviews is not yet implemented')

    def request_revision(self, review_id, admin_notes=None):
        raise NotImplementedError(
            'Requesting product revisions is not yet implemented')

    def list_product_reviews(self, status=None):
        reviews = self.repos.product_reviews.get_all()
        if status:
            reviews = [r for r in reviews if r.get('status') == status]
        return reviews

    # ------------------------------------------------------------------
    # Seller listings
    # ------------------------------------------------------------------

    def submit_seller_product(self, seller, fields):
        """Create a seller listing and its pending review.

        Returns ``(product_id, review_id)``.
        """
        timestamp = now_iso()
        product = {
            key: fields.get(key) for key in SELLER_PRODUCT_FIELDS
            if key in fields
        }
        product.update({
            'id': new_id(),
            'seller_id': seller['id'],
            'created_at': timestamp,
            'updated_at': timestamp,
            'seller': {
                'business_name': seller.get('business_name'),
                'id': seller['id'],
            },
            'stock_status': stock_status_for(product.get('stock')),
            'audit_status': AuditStatus.PENDING.value,
        })
        self.repos.seller_products.append(product)
        review_id = self.create_product_review(
            product['id'], seller['id'], product.get('price'))
        return product['id'], review_id

    def list_seller_products(self, seller_id):
        return [
            p for p in self.repos.seller_products.get_all()
            if same_id(p.get('seller_id'), seller_id)
        ]

    def update_seller_product(self, seller_id, product_id, fields) -> bool:
        products = self.repos.seller_products.get_all()
        for product in products:
            if (same_id(product.get('id'), product_id)
                    and same_id(product.get('seller_id'), seller_id)):
                break
        else:
            return False

        for key in SELLER_PRODUCT_FIELDS:
            if key in fields:
                product[key] = fields[key]
        product['stock_status'] = stock_status_for(product.get('stock'))
        product['updated_at'] = now_iso()
        self.repos.seller_products.set_all(products)
        return True

    def delete_seller_product(self, seller_id, product_id) -> bool:
        products = self.repos.seller_products.get_all()
        remaining = [
            p for p in products
            if not (same_id(p.get('id'), product_id)
                    and same_id(p.get('seller_id'), seller_id))
        ]
        if len(remaining) == len(products):
            return False
        self.repos.seller_products.set_all(remaining)
        return True
