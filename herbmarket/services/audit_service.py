"""Audit lines for account activity and admin decisions.

Every call writes one ``AUDIT`` line to this module's logger. Decisions that
change marketplace data are copied to the ``major_events`` log so they can be
reviewed without the request noise of the main log.
"""
from flask import has_request_context, request
import logging
import json
import os

logger = logging.getLogger(__name__)

MAJOR_EVENTS_FILE = os.environ.get('MAJOR_EVENTS_LOG', 'major_events.log')

MAJOR_ACTION_PREFIXES = (
    'LOGIN',
    'LOGOUT',
    'REGISTER',
    'ORDER_',
    'BUYING_REQUEST_',
    'PRODUCT_REVIEW_',
    'DATA_',
)

PAYLOAD_LIMIT = 600


def _major_events_logger():
    major = logging.getLogger('major_events')
    if not major.handlers:
        handler = logging.FileHandler(MAJOR_EVENTS_FILE)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'))
        major.addHandler(handler)
        major.setLevel(logging.INFO)
        major.propagate = False
    return major


major_logger = _major_events_logger()


def _brief(payload):
    if payload is None:
        return None
    text = json.dumps(
        payload, ensure_ascii=False, separators=(',', ':'), default=str)
    if len(text) > PAYLOAD_LIMIT:
        text = text[:PAYLOAD_LIMIT] + '...'
    return text


def log_audit(
        actor_id=None,
        actor_role='ANONYMOUS',
        action='',
        target_type=None,
        target_id=None,
        payload=None):
    try:
        method, path = None, None
        if has_request_context():
            method, path = request.method, request.path

        line = (
            f"action={action} actor_role={actor_role} actor_id={actor_id} "
            f"target_type={target_type} target_id={target_id} "
            f"method={method} path={path} payload={_brief(payload)}"
        )
        logger.info("AUDIT %s", line)
        if action and action.startswith(MAJOR_ACTION_PREFIXES):
            major_logger.info(line)
    except Exception as e:
        logger.error(f"Failed to log audit: {e}", exc_info=True)
