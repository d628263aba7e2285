import json
import logging

from flask import has_request_context, request

audit_logger = logging.getLogger("audit")


def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None, level=logging.INFO):
    ip = None
    if has_request_context():
        ip = request.headers.get("X-Forwarded-For", request.remote_addr)

    audit_logger.log(
        level,
        "%s user=%s entity=%s:%s ip=%s meta=%s",
        action,
        user_id,
        entity,
        entity_id if entity_id is not None else "-",
        ip,
        json.dumps(metadata, sort_keys=True, default=str) if metadata else "{}",
    )
