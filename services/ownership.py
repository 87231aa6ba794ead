import logging

import errors

logger = logging.getLogger(__name__)


def authorize(actor_id: int, owner_id: int) -> bool:
    return actor_id is not None and actor_id == owner_id


def ensure_owner(actor_id: int, owner_id: int, detail: str = "Not authorized") -> None:
    # Callers look the resource up first, so a missing record is already NotFound.
    if not authorize(actor_id, owner_id):
        logger.warning("User %s refused: resource owned by %s", actor_id, owner_id)
        raise errors.ForbiddenError(detail)
