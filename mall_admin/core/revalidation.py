import logging
from typing import Iterable, List

import httpx

from mall_admin.config.settings import settings

logger = logging.getLogger(__name__)


class Revalidator:
    """Marks public-site paths stale after a mutation. Failures are logged, never raised."""

    def __init__(self, url: str = None, secret: str = None, timeout: float = None):
        self.url = url if url is not None else settings.revalidate_url
        self.secret = secret if secret is not None else settings.revalidate_secret
        self.timeout = timeout if timeout is not None else settings.revalidate_timeout

    def revalidate(self, paths: Iterable[str]) -> List[str]:
        unique_paths = list(dict.fromkeys(p for p in paths if p))
        if not unique_paths:
            return []
        if not self.url:
            logger.debug(f"Revalidation not configured, skipping {unique_paths}")
            return unique_paths
        headers = {"x-revalidate-secret": self.secret} if self.secret else {}
        try:
            resp = httpx.post(self.url, json={"paths": unique_paths}, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Failed to revalidate {unique_paths}: {e}")
        return unique_paths


def get_revalidator() -> Revalidator:
    return Revalidator()
