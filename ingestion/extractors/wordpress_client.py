"""
WordPress REST API client with pagination and a fixed inter-page delay.

This module provides:
- API root normalization for whatever URL form the user pasted
- A connection test used to fail fast before a long import
- Paginated collection fetches (users, categories, posts)
- Single media fetches where a 404 means "no image"

There is no retry or backoff: network errors and timeouts propagate to the
caller, which decides whether to abort the run or skip one item.
"""

import httpx
import asyncio
from typing import List, Dict, Any, Optional, Sequence, Tuple
from urllib.parse import urlparse
from dataclasses import dataclass
from core.config import settings
from core.exceptions import APIExtractionError, NetworkError, AuthenticationError, ResourceNotFoundError
from schemas.wordpress import WordPressMedia
import logging

logger = logging.getLogger(__name__)

TOTAL_PAGES_HEADER = "X-WP-TotalPages"
ERROR_BODY_LIMIT = 200


@dataclass
class WordPressConfig:
    """Connection settings for one WordPress site"""
    base_url: str
    username: Optional[str] = None
    password: Optional[str] = None
    timeout: float = 30.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)


def normalize_wordpress_url(url: str) -> str:
    """
    Turn a site URL, a wp-json URL or a wp/v2 URL into the API root.

    Examples:
        blog.example.com                     -> https://blog.example.com/wp-json
        https://blog.example.com/            -> https://blog.example.com/wp-json
        https://blog.example.com/wp-json/wp/v2/posts -> https://blog.example.com/wp-json
    """
    normalized = url.strip()
    if not normalized.startswith(("http://", "https://")):
        normalized = f"https://{normalized}"

    normalized = normalized.rstrip("/")

    if "/wp/v2" in normalized:
        parsed = urlparse(normalized)
        return f"{parsed.scheme}://{parsed.netloc}/wp-json"

    if "/wp-json" in normalized:
        return normalized[:normalized.index("/wp-json") + len("/wp-json")]

    return f"{normalized}/wp-json"


class WordPressClient:
    """
    Async client for the wp/v2 endpoints of one site.

    Use as an async context manager so the underlying connection pool is
    closed:

        async with WordPressClient(config) as client:
            users = await client.fetch_users()

    Attributes:
        config: Site URL and optional application-password credentials
        page_size: Items requested per page (default: 100)
        page_delay: Seconds to wait between pages (default: 0.2)
    """

    def __init__(
        self,
        config: WordPressConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        page_size: Optional[int] = None,
        page_delay: Optional[float] = None,
        test_timeout: Optional[float] = None
    ):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self.page_size = page_size or settings.WORDPRESS_PAGE_SIZE
        self.page_delay = settings.WORDPRESS_PAGE_DELAY if page_delay is None else page_delay
        self.test_timeout = test_timeout or settings.WORDPRESS_TEST_TIMEOUT

        headers = {"Content-Type": "application/json"}
        auth = (config.username, config.password) if config.has_credentials else None

        self._client = httpx.AsyncClient(
            headers=headers,
            auth=auth,
            timeout=config.timeout,
            transport=transport,
            follow_redirects=True
        )

    async def __aenter__(self) -> "WordPressClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        await self._client.aclose()

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{endpoint}"

    async def test_connection(self) -> Tuple[bool, str]:
        """
        Check that the site answers like a WordPress REST API.

        Tries the posts endpoint first, then the wp/v2 index. Never raises.

        Returns:
            (success, message); on failure the message is the last error seen
        """
        test_urls = [
            self._url("/wp/v2/posts?per_page=1"),
            self._url("/wp/v2"),
        ]
        last_error: Optional[str] = None

        for url in test_urls:
            logger.info(f"Testing WordPress connection: {url}")
            try:
                response = await self._client.get(url, timeout=self.test_timeout)
            except httpx.TimeoutException:
                last_error = f"Connection timeout after {self.test_timeout}s"
                logger.warning(f"WordPress API test timeout: {url}")
                continue
            except httpx.HTTPError as e:
                last_error = str(e) or type(e).__name__
                logger.warning(f"WordPress API test error: {url} - {last_error}")
                continue

            if response.is_success:
                try:
                    data = response.json()
                except ValueError:
                    last_error = "Invalid WordPress REST API response"
                    continue

                if isinstance(data, (list, dict)):
                    logger.info(f"WordPress API test successful: {url}")
                    return True, "Connection successful"
                last_error = "Invalid WordPress REST API response"
            else:
                last_error = f"{response.status_code} {response.reason_phrase}"
                logger.warning(f"WordPress API test failed: {url} - {last_error}")

        return False, last_error or "Invalid WordPress REST API response"

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            return await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise NetworkError(
                f"Request timeout after {self.config.timeout}s",
                context={"api_url": url, "timeout": self.config.timeout},
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise NetworkError(
                f"Network error: {e}",
                context={"api_url": url},
                original_exception=e
            )

    def _raise_for_status(self, response: httpx.Response, url: str):
        if response.is_success:
            return
        body = response.text
        logger.error(f"WordPress API error for {url}: {response.status_code} {response.reason_phrase}")
        if response.status_code in (401, 403):
            error_class = AuthenticationError
        elif response.status_code == 404:
            error_class = ResourceNotFoundError
        else:
            error_class = APIExtractionError
        raise error_class(
            f"WordPress API error: {response.status_code} {response.reason_phrase} - {body[:ERROR_BODY_LIMIT]}",
            context={
                "api_url": url,
                "status_code": response.status_code,
                "response_body": body[:ERROR_BODY_LIMIT]
            }
        )

    async def fetch_collection(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        max_pages: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        Fetch every page of a collection endpoint.

        Stops when the X-WP-TotalPages count is reached, when (without that
        header) a page comes back short, or after max_pages pages.

        Raises:
            NetworkError: On timeout or transport failure
            APIExtractionError: On a non-2xx response or a non-JSON body
        """
        url = self._url(endpoint)
        results: List[Dict[str, Any]] = []
        page = 1
        total_pages = 1

        while True:
            query = dict(params or {})
            query["per_page"] = self.page_size
            query["page"] = page

            logger.info(f"Fetching WordPress API: {url} (page {page})")
            response = await self._get(url, params=query)
            self._raise_for_status(response, url)

            try:
                data = response.json()
            except ValueError as e:
                raise APIExtractionError(
                    "Failed to parse JSON response",
                    context={
                        "api_url": url,
                        "page": page,
                        "response_body": response.text[:ERROR_BODY_LIMIT]
                    },
                    original_exception=e
                )

            if isinstance(data, list):
                results.extend(data)
                page_count = len(data)
            elif isinstance(data, dict):
                results.append(data)
                page_count = 1
            else:
                page_count = 0

            total_pages_header = response.headers.get(TOTAL_PAGES_HEADER)
            if total_pages_header and total_pages_header.isdigit():
                total_pages = int(total_pages_header)
            else:
                total_pages = page if page_count < self.page_size else page + 1

            page += 1
            if page > total_pages or (max_pages and page > max_pages):
                break

            await asyncio.sleep(self.page_delay)

        logger.info(f"Fetched {len(results)} records from {endpoint} ({page - 1} pages)")
        return results

    async def fetch_users(self) -> List[Dict[str, Any]]:
        """Raw user records; each one is parsed by the runner on its own"""
        return await self.fetch_collection("/wp/v2/users")

    async def fetch_categories(self) -> List[Dict[str, Any]]:
        return await self.fetch_collection("/wp/v2/categories")

    async def fetch_posts(self, statuses: Optional[Sequence[str]] = None) -> List[Dict[str, Any]]:
        """
        Fetch posts, filtered by status only when authenticated.

        Without credentials WordPress rejects the status filter and returns
        published posts by default, so the filter is not sent.
        """
        params = {}
        if statuses and self.config.has_credentials:
            params["status"] = ",".join(statuses)
        elif statuses:
            logger.info("No credentials supplied; WordPress will only return published posts")

        return await self.fetch_collection("/wp/v2/posts", params=params)

    async def fetch_media(self, media_id: int) -> Optional[WordPressMedia]:
        """
        Fetch one media item.

        Returns:
            The media item, or None when media_id is not positive or the
            item no longer exists (404)
        """
        if not media_id or media_id <= 0:
            return None

        url = self._url(f"/wp/v2/media/{media_id}")
        response = await self._get(url)

        if response.status_code == 404:
            logger.debug(f"Media {media_id} not found")
            return None

        self._raise_for_status(response, url)
        return WordPressMedia.model_validate(response.json())
