"""
Signed profile token retrieval.

Fetches the raw, unverified token for an ASPE URI. Nothing here establishes
trust: the returned string still has to go through doipverify.aspe.jose.

Usage:
    token = await fetch_token("aspe:keyoxide.org:TOICV3SYXNJP7E4P5AOK5DHW44")
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from doipverify.aspe.uri import JWS_MIME, AspeUri
from doipverify.config import HTTP_TIMEOUT
from doipverify.errors import TokenFetchError

logger = logging.getLogger(__name__)


async def fetch_token(
    profile_uri: str,
    *,
    skip_verify_ssl: bool = False,
    timeout: float = HTTP_TIMEOUT,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Fetch the signed profile token for an ASPE URI.

    Args:
        profile_uri: An aspe:<domain>:<local-part> identifier.
        skip_verify_ssl: Disable TLS certificate validation.
        timeout: HTTP request timeout in seconds.
        client: Optional shared client; it is not closed here.

    Returns:
        The raw token string.

    Raises:
        ProfileURIMalformed: If the URI is not a valid aspe URI.
        TokenFetchError: If the request fails or returns an empty body.
    """
    aspe_uri = AspeUri.parse(profile_uri)
    url = aspe_uri.fetch_url
    headers = {"Content-Type": JWS_MIME, "Accept": JWS_MIME}

    logger.debug(f"Fetching profile token from {url}")

    try:
        if client is not None:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
            body = response.text
        else:
            async with httpx.AsyncClient(timeout=timeout, verify=not skip_verify_ssl) as owned:
                response = await owned.get(url, headers=headers)
                response.raise_for_status()
                body = response.text
    except httpx.HTTPError as e:
        raise TokenFetchError(url, str(e) or type(e).__name__) from e

    body = body.strip()
    if not body:
        raise TokenFetchError(url, "empty response body")

    return body
