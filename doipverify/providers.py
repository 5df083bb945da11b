"""
Service provider catalog and the HTTP claim checker.

A claim URI is matched against a closed catalog of service providers. Each
provider knows where the proof text for a claim lives (an API endpoint or
the claim page itself) and how to read it. A claim is verified when the
proof text mentions the subject URI.

Example:
    >>> async with HttpClaimChecker(VerifierConfig.from_env()) as checker:
    ...     matches = await checker.find_matches("https://lobste.rs/u/alice")
    ...     result = await checker.verify(claim_uri, subject_uri, matches)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from doipverify.claims import (
    ClaimCheckerInterface,
    ClaimVerificationResult,
    ServiceMatch,
    ServiceProviderInfo,
)
from doipverify.config import VerifierConfig
from doipverify.errors import NoProviderMatch, ProofFetchError

logger = logging.getLogger(__name__)

ACTIVITY_JSON = "application/activity+json"


# =============================================================================
# Proof Extractors
# =============================================================================


def _str_parts(*values: Any) -> List[str]:
    return [v for v in values if isinstance(v, str)]


def _gist_text(data: Any) -> str:
    parts = _str_parts(data.get("description"))
    files = data.get("files")
    if isinstance(files, dict):
        for gist_file in files.values():
            if isinstance(gist_file, dict):
                parts.extend(_str_parts(gist_file.get("content")))
    return "\n".join(parts)


def _field_text(name: str) -> Callable[[Any], str]:
    def extract(data: Any) -> str:
        value = data.get(name) if isinstance(data, dict) else None
        return value if isinstance(value, str) else ""

    return extract


def _activitypub_text(data: Any) -> str:
    parts = _str_parts(data.get("summary"))
    attachments = data.get("attachment")
    if isinstance(attachments, list):
        for attachment in attachments:
            if isinstance(attachment, dict):
                parts.extend(_str_parts(attachment.get("name"), attachment.get("value")))
    return "\n".join(parts)


def _plain_text(data: Any) -> str:
    return data if isinstance(data, str) else ""


# =============================================================================
# Catalog
# =============================================================================


@dataclass(frozen=True)
class ServiceProvider:
    """How to locate and read the proof for one kind of service."""

    info: ServiceProviderInfo
    pattern: "re.Pattern[str]"
    proof_url: Callable[[str, Dict[str, str]], str]
    extract: Callable[[Any], str]
    response_format: str = "json"
    headers: Dict[str, str] = field(default_factory=dict)

    def match(self, claim_uri: str) -> Optional[ServiceMatch]:
        found = self.pattern.match(claim_uri)
        if not found:
            return None
        params = {k: v for k, v in found.groupdict().items() if v is not None}
        return ServiceMatch(
            provider=self.info,
            proof_url=self.proof_url(claim_uri, params),
            params=params,
        )


PROVIDERS: Tuple[ServiceProvider, ...] = (
    ServiceProvider(
        info=ServiceProviderInfo(id="github", name="GitHub", homepage="https://github.com"),
        pattern=re.compile(r"^https://gist\.github\.com/(?P<username>[^/]+)/(?P<gist_id>[0-9a-fA-F]+)/?$"),
        proof_url=lambda uri, p: f"https://api.github.com/gists/{p['gist_id']}",
        extract=_gist_text,
        headers={"Accept": "application/vnd.github.v3+json"},
    ),
    ServiceProvider(
        info=ServiceProviderInfo(id="gitlab", name="GitLab", homepage="https://gitlab.com"),
        pattern=re.compile(r"^https://(?P<domain>[^/]+)/(?P<username>[^/]+)/gitlab_proof/?$"),
        proof_url=lambda uri, p: (
            f"https://{p['domain']}/api/v4/projects/{p['username']}%2Fgitlab_proof"
        ),
        extract=_field_text("description"),
    ),
    ServiceProvider(
        info=ServiceProviderInfo(
            id="hackernews", name="Hacker News", homepage="https://news.ycombinator.com"
        ),
        pattern=re.compile(r"^https://news\.ycombinator\.com/user\?id=(?P<username>[^&/]+)$"),
        proof_url=lambda uri, p: (
            f"https://hacker-news.firebaseio.com/v0/user/{p['username']}.json"
        ),
        extract=_field_text("about"),
    ),
    ServiceProvider(
        info=ServiceProviderInfo(id="lobsters", name="Lobsters", homepage="https://lobste.rs"),
        pattern=re.compile(r"^https://lobste\.rs/u/(?P<username>[^/]+)/?$"),
        proof_url=lambda uri, p: f"https://lobste.rs/u/{p['username']}.json",
        extract=_field_text("about"),
    ),
    ServiceProvider(
        info=ServiceProviderInfo(id="activitypub", name="ActivityPub"),
        pattern=re.compile(r"^https://(?P<domain>[^/]+)/(?:@|users/)(?P<username>[^/@]+)/?$"),
        proof_url=lambda uri, p: uri,
        extract=_activitypub_text,
        headers={"Accept": ACTIVITY_JSON},
    ),
    ServiceProvider(
        info=ServiceProviderInfo(id="web", name="Web page"),
        pattern=re.compile(r"^https://\S+$"),
        proof_url=lambda uri, p: uri,
        extract=_plain_text,
        response_format="text",
    ),
)


def match_providers(claim_uri: str) -> List[ServiceMatch]:
    """Return every provider the claim URI matches, most specific first."""
    matches = []
    for provider in PROVIDERS:
        found = provider.match(claim_uri)
        if found:
            matches.append(found)
    return matches


def proof_mentions_subject(text: str, subject_uri: str) -> bool:
    """Check if proof text names the subject (case insensitive)."""
    return bool(subject_uri) and subject_uri.lower() in text.lower()


# =============================================================================
# HTTP Claim Checker
# =============================================================================


class HttpClaimChecker(ClaimCheckerInterface):
    """
    Checks claims by fetching proofs over HTTPS.

    When a proxy hostname is configured, proofs that cannot be fetched
    directly are retried through the proxy's ``/api/3/get/http`` endpoint.
    """

    def __init__(self, config: Optional[VerifierConfig] = None, client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            config: Timeout, pool size and proxy settings. Proof fetches
                always verify TLS certificates; skip_verify_ssl only applies
                to the profile token fetch.
            client: Optional shared client; it is not closed by this checker.
        """
        self._config = config or VerifierConfig.from_env()
        self._http_client = client
        self._owns_client = False

    async def __aenter__(self):
        """Async context manager entry."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._config.http_timeout,
                verify=True,
                limits=httpx.Limits(max_connections=self._config.max_concurrent),
                follow_redirects=True,
            )
            self._owns_client = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._owns_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None
            self._owns_client = False

    async def find_matches(self, claim_uri: str) -> List[ServiceMatch]:
        matches = match_providers(claim_uri)
        if not matches:
            raise NoProviderMatch(claim_uri)
        return matches

    async def verify(
        self, claim_uri: str, subject_uri: str, matches: List[ServiceMatch]
    ) -> ClaimVerificationResult:
        last_error: Optional[ProofFetchError] = None
        fetched_any = False

        for match in matches:
            try:
                text, proxy_used = await self._fetch_proof(match)
            except ProofFetchError as e:
                logger.debug(f"{match.provider.id} proof fetch failed for {claim_uri}: {e}")
                last_error = e
                continue

            fetched_any = True
            if proof_mentions_subject(text, subject_uri):
                return ClaimVerificationResult(
                    result=True, provider_info=match.provider, proxy_used=proxy_used
                )

        if last_error is not None and not fetched_any:
            raise last_error
        return ClaimVerificationResult(result=False)

    async def _fetch_proof(self, match: ServiceMatch) -> Tuple[str, Optional[str]]:
        provider = self._provider_for(match)
        try:
            data = await self._get(match.proof_url, provider.response_format, provider.headers)
            return provider.extract(data), None
        except ProofFetchError:
            proxy = self._config.proxy_hostname
            if not proxy:
                raise

        proxy_url = f"https://{proxy}/api/3/get/http"
        params = {"url": match.proof_url, "format": provider.response_format}
        data = await self._get(proxy_url, provider.response_format, {}, params=params)
        return provider.extract(data), proxy

    async def _get(
        self,
        url: str,
        response_format: str,
        headers: Dict[str, str],
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        client = self._http_client or httpx.AsyncClient(
            timeout=self._config.http_timeout,
            verify=True,
            follow_redirects=True,
        )
        try:
            response = await client.get(url, headers=headers, params=params)
            response.raise_for_status()
            if response_format == "json":
                data = response.json()
                if not isinstance(data, dict):
                    raise ProofFetchError(url, "expected a JSON object")
                return data
            return response.text
        except httpx.HTTPError as e:
            raise ProofFetchError(url, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise ProofFetchError(url, f"invalid JSON: {e}") from e
        finally:
            if not self._http_client:
                await client.aclose()

    @staticmethod
    def _provider_for(match: ServiceMatch) -> ServiceProvider:
        for provider in PROVIDERS:
            if provider.info == match.provider:
                return provider
        raise ProofFetchError(match.proof_url, f"unknown provider {match.provider.id}")
