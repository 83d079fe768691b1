"""DNS-over-HTTPS client for custom domain verification.

Verification is CNAME-only: the tenant's domain must CNAME to the platform
target. A records are looked up purely so the dashboard can show what the
domain currently points at.

Example DNS setup required by the tenant:
    links.acme.com  CNAME  linkpop.space
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

import httpx
from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from custom_domains.config import settings
from custom_domains.services.errors import TransientLookupError
from custom_domains.utils.domain_validator import normalize_domain

logger = logging.getLogger(__name__)

# DNS RR type codes used in DoH JSON answers
TYPE_A = 1
TYPE_CNAME = 5

# DNS RCODE for server failure
RCODE_SERVFAIL = 2

LOOKUP_FAILED_MESSAGE = (
    "DNS lookup failed, please try again. "
    "We will keep retrying automatically while this page is open."
)


class ARecord(BaseModel):
    """An IPv4 address answer."""

    type: Literal[1]
    name: str = ""
    data: str
    TTL: int | None = None


class CnameRecord(BaseModel):
    """A canonical name (alias) answer."""

    type: Literal[5]
    name: str = ""
    data: str
    TTL: int | None = None


DnsAnswer = Annotated[ARecord | CnameRecord, Field(discriminator="type")]

_answers_adapter = TypeAdapter(list[DnsAnswer])


class DohResponse(BaseModel):
    """Top-level DoH JSON payload (application/dns-json)."""

    Status: int
    Answer: list[dict[str, Any]] = Field(default_factory=list)


@dataclass
class DnsRecordCheck:
    """One DNS record the tenant must configure, and what we found."""

    type: str
    name: str
    expected_value: str
    found: bool = False
    current_value: str | None = None


@dataclass
class VerificationResult:
    """Result of a verification attempt. Not persisted."""

    verified: bool
    records: list[DnsRecordCheck] = field(default_factory=list)
    message: str = ""
    # True only when the lookup itself failed (not when DNS is simply unset)
    transient: bool = False


def decode_answers(payload: Any) -> tuple[int, list[ARecord | CnameRecord]]:
    """
    Decode a DoH JSON payload into typed A/CNAME answers.

    Answers of other record types (RRSIG, AAAA, ...) are ignored.

    Args:
        payload: Parsed JSON body

    Returns:
        Tuple of (DNS status code, typed answers)

    Raises:
        TransientLookupError: If the payload is malformed
    """
    try:
        response = DohResponse.model_validate(payload)
        known = [a for a in response.Answer if a.get("type") in (TYPE_A, TYPE_CNAME)]
        answers = _answers_adapter.validate_python(known)
    except PydanticValidationError as e:
        raise TransientLookupError(f"Malformed DNS response: {e}")

    return response.Status, answers


class DNSVerifier:
    """Checks that a custom domain's CNAME points at the platform."""

    def __init__(
        self,
        endpoint: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the verifier.

        Args:
            endpoint: DoH JSON endpoint (defaults to settings.DOH_ENDPOINT)
            timeout: Seconds allowed for one query, and for all lookups of one
                verify call together (defaults to settings.DOH_TIMEOUT_SECONDS)
            transport: Optional httpx transport, used by tests
        """
        self.endpoint = endpoint or settings.DOH_ENDPOINT
        self.timeout = timeout if timeout is not None else settings.DOH_TIMEOUT_SECONDS
        self.transport = transport

    async def query(self, domain: str, record_type: str) -> list[ARecord | CnameRecord]:
        """
        Issue a single DoH query. No retries; the caller owns retry policy.

        Args:
            domain: Name to look up
            record_type: "CNAME" or "A"

        Returns:
            Typed answers (empty when the name has no such record)

        Raises:
            TransientLookupError: On transport failure, non-2xx status,
                SERVFAIL, or a malformed payload
        """
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.get(
                    self.endpoint,
                    params={"name": domain, "type": record_type},
                    headers={"Accept": "application/dns-json"},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            raise TransientLookupError(f"DNS query returned status {e.response.status_code}")
        except httpx.HTTPError as e:
            raise TransientLookupError(f"DNS query failed: {e!r}")
        except ValueError as e:
            raise TransientLookupError(f"DNS response is not valid JSON: {e}")

        dns_status, answers = decode_answers(payload)

        if dns_status == RCODE_SERVFAIL:
            raise TransientLookupError(f"DNS server failure (SERVFAIL) for {domain}")

        logger.debug(f"DoH {record_type} {domain}: status={dns_status}, answers={len(answers)}")
        return answers

    async def _diagnostic_a_records(self, domain: str, deadline: float) -> list[str]:
        """Look up A records for display only; failures just mean nothing to show."""
        try:
            async with asyncio.timeout_at(deadline):
                answers = await self.query(domain, "A")
        except TransientLookupError as e:
            logger.info(f"A-record diagnostic lookup failed for {domain}: {e}")
            return []
        except TimeoutError:
            logger.info(f"A-record diagnostic lookup for {domain} ran out of time")
            return []
        return [a.data for a in answers if isinstance(a, ARecord)]

    async def verify(self, domain: str, expected_target: str) -> VerificationResult:
        """
        Verify that domain has a CNAME pointing at expected_target.

        Never raises: every failure becomes verified=False with a message.
        All lookups for one call share a single timeout budget.

        Args:
            domain: The tenant's custom domain
            expected_target: Hostname the CNAME must point to

        Returns:
            VerificationResult with per-record diagnostics
        """
        domain = normalize_domain(domain)
        expected = normalize_domain(expected_target)
        check = DnsRecordCheck(type="CNAME", name=domain, expected_value=expected)

        logger.info(f"Verifying DNS for {domain}, expected CNAME {expected}")

        deadline = asyncio.get_running_loop().time() + self.timeout

        try:
            async with asyncio.timeout_at(deadline):
                answers = await self.query(domain, "CNAME")
        except (TransientLookupError, TimeoutError) as e:
            logger.warning(f"DNS lookup failed for {domain}: {e!r}")
            return VerificationResult(
                verified=False,
                records=[check],
                message=LOOKUP_FAILED_MESSAGE,
                transient=True,
            )

        cnames = [normalize_domain(a.data) for a in answers if isinstance(a, CnameRecord)]

        if expected in cnames:
            check.found = True
            check.current_value = expected
            logger.info(f"DNS verified for {domain}")
            return VerificationResult(
                verified=True,
                records=[check],
                message="DNS records verified successfully",
            )

        if cnames:
            check.current_value = cnames[0]
            return VerificationResult(
                verified=False,
                records=[check],
                message=(
                    f"Found DNS record but it points to {check.current_value} instead of "
                    f"{expected}. Update the CNAME record to point to {expected}."
                ),
            )

        a_values = await self._diagnostic_a_records(domain, deadline)
        if a_values:
            check.current_value = a_values[0]
            return VerificationResult(
                verified=False,
                records=[check],
                message=(
                    f"Found an A record pointing to {check.current_value}, but a CNAME is "
                    f"required. Replace it with a CNAME record pointing to {expected} "
                    f"(for a root domain, use your DNS provider's CNAME flattening or ALIAS)."
                ),
            )

        return VerificationResult(
            verified=False,
            records=[check],
            message=(
                f"No CNAME record found yet. Add a CNAME record pointing to {expected}. "
                f"DNS changes have not propagated yet and can take up to 48 hours."
            ),
        )


# Global verifier instance
dns_verifier = DNSVerifier()
