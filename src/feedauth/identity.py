"""OpenID Connect client for the Microsoft identity platform.

Provides the three provider interactions feedauth needs, all over
:mod:`httpx` with the fixed :data:`~feedauth.config.REQUEST_TIMEOUT`:

1. :func:`discover` -- fetch the tenant's OpenID configuration document.
2. :meth:`OidcClient.refresh` -- redeem a refresh token. Returns a tagged
   :class:`~feedauth.models.RefreshOutcome` instead of raising, so the
   caller's state machine decides what a failure means.
3. :meth:`OidcClient.device_authorization` -- start the OAuth2 Device
   Authorization Grant (:rfc:`8628`) and return a
   :class:`DeviceAuthorization` whose :meth:`~DeviceAuthorization.poll`
   blocks until the operator finishes signing in.

See Also:
    :mod:`feedauth.lifecycle` for the consumer of this client.
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from feedauth.config import DISCOVERY_URL_TEMPLATE, REQUEST_TIMEOUT
from feedauth.exceptions import DeviceFlowError, DiscoveryError, RefreshError
from feedauth.models import Issuer, RefreshOutcome, TokenSet

DEVICE_CODE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"

RECOVERABLE_REFRESH_ERRORS = frozenset({"invalid_grant", "interaction_required"})
"""Refresh error codes meaning the stored token is stale, not that sign-in is broken."""


def discover(tenant: str) -> Issuer:
    """Fetch and validate the OpenID configuration document for *tenant*.

    Args:
        tenant: Tenant id, domain, or one of ``common`` / ``organizations``
            / ``consumers``.

    Returns:
        The discovered :class:`~feedauth.models.Issuer`.

    Raises:
        DiscoveryError: If the document cannot be fetched, is not JSON, or
            lacks the token or device authorization endpoint.
    """
    url = DISCOVERY_URL_TEMPLATE.format(tenant=tenant)
    try:
        response = httpx.get(
            url,
            headers={"Accept": "application/json"},
            timeout=REQUEST_TIMEOUT,
        )
        response.raise_for_status()
        doc: dict[str, Any] = response.json()
    except httpx.HTTPStatusError as exc:
        raise DiscoveryError(
            f"OpenID discovery failed with status {exc.response.status_code}: "
            f"{exc.response.text}"
        ) from exc
    except httpx.HTTPError as exc:
        raise DiscoveryError(f"OpenID discovery failed: {exc}") from exc
    except ValueError as exc:
        raise DiscoveryError(f"OpenID discovery returned invalid JSON: {exc}") from exc

    if not isinstance(doc, dict):
        raise DiscoveryError("OpenID discovery document is not a JSON object")
    for field in ("issuer", "token_endpoint", "device_authorization_endpoint"):
        if not doc.get(field):
            raise DiscoveryError(f"OpenID discovery document missing '{field}'")

    return Issuer.model_validate(doc)


class DeviceAuthorization:
    """A pending device authorization, created by :meth:`OidcClient.device_authorization`.

    Attributes:
        verification_uri: Page where the operator enters :attr:`user_code`.
        user_code: Short code shown to the operator.
        device_code: Opaque code used when polling.
        interval: Minimum seconds between polls.
        expires_in: Seconds until the codes expire.
        message: Provider-supplied instructions, if any.
    """

    def __init__(
        self,
        client: OidcClient,
        verification_uri: str,
        user_code: str,
        device_code: str,
        interval: int = 5,
        expires_in: int = 900,
        message: str | None = None,
    ):
        self._client = client
        self.verification_uri = verification_uri
        self.user_code = user_code
        self.device_code = device_code
        self.interval = interval
        self.expires_in = expires_in
        self.message = message

    def poll(self) -> TokenSet:
        """Poll the token endpoint until the operator authorizes or the code expires.

        Implements :rfc:`8628` section 3.5: ``authorization_pending`` keeps
        polling, ``slow_down`` adds five seconds to the interval, anything
        else ends the flow.

        Returns:
            The issued :class:`~feedauth.models.TokenSet`.

        Raises:
            DeviceFlowError: If the operator declines, the code expires, the
                provider returns another error, or the request fails.
        """
        deadline = time.monotonic() + self.expires_in
        poll_interval = max(self.interval, 1)
        data = {
            "grant_type": DEVICE_CODE_GRANT_TYPE,
            "client_id": self._client.client_id,
            "device_code": self.device_code,
        }

        while time.monotonic() < deadline:
            time.sleep(poll_interval)

            try:
                response = httpx.post(
                    self._client.issuer.token_endpoint,
                    data=data,
                    headers={"Accept": "application/json"},
                    timeout=REQUEST_TIMEOUT,
                )
                token_data: dict[str, Any] = response.json()
            except httpx.HTTPError as exc:
                raise DeviceFlowError(f"Token polling failed: {exc}") from exc
            except ValueError as exc:
                raise DeviceFlowError(f"Token polling returned invalid JSON: {exc}") from exc

            if not isinstance(token_data, dict):
                raise DeviceFlowError("Token polling response is not a JSON object")

            if response.status_code == 200 and "access_token" in token_data:
                return TokenSet.from_response(token_data)

            error = token_data.get("error", "")
            if error == "authorization_pending":
                continue
            elif error == "slow_down":
                poll_interval += 5
                continue
            elif error in ("access_denied", "authorization_declined"):
                raise DeviceFlowError("Authorization denied by user")
            elif error in ("expired_token", "code_expired"):
                raise DeviceFlowError("Device code expired -- please try again")
            else:
                desc = token_data.get("error_description") or error or f"HTTP {response.status_code}"
                raise DeviceFlowError(f"Device code authorization failed: {desc}")

        raise DeviceFlowError("Device code flow timed out -- please try again")


class OidcClient:
    """Client for one application registered with a discovered issuer.

    Every request is sent with the fixed :data:`~feedauth.config.REQUEST_TIMEOUT`
    (5 seconds); the provider occasionally stalls and a short timeout
    surfaces that as an error instead of a hang.

    Args:
        issuer: Endpoints from :func:`discover`.
        client_id: Application (client) id.
    """

    timeout = REQUEST_TIMEOUT

    def __init__(self, issuer: Issuer, client_id: str) -> None:
        self.issuer = issuer
        self.client_id = client_id

    def refresh(self, refresh_token: str) -> RefreshOutcome:
        """Redeem *refresh_token* for a new token set.

        Returns:
            ``SUCCESS`` with the new :class:`~feedauth.models.TokenSet`;
            ``RECOVERABLE`` when the provider answers ``invalid_grant`` or
            ``interaction_required``; ``FATAL`` for any other error code,
            a malformed response, or a transport failure.
        """
        data = {
            "grant_type": "refresh_token",
            "client_id": self.client_id,
            "refresh_token": refresh_token,
        }
        try:
            response = httpx.post(
                self.issuer.token_endpoint,
                data=data,
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            token_data: dict[str, Any] = response.json()
        except httpx.HTTPError as exc:
            return RefreshOutcome.fatal(RefreshError(f"Token refresh failed: {exc}"))
        except ValueError as exc:
            return RefreshOutcome.fatal(
                RefreshError(f"Token refresh returned invalid JSON: {exc}")
            )

        if not isinstance(token_data, dict):
            return RefreshOutcome.fatal(RefreshError("Token refresh response is not a JSON object"))

        if response.status_code == 200 and "access_token" in token_data:
            return RefreshOutcome.success(TokenSet.from_response(token_data))

        code = token_data.get("error")
        description = token_data.get("error_description")
        if not code:
            return RefreshOutcome.fatal(
                RefreshError(
                    f"Token refresh failed with status {response.status_code} "
                    "and no error code"
                )
            )
        error = RefreshError(
            f"Token refresh failed: {code}" + (f" ({description})" if description else ""),
            code=code,
            description=description,
        )
        if code in RECOVERABLE_REFRESH_ERRORS:
            return RefreshOutcome.recoverable(error)
        return RefreshOutcome.fatal(error)

    def device_authorization(self, scope: str) -> DeviceAuthorization:
        """Request a device code and user code for *scope*.

        Raises:
            DeviceFlowError: On HTTP errors or if ``device_code`` /
                ``user_code`` / ``verification_uri`` are missing.
        """
        try:
            response = httpx.post(
                self.issuer.device_authorization_endpoint,
                data={"client_id": self.client_id, "scope": scope},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            result: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            raise DeviceFlowError(
                f"Device authorization request failed with status "
                f"{exc.response.status_code}: {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DeviceFlowError(f"Device authorization request failed: {exc}") from exc
        except ValueError as exc:
            raise DeviceFlowError(
                f"Device authorization returned invalid JSON: {exc}"
            ) from exc

        if not isinstance(result, dict):
            raise DeviceFlowError("Device authorization response is not a JSON object")

        for field in ("device_code", "user_code"):
            if field not in result:
                raise DeviceFlowError(f"Device authorization response missing '{field}'")
        verification_uri = result.get("verification_uri") or result.get("verification_url")
        if not verification_uri:
            raise DeviceFlowError("Device authorization response missing 'verification_uri'")

        return DeviceAuthorization(
            client=self,
            verification_uri=verification_uri,
            user_code=result["user_code"],
            device_code=result["device_code"],
            interval=int(result.get("interval", 5)),
            expires_in=int(result.get("expires_in", 900)),
            message=result.get("message"),
        )
