"""AWS IAM Identity Center (SSO) login flow and portal access."""

from __future__ import annotations

import json
import time
import urllib.error
import urllib.parse
import urllib.request
import webbrowser
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Protocol

from .settings import AppConfig

DEFAULT_REGION = "us-east-1"
CLIENT_NAME = "aws-sso-config-cli"
CLIENT_TYPE = "public"
SCOPES = ("sso-portal:*",)
DEVICE_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:device_code"

POLL_MAX_ATTEMPTS = 30
POLL_INTERVAL_SECONDS = 5
REQUEST_TIMEOUT_SECONDS = 30


class SSOError(Exception):
    """Raised when an SSO or SSO OIDC request fails."""

    def __init__(self, message: str, code: str = "") -> None:
        super().__init__(message)
        self.code = code


@dataclass
class AccountInfo:
    account_id: str = ""
    account_name: str = ""
    email_address: str = ""


@dataclass
class RoleInfo:
    account_id: str = ""
    role_name: str = ""


@dataclass
class ClientRegistration:
    client_id: str = ""
    client_secret: str = ""


@dataclass
class DeviceAuthorization:
    device_code: str = ""
    user_code: str = ""
    verification_uri: str = ""
    verification_uri_complete: str = ""
    interval: int = 0
    expires_in: int = 0


@dataclass
class SSOCacheEntry:
    """A token entry from the AWS CLI's SSO cache."""

    access_token: str
    expires_at: datetime

    @classmethod
    def from_json(cls, data: Any) -> SSOCacheEntry | None:
        if not isinstance(data, dict):
            return None
        token = data.get("accessToken")
        expires = data.get("expiresAt")
        if not isinstance(token, str) or not token or not isinstance(expires, str):
            return None
        try:
            expires_at = datetime.fromisoformat(expires)
        except ValueError:
            return None
        if expires_at.tzinfo is None:
            return None
        return cls(access_token=token, expires_at=expires_at)


def _request(method: str, url: str, *, body: dict[str, Any] | None = None,
             headers: dict[str, str] | None = None, operation: str) -> dict[str, Any]:
    data = json.dumps(body).encode("utf-8") if body is not None else None
    request = urllib.request.Request(url, data=data, method=method)
    if data is not None:
        request.add_header("Content-Type", "application/json")
    for name, value in (headers or {}).items():
        request.add_header(name, value)
    try:
        with urllib.request.urlopen(request, timeout=REQUEST_TIMEOUT_SECONDS) as response:
            raw = response.read()
    except urllib.error.HTTPError as exc:
        raise _http_error(operation, exc) from exc
    except (urllib.error.URLError, OSError) as exc:
        raise SSOError(f"{operation}: {exc}") from exc
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise SSOError(f"{operation}: invalid response: {exc}") from exc


def _http_error(operation: str, exc: urllib.error.HTTPError) -> SSOError:
    try:
        payload = json.loads(exc.read() or b"{}")
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    error_type = (exc.headers.get("x-amzn-ErrorType", "") if exc.headers else "").split(":")[0]
    code = str(payload.get("error") or payload.get("__type") or error_type or "")
    description = payload.get("error_description") or payload.get("message") or exc.reason
    parts = [f"{operation}: StatusCode: {exc.code}"]
    if error_type and error_type != code:
        parts.append(error_type)
    if code:
        parts.append(code)
    if description:
        parts.append(str(description))
    return SSOError(", ".join(parts), code=code)


class SSOOIDCClient:
    """Client for the SSO OIDC device-authorization endpoints."""

    def __init__(self, region: str = DEFAULT_REGION) -> None:
        self.region = region
        self.endpoint = f"https://oidc.{region}.amazonaws.com"

    def register_client(self, client_name: str, client_type: str,
                        scopes: list[str] | tuple[str, ...]) -> ClientRegistration:
        data = _request("POST", f"{self.endpoint}/client/register", operation="RegisterClient",
                        body={"clientName": client_name, "clientType": client_type,
                              "scopes": list(scopes)})
        return ClientRegistration(client_id=data.get("clientId") or "",
                                  client_secret=data.get("clientSecret") or "")

    def start_device_authorization(self, client_id: str, client_secret: str,
                                   start_url: str) -> DeviceAuthorization:
        data = _request("POST", f"{self.endpoint}/device_authorization",
                        operation="StartDeviceAuthorization",
                        body={"clientId": client_id, "clientSecret": client_secret,
                              "startUrl": start_url})
        return DeviceAuthorization(
            device_code=data.get("deviceCode") or "",
            user_code=data.get("userCode") or "",
            verification_uri=data.get("verificationUri") or "",
            verification_uri_complete=data.get("verificationUriComplete") or "",
            interval=int(data.get("interval") or 0),
            expires_in=int(data.get("expiresIn") or 0),
        )

    def create_token(self, client_id: str, client_secret: str, device_code: str,
                     grant_type: str) -> str:
        """Exchange a device code for an access token."""
        data = _request("POST", f"{self.endpoint}/token", operation="CreateToken",
                        body={"clientId": client_id, "clientSecret": client_secret,
                              "deviceCode": device_code, "grantType": grant_type})
        return data.get("accessToken") or ""


class SSOPortalClient:
    """Client for the SSO portal account and role listings."""

    def __init__(self, region: str = DEFAULT_REGION) -> None:
        self.region = region
        self.endpoint = f"https://portal.sso.{region}.amazonaws.com"

    def _get(self, path: str, params: dict[str, str], access_token: str, operation: str):
        query = urllib.parse.urlencode(params)
        url = f"{self.endpoint}{path}" + (f"?{query}" if query else "")
        return _request("GET", url, headers={"x-amz-sso_bearer_token": access_token},
                        operation=operation)

    def list_accounts(self, access_token: str) -> list[AccountInfo]:
        data = self._get("/assignment/accounts", {}, access_token, "ListAccounts")
        return [
            AccountInfo(account_id=item.get("accountId") or "",
                        account_name=item.get("accountName") or "",
                        email_address=item.get("emailAddress") or "")
            for item in data.get("accountList") or []
        ]

    def list_account_roles(self, access_token: str, account_id: str) -> list[RoleInfo]:
        data = self._get("/assignment/roles", {"account_id": account_id}, access_token,
                         "ListAccountRoles")
        return [
            RoleInfo(account_id=item.get("accountId") or "", role_name=item.get("roleName") or "")
            for item in data.get("roleList") or []
        ]


class _OIDC(Protocol):
    def register_client(self, client_name, client_type, scopes) -> ClientRegistration: ...
    def start_device_authorization(self, client_id, client_secret,
                                   start_url) -> DeviceAuthorization: ...
    def create_token(self, client_id, client_secret, device_code, grant_type) -> str: ...


def aws_config_path() -> str:
    """Return the path of the user's AWS CLI config file."""
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise SSOError(f"failed to get home directory: {exc}") from exc
    return str(home / ".aws" / "config")


def get_current_token(cache_dir: str | Path | None = None) -> str | None:
    """Return an unexpired access token from the SSO cache, if any."""
    if cache_dir is None:
        try:
            cache_dir = Path.home() / ".aws" / "sso" / "cache"
        except RuntimeError:
            return None
    try:
        entries = sorted(Path(cache_dir).iterdir())
    except OSError:
        return None
    now = datetime.now(timezone.utc)
    for path in entries:
        if not path.name.endswith(".json"):
            continue
        try:
            data = json.loads(path.read_bytes())
        except (OSError, ValueError):
            continue
        entry = SSOCacheEntry.from_json(data)
        if entry is None or now > entry.expires_at:
            continue
        return entry.access_token
    return None


def poll_for_token(client: _OIDC, registration: ClientRegistration,
                   device_auth: DeviceAuthorization) -> str | None:
    """Poll until the user authorizes the device, giving up after about five minutes."""
    error: SSOError | None = None
    token = None
    for attempt in range(1, POLL_MAX_ATTEMPTS + 1):
        try:
            token = client.create_token(registration.client_id, registration.client_secret,
                                        device_auth.device_code, DEVICE_GRANT_TYPE)
        except SSOError as exc:
            error = exc
            message = str(exc)
            if "authorization_pending" in message or "slow_down" in message:
                if attempt % 6 == 0:
                    print(f"Still waiting for authorization... "
                          f"(attempt {attempt}/{POLL_MAX_ATTEMPTS})")
                time.sleep(POLL_INTERVAL_SECONDS)
                continue
            print(f"Authorization error: {exc}")
            break
        error = None
        print("✓ Authorization successful!")
        break

    if error is not None:
        if "authorization_pending" in str(error):
            print("Authorization timeout. Please try again.")
        return None
    return token


def _open_url(url: str) -> None:
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        raise SSOError(str(exc)) from exc
    if not opened:
        raise SSOError(f"no browser could open {url}")


def generate_token_with_config(client: _OIDC, app_config: AppConfig) -> str | None:
    """Run the device-authorization login for the configured start URL."""
    try:
        registration = client.register_client(CLIENT_NAME, CLIENT_TYPE, list(SCOPES))
    except SSOError as exc:
        print(f"Failed to register client: {exc}")
        return None
    try:
        device_auth = client.start_device_authorization(
            registration.client_id, registration.client_secret, app_config.sso.start_url)
    except SSOError as exc:
        print(f"Failed to start device authorization: {exc}")
        return None

    url = device_auth.verification_uri_complete
    print(f"Opening browser for AWS SSO login...\n{url}")
    try:
        _open_url(url)
    except SSOError:
        print(f"Failed to open browser automatically. Please manually open: {url}")
    print("Waiting for authorization... (this may take a few moments)")
    return poll_for_token(client, registration, device_auth)


def get_token(client: _OIDC, app_config: AppConfig) -> str | None:
    """Return a cached token, or log in to get a new one."""
    token = get_current_token()
    if token is not None:
        return token
    return generate_token_with_config(client, app_config)


TokenPoller = Callable[[_OIDC, ClientRegistration, DeviceAuthorization], "str | None"]


class SSOProvider:
    """The login flow with its client, browser and poller replaceable."""

    def __init__(self, oidc_client: _OIDC, browser_opener: Callable[[str], Any] = _open_url,
                 token_poller: TokenPoller = poll_for_token) -> None:
        self.oidc_client = oidc_client
        self.browser_opener = browser_opener
        self.token_poller = token_poller

    def generate_token(self, app_config: AppConfig) -> str | None:
        client = self.oidc_client
        try:
            registration = client.register_client(CLIENT_NAME, CLIENT_TYPE, list(SCOPES))
            device_auth = client.start_device_authorization(
                registration.client_id, registration.client_secret, app_config.sso.start_url)
        except SSOError:
            return None
        try:
            self.browser_opener(device_auth.verification_uri_complete)
        except (SSOError, OSError, webbrowser.Error):
            pass
        return self.token_poller(client, registration, device_auth)


def new_default_provider(region: str = DEFAULT_REGION) -> SSOProvider:
    """Build a provider that talks to the real SSO OIDC service."""
    return SSOProvider(SSOOIDCClient(region), _open_url, poll_for_token)