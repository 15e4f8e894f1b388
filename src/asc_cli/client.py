"""
Apple App Store Connect API client.

This module provides the HTTP client used by every asc command. It signs
requests with an App Store Connect JWT, maps HTTP failures to exceptions
and exposes one method per resource operation the CLI supports.
"""

import jwt
import requests
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from ratelimit import limits, sleep_and_retry
import logging

from .config import Config, DEFAULT_MAX_PAGES, DEFAULT_TIMEOUT
from .exceptions import (
    AppStoreConnectError,
    AuthenticationError,
    ConfigurationError,
    RateLimitError,
    ValidationError,
    NotFoundError,
    PermissionError,
    ServerError,
)
from .pagination import paginate_all

logger = logging.getLogger(__name__)


class AppStoreConnectAPI:
    """
    Apple App Store Connect API client.

    Args:
        key_id: Your App Store Connect API key ID
        issuer_id: Your App Store Connect API issuer ID
        private_key_path: Path to your .p8 private key file
        timeout: Per-request timeout in seconds
        max_pages: Page cap used when reading every page of a collection
    """

    BASE_URL = "https://api.appstoreconnect.apple.com/v1"

    def __init__(
        self,
        key_id: str,
        issuer_id: str,
        private_key_path: Union[str, Path],
        timeout: float = DEFAULT_TIMEOUT,
        max_pages: int = DEFAULT_MAX_PAGES,
    ):
        """Initialize the App Store Connect API client."""
        # Validate required parameters
        if not all([key_id, issuer_id, private_key_path]):
            raise ValidationError("Missing required authentication parameters")

        self.key_id = key_id
        self.issuer_id = issuer_id
        self.private_key_path = Path(private_key_path)
        self.timeout = timeout
        self.max_pages = max_pages
        self._token: Optional[str] = None
        self._token_expiry: Optional[int] = None

        if not self.private_key_path.exists():
            raise ValidationError(f"Private key file not found: {private_key_path}")

    @classmethod
    def from_config(cls, config: Config) -> "AppStoreConnectAPI":
        """
        Create a client from resolved CLI configuration.

        Raises:
            ConfigurationError: If any credential is missing
        """
        missing = config.missing_credentials()
        if missing:
            raise ConfigurationError(
                f"Missing credentials: set {', '.join(missing)} "
                "or add them to the config file"
            )
        return cls(
            key_id=config.key_id,
            issuer_id=config.issuer_id,
            private_key_path=config.private_key_path,
            timeout=config.timeout,
            max_pages=config.max_pages,
        )

    def _load_private_key(self) -> str:
        """Load the private key from file."""
        try:
            with open(self.private_key_path, "r") as f:
                return f.read()
        except IOError as e:
            raise AuthenticationError(f"Failed to load private key: {e}")

    def _generate_token(self) -> str:
        """Generate a JWT token for App Store Connect API."""
        current_time = int(datetime.now(timezone.utc).timestamp())

        if self._token and self._token_expiry and current_time < self._token_expiry:
            return self._token

        try:
            private_key = self._load_private_key()
        except Exception as e:
            raise AuthenticationError(f"Failed to load private key: {e}")

        # Token expires in 20 minutes (max allowed by Apple)
        expiry = current_time + 1200

        payload = {
            "iss": self.issuer_id,
            "iat": current_time,
            "exp": expiry,
            "aud": "appstoreconnect-v1",
        }

        headers = {"alg": "ES256", "kid": self.key_id, "typ": "JWT"}

        try:
            self._token = jwt.encode(
                payload, private_key, algorithm="ES256", headers=headers
            )
        except Exception as e:
            raise AuthenticationError(f"Failed to generate JWT token: {e}")

        self._token_expiry = expiry - 60  # Refresh 1 minute before expiry
        return self._token

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests."""
        token = self._generate_token()
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    def _make_request_raw(
        self,
        method: str = "GET",
        url: Optional[str] = None,
        endpoint: Optional[str] = None,
        params: Optional[Dict] = None,
        data: Optional[Dict] = None,
    ) -> requests.Response:
        """Make a request to the API and map error statuses to exceptions."""
        # Absolute URLs (pagination links) are sent as-is
        if url is None and endpoint is not None:
            url = f"{self.BASE_URL}{endpoint}"
        elif url is None:
            raise ValidationError("Either url or endpoint must be provided")

        headers = self._get_headers()

        logger.info(f"_make_request: {method} {url}")
        if params:
            logger.info(f"_make_request: params={params}")

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=data,
                timeout=self.timeout,
            )
            logger.info(
                f"_make_request: Response received - status={response.status_code}"
            )
        except requests.exceptions.Timeout as e:
            logger.error(
                f"_make_request: Request timed out after {self.timeout}s: {e}"
            )
            raise AppStoreConnectError(f"Request failed: {e}")
        except requests.exceptions.RequestException as e:
            logger.error(f"_make_request: Request failed: {e}")
            raise AppStoreConnectError(f"Request failed: {e}")

        if response.status_code >= 400:
            self._raise_for_status(response)

        return response

    def _raise_for_status(self, response: requests.Response) -> None:
        """Raise the exception matching an error response."""
        status = response.status_code
        detail = self._error_detail(response)
        logger.error(f"API Error {status}: {detail}")

        if status == 401:
            raise AuthenticationError(
                f"Authentication failed - check credentials ({detail})"
            )
        elif status == 403:
            raise PermissionError(
                f"Insufficient permissions for this operation ({detail})"
            )
        elif status == 404:
            raise NotFoundError(f"Requested resource not found ({detail})")
        elif status == 429:
            raise RateLimitError("Rate limit exceeded")
        elif status >= 500:
            raise ServerError(f"API Error {status}: {detail}")
        raise AppStoreConnectError(f"API Error {status}: {detail}")

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        """Extract the first error detail from a JSON:API error body."""
        try:
            error_data = response.json()
            error = (error_data.get("errors") or [{}])[0]
            return error.get("detail") or error.get("title") or response.text
        except Exception:
            return getattr(response, "text", "") or f"HTTP {response.status_code}"

    @sleep_and_retry
    @limits(calls=3500, period=3600)  # Apple's rate limit
    def _make_request(self, *args, **kwargs) -> requests.Response:
        """Rate-limited wrapper for _make_request_raw."""
        return self._make_request_raw(*args, **kwargs)

    def _get_json(
        self,
        endpoint: Optional[str] = None,
        url: Optional[str] = None,
        params: Optional[Dict] = None,
    ) -> Dict[str, Any]:
        """GET a JSON:API document."""
        response = self._make_request(
            method="GET", url=url, endpoint=endpoint, params=params
        )
        return self._decode(response)

    def _decode(self, response: requests.Response) -> Dict[str, Any]:
        try:
            document = response.json()
        except ValueError as e:
            raise AppStoreConnectError(f"Failed to parse API response: {e}")
        if not isinstance(document, dict):
            raise AppStoreConnectError("Unexpected API response: expected an object")
        return document

    @staticmethod
    def _list_params(
        limit: Optional[int] = None, filters: Optional[Dict[str, List[str]]] = None
    ) -> Dict[str, Any]:
        """Build query parameters for a collection request."""
        params: Dict[str, Any] = {}
        for name, values in (filters or {}).items():
            if values:
                params[f"filter[{name}]"] = ",".join(values)
        if limit:
            params["limit"] = limit
        return params

    # ===== PAGINATION =====

    def get_page(self, url: str) -> Dict[str, Any]:
        """Fetch one page by absolute URL (a --next value or a links.next)."""
        return self._get_json(url=url)

    def get_all_pages(
        self, first_page: Dict[str, Any], start_url: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Follow next links from first_page and return the merged document.

        Args:
            first_page: An already fetched page
            start_url: The URL first_page came from, if it was fetched by URL
        """
        return paginate_all(
            self.get_page, first_page, max_pages=self.max_pages, start_url=start_url
        )

    # ===== CERTIFICATES =====

    def list_certificates(
        self,
        certificate_types: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """List signing certificates."""
        params = self._list_params(limit, {"certificateType": certificate_types})
        return self._get_json(endpoint="/certificates", params=params)

    def get_certificate(self, certificate_id: str) -> Dict[str, Any]:
        """Get a single certificate."""
        return self._get_json(endpoint=f"/certificates/{certificate_id}")

    def create_certificate(
        self, certificate_type: str, csr_content: str
    ) -> Optional[Dict]:
        """Create a certificate from a certificate signing request."""
        data = {
            "data": {
                "type": "certificates",
                "attributes": {
                    "certificateType": certificate_type,
                    "csrContent": csr_content,
                },
            }
        }
        response = self._make_request(
            method="POST", endpoint="/certificates", data=data
        )
        if response.status_code == 201:
            return self._decode(response)
        return None

    def revoke_certificate(self, certificate_id: str) -> bool:
        """Revoke a certificate."""
        response = self._make_request(
            method="DELETE", endpoint=f"/certificates/{certificate_id}"
        )
        return response.status_code == 204

    # ===== NOMINATIONS =====

    def list_nominations(
        self,
        states: List[str],
        types: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """List featuring nominations (the API requires a state filter)."""
        if not states:
            raise ValidationError("At least one nomination state is required")
        params = self._list_params(limit, {"state": states, "type": types})
        return self._get_json(endpoint="/nominations", params=params)

    def get_nomination(self, nomination_id: str) -> Dict[str, Any]:
        """Get a single nomination."""
        return self._get_json(endpoint=f"/nominations/{nomination_id}")

    def delete_nomination(self, nomination_id: str) -> bool:
        """Delete a nomination."""
        response = self._make_request(
            method="DELETE", endpoint=f"/nominations/{nomination_id}"
        )
        return response.status_code == 204

    # ===== AGREEMENTS =====

    def get_end_user_license_agreement(self, agreement_id: str) -> Dict[str, Any]:
        """Get an end user license agreement."""
        return self._get_json(endpoint=f"/endUserLicenseAgreements/{agreement_id}")

    def list_agreement_territories(
        self, agreement_id: str, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """List the territories an end user license agreement applies to."""
        return self._get_json(
            endpoint=f"/endUserLicenseAgreements/{agreement_id}/territories",
            params=self._list_params(limit),
        )

    # ===== CATEGORIES =====

    def list_app_categories(
        self, platforms: Optional[List[str]] = None, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """List App Store categories."""
        params = self._list_params(limit, {"platforms": platforms})
        return self._get_json(endpoint="/appCategories", params=params)

    def get_app_category(self, category_id: str) -> Dict[str, Any]:
        """Get a single category."""
        return self._get_json(endpoint=f"/appCategories/{category_id}")

    def list_app_subcategories(
        self, category_id: str, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """List the subcategories of a category."""
        return self._get_json(
            endpoint=f"/appCategories/{category_id}/subcategories",
            params=self._list_params(limit),
        )

    def get_app_category_parent(self, category_id: str) -> Dict[str, Any]:
        """Get the parent of a subcategory."""
        return self._get_json(endpoint=f"/appCategories/{category_id}/parent")

    # ===== ENCRYPTION DECLARATIONS =====

    def list_app_encryption_declarations(
        self,
        app_id: str,
        platforms: Optional[List[str]] = None,
        build_ids: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """List export compliance declarations for an app."""
        params = self._list_params(
            limit,
            {"app": [app_id], "platform": platforms, "builds": build_ids},
        )
        return self._get_json(endpoint="/appEncryptionDeclarations", params=params)

    def get_app_encryption_declaration(self, declaration_id: str) -> Dict[str, Any]:
        """Get a single encryption declaration."""
        return self._get_json(endpoint=f"/appEncryptionDeclarations/{declaration_id}")

    # ===== ACCESSIBILITY DECLARATIONS =====

    def list_accessibility_declarations(
        self,
        app_id: str,
        device_families: Optional[List[str]] = None,
        states: Optional[List[str]] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """List accessibility declarations for an app."""
        params = self._list_params(
            limit, {"deviceFamily": device_families, "state": states}
        )
        return self._get_json(
            endpoint=f"/apps/{app_id}/accessibilityDeclarations", params=params
        )

    def get_accessibility_declaration(self, declaration_id: str) -> Dict[str, Any]:
        """Get a single accessibility declaration."""
        return self._get_json(endpoint=f"/accessibilityDeclarations/{declaration_id}")

    # ===== APP STORE VERSION LOCALIZATIONS =====

    def get_app_store_version_localizations(self, version_id: str) -> Dict[str, Any]:
        """Get every localization of an App Store version (all pages)."""
        first_page = self._get_json(
            endpoint=f"/appStoreVersions/{version_id}/appStoreVersionLocalizations",
            params={"limit": 200},
        )
        return self.get_all_pages(first_page)

    def create_app_store_version_localization(
        self, version_id: str, attributes: Dict[str, Any]
    ) -> Optional[Dict]:
        """Create a localization for an App Store version."""
        data = {
            "data": {
                "type": "appStoreVersionLocalizations",
                "attributes": attributes,
                "relationships": {
                    "appStoreVersion": {
                        "data": {"type": "appStoreVersions", "id": version_id}
                    }
                },
            }
        }
        response = self._make_request(
            method="POST", endpoint="/appStoreVersionLocalizations", data=data
        )
        if response.status_code == 201:
            return self._decode(response)
        return None

    def update_app_store_version_localization(
        self, localization_id: str, attributes: Dict[str, Any]
    ) -> Optional[Dict]:
        """Update App Store version localization (description, keywords, etc.)."""
        update_data = {
            "data": {
                "type": "appStoreVersionLocalizations",
                "id": localization_id,
                "attributes": attributes,
            }
        }
        response = self._make_request(
            method="PATCH",
            endpoint=f"/appStoreVersionLocalizations/{localization_id}",
            data=update_data,
        )
        if response.status_code == 200:
            return self._decode(response)
        return None
