"""
Client implementation for the ConnectWise Manage REST API.

This module defines the :class:`ConnectWiseClient` class which
discovers the tenant's API codebase through the unauthenticated
``login/companyinfo`` endpoint and performs authenticated requests
against ``apis/3.0``.  Requests are authenticated with the
``ClientID`` header and HTTP Basic credentials built from the company
identifier and the member's public/private API key pair.

Usage
-----

.. code-block:: python

    from connectwise_api_client import ConnectWiseClient, Option

    client = ConnectWiseClient(
        site="na.myconnectwise.net",
        client_id="00000000-0000-0000-0000-000000000000",
        company="mycompany",
        public_key="pub",
        private_key="priv",
    )

    # Raw bytes of a single page
    body = client.get("system/members", [Option("pagesize", "25")])

    # Every page of a listing, in page order
    pages = client.get_all("system/members", [Option("pagesize", "100")])

Bodies are returned exactly as the server sent them; decoding the
JSON is left to the caller except for :meth:`get_system_info` and
:meth:`get_all_items`.
"""

from __future__ import annotations

import base64
import dataclasses
import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import requests

from .config import (
    API_PATH,
    COMPANY_INFO_PATH,
    DEFAULT_API_HOST,
    ConnectWiseSettings,
    load_settings,
)
from .exceptions import (
    ConnectWiseAPIError,
    ConnectWiseBodyReadError,
    ConnectWiseConnectionError,
    ConnectWiseDecodeError,
    ConnectWiseError,
    ConnectWisePaginationError,
    ConnectWiseResolutionError,
)
from .models import ApiVersion, Option, SystemInfo

logger = logging.getLogger(__name__)

Options = Sequence[Tuple[str, str]]

# What list endpoints return once the page index runs past the data
EMPTY_PAGE = b"[]"


def _send(
    method: str,
    url: str,
    *,
    expected: int,
    params: Optional[List[Tuple[str, str]]] = None,
    data: Optional[bytes] = None,
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """Perform one HTTP exchange and return the raw body.

    The body is streamed so that a failure while reading it can be
    told apart from a failure to connect.

    Raises
    ------
    ConnectWiseConnectionError
        If the request could not be sent.
    ConnectWiseBodyReadError
        If the body could not be read after the headers arrived.
    ConnectWiseAPIError
        If the status code is not ``expected``.
    """
    try:
        response = requests.request(
            method=method,
            url=url,
            params=params,
            data=data,
            headers=headers,
            stream=True,
        )
    except requests.RequestException as exc:
        raise ConnectWiseConnectionError(
            f"Failed to connect to {url}: {exc}", url=url
        ) from exc

    try:
        body = response.content
    except requests.RequestException as exc:
        raise ConnectWiseBodyReadError(
            f"Failed to read response from {url}: {exc}", url=url
        ) from exc
    finally:
        response.close()

    logger.debug(
        "%s %s -> %d (%d bytes)", method, url, response.status_code, len(body)
    )
    if response.status_code != expected:
        raise ConnectWiseAPIError(
            response.status_code,
            response.reason or "",
            body,
            url,
            expected=expected,
        )
    return body


def resolve_api_version(site: str, company: str) -> ApiVersion:
    """Look up where the API for ``company`` lives.

    ConnectWise hosts tenants on different codebases (API versions)
    and regions.  ``https://{site}/login/companyinfo/{company}`` tells
    us which one; it needs no authentication.

    Parameters
    ----------
    site : str
        The ConnectWise site host, e.g. ``"na.myconnectwise.net"``.
    company : str
        The company (tenant) identifier used at login.

    Returns
    -------
    ApiVersion

    Raises
    ------
    ConnectWiseResolutionError
        If the lookup fails for any reason.  The message names both
        the company and the site.
    """
    url = f"https://{site}/{COMPANY_INFO_PATH}/{company}"
    try:
        body = _send("GET", url, expected=200)
    except ConnectWiseError as exc:
        raise ConnectWiseResolutionError(
            f"Cannot get api version for {company} at {site}: {exc}",
            company=company,
            site=site,
        ) from exc

    try:
        data = json.loads(body)
    except ValueError as exc:
        raise ConnectWiseResolutionError(
            f"Cannot decode company info for {company} at {site}: {exc}",
            company=company,
            site=site,
        ) from exc
    if not isinstance(data, dict):
        raise ConnectWiseResolutionError(
            f"Cannot decode company info for {company} at {site}: "
            f"expected an object, got {type(data).__name__}",
            company=company,
            site=site,
        )

    version = ApiVersion.from_json(data)
    if not version.codebase:
        raise ConnectWiseResolutionError(
            f"Company info for {company} at {site} has no Codebase",
            company=company,
            site=site,
        )
    return version


class ConnectWiseClient:
    """A client for the ConnectWise Manage REST API.

    Creating a client performs the ``companyinfo`` lookup; if it
    fails the constructor raises and no client exists.  The client
    holds no mutable state afterwards, so one instance can be shared.

    Parameters
    ----------
    site : str
        The ConnectWise site host used for the ``companyinfo`` lookup.
    client_id : str
        The integration's client identifier, sent in the ``ClientID``
        header on every request.
    company : str
        The company (tenant) identifier.
    public_key : str
        The API member's public key.
    private_key : str
        The API member's private key.
    api_host : str, optional
        Host serving ``apis/3.0``.  Defaults to
        ``api-na.myconnectwise.net``.
    """

    def __init__(
        self,
        *,
        site: str,
        client_id: str,
        company: str,
        public_key: str,
        private_key: str,
        api_host: str = DEFAULT_API_HOST,
    ) -> None:
        if not site:
            raise ValueError("site must be provided")
        if not client_id:
            raise ValueError("client_id must be provided")
        if not company:
            raise ValueError("company must be provided")
        if not public_key:
            raise ValueError("public_key must be provided")
        if not private_key:
            raise ValueError("private_key must be provided")
        if not api_host:
            raise ValueError("api_host must not be empty")

        self._api_version = resolve_api_version(site, company)
        self._site = site
        self._client_id = client_id
        self._company_id = company
        self._public_key = public_key
        self._private_key = private_key
        self._api_host = api_host
        logger.debug(
            "Resolved %s at %s to codebase %s (%s)",
            company,
            site,
            self._api_version.codebase,
            self._api_version.version_code,
        )

    @classmethod
    def from_env(
        cls, env_file: Optional[str] = None, **overrides: str
    ) -> "ConnectWiseClient":
        """Create a client from ``CONNECTWISE_*`` environment variables.

        Keyword arguments replace the matching
        :class:`~connectwise_api_client.config.ConnectWiseSettings`
        field after the environment is read, e.g.
        ``ConnectWiseClient.from_env(api_host="api-eu.myconnectwise.net")``.
        See :func:`connectwise_api_client.config.load_settings`.
        """
        settings = load_settings(env_file)
        if overrides:
            settings = dataclasses.replace(settings, **overrides)
        return cls.from_settings(settings)

    @classmethod
    def from_settings(cls, settings: ConnectWiseSettings) -> "ConnectWiseClient":
        return cls(
            site=settings.site,
            client_id=settings.client_id,
            company=settings.company,
            public_key=settings.public_key,
            private_key=settings.private_key,
            api_host=settings.api_host,
        )

    def __repr__(self) -> str:
        return (
            f"ConnectWiseClient(company={self._company_id!r}, "
            f"codebase={self._api_version.codebase!r}, api_host={self._api_host!r})"
        )

    @property
    def api_version(self) -> ApiVersion:
        return self._api_version

    @property
    def site(self) -> str:
        return self._site

    @property
    def client_id(self) -> str:
        return self._client_id

    @property
    def company_id(self) -> str:
        return self._company_id

    @property
    def api_host(self) -> str:
        return self._api_host

    @property
    def base_url(self) -> str:
        """``https://{api_host}/{codebase}apis/3.0``; the codebase is used verbatim."""
        return f"https://{self._api_host}/{self._api_version.codebase}{API_PATH}"

    # ------------------------------------------------------------------
    # HTTP request helpers
    # ------------------------------------------------------------------
    def _prepare_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _auth_headers(self) -> Dict[str, str]:
        credentials = f"{self._company_id}+{self._public_key}:{self._private_key}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return {
            "ClientID": self._client_id,
            "Authorization": f"Basic {encoded}",
        }

    @staticmethod
    def _query(options: Options) -> List[Tuple[str, str]]:
        return [(key, value) for key, value in options]

    # ------------------------------------------------------------------
    # Public request methods
    # ------------------------------------------------------------------
    def get(self, path: str, options: Options = ()) -> bytes:
        """Perform a GET request and return the raw body.

        Parameters
        ----------
        path : str
            Endpoint path relative to ``apis/3.0``, e.g.
            ``"system/info"``.  A leading slash is ignored.
        options : sequence of Option
            Query parameters.  Every entry is sent, duplicates included.

        Raises
        ------
        ConnectWiseConnectionError
            If the server could not be reached.
        ConnectWiseBodyReadError
            If the body could not be read.
        ConnectWiseAPIError
            If the response status is not 200.
        """
        return _send(
            "GET",
            self._prepare_url(path),
            expected=200,
            params=self._query(options),
            headers=self._auth_headers(),
        )

    def post(
        self, path: str, payload: Union[bytes, str, Any], options: Options = ()
    ) -> str:
        """Perform a POST request and return the body as text.

        ``payload`` is sent as-is when it is ``bytes`` or ``str``;
        anything else is encoded as JSON first.  Success requires
        HTTP 201 (Created).  Errors are raised as for :meth:`get`.
        """
        if isinstance(payload, bytes):
            data = payload
        elif isinstance(payload, str):
            data = payload.encode("utf-8")
        else:
            data = json.dumps(payload).encode("utf-8")

        headers = self._auth_headers()
        headers["Content-Type"] = "application/json"
        body = _send(
            "POST",
            self._prepare_url(path),
            expected=201,
            params=self._query(options),
            data=data,
            headers=headers,
        )
        return body.decode("utf-8", errors="replace")

    def get_all(self, path: str, options: Options = ()) -> List[bytes]:
        """Perform GET requests with ``page=1, 2, ...`` until the listing ends.

        The listing ends when the server returns an empty JSON array
        (``[]``), which is not included in the result.  Endpoints that
        ignore ``page`` keep returning their first page; when a page is
        byte-for-byte identical to the first one, only the first page
        is returned.

        Returns
        -------
        list of bytes
            Raw page bodies in page order.

        Raises
        ------
        ConnectWisePaginationError
            If any page request fails.  The pages fetched before the
            failure are available on the exception.
        """
        pages: List[bytes] = []
        page = 1
        while True:
            params = self._query(options) + [Option("page", str(page))]
            try:
                body = self.get(path, params)
            except ConnectWiseError as exc:
                raise ConnectWisePaginationError(path, page, pages, exc) from exc

            if body == EMPTY_PAGE:
                logger.debug("%s: end of listing at page %d", path, page)
                return pages
            if pages and body == pages[0]:
                logger.debug(
                    "%s: page %d repeats page 1, endpoint is not paginated", path, page
                )
                return [pages[0]]

            pages.append(body)
            page += 1

    # ------------------------------------------------------------------
    # Convenience decodes
    # ------------------------------------------------------------------
    def get_all_items(self, path: str, options: Options = ()) -> List[Any]:
        """Fetch every page of a listing and return the decoded items.

        Each page must be a JSON array; the items are concatenated in
        page order.
        """
        items: List[Any] = []
        for index, page in enumerate(self.get_all(path, options), start=1):
            try:
                decoded = json.loads(page)
            except ValueError as exc:
                raise ConnectWiseDecodeError(
                    f"Cannot decode page {index} of {path}: {exc}"
                ) from exc
            if not isinstance(decoded, list):
                raise ConnectWiseDecodeError(
                    f"Page {index} of {path} is not a JSON array: "
                    f"got {type(decoded).__name__}"
                )
            items.extend(decoded)
        return items

    def get_system_info(self, options: Options = ()) -> SystemInfo:
        """Retrieve and decode ``system/info``."""
        body = self.get("system/info", options)
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise ConnectWiseDecodeError(f"Cannot decode system info: {exc}") from exc
        if not isinstance(data, dict):
            raise ConnectWiseDecodeError(
                f"Cannot decode system info: expected an object, got {type(data).__name__}"
            )
        try:
            return SystemInfo.from_json(data)
        except (TypeError, AttributeError) as exc:
            raise ConnectWiseDecodeError(f"Cannot decode system info: {exc}") from exc
