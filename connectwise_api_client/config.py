"""Endpoint constants and credential loading."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

# ConnectWise cloud API host for North America
DEFAULT_API_HOST = "api-na.myconnectwise.net"
API_PATH = "apis/3.0"
COMPANY_INFO_PATH = "login/companyinfo"

ENV_PREFIX = "CONNECTWISE_"
_REQUIRED = ("SITE", "CLIENT_ID", "COMPANY", "PUBLIC_KEY", "PRIVATE_KEY")


@dataclass(frozen=True)
class ConnectWiseSettings:
    """The inputs needed to build a :class:`ConnectWiseClient`."""

    site: str
    client_id: str
    company: str
    public_key: str
    private_key: str
    api_host: str = DEFAULT_API_HOST

    def __repr__(self) -> str:
        return (
            f"ConnectWiseSettings(site={self.site!r}, client_id={self.client_id!r}, "
            f"company={self.company!r}, api_host={self.api_host!r})"
        )


def load_settings(
    env_file: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ConnectWiseSettings:
    """Read client settings from the environment.

    Parameters
    ----------
    env_file : str, optional
        Path to a ``.env`` file loaded with python-dotenv before the
        environment is read.  When omitted, dotenv searches for a
        ``.env`` file starting from the current directory.  Variables
        already set in the process environment win over the file.
    environ : mapping, optional
        Read from this mapping instead of ``os.environ``.  No ``.env``
        file is loaded in that case.

    Returns
    -------
    ConnectWiseSettings

    Raises
    ------
    ValueError
        If any of ``CONNECTWISE_SITE``, ``CONNECTWISE_CLIENT_ID``,
        ``CONNECTWISE_COMPANY``, ``CONNECTWISE_PUBLIC_KEY`` or
        ``CONNECTWISE_PRIVATE_KEY`` is missing or empty.
    """
    if environ is None:
        load_dotenv(dotenv_path=env_file)
        environ = os.environ

    missing = [
        ENV_PREFIX + name for name in _REQUIRED if not environ.get(ENV_PREFIX + name)
    ]
    if missing:
        raise ValueError("missing ConnectWise settings: %s" % ", ".join(missing))

    return ConnectWiseSettings(
        site=environ[ENV_PREFIX + "SITE"],
        client_id=environ[ENV_PREFIX + "CLIENT_ID"],
        company=environ[ENV_PREFIX + "COMPANY"],
        public_key=environ[ENV_PREFIX + "PUBLIC_KEY"],
        private_key=environ[ENV_PREFIX + "PRIVATE_KEY"],
        api_host=environ.get(ENV_PREFIX + "API_HOST") or DEFAULT_API_HOST,
    )
