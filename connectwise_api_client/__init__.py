"""
Python client for interacting with the ConnectWise Manage REST API.

This package provides a `ConnectWiseClient` class that resolves a
tenant's API codebase from the public ``login/companyinfo`` endpoint
and makes authenticated requests against ``apis/3.0``.

Examples
--------

```python
from connectwise_api_client import ConnectWiseClient, Option

# Credentials can also be read from CONNECTWISE_* variables or a .env
# file with ConnectWiseClient.from_env()
client = ConnectWiseClient(
    site="na.myconnectwise.net",
    client_id="YOUR_CLIENT_ID",
    company="yourcompany",
    public_key="PUBLIC_KEY",
    private_key="PRIVATE_KEY",
)

info = client.get_system_info()

# Every page of the member list as raw JSON bodies
pages = client.get_all("system/members", [Option("pagesize", "100")])
```

See Also
--------
ConnectWise's developer network documents the Manage cloud URL
format (``https://{host}/{codebase}apis/3.0``) and the
``ClientID``/Basic authentication scheme used here.
"""

from .client import ConnectWiseClient, resolve_api_version
from .config import ConnectWiseSettings, load_settings
from .exceptions import (
    ConnectWiseAPIError,
    ConnectWiseBodyReadError,
    ConnectWiseConnectionError,
    ConnectWiseDecodeError,
    ConnectWiseError,
    ConnectWisePaginationError,
    ConnectWiseResolutionError,
)
from .models import ApiVersion, LicenseBit, Option, SystemInfo

__all__ = [
    "ConnectWiseClient",
    "resolve_api_version",
    "ConnectWiseSettings",
    "load_settings",
    "ApiVersion",
    "LicenseBit",
    "Option",
    "SystemInfo",
    "ConnectWiseError",
    "ConnectWiseResolutionError",
    "ConnectWiseConnectionError",
    "ConnectWiseBodyReadError",
    "ConnectWiseAPIError",
    "ConnectWisePaginationError",
    "ConnectWiseDecodeError",
]
