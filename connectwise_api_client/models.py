"""
Plain records passed to and returned by :class:`ConnectWiseClient`.

ConnectWise is inconsistent about key casing: ``companyinfo`` answers
with PascalCase keys while the ``apis/3.0`` endpoints use camelCase.
The records below use snake_case attributes and translate the wire
names in ``from_json``/``to_json``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, NamedTuple, Tuple


def _json_bool(value: Any) -> bool:
    # "false" and 1 are not booleans
    return value if isinstance(value, bool) else False


class Option(NamedTuple):
    """One query-string parameter.

    Pass an ordered sequence of options to a request.  Keys need not
    be unique; every entry is sent.

    >>> Option("pagesize", "10")
    Option(key='pagesize', value='10')
    """

    key: str
    value: str


@dataclass(frozen=True)
class ApiVersion:
    """Where a tenant's API lives, as reported by ``login/companyinfo``.

    ``codebase`` is a path fragment such as ``"v2020_3/"`` and is placed
    verbatim in front of ``apis/3.0`` when building request URLs.
    """

    company_name: str = ""
    codebase: str = ""
    version_code: str = ""
    company_id: str = ""
    is_cloud: bool = False
    site_url: str = ""

    _WIRE_NAMES = {
        "company_name": "CompanyName",
        "codebase": "Codebase",
        "version_code": "VersionCode",
        "company_id": "CompanyID",
        "is_cloud": "IsCloud",
        "site_url": "SiteUrl",
    }

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "ApiVersion":
        """Build the record from a decoded ``companyinfo`` response.

        Missing keys fall back to the field defaults; ``IsCloud`` is
        only taken when it is a JSON boolean.
        """
        values: Dict[str, Any] = {}
        for attr, wire in cls._WIRE_NAMES.items():
            value = data.get(wire)
            if attr == "is_cloud":
                values[attr] = _json_bool(value)
            else:
                values[attr] = str(value or "")
        return cls(**values)

    def to_json(self) -> Dict[str, Any]:
        return {wire: getattr(self, attr) for attr, wire in self._WIRE_NAMES.items()}


@dataclass(frozen=True)
class LicenseBit:
    name: str = ""
    active_flag: Any = None


@dataclass(frozen=True)
class SystemInfo:
    """Decoded ``GET system/info`` response."""

    version: str = ""
    is_cloud: bool = False
    server_time_zone: str = ""
    license_bits: Tuple[LicenseBit, ...] = field(default_factory=tuple)
    cloud_region: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "SystemInfo":
        bits = data.get("licenseBits") or []
        return cls(
            version=str(data.get("version") or ""),
            is_cloud=_json_bool(data.get("isCloud")),
            server_time_zone=str(data.get("serverTimeZone") or ""),
            license_bits=tuple(
                LicenseBit(
                    name=str(bit.get("name") or ""),
                    active_flag=bit.get("activeFlag"),
                )
                for bit in bits
            ),
            cloud_region=str(data.get("cloudRegion") or ""),
        )
