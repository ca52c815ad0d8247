"""
Helper functions that are available in every template, e.g. `{{ imageFor("etcd") }}`.
"""

import base64
import ipaddress
import secrets
import string
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from textwrap import indent as _indent
from typing import TYPE_CHECKING, Any

from loguru import logger

from hcp_render.api import ClusterParams
from hcp_render.errors import InvalidCIDR, ReleaseLookupError

if TYPE_CHECKING:
    from hcp_render.render import RenderContext

RANDOM_STRING_ALPHABET = string.ascii_letters + string.digits


def base64_string(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


def indent(spaces: int, value: str) -> str:
    """
    Prefix every line of *value* with *spaces* spaces.
    """

    return _indent(value, " " * spaces, lambda _: True)


def include_data(data: str, spaces: int = 0) -> str:
    """
    Embed a raw data block. With *spaces*, every line is indented so that the block can be placed under a YAML
    block scalar.
    """

    if spaces:
        return indent(spaces, data)
    return data


def trim_trailing_space(value: str) -> str:
    return "\n".join(line.rstrip() for line in value.split("\n"))


def _network(cidr: str) -> ipaddress.IPv4Network | ipaddress.IPv6Network:
    try:
        return ipaddress.ip_network(cidr, strict=False)
    except ValueError as exc:
        raise InvalidCIDR(cidr, str(exc)) from exc


def cidr_address(cidr: str, offset: int = 0) -> str:
    """
    Return the address at *offset* from the start of the network. `address("10.0.0.0/16", 1)` is `10.0.0.1`.
    """

    network = _network(cidr)
    if not 0 <= offset < network.num_addresses:
        raise InvalidCIDR(cidr, f"offset {offset} is outside of the network")
    return str(network.network_address + offset)


def cidr_mask(cidr: str) -> str:
    """
    Return the netmask of the network, e.g. `255.255.0.0` for a `/16`.
    """

    return str(_network(cidr).netmask)


def random_string(length: int) -> str:
    return "".join(secrets.choice(RANDOM_STRING_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class TemplateFuncs:
    """
    The functions available to templates during one render pass. Holds the resolved release tables and the paths
    and flags that the functions depend on.
    """

    images: Mapping[str, str]
    """ Image pull references by component name. """

    versions: Mapping[str, str]
    """ Version strings by component name. """

    pki_dir: Path
    """ The directory that `pki()` reads certificates and keys from. """

    include_vpn: bool
    """ Whether `includeVPN()` expands the asset it is given. """

    context: "RenderContext"
    """ The render context that `include()` expands assets with. """

    params: ClusterParams
    """ The parameters that `include()` expands assets with. """

    def version(self, component: str) -> str:
        try:
            return self.versions[component]
        except KeyError:
            raise ReleaseLookupError("version", component) from None

    def image_for(self, name: str) -> str:
        try:
            return self.images[name]
        except KeyError:
            raise ReleaseLookupError("image", name) from None

    def include(self, path: str) -> str:
        return self.context.substitute_params(self.params, path)

    def include_vpn_asset(self, path: str) -> str:
        if not self.include_vpn:
            return ""
        return self.include(path)

    def pki(self, filename: str) -> str:
        file = self.pki_dir / filename
        logger.trace("Reading PKI file '{}'", file)
        return file.read_text()

    def as_globals(self) -> dict[str, Callable[..., Any]]:
        """
        Return the functions by the names that templates call them with.
        """

        return {
            "version": self.version,
            "imageFor": self.image_for,
            "base64String": base64_string,
            "indent": indent,
            "address": cidr_address,
            "mask": cidr_mask,
            "include": self.include,
            "includeVPN": self.include_vpn_asset,
            "randomString": random_string,
            "includeData": include_data,
            "trimTrailingSpace": trim_trailing_space,
            "pki": self.pki,
        }
