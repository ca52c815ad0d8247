"""
Parameter objects that templates are rendered against.
"""

from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from hcp_render.errors import ConfigError


@dataclass(kw_only=True)
class ClusterParams:
    """
    Configuration of a hosted control plane cluster. Every field is available as a variable in the templates of the
    asset library, e.g. `{{ namespace }}`.
    """

    FILENAME = "cluster.yaml"

    namespace: str
    """ The namespace in the management cluster that hosts the control plane. """

    release_image: str
    """ The release payload that images and versions are resolved from. """

    origin_release_prefix: str = ""
    """ If set, all release images are pulled from `<prefix>:<tag>` instead of the payload references. """

    base_domain: str
    ingress_subdomain: str
    infra_id: str

    external_api_dns_name: str
    external_api_address: str
    external_api_port: int = 6443
    api_node_port: int = 0

    external_openvpn_dns_name: str = ""
    external_openvpn_port: int = 1194
    openvpn_node_port: int = 0

    service_cidr: str = "172.30.0.0/16"
    pod_cidr: str = "10.128.0.0/14"
    machine_cidr: str = "10.0.0.0/16"
    network_type: str = "OpenShiftSDN"

    router_node_port_http: int = 0
    router_node_port_https: int = 0

    image_registry_http_secret: str = ""
    """ The HTTP secret of the image registry. A random secret is generated if this is empty. """

    etcd_version: str = "3.4.9"

    image_overrides: dict[str, str] = field(default_factory=dict)
    """ Images that take precedence over the ones resolved from the release payload. """

    @staticmethod
    def load(file: Path) -> "ClusterParams":
        """
        Load cluster parameters from a YAML file.

        Raises:
            ConfigError: If the file cannot be read or does not describe valid cluster parameters.
        """

        from databind.core import ConversionError
        from databind.json import load as deser
        from yaml import YAMLError, safe_load

        logger.debug("Loading cluster parameters from '{}'", file)
        try:
            data = safe_load(file.read_text())
        except (OSError, YAMLError) as exc:
            raise ConfigError(str(file), str(exc)) from exc
        if not isinstance(data, dict):
            raise ConfigError(str(file), "expected a mapping at the top level")

        try:
            return deser(data, ClusterParams, filename=str(file))
        except ConversionError as exc:
            raise ConfigError(str(file), str(exc)) from exc


@dataclass(frozen=True)
class UserManifest:
    """
    The parameters of the template that wraps a user manifest into a ConfigMap: the manifest's content (`data`) and
    the name of the ConfigMap (`name`). The ConfigMap is created in the cluster's `namespace`, where the
    bootstrapper looks for it.
    """

    data: str
    name: str
    namespace: str = ""


TemplateParams = ClusterParams | UserManifest
""" The parameter objects that a template can be rendered against. """
