from pathlib import Path
from textwrap import dedent

import pytest

from hcp_render.api import ClusterParams
from hcp_render.errors import ConfigError


def test__ClusterParams__load(tmp_path: Path) -> None:
    file = tmp_path / ClusterParams.FILENAME
    file.write_text(
        dedent(
            """
            namespace: hcp-test
            release_image: quay.io/openshift-release-dev/ocp-release:4.5.0-x86_64
            base_domain: example.com
            ingress_subdomain: apps.test.example.com
            infra_id: test-x7k2p
            external_api_dns_name: api.test.example.com
            external_api_address: 203.0.113.10
            external_api_port: 443
            image_overrides:
              openvpn: example.com/openvpn:dev
            """
        )
    )

    params = ClusterParams.load(file)
    assert params.namespace == "hcp-test"
    assert params.external_api_port == 443
    assert params.service_cidr == "172.30.0.0/16"
    assert params.image_overrides == {"openvpn": "example.com/openvpn:dev"}


def test__ClusterParams__load__missing_field(tmp_path: Path) -> None:
    file = tmp_path / ClusterParams.FILENAME
    file.write_text("namespace: hcp-test\n")
    with pytest.raises(ConfigError):
        ClusterParams.load(file)


def test__ClusterParams__load__invalid_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        ClusterParams.load(tmp_path / "does-not-exist.yaml")

    file = tmp_path / ClusterParams.FILENAME
    file.write_text("- not\n- a mapping\n")
    with pytest.raises(ConfigError):
        ClusterParams.load(file)
