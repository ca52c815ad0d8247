import sys
import unittest.mock
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import Result
from loguru import logger
from typer.testing import CliRunner

from hcp_render.api import ClusterParams
from hcp_render.commands import app
from hcp_render.errors import ReleaseResolutionError
from hcp_render.tools.types import RenderedManifests

PARAMS = """\
namespace: hcp-test
release_image: quay.io/openshift-release-dev/ocp-release:4.5.0-x86_64
base_domain: example.com
ingress_subdomain: apps.test.example.com
infra_id: test-x7k2p
external_api_dns_name: api.test.example.com
external_api_address: 203.0.113.10
"""

MANIFESTS = RenderedManifests({"etcd/etcd-cluster.yaml": "kind: EtcdCluster\n", "router.yaml": "kind: Service\n"})


@pytest.fixture(autouse=True)
def _reset_logger() -> Iterator[None]:
    yield
    logger.remove()
    logger.add(sys.stderr)


def invoke(tmp_path: Path, *args: str, **mock_kwargs: object) -> tuple[Result, unittest.mock.MagicMock]:
    params = tmp_path / ClusterParams.FILENAME
    params.write_text(PARAMS)
    with unittest.mock.patch("hcp_render.commands.render.render_cluster_manifests", **mock_kwargs) as render:
        result = CliRunner().invoke(
            app,
            [
                "--log-level",
                "error",
                "render",
                "--params",
                str(params),
                "--pull-secret",
                str(tmp_path / "pull-secret.json"),
                "--output-dir",
                str(tmp_path / "manifests"),
                *args,
            ],
        )
    return result, render


def test__render__writes_manifests(tmp_path: Path) -> None:
    result, render = invoke(tmp_path, "--no-vpn", "--include-registry", return_value=MANIFESTS)

    assert result.exit_code == 0, result.output
    assert render.call_args.kwargs["vpn"] is False
    assert render.call_args.kwargs["etcd"] is True
    assert render.call_args.kwargs["include_registry"] is True
    assert render.call_args.args[0].namespace == "hcp-test"
    assert (tmp_path / "manifests" / "etcd" / "etcd-cluster.yaml").read_text() == "kind: EtcdCluster\n"
    assert (tmp_path / "manifests" / "router.yaml").read_text() == "kind: Service\n"


def test__render__dry_run(tmp_path: Path) -> None:
    result, _ = invoke(tmp_path, "--dry-run", return_value=MANIFESTS)

    assert result.exit_code == 0, result.output
    lines = result.stdout.splitlines()
    assert "etcd/etcd-cluster.yaml" in lines
    assert "router.yaml" in lines
    assert not (tmp_path / "manifests").exists()


def test__render__fails_without_output(tmp_path: Path) -> None:
    error = ReleaseResolutionError("quay.io/openshift-release-dev/ocp-release:4.5.0-x86_64", "unauthorized")
    result, _ = invoke(tmp_path, side_effect=error)

    assert result.exit_code == 1
    assert not (tmp_path / "manifests").exists()


def test__render__fails_on_unreadable_pki_file(tmp_path: Path) -> None:
    result, _ = invoke(tmp_path, side_effect=PermissionError(13, "Permission denied", "pki/ingress-openshift.key"))

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert not (tmp_path / "manifests").exists()
