from pathlib import Path
from typing import Optional

from loguru import logger
from typer import Exit, Option

from hcp_render.api import ClusterParams
from hcp_render.errors import RenderError
from hcp_render.render.cluster import render_cluster_manifests
from hcp_render.tools.fs import find_config_file, write_manifests

from . import app


@app.command()
def render(
    params: Optional[Path] = Option(
        None,
        envvar="HCP_RENDER_PARAMS",
        help=f"The cluster parameters file. If not set, `{ClusterParams.FILENAME}` is searched in the current "
        "directory and its parents.",
    ),
    pull_secret: Path = Option(
        ..., envvar="HCP_RENDER_PULL_SECRET", help="The pull secret used to read the release payload."
    ),
    pki_dir: Path = Option(Path("pki"), envvar="HCP_RENDER_PKI_DIR", help="The directory with certificates and keys."),
    output_dir: Path = Option(
        Path("manifests"),
        envvar="HCP_RENDER_OUTPUT_DIR",
        help="The directory to write manifests to. Manifests already in this directory can be patched.",
    ),
    etcd: bool = Option(True, help="Include an etcd cluster managed by the etcd operator."),
    vpn: bool = Option(True, help="Include the OpenVPN server and clients that connect the control plane to workers."),
    external_oauth: bool = Option(False, help="Include the ingress certificates for an external OAuth server."),
    include_registry: bool = Option(False, help="Include the configuration of the cluster's image registry."),
    dry_run: bool = Option(False, help="Only print the names of the rendered manifests, do not write them."),
) -> None:
    """
    Render the manifests of a hosted control plane cluster.
    """

    try:
        if params is None:
            params = find_config_file(ClusterParams.FILENAME)
        cluster_params = ClusterParams.load(params)
        manifests = render_cluster_manifests(
            cluster_params,
            pull_secret_file=pull_secret,
            pki_dir=pki_dir,
            output_dir=output_dir,
            etcd=etcd,
            vpn=vpn,
            external_oauth=external_oauth,
            include_registry=include_registry,
        )
    except (RenderError, OSError) as exc:
        logger.error("{}", exc)
        raise Exit(1)

    logger.info("Rendered {} manifest(s) for namespace '{}'", len(manifests), cluster_params.namespace)
    if dry_run:
        for name in manifests:
            print(name)
        return

    write_manifests(manifests, output_dir)
