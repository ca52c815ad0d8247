"""
Composition of the manifests that make up a hosted control plane.
"""

from collections.abc import Callable, Mapping
from pathlib import Path, PurePosixPath

from loguru import logger

from hcp_render.api import ClusterParams, UserManifest
from hcp_render.assets import AssetLibrary
from hcp_render.release import DEFAULT_IMAGES, ReleaseInfo, get_release_info
from hcp_render.render import RenderContext
from hcp_render.render.funcs import TemplateFuncs
from hcp_render.tools.types import RenderedManifests

USER_MANIFEST_PREFIX = "user-manifest-"
USER_MANIFEST_TEMPLATE = "user-manifests-bootstrapper/user-manifest-template.yaml"

ReleaseResolver = Callable[[str, str, Path], ReleaseInfo]
""" Resolves (release image, origin release prefix, pull secret file) into the release's images and versions. """


def render_cluster_manifests(
    params: ClusterParams,
    pull_secret_file: Path,
    pki_dir: Path,
    output_dir: Path,
    etcd: bool,
    vpn: bool,
    external_oauth: bool,
    include_registry: bool,
    *,
    resolver: ReleaseResolver = get_release_info,
    assets: AssetLibrary | None = None,
) -> RenderedManifests:
    """
    Render the manifests for a hosted control plane cluster.

    Nothing is written to *output_dir*; it is only consulted for manifests rendered by an earlier step that get
    patched. The first error aborts the render and no manifests are returned.
    """

    release = resolver(params.release_image, params.origin_release_prefix, pull_secret_file)
    images = {**DEFAULT_IMAGES, **release.images, **params.image_overrides}
    ctx = ClusterManifestContext(
        images,
        release.versions,
        params,
        pki_dir,
        output_dir,
        vpn,
        assets=assets or AssetLibrary.default(),
    )
    ctx.setup_manifests(etcd=etcd, vpn=vpn, external_oauth=external_oauth, include_registry=include_registry)
    return ctx.render_manifests()


def user_config_map_name(file: str) -> str:
    """
    Derive the name of the ConfigMap that carries a user manifest from the manifest's file name. The extension
    (everything after the first `.`) is dropped and underscores become hyphens.
    """

    return USER_MANIFEST_PREFIX + file.split(".")[0].replace("_", "-")


class ClusterManifestContext(RenderContext):
    """
    Renders the manifest groups of a hosted control plane into a single render context.

    Manifests for the control plane itself are rendered directly. Manifests meant for the guest cluster ("user
    manifests") are collected first and wrapped into ConfigMaps by `user_manifests_bootstrapper()`, from where the
    bootstrapper pod applies them.
    """

    def __init__(
        self,
        images: Mapping[str, str],
        versions: Mapping[str, str],
        params: ClusterParams,
        pki_dir: Path,
        output_dir: Path | None,
        include_vpn: bool,
        *,
        assets: AssetLibrary,
    ) -> None:
        super().__init__(params, output_dir, assets)
        self.params: ClusterParams = params
        self.user_manifest_files: list[str] = []
        self.user_manifests: dict[str, str] = {}
        self.set_funcs(
            TemplateFuncs(
                images=images,
                versions=versions,
                pki_dir=pki_dir,
                include_vpn=include_vpn,
                context=self,
                params=params,
            )
        )

    def setup_manifests(self, *, etcd: bool, vpn: bool, external_oauth: bool, include_registry: bool) -> None:
        """
        Render the manifest groups selected by the feature flags. The bootstrapper runs after every group that
        contributes user manifests.
        """

        if etcd:
            self.etcd()
        self.kube_apiserver()
        self.cluster_bootstrap()
        if external_oauth:
            self.oauth_openshift_server()
        if vpn:
            self.openvpn()
        if include_registry:
            self.registry()
        self.user_manifests_bootstrapper()
        self.router_proxy()
        self.hypershift_operator()

    def add_user_manifest_files(self, *paths: str) -> None:
        self.user_manifest_files.extend(paths)

    def add_user_manifest(self, name: str, content: str) -> None:
        self.user_manifests[name] = content

    # Manifest groups

    def etcd(self) -> None:
        logger.info("Rendering etcd manifests")
        self.add_manifest_files(
            "etcd/etcd-cluster-crd.yaml",
            "etcd/etcd-cluster.yaml",
            "etcd/etcd-operator-cluster-role-binding.yaml",
            "etcd/etcd-operator-cluster-role.yaml",
            "etcd/etcd-operator.yaml",
        )

    def kube_apiserver(self) -> None:
        logger.info("Rendering kube-apiserver manifests")
        self.add_patch("kube-apiserver-deployment.yaml", "kube-apiserver/kube-apiserver-deployment-patch.yaml")
        self.add_manifest_files("kube-apiserver/kube-apiserver-vpnclient-config.yaml")

    def cluster_bootstrap(self) -> None:
        manifests = self.assets.list_dir("cluster-bootstrap")
        logger.info("Collecting {} cluster-bootstrap manifest(s)", len(manifests))
        self.add_user_manifest_files(*(f"cluster-bootstrap/{name}" for name in manifests))

    def oauth_openshift_server(self) -> None:
        logger.info("Collecting oauth-openshift manifests")
        self.add_user_manifest_files("oauth-openshift/ingress-certs-secret.yaml")

    def openvpn(self) -> None:
        logger.info("Rendering OpenVPN manifests")
        self.add_manifest_files(
            "openvpn/openvpn-serviceaccount.yaml",
            "openvpn/openvpn-server-deployment.yaml",
            "openvpn/openvpn-ccd-configmap.yaml",
            "openvpn/openvpn-server-configmap.yaml",
        )
        self.add_user_manifest_files(
            "openvpn/openvpn-client-deployment.yaml",
            "openvpn/openvpn-client-configmap.yaml",
        )

    def registry(self) -> None:
        logger.info("Collecting image registry manifests")
        self.add_user_manifest_files("registry/cluster-imageregistry-config.yaml")

    def user_manifests_bootstrapper(self) -> None:
        """
        Add the bootstrapper pod and wrap every collected user manifest into a ConfigMap for it to apply.
        """

        logger.info(
            "Rendering user manifests bootstrapper with {} user manifest(s)",
            len(self.user_manifest_files) + len(self.user_manifests),
        )
        self.add_manifest_files("user-manifests-bootstrapper/user-manifests-bootstrapper-pod.yaml")

        for file in self.user_manifest_files:
            name = PurePosixPath(file).name
            self._add_user_manifest_config_map(name, self.substitute_params(self.params, file))

        for name, data in self.user_manifests.items():
            self._add_user_manifest_config_map(name, data)

    def _add_user_manifest_config_map(self, name: str, data: str) -> None:
        wrapper = UserManifest(data=data, name=user_config_map_name(name), namespace=self.params.namespace)
        self.add_manifest(USER_MANIFEST_PREFIX + name, self.substitute_params(wrapper, USER_MANIFEST_TEMPLATE))

    def router_proxy(self) -> None:
        logger.info("Rendering router proxy manifests")
        self.add_manifest_files(
            "router-proxy/router-proxy-deployment.yaml",
            "router-proxy/router-proxy-configmap.yaml",
            "router-proxy/router-proxy-vpnclient-configmap.yaml",
            "router-proxy/router-proxy-http-service.yaml",
            "router-proxy/router-proxy-https-service.yaml",
        )

    def hypershift_operator(self) -> None:
        logger.info("Rendering hypershift operator manifests")
        self.add_manifest_files("hypershift-operator/hypershift-operator-deployment.yaml")
