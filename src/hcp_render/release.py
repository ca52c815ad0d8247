"""
Resolve the images and component versions of an OpenShift release payload.
"""

import json
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger

from hcp_render.errors import ReleaseResolutionError

DEFAULT_IMAGES = {
    "openvpn": "quay.io/hypershift/openvpn:latest",
    "etcd-operator": "quay.io/coreos/etcd-operator:v0.9.4",
    "hypershift-operator": "quay.io/hypershift/hypershift-operator:latest",
}
"""
Images of hosted control plane components that are not part of a release payload. Images from the payload and the
cluster's image overrides take precedence.
"""

RELEASE_VERSION_KEY = "release"
""" The key under which the version of the release payload itself is stored in `ReleaseInfo.versions`. """


@dataclass
class ReleaseInfo:
    images: dict[str, str] = field(default_factory=dict)
    """ Image pull references by component name. """

    versions: dict[str, str] = field(default_factory=dict)
    """ Version strings by component name. """

    @staticmethod
    def parse(release_image: str, data: dict[str, Any], origin_release_prefix: str = "") -> "ReleaseInfo":
        """
        Parse the JSON output of `oc adm release info --output json`.

        Raises:
            ReleaseResolutionError: If the data does not describe a release.
        """

        info = ReleaseInfo()
        try:
            for tag in data["references"]["spec"]["tags"]:
                name = tag["name"]
                if origin_release_prefix:
                    info.images[name] = f"{origin_release_prefix}:{name}"
                else:
                    info.images[name] = tag["from"]["name"]

            info.versions[RELEASE_VERSION_KEY] = data["metadata"]["version"]
            for component, display in (data.get("displayVersions") or {}).items():
                info.versions[component] = display["Version"]
        except (KeyError, TypeError) as exc:
            raise ReleaseResolutionError(release_image, f"missing field {exc} in release info") from exc

        return info


def get_release_info(release_image: str, origin_release_prefix: str, pull_secret_file: Path) -> ReleaseInfo:
    """
    Resolve the images and versions of *release_image* with `oc adm release info`.

    Raises:
        ReleaseResolutionError: If `oc` fails or its output cannot be parsed.
    """

    command = [
        "oc",
        "adm",
        "release",
        "info",
        "--output",
        "json",
        "--registry-config",
        str(pull_secret_file),
        release_image,
    ]

    logger.info("Resolving release info for {}", release_image)
    logger.debug("$ {}", " ".join(map(shlex.quote, command)))
    try:
        result = subprocess.run(command, capture_output=True, text=True, check=True)
    except FileNotFoundError as exc:
        raise ReleaseResolutionError(release_image, "the `oc` command is not installed") from exc
    except subprocess.CalledProcessError as exc:
        logger.error("Failed to resolve release info for '{}'; stderr={}", release_image, exc.stderr)
        raise ReleaseResolutionError(release_image, f"`oc` exited with status code {exc.returncode}") from exc

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as exc:
        raise ReleaseResolutionError(release_image, f"invalid JSON from `oc`: {exc}") from exc

    info = ReleaseInfo.parse(release_image, data, origin_release_prefix)
    logger.debug(
        "Release {} is version {} with {} image(s)", release_image, info.versions[RELEASE_VERSION_KEY], len(info.images)
    )
    return info
