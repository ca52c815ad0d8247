"""
The library of template bodies that hosted control plane manifests are rendered from.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from hcp_render.errors import AssetNotFoundError

TEMPLATES_DIR = Path(__file__).parent / "templates"
""" The directory that contains the templates shipped with this package. """


def _normalize(path: str) -> str:
    """
    Normalize an asset path to its `/`-separated form. Absolute paths and paths that walk out of the library
    root are not valid asset paths.
    """

    parts = PurePosixPath(path).parts
    if not parts or parts[0] == "/" or ".." in parts:
        raise AssetNotFoundError(path)
    return "/".join(part for part in parts if part != ".")


class AssetLibrary(ABC):
    """
    A read-only store of template bodies, addressed by `/`-separated paths such as `etcd/etcd-cluster.yaml`.
    """

    @abstractmethod
    def read(self, path: str) -> str:
        """
        Return the template body stored under *path*.

        Raises:
            AssetNotFoundError: If there is no asset with the given path.
        """

    @abstractmethod
    def list_dir(self, path: str) -> list[str]:
        """
        Return the names of the assets directly inside the directory *path*, sorted by name.

        Raises:
            AssetNotFoundError: If the directory does not exist.
        """

    @staticmethod
    def default() -> "DirectoryAssetLibrary":
        """
        Return the library of templates shipped with this package.
        """

        return DirectoryAssetLibrary(TEMPLATES_DIR)


@dataclass(frozen=True)
class DirectoryAssetLibrary(AssetLibrary):
    """
    Serves assets from files below a directory on the filesystem.
    """

    root: Path

    def read(self, path: str) -> str:
        file = self.root / _normalize(path)
        if not file.is_file():
            raise AssetNotFoundError(path)
        return file.read_text()

    def list_dir(self, path: str) -> list[str]:
        directory = self.root / _normalize(path)
        if not directory.is_dir():
            raise AssetNotFoundError(path)
        return sorted(item.name for item in directory.iterdir() if item.is_file())


@dataclass(frozen=True)
class MemoryAssetLibrary(AssetLibrary):
    """
    Serves assets from an in-memory mapping of asset path to template body.
    """

    assets: Mapping[str, str] = field(default_factory=dict)

    def read(self, path: str) -> str:
        try:
            return self.assets[_normalize(path)]
        except KeyError:
            raise AssetNotFoundError(path) from None

    def list_dir(self, path: str) -> list[str]:
        prefix = _normalize(path) + "/"
        names = sorted(
            key[len(prefix) :] for key in self.assets if key.startswith(prefix) and "/" not in key[len(prefix) :]
        )
        if not names:
            raise AssetNotFoundError(path)
        return names
