from pathlib import Path
from typing import Literal, overload

from loguru import logger

from hcp_render.tools.types import RenderedManifests


@overload
def find_config_file(filename: str, cwd: Path | None = None, required: Literal[False] = False) -> Path | None: ...


@overload
def find_config_file(filename: str, cwd: Path | None = None, required: Literal[True] = True) -> Path: ...


def find_config_file(filename: str, cwd: Path | None = None, required: bool = True) -> Path | None:
    """
    Find a file with the given *filename* in the given *cwd* or any of its parent directories.
    """

    if cwd is None:
        cwd = Path.cwd()

    for directory in [cwd] + list(cwd.parents):
        file = directory / filename
        if file.is_file():
            return file

    if required:
        raise FileNotFoundError(f"Could not find '{filename}' in '{cwd}' or any of its parent directories.")

    return None


def write_manifests(manifests: RenderedManifests, output_dir: Path) -> list[Path]:
    """
    Write every manifest to a file named after it in *output_dir*. Manifest names may contain directories, which
    are created as needed. Existing files are overwritten.

    All target paths are validated before the first file is written, so an invalid name leaves the output directory
    untouched.
    """

    output_dir = output_dir.absolute()
    targets: list[tuple[Path, str]] = []
    for name, content in manifests.items():
        target = (output_dir / name).resolve()
        if not name or not target.is_relative_to(output_dir.resolve()):
            raise ValueError(f"Manifest name {name!r} does not resolve to a path inside '{output_dir}'")
        targets.append((target, content))

    for target, content in targets:
        logger.debug("Writing {}", target)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)

    logger.info("Wrote {} manifest(s) to '{}'", len(targets), output_dir)
    return [target for target, _ in targets]
