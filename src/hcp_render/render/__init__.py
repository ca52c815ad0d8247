"""
This package contains the engine that renders manifests from the templates of an asset library.
"""

from dataclasses import fields
from pathlib import Path
from typing import Any

import jinja2
from loguru import logger

from hcp_render.api import TemplateParams
from hcp_render.assets import AssetLibrary
from hcp_render.errors import PatchTargetMissing, TemplateError
from hcp_render.render.funcs import TemplateFuncs
from hcp_render.tools.types import RenderedManifests


class RenderContext:
    """
    Accumulates the manifests of a single render pass.

    Manifests are kept in the order in which they were first added. Adding a manifest under a name that already
    exists replaces its content but keeps its position.
    """

    def __init__(self, params: TemplateParams, output_dir: Path | None, assets: AssetLibrary) -> None:
        self.params = params
        self.output_dir = output_dir
        self.assets = assets
        self._funcs: TemplateFuncs | None = None
        self._manifests: dict[str, str] = {}
        self._env = jinja2.Environment(
            loader=jinja2.FunctionLoader(self.assets.read),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False,
        )

    def set_funcs(self, funcs: TemplateFuncs) -> None:
        """
        Install the functions that are available in templates.
        """

        self._funcs = funcs
        self._env.globals.update(funcs.as_globals())

    def substitute_params(self, params: TemplateParams, path: str) -> str:
        """
        Render the asset at *path* with the fields of *params* as template variables.

        Raises:
            AssetNotFoundError: If the asset, or an asset it includes, does not exist.
            TemplateError: If the template is malformed or references an unknown variable or function.
        """

        if self._funcs is None:
            raise RuntimeError("RenderContext.set_funcs() must be called before rendering templates")

        try:
            template = self._env.get_template(path)
            return template.render(_template_vars(params))
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateError(exc.name or path, exc.message or str(exc), exc.lineno) from exc
        except jinja2.TemplateError as exc:
            raise TemplateError(path, exc.message or str(exc)) from exc

    def add_manifest(self, name: str, content: str) -> None:
        if not name:
            raise ValueError("Manifest name must not be empty")
        if name in self._manifests:
            logger.debug("Replacing manifest {}", name)
        else:
            logger.debug("Adding manifest {}", name)
        self._manifests[name] = content

    def add_manifest_files(self, *paths: str) -> None:
        """
        Render each asset with the context's parameters and add it under the asset's path.
        """

        for path in paths:
            self.add_manifest(path, self.substitute_params(self.params, path))

    def add_patch(self, base_name: str, patch: str) -> None:
        """
        Append the rendered *patch* asset to the manifest *base_name*. Keys repeated in the patch take precedence
        over the same keys in the base manifest when the result is parsed as YAML.

        If the manifest has not been added in this render pass, a file of the same name in the output directory is
        used as the base. A base that already ends with the rendered patch is kept as is, so rendering into the same
        output directory again does not apply the patch twice.

        Raises:
            PatchTargetMissing: If there is no manifest named *base_name*.
        """

        base = self._manifests.get(base_name)
        if base is None:
            base = self._read_previous_output(base_name)
        if base is None:
            raise PatchTargetMissing(base_name, patch)

        rendered = self.substitute_params(self.params, patch)
        if rendered and base.endswith(rendered):
            logger.debug("Manifest {} already carries patch {}", base_name, patch)
            self.add_manifest(base_name, base)
            return

        logger.debug("Patching manifest {} with {}", base_name, patch)
        self.add_manifest(base_name, base + rendered)

    def _read_previous_output(self, name: str) -> str | None:
        if self.output_dir is None:
            return None
        file = self.output_dir / name
        if not file.is_file():
            return None
        logger.debug("Using previously rendered manifest '{}' as patch base", file)
        return file.read_text()

    def render_manifests(self) -> RenderedManifests:
        """
        Return the manifests added so far, in the order they were added.
        """

        return RenderedManifests(dict(self._manifests))


def _template_vars(params: TemplateParams) -> dict[str, Any]:
    return {field.name: getattr(params, field.name) for field in fields(params)}
