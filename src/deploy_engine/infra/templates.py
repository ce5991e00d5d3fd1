"""Jinja2 rendering of chart and provisioner template directories."""

from __future__ import annotations

import shutil
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from deploy_engine.errors import TemplateRenderError

TEMPLATE_MARKER = ".j2"


def get_template_env(source_dir: Path) -> Environment:
    """Get Jinja2 environment for templates under ``source_dir``."""
    return Environment(
        loader=FileSystemLoader(source_dir),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def rendered_name(name: str) -> str | None:
    """File name once rendered, or None when ``name`` is not a template.

    The marker is a whole dotted component, wherever it sits:
    ``values.j2.yaml`` and ``values.yaml.j2`` both give ``values.yaml``.
    """
    stem, *suffixes = name.split(".")
    marker = TEMPLATE_MARKER.lstrip(".")
    if marker not in suffixes:
        return None
    return ".".join([stem, *(part for part in suffixes if part != marker)])


class JinjaTemplateRenderer:
    """Materializes a template directory into a workspace directory.

    Template files are rendered and written without their marker. Other
    files are copied verbatim, so chart templates keep their own
    templating syntax.
    """

    def render_directory(
        self,
        source_dir: Path,
        dest_dir: Path,
        context: Mapping[str, Any],
    ) -> None:
        """Render every file of ``source_dir`` into ``dest_dir``.

        Raises:
            TemplateRenderError: If the source is missing, a template fails
                to render or a file cannot be read or written
        """
        if not source_dir.is_dir():
            raise TemplateRenderError(
                f"Template directory `{source_dir}` does not exist"
            )

        env = get_template_env(source_dir)
        for source in sorted(source_dir.rglob("*")):
            if not source.is_file():
                continue
            relative = source.relative_to(source_dir)
            try:
                self._materialize(env, source, relative, dest_dir, context)
            except TemplateError as e:
                raise TemplateRenderError(
                    f"Cannot render template `{relative}`", full_details=str(e)
                ) from e
            except UnicodeDecodeError as e:
                raise TemplateRenderError(
                    f"Template `{relative}` is not valid UTF-8", full_details=str(e)
                ) from e
            except OSError as e:
                raise TemplateRenderError(
                    f"Cannot write `{relative}` into `{dest_dir}`",
                    full_details=str(e),
                ) from e

    @staticmethod
    def _materialize(
        env: Environment,
        source: Path,
        relative: Path,
        dest_dir: Path,
        context: Mapping[str, Any],
    ) -> None:
        target_name = rendered_name(relative.name)
        destination = dest_dir / relative.parent / (target_name or relative.name)
        destination.parent.mkdir(parents=True, exist_ok=True)

        if target_name is None:
            shutil.copyfile(source, destination)
            return
        content = env.get_template(relative.as_posix()).render(**context)
        destination.write_text(content)


def render_directory(
    source_dir: Path, dest_dir: Path, context: Mapping[str, Any]
) -> None:
    """Render a template directory with the default renderer."""
    JinjaTemplateRenderer().render_directory(source_dir, dest_dir, context)
