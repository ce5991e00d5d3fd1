"""Tests for template directory rendering."""

from pathlib import Path

import pytest

from deploy_engine.errors import TemplateRenderError
from deploy_engine.infra.templates import render_directory


class TestRenderDirectory:
    """Tests for JinjaTemplateRenderer.render_directory."""

    @pytest.fixture
    def source(self, tmp_path: Path) -> Path:
        source = tmp_path / "chart"
        (source / "templates").mkdir(parents=True)
        (source / "Chart.yaml").write_text("name: app\n")
        (source / "values.j2.yaml").write_text("image: {{ image }}\n")
        (source / "templates" / "deployment.yaml").write_text(
            "replicas: {{ .Values.replicas }}\n"
        )
        return source

    def test_renders_marked_files_without_marker(
        self, source: Path, tmp_path: Path
    ) -> None:
        """Files with the .j2 marker should be rendered and renamed."""
        dest = tmp_path / "out"

        render_directory(source, dest, {"image": "nginx:1.25"})

        assert (dest / "values.yaml").read_text() == "image: nginx:1.25\n"
        assert not (dest / "values.j2.yaml").exists()

    def test_copies_other_files_verbatim(self, source: Path, tmp_path: Path) -> None:
        """Chart templates should keep their own templating syntax."""
        dest = tmp_path / "out"

        render_directory(source, dest, {"image": "nginx:1.25"})

        assert (dest / "Chart.yaml").read_text() == "name: app\n"
        assert (dest / "templates" / "deployment.yaml").read_text() == (
            "replicas: {{ .Values.replicas }}\n"
        )

    def test_missing_source_directory(self, tmp_path: Path) -> None:
        """A missing source directory should raise TemplateRenderError."""
        with pytest.raises(TemplateRenderError, match="does not exist"):
            render_directory(tmp_path / "nope", tmp_path / "out", {})

    def test_undefined_variable_fails(self, source: Path, tmp_path: Path) -> None:
        """Undefined template variables should fail instead of rendering empty."""
        with pytest.raises(TemplateRenderError, match="values.j2.yaml"):
            render_directory(source, tmp_path / "out", {})

    def test_trailing_marker_is_dropped(self, tmp_path: Path) -> None:
        source = tmp_path / "module"
        source.mkdir()
        (source / "main.tf.j2").write_text('engine_version = "{{ version }}"\n')

        render_directory(source, tmp_path / "out", {"version": "13.7"})

        assert (tmp_path / "out" / "main.tf").read_text() == (
            'engine_version = "13.7"\n'
        )

    def test_marker_inside_a_component_is_not_a_template(
        self, tmp_path: Path
    ) -> None:
        """Only a whole ``.j2`` component marks a template."""
        source = tmp_path / "module"
        source.mkdir()
        (source / "notes.j2x.txt").write_text("{{ left alone }}\n")

        render_directory(source, tmp_path / "out", {})

        assert (tmp_path / "out" / "notes.j2x.txt").read_text() == (
            "{{ left alone }}\n"
        )

    def test_non_utf8_template_fails(self, tmp_path: Path) -> None:
        source = tmp_path / "module"
        source.mkdir()
        (source / "values.yaml.j2").write_bytes(b"name: \xff\xfe\n")

        with pytest.raises(TemplateRenderError, match="not valid UTF-8"):
            render_directory(source, tmp_path / "out", {})

    def test_unwritable_destination_fails(self, source: Path, tmp_path: Path) -> None:
        """Write errors are reported like rendering errors."""
        dest = tmp_path / "out"
        (dest / "Chart.yaml").mkdir(parents=True)

        with pytest.raises(TemplateRenderError, match="Cannot write `Chart.yaml`"):
            render_directory(source, dest, {"image": "nginx:1.25"})
