"""
Project file and CLI pipeline tests

Tests pagepress.yaml discovery and validation, target resolution and the
pipeline stages run by the command line entry point.
"""

import pytest
from pathlib import Path

from pagepress.__main__ import env_check, config_load, targets_build, results_report
from pagepress.lib.project import ProjectError, projectFile_find, project_load, targets_resolve
from pagepress.models import ProgramState, pipeline
from pagepress.models.targets import BuildMode, FileType


PROJECT = """\
output: public
targets:
  - path: index.html
  - path: static
  - path: notes.gmi
    output: notes.html
  - path: feed.txt
    mode: compile
    filetype: gemtext
"""


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "static").mkdir(parents=True)
    (root / "pagepress.yaml").write_text(PROJECT)
    (root / "index.html").write_text("<body>\n  <p>#!INCLUDE(static/name.txt)</p>\n</body>\n")
    (root / "static" / "name.txt").write_text("pagepress")
    (root / "notes.gmi").write_text("# Notes\n* one\n")
    (root / "feed.txt").write_text("=> /feed Feed\n")
    return root


class TestProjectFile:
    """Test discovery and loading of pagepress.yaml"""

    def test_find_in_start_directory(self, project):
        assert projectFile_find(project, "pagepress.yaml") == (project / "pagepress.yaml").resolve()

    def test_find_in_ancestor(self, project):
        nested = project / "static" / "deeper"
        nested.mkdir()
        assert projectFile_find(nested, "pagepress.yaml") == (project / "pagepress.yaml").resolve()

    def test_not_found(self, tmp_path):
        with pytest.raises(ProjectError):
            projectFile_find(tmp_path, "no-such-project-file.yaml")

    def test_load(self, project):
        config = project_load(project / "pagepress.yaml")
        assert config.output == "public"
        assert [entry.path for entry in config.targets] == ["index.html", "static", "notes.gmi", "feed.txt"]
        assert config.targets[3].mode is BuildMode.COMPILE
        assert config.targets[3].filetype is FileType.GEMTEXT

    @pytest.mark.parametrize("content", [
        "",
        "- a\n- b\n",
        "targets: []\n",
        "targets:\n  - path: x\n    filetype: rst\n",
        "targets:\n  - path: x\n    mode: zip\n",
        "targets:\n  - path: ''\n",
        "targets: [\n",
    ])
    def test_invalid(self, tmp_path, content):
        project_file = tmp_path / "pagepress.yaml"
        project_file.write_text(content)
        with pytest.raises(ProjectError):
            project_load(project_file)

    def test_filetype_aliases(self, tmp_path):
        project_file = tmp_path / "pagepress.yaml"
        project_file.write_text(
            "targets:\n"
            "  - {path: a, filetype: md}\n"
            "  - {path: b, filetype: markdown}\n"
            "  - {path: c, filetype: gmi}\n"
        )
        config = project_load(project_file)
        assert [entry.filetype for entry in config.targets] == [
            FileType.MARKDOWN, FileType.MARKDOWN, FileType.GEMTEXT,
        ]


class TestTargets:
    """Test target resolution defaults"""

    def test_resolve(self, project, tmp_path):
        config = project_load(project / "pagepress.yaml")
        out = tmp_path / "out"
        targets = targets_resolve(config, project, out)

        assert [target.path for target in targets] == [
            project / "index.html", project / "static", project / "notes.gmi", project / "feed.txt",
        ]
        assert [target.mode for target in targets] == [
            BuildMode.COMPILE, BuildMode.COPY, BuildMode.COMPILE, BuildMode.COMPILE,
        ]
        assert [target.output for target in targets] == [
            out / "index.html", out / "static", out / "notes.html", out / "feed.txt",
        ]

    def test_default_modes(self):
        assert BuildMode.default_for(Path("a.svg")) is BuildMode.COMPILE
        assert BuildMode.default_for(Path("a.md")) is BuildMode.COMPILE
        assert BuildMode.default_for(Path("a.png")) is BuildMode.COPY
        assert BuildMode.default_for(Path("assets")) is BuildMode.COPY


class TestPipeline:
    """Test the CLI pipeline stages"""

    def test_full_build(self, project, tmp_path):
        outputdir = tmp_path / "out"
        state = ProgramState(inputdir=project / "static", outputdir=outputdir)

        final = pipeline(state, env_check, config_load, targets_build, results_report)

        public = outputdir / "public"
        assert final.outputRoot == public
        assert len(final.buildResults) == 4
        assert (public / "index.html").read_text() == "<body><p>pagepress</p></body>"
        assert (public / "static" / "name.txt").read_text() == "pagepress"
        assert (public / "notes.html").read_text() == "<p><h1>Notes</h1><ul><li>one</li></ul></p>"
        assert (public / "feed.txt").read_text() == '<p><a href="/feed">Feed</a><br></p>'

    def test_missing_project_file_exits(self, tmp_path):
        state = ProgramState(inputdir=tmp_path, outputdir=tmp_path / "out",
                             configFile="no-such-project-file.yaml")
        with pytest.raises(SystemExit) as excinfo:
            env_check(state)
        assert excinfo.value.code == 1

    def test_failed_file_exits(self, project, tmp_path, capsys):
        (project / "index.html").write_text("<p>#!NOPE()</p>")
        state = ProgramState(inputdir=project, outputdir=tmp_path / "out")

        with pytest.raises(SystemExit) as excinfo:
            pipeline(state, env_check, config_load, targets_build, results_report)

        assert excinfo.value.code == 1
        assert "Unknown macro 'NOPE'" in capsys.readouterr().err
        assert (tmp_path / "out" / "public" / "notes.html").exists()
