"""Tests for the depviz command line.

Help output must stay pure ASCII: Windows consoles on CP1252 cannot render
anything else.
"""

import json
import warnings

import pytest
from click.testing import CliRunner

from depviz import __version__
from depviz.cli import cli
from depviz.utils import ExitCodes


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def project(make_project):
    return make_project(
        {
            "a.ts": 'import "./b";\n',
            "b.ts": 'import "./a";\n',
            "orphan.js": "export const x = 1;\n",
            "bad.ts": "import { from ;;;\n",
        }
    )


class TestHelp:
    @pytest.mark.parametrize("args", [["--help"], ["analyze", "--help"], ["inspect", "--help"]])
    def test_help_is_ascii(self, runner, args):
        result = runner.invoke(cli, args)

        assert result.exit_code == 0
        try:
            result.output.encode("ascii")
        except UnicodeEncodeError as e:
            pytest.fail(f"Non-ASCII character in depviz {' '.join(args)}: {e}")

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestAnalyzeCommand:
    def test_json_output(self, runner, project):
        result = runner.invoke(cli, ["analyze", str(project), "--json"])

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        data = json.loads(result.output)
        assert data["stats"] == {"totalFiles": 4, "totalDependencies": 2, "circularDependencies": 2}
        assert {e["id"].startswith("e-") for e in data["edges"]} == {True}
        assert [w["file"].endswith("bad.ts") for w in data["warnings"]] == [True]

    def test_summary_output(self, runner, project):
        result = runner.invoke(cli, ["analyze", str(project)])

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        assert "DEPENDENCY GRAPH" in result.output
        assert "orphan.js" in result.output
        assert "CIRCULAR" in result.output

    def test_out_file(self, runner, project, tmp_path):
        out = tmp_path / "reports" / "graph.json"

        result = runner.invoke(cli, ["analyze", str(project), "--layout", "zoned", "--seed", "1", "--out", str(out)])

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        data = json.loads(out.read_text(encoding="utf-8"))
        assert len(data["nodes"]) == 4
        assert all(set(n["position"]) == {"x", "y"} for n in data["nodes"])

    def test_out_file_with_summary_reports_the_save(self, runner, project, tmp_path):
        out = tmp_path / "graph.json"

        result = runner.invoke(cli, ["analyze", str(project), "--out", str(out)])

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        assert "OK: Saved to:" in result.output
        assert out.exists()

    def test_seeded_zoned_output_is_stable(self, runner, project):
        args = ["analyze", str(project), "--layout", "zoned", "--seed", "5", "--json"]

        assert runner.invoke(cli, args).output == runner.invoke(cli, args).output

    def test_missing_root_exit_code(self, runner, tmp_path):
        result = runner.invoke(cli, ["analyze", str(tmp_path / "absent")])

        assert result.exit_code == ExitCodes.NOT_FOUND
        assert "Directory not found" in result.output

    def test_file_root_exit_code(self, runner, project):
        result = runner.invoke(cli, ["analyze", str(project / "a.ts")])

        assert result.exit_code == ExitCodes.INPUT_ERROR

    def test_empty_root_exit_code(self, runner):
        result = runner.invoke(cli, ["analyze", ""])

        assert result.exit_code == ExitCodes.INPUT_ERROR

    def test_internal_error_exit_code(self, runner, project, monkeypatch):
        from depviz.commands import analyze as analyze_module

        def explode(*args, **kwargs):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(analyze_module, "analyze_directory", explode)

        result = runner.invoke(cli, ["analyze", str(project)])

        assert result.exit_code == ExitCodes.INTERNAL_ERROR
        assert "InternalError" in result.output


class TestInspectCommand:
    def test_inspect_file_json(self, runner, make_project):
        root = make_project({"Button.tsx": "export default function Button() { return <button />; }\n"})

        result = runner.invoke(cli, ["inspect", str(root / "Button.tsx"), "--json"])

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        data = json.loads(result.output)
        assert data["metrics"]["functions"] == 1
        assert data["patterns"]["isReactComponent"] is True

    def test_inspect_stdin(self, runner):
        result = runner.invoke(
            cli,
            ["inspect", "--text-from-stdin", "--filename", "helpers.ts", "--json"],
            input="export const a = () => 1;\nexport const b = () => 2;\n",
        )

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        data = json.loads(result.output)
        assert data["metrics"]["exports"] == 2
        assert data["patterns"]["isUtilityFile"] is True

    def test_inspect_stdin_without_deprecated_stream_api(self, runner):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            result = runner.invoke(cli, ["inspect", "--text-from-stdin", "--json"], input="const a = 1;\n")

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        assert json.loads(result.output)["filename"] == "<stdin>"
        assert not [w for w in caught if issubclass(w.category, DeprecationWarning) and "depviz" in w.filename]

    def test_inspect_summary(self, runner, make_project):
        root = make_project({"broken.ts": "export default function (( {{{"})

        result = runner.invoke(cli, ["inspect", str(root / "broken.ts")])

        assert result.exit_code == ExitCodes.SUCCESS, result.output
        assert "Parse failed" in result.output

    def test_inspect_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["inspect", str(tmp_path / "gone.ts")])

        assert result.exit_code == ExitCodes.NOT_FOUND

    def test_inspect_without_input(self, runner):
        result = runner.invoke(cli, ["inspect"])

        assert result.exit_code == ExitCodes.INPUT_ERROR
