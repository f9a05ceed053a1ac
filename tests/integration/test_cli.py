"""Integration tests for the ctree CLI."""

import json
from pathlib import Path

from change_tree import CONFIG_FILE, CT_DIR
from change_tree.cli import main

NAME_STATUS = "M\tsrc/a/file1.txt\nA\tsrc/a/file2.txt\nD\tsrc/b/file3.txt\nM\treadme.md\n"


class TestCLIEntry:
    """Tests for the CLI entry point."""

    def test_version_flag(self, cli_runner):
        """--version shows version info."""
        result = cli_runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "ctree" in result.output
        assert "0.1.0" in result.output

    def test_help_flag(self, cli_runner):
        """--help lists the commands."""
        result = cli_runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "change-tree" in result.output
        for command in ("show", "parse", "init"):
            assert command in result.output


class TestParseCommand:
    """Building trees from name-status text."""

    def test_json_output(self, cli_runner):
        with cli_runner.isolated_filesystem():
            result = cli_runner.invoke(main, ["parse", "--format", "json"], input=NAME_STATUS)

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["changes"] == []
        src = data["children"][0]
        assert src["name"] == "src"
        assert [child["name"] for child in src["children"]] == ["a", "b"]
        assert [c["name"] for c in src["children"][0]["changes"]] == ["file1.txt", "file2.txt"]

    def test_keep_root(self, cli_runner):
        with cli_runner.isolated_filesystem():
            result = cli_runner.invoke(
                main, ["parse", "--format", "json", "--keep-root"], input=NAME_STATUS
            )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [c["path"] for c in data["changes"]] == ["readme.md"]

    def test_text_output(self, cli_runner):
        with cli_runner.isolated_filesystem():
            result = cli_runner.invoke(main, ["parse", "--format", "text"], input=NAME_STATUS)

        assert result.exit_code == 0
        assert "\t\t\t\t>file3.txt (Deleted)" in result.output
        assert "readme.md" not in result.output

    def test_tree_output_from_file(self, cli_runner):
        with cli_runner.isolated_filesystem():
            Path("changes.txt").write_text(NAME_STATUS)
            result = cli_runner.invoke(main, ["parse", "changes.txt"])

        assert result.exit_code == 0
        assert "file1.txt (Modified)" in result.output
        assert "file3.txt (Deleted)" in result.output

    def test_no_changes(self, cli_runner):
        with cli_runner.isolated_filesystem():
            result = cli_runner.invoke(main, ["parse"], input="")

        assert result.exit_code == 0
        assert "No changes." in result.output

    def test_verbose_prints_stats(self, cli_runner):
        with cli_runner.isolated_filesystem():
            result = cli_runner.invoke(main, ["parse", "-v"], input=NAME_STATUS)

        assert result.exit_code == 0
        assert "4 records" in result.output
        assert "1 excluded" in result.output

    def test_config_keep_root(self, cli_runner):
        with cli_runner.isolated_filesystem():
            Path(CT_DIR).mkdir()
            (Path(CT_DIR) / CONFIG_FILE).write_text(json.dumps({"keep_root_changes": True}))
            result = cli_runner.invoke(main, ["parse", "--format", "json"], input=NAME_STATUS)

        assert result.exit_code == 0
        assert json.loads(result.output)["changes"][0]["name"] == "readme.md"

    def test_quoted_paths(self, cli_runner):
        with cli_runner.isolated_filesystem():
            result = cli_runner.invoke(
                main, ["parse", "--format", "json"], input='A\t"src/a/\\303\\251.txt"\n'
            )

        assert result.exit_code == 0
        src = json.loads(result.output)["children"][0]
        assert src["name"] == "src"
        assert src["children"][0]["changes"][0]["path"] == "src/a/é.txt"

    def test_invalid_config(self, cli_runner):
        with cli_runner.isolated_filesystem():
            Path(CT_DIR).mkdir()
            (Path(CT_DIR) / CONFIG_FILE).write_text("{not json")
            result = cli_runner.invoke(main, ["parse"], input=NAME_STATUS)

        assert result.exit_code == 1
        assert "Invalid config file" in result.output


class TestShowCommand:
    """Rendering a git working copy."""

    def test_show_json(self, cli_runner, dirty_repo: Path):
        result = cli_runner.invoke(main, ["show", str(dirty_repo), "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        src = data["children"][0]
        paths = {c["path"] for child in src["children"] for c in child["changes"]}
        assert paths == {"src/a/file1.txt", "src/a/file2.txt", "src/b/file3.txt"}

    def test_show_no_untracked(self, cli_runner, dirty_repo: Path):
        result = cli_runner.invoke(
            main, ["show", str(dirty_repo), "--format", "json", "--no-untracked"]
        )

        assert result.exit_code == 0
        assert "file2.txt" not in result.output

    def test_show_tree_uses_repo_name(self, cli_runner, dirty_repo: Path):
        result = cli_runner.invoke(main, ["show", str(dirty_repo)])

        assert result.exit_code == 0
        assert result.output.splitlines()[0].strip() == "repo"
        assert "file1.txt (Modified)" in result.output

    def test_show_clean_repo(self, cli_runner, git_repo: Path):
        result = cli_runner.invoke(main, ["show", str(git_repo)])

        assert result.exit_code == 0
        assert "No changes." in result.output

    def test_show_not_a_repository(self, cli_runner, tmp_path: Path):
        result = cli_runner.invoke(main, ["show", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "Not a git repository" in result.output


class TestInitCommand:
    def test_init_writes_config(self, cli_runner):
        with cli_runner.isolated_filesystem():
            result = cli_runner.invoke(main, ["init"])
            config = json.loads((Path(CT_DIR) / CONFIG_FILE).read_text())

        assert result.exit_code == 0
        assert config["keep_root_changes"] is False

    def test_init_refuses_to_overwrite(self, cli_runner):
        with cli_runner.isolated_filesystem():
            cli_runner.invoke(main, ["init"])
            result = cli_runner.invoke(main, ["init"])
            forced = cli_runner.invoke(main, ["init", "--force"])

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert forced.exit_code == 0
