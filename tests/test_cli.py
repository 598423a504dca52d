"""
Tests for the tango command line.
"""

import json

from click.testing import CliRunner

from tango import __version__
from tango.cli import cli
from tango.timestamp import Timestamp

HELLO_RS = "//@ Hello\nfn main() {}\n"
HELLO_MD = "Hello\n```rust\nfn main() {}\n```\n"
STALE_MD = "```rust\nx();\n```\n[n]: https://play.rust-lang.org/?code=old&version=nightly\n"


def write(path, text, ms=1000_000_000):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    Timestamp.from_ms(ms).set_file_times(path)
    return path


class TestRun:
    """Tests for `tango run`."""

    def test_generates(self, tmp_path):
        """Should convert a lone source file and report it."""
        write(tmp_path / "src" / "hello.rs", HELLO_RS)

        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--root", str(tmp_path)])

        assert result.exit_code == 0
        assert "Generated: 1 file(s)" in result.output
        assert (tmp_path / "src" / "hello.md").read_text() == HELLO_MD
        assert (tmp_path / "tango.stamp").exists()

    def test_json(self, tmp_path):
        write(tmp_path / "src" / "hello.rs", HELLO_RS)

        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--root", str(tmp_path), "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["generated"][0]["direction"] == "to_literate"
        assert data["stamp_created"] is True

    def test_in_sync(self, tmp_path):
        write(tmp_path / "src" / "hello.rs", HELLO_RS)
        runner = CliRunner()
        runner.invoke(cli, ["run", "--root", str(tmp_path)])

        result = runner.invoke(cli, ["run", "--root", str(tmp_path)])

        assert result.exit_code == 0
        assert "Everything is in sync." in result.output

    def test_conflict_exits_1(self, tmp_path):
        """Should refuse to pick a side without a stamp."""
        write(tmp_path / "src" / "hello.rs", HELLO_RS, 1000_000_000)
        write(tmp_path / "src" / "hello.md", "Edited\n", 2000_000_000)

        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--root", str(tmp_path)])

        assert result.exit_code == 1
        assert "Conflict:" in result.output
        assert (tmp_path / "src" / "hello.md").read_text() == "Edited\n"

    def test_stale_link_is_a_warning(self, tmp_path):
        write(tmp_path / "src" / "n.md", STALE_MD)

        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--root", str(tmp_path)])

        assert result.exit_code == 0
        assert "Warnings: 1" in result.output
        assert (tmp_path / "src" / "n.rs").read_text() == "//@@@ n\nx();\n"

    def test_strict_flag(self, tmp_path):
        """Should fail on stale links with --strict, after writing outputs."""
        write(tmp_path / "src" / "n.md", STALE_MD)

        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--root", str(tmp_path), "--strict"])

        assert result.exit_code == 1
        assert "strict mode" in result.output
        assert (tmp_path / "src" / "n.rs").exists()

    def test_strict_from_config(self, tmp_path):
        (tmp_path / "tango.yaml").write_text("strict: true\n")
        write(tmp_path / "src" / "n.md", STALE_MD)

        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--root", str(tmp_path)])

        assert result.exit_code == 1

    def test_undecodable_input(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "lib.md").write_bytes(b"\xff\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--root", str(tmp_path)])

        assert result.exit_code == 1
        assert "Error: I/O error on" in result.output
        assert not (tmp_path / "src" / "lib.rs").exists()

    def test_bad_config(self, tmp_path):
        (tmp_path / "tango.yaml").write_text("source_ext: md\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["run", "--root", str(tmp_path)])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestStatus:
    """Tests for `tango status`."""

    def test_pending(self, tmp_path):
        """Should list pending work without writing it."""
        write(tmp_path / "src" / "hello.rs", HELLO_RS)

        runner = CliRunner()
        result = runner.invoke(cli, ["status", "--root", str(tmp_path)])

        assert result.exit_code == 0
        assert "Pending: 1 file(s)" in result.output
        assert not (tmp_path / "src" / "hello.md").exists()
        assert not (tmp_path / "tango.stamp").exists()

    def test_conflicts(self, tmp_path):
        write(tmp_path / "src" / "hello.rs", HELLO_RS, 1000_000_000)
        write(tmp_path / "src" / "hello.md", "Edited\n", 2000_000_000)

        runner = CliRunner()
        result = runner.invoke(cli, ["status", "--root", str(tmp_path), "--json"])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["dry_run"] is True
        assert len(data["conflicts"]) == 1


class TestConvert:
    """Tests for `tango convert`."""

    def test_to_literate_stdout(self, tmp_path):
        path = write(tmp_path / "hello.rs", HELLO_RS)

        runner = CliRunner()
        result = runner.invoke(cli, ["convert", "to-literate", str(path), "--root", str(tmp_path)])

        assert result.exit_code == 0
        assert result.output == HELLO_MD

    def test_to_source_output_file(self, tmp_path):
        path = write(tmp_path / "hello.md", HELLO_MD)
        out = tmp_path / "out.rs"

        runner = CliRunner()
        result = runner.invoke(cli, [
            "convert", "to-source", str(path),
            "-o", str(out),
            "--root", str(tmp_path),
        ])

        assert result.exit_code == 0
        assert out.read_text() == HELLO_RS

    def test_warning_reported(self, tmp_path):
        path = write(tmp_path / "n.md", STALE_MD)

        runner = CliRunner()
        result = runner.invoke(cli, ["convert", "to-source", str(path), "--root", str(tmp_path)])

        assert result.exit_code == 0
        assert "Warning: line 4: link [n] does not match its block" in result.output

    def test_undecodable_file(self, tmp_path):
        """Should report a clean error and leave -o untouched."""
        path = tmp_path / "bad.md"
        path.write_bytes(b"# Title\n\xff\xfe broken\n")
        out = write(tmp_path / "out.rs", "fn keep_me() {}\n")

        runner = CliRunner()
        result = runner.invoke(cli, [
            "convert", "to-source", str(path),
            "-o", str(out),
            "--root", str(tmp_path),
        ])

        assert result.exit_code == 1
        assert "Error: cannot read" in result.output
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert out.read_text() == "fn keep_me() {}\n"

    def test_missing_file(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["convert", "to-source", str(tmp_path / "nope.md")])
        assert result.exit_code == 2


class TestConfigCommand:
    """Tests for `tango config`."""

    def test_show_defaults(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(cli, ["config", "--root", str(tmp_path)])

        assert result.exit_code == 0
        assert "Configuration (defaults):" in result.output
        assert "lit_dir: src" in result.output

    def test_init(self, tmp_path):
        """Should write tango.yaml once and refuse to overwrite it."""
        runner = CliRunner()
        result = runner.invoke(cli, ["config", "--init", "--root", str(tmp_path)])

        assert result.exit_code == 0
        assert (tmp_path / "tango.yaml").exists()

        result = runner.invoke(cli, ["config", "--init", "--root", str(tmp_path)])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_show_file(self, tmp_path):
        (tmp_path / "tango.yaml").write_text("lit_dir: doc\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["config", "--root", str(tmp_path)])

        assert result.exit_code == 0
        assert "tango.yaml" in result.output
        assert "lit_dir: doc" in result.output


def test_version():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
