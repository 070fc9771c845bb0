"""
Integration tests for the phylodash CLI.

Tests the command-line interface using Typer's CliRunner for:
- Main entry point and version display
- descriptors classify with table and JSON output
- tree colour hierarchy export
- data filter, presence and pyramid commands
- config init and show
- Error handling for invalid inputs
"""

from __future__ import annotations

import json
from pathlib import Path

import polars as pl
import pytest
from typer.testing import CliRunner

from phylodash import __version__
from phylodash.cli.main import app
from phylodash.models.config import TABLEAU10

runner = CliRunner()


# =============================================================================
# CLI Test Fixtures
# =============================================================================


@pytest.fixture
def empty_csv_file(tmp_path: Path) -> Path:
    path = tmp_path / "empty.csv"
    path.write_text("accession,pmid,genotype\n")
    return path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Config that lowers the distinct-value gate so severity is numerical."""
    path = tmp_path / "phylodash.yaml"
    path.write_text("classifier:\n  min_distinct_numeric: 2\n")
    return path


def _nodes_by_name(hierarchy: dict) -> dict[str, dict]:
    nodes = {}
    stack = [hierarchy]
    while stack:
        node = stack.pop()
        if "name" in node:
            nodes[node["name"]] = node
        stack.extend(node.get("branchset", []))
    return nodes


# =============================================================================
# Main Entry Point
# =============================================================================


class TestMainApp:
    """Tests for the top-level app."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"phylodash version {__version__}" in result.stdout

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("descriptors", "tree", "data", "config"):
            assert command in result.stdout


# =============================================================================
# descriptors classify
# =============================================================================


class TestDescriptorsClassify:
    """Tests for the descriptors classify command."""

    def test_prints_table(self, csv_file: Path):
        result = runner.invoke(app, ["descriptors", "classify", "--csv", str(csv_file)])

        assert result.exit_code == 0, result.stdout
        assert "genotype" in result.stdout
        assert "numerical" in result.stdout
        assert "categorical" in result.stdout

    def test_json_output(self, csv_file: Path, tmp_path: Path):
        output = tmp_path / "out" / "descriptors.json"

        result = runner.invoke(
            app,
            ["descriptors", "classify", "--csv", str(csv_file), "--json", str(output), "-q"],
        )

        assert result.exit_code == 0, result.stdout
        data = json.loads(output.read_text())
        assert list(data) == ["genotype", "host", "length_kb", "severity"]
        assert data["genotype"] == {"type": "categorical", "domain": ["GI", "GII"]}
        assert data["length_kb"] == {"type": "numerical", "domain": [7.1, 8.3]}
        assert data["severity"]["type"] == "categorical"

    def test_config_changes_classification(
        self, csv_file: Path, config_file: Path, tmp_path: Path
    ):
        output = tmp_path / "descriptors.json"

        result = runner.invoke(
            app,
            [
                "descriptors", "classify",
                "--csv", str(csv_file),
                "--config", str(config_file),
                "--json", str(output),
            ],
        )

        assert result.exit_code == 0, result.stdout
        assert json.loads(output.read_text())["severity"]["type"] == "numerical"

    def test_empty_csv_fails(self, empty_csv_file: Path):
        result = runner.invoke(app, ["descriptors", "classify", "--csv", str(empty_csv_file)])

        assert result.exit_code == 1
        assert "CSV data is empty" in result.stdout

    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(
            app, ["descriptors", "classify", "--csv", str(tmp_path / "absent.csv")]
        )

        assert result.exit_code != 0


# =============================================================================
# tree colour
# =============================================================================


class TestTreeColour:
    """Tests for the tree colour command."""

    def test_colour_by_genotype(self, csv_file: Path, tree_file: Path, tmp_path: Path):
        output = tmp_path / "tree.json"

        result = runner.invoke(
            app,
            [
                "tree", "colour",
                "--csv", str(csv_file),
                "--tree", str(tree_file),
                "--colour", "genotype",
                "-o", str(output),
            ],
        )

        assert result.exit_code == 0, result.stdout
        payload = json.loads(output.read_text())
        assert payload["descriptor"] == "genotype"
        assert payload["legend"] == [
            {"category": "GI", "color": TABLEAU10[4]},
            {"category": "GII", "color": TABLEAU10[7]},
        ]
        nodes = _nodes_by_name(payload["tree"])
        assert nodes["cladeA"]["color"] == TABLEAU10[7]
        assert nodes["cladeB"]["color"] == TABLEAU10[4]
        assert nodes["root"]["color"] == "#ccc"
        assert nodes["X9"]["radius"] == pytest.approx(1.0)

    def test_reports_join_counts(self, csv_file: Path, tree_file: Path, tmp_path: Path):
        result = runner.invoke(
            app,
            [
                "tree", "colour",
                "-c", str(csv_file),
                "-t", str(tree_file),
                "-o", str(tmp_path / "tree.json"),
            ],
        )

        assert result.exit_code == 0, result.stdout
        assert "Leaves:" in result.stdout
        assert "9" in result.stdout

    def test_numerical_descriptor_leaves_tree_neutral(
        self, csv_file: Path, tree_file: Path, tmp_path: Path
    ):
        output = tmp_path / "tree.json"

        result = runner.invoke(
            app,
            [
                "tree", "colour",
                "-c", str(csv_file),
                "-t", str(tree_file),
                "--color", "length_kb",
                "-o", str(output),
            ],
        )

        assert result.exit_code == 0, result.stdout
        payload = json.loads(output.read_text())
        assert payload["legend"] == []
        colours = {node["color"] for node in _nodes_by_name(payload["tree"]).values()}
        assert colours == {"#ccc"}

    def test_deep_tree(self, tmp_path: Path):
        """A tree nested 1,500 levels deep is coloured and written."""
        depth = 1500
        csv = tmp_path / "deep.csv"
        csv.write_text("accession,pmid,code\nA,1,x\nB,1,x\n")
        tree = tmp_path / "deep.nwk"
        tree.write_text("(" * depth + "A,B" + ")" * depth + ";\n")
        output = tmp_path / "deep.json"

        result = runner.invoke(
            app,
            [
                "tree", "colour",
                "-c", str(csv),
                "-t", str(tree),
                "--colour", "code",
                "-o", str(output),
            ],
        )

        assert result.exit_code == 0, result.stdout
        text = output.read_text()
        x_colour = TABLEAU10[ord("x") % 10]
        assert text.count('"branchset"') == depth
        assert text.count(f'"color":"{x_colour}"') == depth + 2
        assert '"descriptor": "code"' in text

    def test_unknown_descriptor(self, csv_file: Path, tree_file: Path, tmp_path: Path):
        result = runner.invoke(
            app,
            [
                "tree", "colour",
                "-c", str(csv_file),
                "-t", str(tree_file),
                "--colour", "nope",
                "-o", str(tmp_path / "tree.json"),
            ],
        )

        assert result.exit_code == 1
        assert "Unknown descriptor: nope" in result.stdout

    def test_malformed_tree(self, csv_file: Path, tmp_path: Path):
        tree = tmp_path / "bad.nwk"
        tree.write_text("((A1,A2),B1;")

        result = runner.invoke(
            app,
            [
                "tree", "colour",
                "-c", str(csv_file),
                "-t", str(tree),
                "-o", str(tmp_path / "tree.json"),
            ],
        )

        assert result.exit_code == 1
        assert "Malformed Newick tree" in result.stdout
        assert not (tmp_path / "tree.json").exists()


# =============================================================================
# data filter / presence / pyramid
# =============================================================================


class TestDataCommands:
    """Tests for the data subcommands."""

    def test_filter(self, csv_file: Path, tmp_path: Path):
        output = tmp_path / "filtered_sequences.csv"

        result = runner.invoke(
            app,
            ["data", "filter", "--csv", str(csv_file), "--query", "2002", "-o", str(output)],
        )

        assert result.exit_code == 0, result.stdout
        assert output.read_text() == (
            "accession,pmid,genotype,host,length_kb,severity\n"
            "B1,2002,GI,pig,7.1,3\n"
            "B2,2002,GI,pig,7.2,1\n"
        )
        assert "2 of 8" in result.stdout

    def test_filter_without_query_exports_all(self, csv_file: Path, tmp_path: Path):
        output = tmp_path / "all.csv"

        result = runner.invoke(app, ["data", "filter", "-c", str(csv_file), "-o", str(output)])

        assert result.exit_code == 0, result.stdout
        assert len(output.read_text().splitlines()) == 9

    def test_presence(self, csv_file: Path, tmp_path: Path):
        output = tmp_path / "presence.csv"

        result = runner.invoke(
            app, ["data", "presence", "-c", str(csv_file), "-o", str(output), "-q"]
        )

        assert result.exit_code == 0, result.stdout
        frame = pl.read_csv(output, infer_schema_length=0)
        assert frame.columns == ["descriptor", "1001", "2002", "3003"]
        assert frame["descriptor"].to_list() == ["genotype", "host", "length_kb", "severity"]

    def test_pyramid(self, csv_file: Path):
        result = runner.invoke(
            app, ["data", "pyramid", "-c", str(csv_file), "--x", "genotype", "--y", "host"]
        )

        assert result.exit_code == 0, result.stdout
        assert "human" in result.stdout
        assert "oyster" in result.stdout

    def test_pyramid_rejects_numerical(self, csv_file: Path):
        result = runner.invoke(
            app, ["data", "pyramid", "-c", str(csv_file), "--x", "length_kb", "--y", "host"]
        )

        assert result.exit_code == 1
        assert "expected categorical" in result.stdout


# =============================================================================
# config init / show
# =============================================================================


class TestConfigCommands:
    """Tests for the config subcommands."""

    def test_init_writes_defaults(self, tmp_path: Path):
        output = tmp_path / "phylodash.yaml"

        result = runner.invoke(app, ["config", "init", "-o", str(output)])

        assert result.exit_code == 0, result.stdout
        assert "numeric_fraction_threshold: 0.8" in output.read_text()

    def test_init_refuses_overwrite(self, tmp_path: Path):
        output = tmp_path / "phylodash.yaml"
        output.write_text("layout: {}\n")

        result = runner.invoke(app, ["config", "init", "-o", str(output)])

        assert result.exit_code == 1
        assert output.read_text() == "layout: {}\n"

    def test_init_force(self, tmp_path: Path):
        output = tmp_path / "phylodash.yaml"
        output.write_text("layout: {}\n")

        result = runner.invoke(app, ["config", "init", "-o", str(output), "--force"])

        assert result.exit_code == 0
        assert "palette" in output.read_text()

    def test_show(self, config_file: Path):
        result = runner.invoke(app, ["config", "show", "--config", str(config_file)])

        assert result.exit_code == 0, result.stdout
        assert "min_distinct_numeric: 2" in result.stdout

    def test_invalid_config(self, csv_file: Path, tmp_path: Path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("layout:\n  radial_extent: -5\n")

        result = runner.invoke(
            app, ["descriptors", "classify", "-c", str(csv_file), "--config", str(bad)]
        )

        assert result.exit_code == 1
        assert "Invalid configuration" in result.stdout
