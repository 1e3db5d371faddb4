#!/usr/bin/env python3
"""Unit tests for the order-graph command-line interface."""

import io
import json
import os
from unittest.mock import patch

import pytest

from order_graph_api.services.domain.json_to_graph.converter import main
from utils.graph_helpers import FIXTURES_DIR


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep the CLI from reconfiguring logging for the rest of the session."""
    with patch("order_graph_api.services.domain.json_to_graph.converter.setup_logging") as mock_setup:
        yield mock_setup


@pytest.mark.unit
class TestGraphCli:
    """Test suite for the order-graph entry point."""

    def test_writes_graph_to_stdout(self, capsys):
        """Test that the graph JSON is printed with the requested indentation."""
        exit_code = main([str(FIXTURES_DIR / "sample_order.json"), "--indent", "0"])

        assert exit_code == 0
        graph = json.loads(capsys.readouterr().out)
        assert len(graph["nodes"]) == 28
        assert len(graph["edges"]) == 38
        assert graph["nodes"][0]["label"] == "Order: ORD-1001"

    def test_writes_graph_to_file(self, tmp_path, capsys):
        """Test --out writes the file and prints a one-line summary."""
        out = tmp_path / "graph.json"

        exit_code = main([str(FIXTURES_DIR / "amended_order.json"), "--out", str(out)])

        assert exit_code == 0
        graph = json.loads(out.read_text(encoding="utf-8"))
        assert len(graph["nodes"]) == 41
        assert capsys.readouterr().out.strip() == f"OK: wrote 41 nodes and 54 edges to {out}"

    def test_strategy_option(self, capsys):
        exit_code = main([str(FIXTURES_DIR / "amended_order.json"), "--strategy", "domain"])

        assert exit_code == 0
        assert len(json.loads(capsys.readouterr().out)["nodes"]) == 1

    def test_reads_stdin(self, capsys):
        with patch("sys.stdin", io.StringIO('{"orderId": "O-9"}')):
            exit_code = main(["-"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["nodes"][0]["label"] == "Order: O-9"

    def test_invalid_json_exits_with_error(self, tmp_path, capsys):
        """Test that a parse failure prints to stderr and returns 1."""
        path = tmp_path / "broken.json"
        path.write_text("{'orderId': 1}", encoding="utf-8")

        exit_code = main([str(path)])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert captured.out == ""
        assert captured.err.startswith("Error: Invalid JSON")

    def test_custom_rules_option(self, tmp_path, capsys):
        """Test --rules with a table whose domain markers do not match."""
        rules = tmp_path / "rules.yaml"
        rules.write_text("domain_markers: [ticketId]\n", encoding="utf-8")

        exit_code = main([str(FIXTURES_DIR / "sample_order.json"), "--rules", str(rules)])

        assert exit_code == 0
        nodes = json.loads(capsys.readouterr().out)["nodes"]
        assert nodes[0]["type"] == "object"

    def test_unknown_strategy_rejected_by_parser(self):
        with pytest.raises(SystemExit) as exc_info:
            main([str(FIXTURES_DIR / "sample_order.json"), "--strategy", "fancy"])
        assert exc_info.value.code == 2

    @patch.dict(os.environ, {"LOG_LEVEL": "debug"})
    def test_logging_goes_to_stderr(self, quiet_logging, capsys):
        main([str(FIXTURES_DIR / "sample_order.json")])
        quiet_logging.assert_called_once_with("DEBUG", stream="ext://sys.stderr")
