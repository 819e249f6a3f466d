#!/usr/bin/env python3
"""
Tests for the cath command line interface
"""
import json
import logging
import os

import pytest

from cath.cli.main import main, create_parser
from cath.models.structure import StructureView


@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the root logger; put the previous handlers back"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def structure_file(tmp_path, two_chain_structure):
    path = tmp_path / "1abc.npz"
    two_chain_structure.dump(path)
    return str(path)


class TestParser:

    def test_split_arguments(self):
        args = create_parser().parse_args(['-vv', 'split', 'a.npz', 'b.npz', '--release', 's35',
                                           '--skip-empty', '--threads', '4'])
        assert args.command == 'split'
        assert args.verbose == 2
        assert args.structures == ['a.npz', 'b.npz']
        assert args.release == 's35'
        assert args.skip_empty
        assert args.threads == 4

    def test_unknown_release_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(['index', '--release', 'nightly'])


class TestIndexCommand:

    def test_summary(self, boundary_file, capsys):
        assert main(['--json', 'index', '--boundaries', str(boundary_file)]) == 0

        summary = json.loads(capsys.readouterr().out)
        assert summary == {'source': str(boundary_file), 'chains': 2, 'domains': 3}

    def test_lookup(self, boundary_file, capsys):
        assert main(['--json', 'index', '--boundaries', str(boundary_file), '--lookup', '1abcA']) == 0

        output = json.loads(capsys.readouterr().out)
        assert output == {'key': '1ABCA', 'domains': ['1-50:A,60-100:A', '101-120:A']}

    def test_lookup_text(self, boundary_file, capsys):
        assert main(['index', '--boundaries', str(boundary_file), '--lookup', '3zzzQ']) == 0
        assert "No domains for 3ZZZQ" in capsys.readouterr().out

    def test_missing_boundaries(self, tmp_path, capsys):
        assert main(['index', '--boundaries', str(tmp_path / "absent.gz")]) == 1
        assert "FetchError" in capsys.readouterr().err


class TestSplitCommand:

    def test_split_writes_domains(self, tmp_path, boundary_file, structure_file, capsys):
        output_dir = str(tmp_path / "domains")

        code = main(['--json', 'split', '--boundaries', str(boundary_file),
                     '--output-dir', output_dir, structure_file])

        assert code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary['successful'] == 1
        assert summary['files_written'] == 2
        assert sorted(os.listdir(output_dir)) == ["1ABC.A.0.npz", "1ABC.A.1.npz"]
        assert StructureView.load(os.path.join(output_dir, "1ABC.A.0.npz")).num_groups == 91

    def test_unreadable_structure_reported(self, tmp_path, boundary_file, structure_file, capsys):
        broken = tmp_path / "broken.npz"
        broken.write_text("not a structure")
        output_dir = str(tmp_path / "domains")

        code = main(['split', '--boundaries', str(boundary_file), '--output-dir', output_dir,
                     '--threads', '2', structure_file, str(broken)])

        assert code == 1
        captured = capsys.readouterr()
        assert "successful: 1, failed: 1" in captured.out
        assert "FAILED broken" in captured.err
        assert len(os.listdir(output_dir)) == 2

    def test_output_dir_from_config(self, tmp_path, boundary_file, structure_file):
        output_dir = tmp_path / "configured"
        config = tmp_path / "config.yml"
        config.write_text(f"paths:\n  output_dir: {output_dir}\n"
                          f"boundaries:\n  source: {boundary_file}\n")

        assert main(['--config', str(config), 'split', structure_file]) == 0
        assert sorted(os.listdir(output_dir)) == ["1ABC.A.0.npz", "1ABC.A.1.npz"]


class TestMain:

    def test_no_command(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_missing_config(self, tmp_path, capsys):
        assert main(['--config', str(tmp_path / "missing.yml"), 'index']) == 1
        assert "ConfigurationError" in capsys.readouterr().err
