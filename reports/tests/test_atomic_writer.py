"""
Tests for atomic writer - temp write → fsync → rename.
"""

import json
import pytest
from datetime import date
from pathlib import Path
from unittest.mock import patch

from reports.atomic_writer import (
    write_text_atomic,
    write_json_atomic,
    AtomicWriteError
)


class TestWriteTextAtomic:
    """Tests for atomic text writing."""

    def test_write_success(self, tmp_path):
        content = "# Variance Ratio Test: SPY\n\nRandom walk not rejected.\n"
        output_path = tmp_path / 'SPY.md'

        result = write_text_atomic(content, output_path)

        assert result['status'] == 'completed'
        assert result['output_path'] == str(output_path)
        assert result['bytes_written'] == len(content.encode('utf-8'))
        assert output_path.read_text(encoding='utf-8') == content

    def test_creates_parent_directories(self, tmp_path):
        output_path = tmp_path / 'data' / 'processed' / 'SPY.md'

        write_text_atomic("x", output_path)

        assert output_path.exists()

    def test_overwrites_existing(self, tmp_path):
        output_path = tmp_path / 'SPY.md'
        output_path.write_text("Original content")

        write_text_atomic("New content", output_path)

        assert output_path.read_text() == "New content"

    def test_no_temp_files_left(self, tmp_path):
        write_text_atomic("content", tmp_path / 'SPY.md')

        assert list(tmp_path.glob('*.tmp')) == []

    def test_non_ascii_byte_count(self, tmp_path):
        content = "σ(q) ±1.96"

        result = write_text_atomic(content, tmp_path / 'vol.md')

        assert result['bytes_written'] == len(content.encode('utf-8'))

    @patch('reports.atomic_writer.os.fsync')
    def test_fsync_called(self, mock_fsync, tmp_path):
        write_text_atomic("content", tmp_path / 'SPY.md')

        mock_fsync.assert_called_once()

    @patch('reports.atomic_writer.os.replace')
    def test_rename_failure_cleans_up(self, mock_replace, tmp_path):
        """A failed rename leaves neither the target nor the temp file behind."""
        mock_replace.side_effect = OSError("rename failed")
        output_path = tmp_path / 'SPY.md'

        with pytest.raises(AtomicWriteError, match="rename failed"):
            write_text_atomic("content", output_path)

        assert not output_path.exists()
        assert list(tmp_path.glob('*.tmp')) == []

    def test_parent_is_a_file(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text("not a directory")

        with pytest.raises(AtomicWriteError):
            write_text_atomic("content", blocker / 'SPY.md')


class TestWriteJsonAtomic:
    """Tests for JSON output."""

    def test_round_trip(self, tmp_path):
        data = {
            'ticker': 'SPY',
            'variance_ratio': [{'q': 2, 'z_stat': -1.25, 'p_value': None}],
        }
        output_path = tmp_path / 'SPY.json'

        result = write_json_atomic(data, output_path)

        assert result['status'] == 'completed'
        assert json.loads(output_path.read_text()) == data

    def test_dates_written_as_strings(self, tmp_path):
        output_path = tmp_path / 'SPY.json'

        write_json_atomic({'start_date': date(2024, 1, 2), 'path': Path('a/b')}, output_path)

        loaded = json.loads(output_path.read_text())
        assert loaded['start_date'] == '2024-01-02'
        assert loaded['path'] == str(Path('a/b'))

    def test_nan_is_rejected(self, tmp_path):
        """Strict JSON has no NaN; values must be None before writing."""
        with pytest.raises(AtomicWriteError, match="serialize"):
            write_json_atomic({'z_stat': float('nan')}, tmp_path / 'bad.json')
