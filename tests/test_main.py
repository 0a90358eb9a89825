"""
Tests for the command line entry point.
"""
import sys
from unittest.mock import Mock, patch

import pytest

from bucket_mirror import main as cli
from bucket_mirror.models.data_models import DiffResult, ReconcileReport, TransferResult


@pytest.fixture(autouse=True)
def no_log_file(monkeypatch):
    monkeypatch.setenv('LOG_FILE', 'off')
    monkeypatch.setenv('MIRROR_S3_BUCKET', 'test-bucket')


def _run(monkeypatch, *args):
    monkeypatch.setattr(sys, 'argv', ['bucket-mirror', *args])
    cli.main()


class TestMain:
    """Test cases for the CLI dispatcher."""

    def test_help(self, monkeypatch, capsys):
        """Test help prints usage."""
        _run(monkeypatch, 'help')

        assert 'Bucket Mirror - Command Line Interface' in capsys.readouterr().out

    def test_unknown_command_exits_nonzero(self, monkeypatch):
        """Test an unknown command exits with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, 'bogus')

        assert exc_info.value.code == 1

    def test_reconcile_success(self, monkeypatch):
        """Test reconcile exits normally when every transfer succeeded."""
        report = ReconcileReport(diff=DiffResult(['a.txt'], []),
                                 transfers=[TransferResult('download', 'a.txt', True, size=3)])
        service = Mock()
        service.run_reconcile.return_value = report

        with patch('bucket_mirror.main.MirrorService', return_value=service):
            _run(monkeypatch, 'reconcile')

        service.check_connection.assert_called_once()

    def test_reconcile_with_failures_exits_nonzero(self, monkeypatch):
        """Test reconcile exits with status 1 when a transfer failed."""
        report = ReconcileReport(diff=DiffResult([], ['c.txt']),
                                 transfers=[TransferResult('upload', 'c.txt', False, error='denied')])
        service = Mock()
        service.run_reconcile.return_value = report

        with patch('bucket_mirror.main.MirrorService', return_value=service):
            with pytest.raises(SystemExit) as exc_info:
                _run(monkeypatch, 'reconcile')

        assert exc_info.value.code == 1

    def test_configuration_error_exits_nonzero(self, monkeypatch, tmp_path):
        """Test a missing local root is reported and exits with status 1."""
        monkeypatch.setenv('MIRROR_LOCAL_ROOT', str(tmp_path / 'absent'))

        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, 'reconcile')

        assert exc_info.value.code == 1
