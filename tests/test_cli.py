"""Tests for the command-line interface."""
import json
import pytest
from click.testing import CliRunner

from ledger_bridge import cli as cli_module
from ledger_bridge.cli import cli


@pytest.fixture
def runner():
    """Create a click test runner."""
    return CliRunner()


@pytest.fixture
def csv_file(tmp_path, simple_csv_text):
    """Write the simple CSV fixture to disk."""
    path = tmp_path / "statement.csv"
    path.write_text(simple_csv_text, encoding='utf-8')
    return path


class TestConvertCommand:
    """Test the convert command."""

    def test_file_to_stdout(self, runner, csv_file):
        """Test converting a file and writing to stdout."""
        result = runner.invoke(cli, [
            'convert', '--in-format', 'csv', '--out-format', 'mt940', '-i', str(csv_file)
        ])

        assert result.exit_code == 0
        assert result.stdout.startswith("{1:F01BANKXXXXXX")
        assert ":62F:C240131USD1200,00" in result.stdout

    def test_stdin_to_file(self, runner, tmp_path, mt940_text):
        """Test reading stdin and writing an output file."""
        output = tmp_path / "out.xml"
        result = runner.invoke(
            cli,
            ['convert', '--in-format', 'MT940', '--out-format', 'camt053', '-o', str(output)],
            input=mt940_text
        )

        assert result.exit_code == 0
        assert output.read_text(encoding='utf-8').startswith('<?xml version="1.0" encoding="UTF-8"?>')

    def test_heuristic_layout(self, runner, csv_file):
        """Test writing the heuristic CSV layout."""
        result = runner.invoke(cli, [
            'convert', '--in-format', 'csv', '--out-format', 'csv',
            '--csv-layout', 'heuristic', '-i', str(csv_file)
        ])

        assert result.exit_code == 0
        assert "Дата проводки" in result.stdout

    def test_json_result(self, runner, tmp_path, csv_file):
        """Test writing the result JSON."""
        json_path = tmp_path / "result.json"
        result = runner.invoke(cli, [
            'convert', '--in-format', 'csv', '--out-format', 'camt053',
            '-i', str(csv_file), '--json', str(json_path)
        ])

        assert result.exit_code == 0
        data = json.loads(json_path.read_text(encoding='utf-8'))
        assert data['success'] is True
        assert data['statement']['account_number'] == "ACC123"

    def test_decode_error(self, runner):
        """Test that decode errors exit with status 1."""
        result = runner.invoke(cli, ['convert', '--in-format', 'camt053', '--out-format', 'csv'], input="")

        assert result.exit_code == 1
        assert "Empty input" in result.output

    def test_unknown_format(self, runner):
        """Test that unknown formats are rejected by option parsing."""
        result = runner.invoke(cli, ['convert', '--in-format', 'ofx', '--out-format', 'csv'], input="x")
        assert result.exit_code == 2

    def test_validate_flag(self, runner, tmp_path, simple_csv_text):
        """Test that reconciliation warnings do not block the conversion."""
        path = tmp_path / "broken.csv"
        path.write_text(simple_csv_text.replace("1200.00", "1300.00"), encoding='utf-8')

        result = runner.invoke(cli, [
            'convert', '--in-format', 'csv', '--out-format', 'mt940', '-i', str(path), '--validate'
        ])

        assert result.exit_code == 0
        assert "Warnings" in result.output
        assert "{1:F01" in result.stdout


class TestInspectCommand:
    """Test the inspect command."""

    def test_summary(self, runner, tmp_path, camt_xml):
        """Test the statement summary."""
        path = tmp_path / "statement.xml"
        path.write_text(camt_xml, encoding='utf-8')

        result = runner.invoke(cli, ['inspect', str(path), '--format', 'camt053'])

        assert result.exit_code == 0
        assert "NL69INGB0123456789" in result.output
        assert "EUR" in result.output

    def test_invalid_file(self, runner, tmp_path):
        """Test that decode errors exit with status 1."""
        path = tmp_path / "empty.sta"
        path.write_text("", encoding='utf-8')

        result = runner.invoke(cli, ['inspect', str(path), '--format', 'mt940'])
        assert result.exit_code == 1


class TestValidateCommand:
    """Test the validate command."""

    def test_reconciles(self, runner, csv_file):
        """Test a statement that adds up."""
        result = runner.invoke(cli, ['validate', str(csv_file), '--format', 'csv'])

        assert result.exit_code == 0
        assert "reconciles" in result.output

    def test_does_not_reconcile(self, runner, tmp_path, simple_csv_text):
        """Test a statement that does not add up."""
        path = tmp_path / "broken.csv"
        path.write_text(simple_csv_text.replace("1200.00", "1300.00"), encoding='utf-8')

        result = runner.invoke(cli, ['validate', str(path), '--format', 'csv'])
        assert result.exit_code == 1

    def test_tolerance(self, runner, tmp_path, simple_csv_text):
        """Test a custom tolerance."""
        path = tmp_path / "close.csv"
        path.write_text(simple_csv_text.replace("1200.00", "1200.50"), encoding='utf-8')

        result = runner.invoke(cli, ['validate', str(path), '--format', 'csv', '--tolerance', '1'])
        assert result.exit_code == 0


class TestLayoutsCommand:
    """Test the layouts command."""

    def test_lists_profiles(self, runner):
        """Test that built-in and bundled layouts are listed."""
        result = runner.invoke(cli, ['layouts'])

        assert result.exit_code == 0
        assert "simple" in result.output
        assert "heuristic" in result.output
        assert "sberbank_foreign" in result.output

    def test_default_profile_listed_once(self, runner):
        """Test that the built-in profile only appears as 'heuristic'."""
        result = runner.invoke(cli, ['layouts'])

        assert result.exit_code == 0
        assert result.output.count("sberbank") == result.output.count("sberbank_foreign")


class TestMain:
    """Test the console entry point."""

    def test_keyboard_interrupt(self, monkeypatch):
        """Test that Ctrl+C exits with status 130."""
        def interrupted():
            raise KeyboardInterrupt

        monkeypatch.setattr(cli_module, 'cli', interrupted)
        with pytest.raises(SystemExit) as exc_info:
            cli_module.main()

        assert exc_info.value.code == 130

    def test_unexpected_error(self, monkeypatch):
        """Test that other errors exit with status 1."""
        def broken():
            raise RuntimeError("boom")

        monkeypatch.setattr(cli_module, 'cli', broken)
        with pytest.raises(SystemExit) as exc_info:
            cli_module.main()

        assert exc_info.value.code == 1
