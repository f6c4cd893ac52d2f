"""Tests for the command-line interface."""

import pytest

from quote_parser.cli import build_parser, main


class TestArguments:
    def test_defaults(self):
        args = build_parser().parse_args(["capture.pcap"])
        assert args.input == "capture.pcap"
        assert args.reorder is False
        assert args.layout == "compact"
        assert args.output is None
        assert args.port == []

    def test_repeated_ports(self):
        args = build_parser().parse_args(["capture.pcap", "--port", "15515", "--port", "15516"])
        assert args.port == [15515, 15516]

    def test_bare_output_flag_is_usage_error(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            build_parser().parse_args(["capture.pcap", "-o"])
        assert excinfo.value.code == 2
        assert "-o/--output" in capsys.readouterr().err

    def test_detailed_layout_selected_with_layout_flag(self):
        args = build_parser().parse_args(["capture.pcap", "-l", "detailed"])
        assert args.layout == "detailed"
        assert args.output is None


class TestMain:
    def test_compact_to_stdout(self, scenario_capture, capsys):
        assert main([str(scenario_capture)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert [line.split()[2] for line in lines] == ["KR4101T30001", "KR4101T30002", "KR4101T30003"]

    def test_reorder(self, scenario_capture, capsys):
        assert main([str(scenario_capture), "-r"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert [line.split()[2] for line in lines] == ["KR4101T30002", "KR4101T30003", "KR4101T30001"]

    def test_detailed_to_file(self, scenario_capture, tmp_path, capsys):
        output = tmp_path / "quotes.txt"
        assert main([str(scenario_capture), "-l", "detailed", "-o", str(output)]) == 0

        lines = output.read_text().splitlines()
        assert len(lines) == 6
        assert lines[0].startswith("Packet-Time: 1700000000.123456 | Accept-Time: ")
        assert capsys.readouterr().out == ""

    def test_csv_and_summary(self, scenario_capture, tmp_path, capsys):
        csv_path = tmp_path / "quotes.csv"
        assert main([str(scenario_capture), "--csv", str(csv_path), "--summary"]) == 0

        assert csv_path.exists()
        err = capsys.readouterr().err
        assert "Quotes:         3" in err
        assert "Out of order:   2" in err

    def test_kospi_ports_filter_everything_else(self, scenario_capture, capsys):
        # Scenario traffic goes to 15515
        assert main([str(scenario_capture), "--kospi-ports"]) == 0
        assert len(capsys.readouterr().out.splitlines()) == 3

    def test_no_messages_exit_code(self, write_pcap, make_frame, base_time_ns, capsys):
        path = write_pcap([(base_time_ns, make_frame(b"nothing to see"))])
        assert main([str(path)]) == 1
        assert "No quote messages found" in capsys.readouterr().err

    def test_malformed_capture_exit_code(self, tmp_path, capsys):
        path = tmp_path / "bad.pcap"
        path.write_bytes(b"\x00" * 64)
        assert main([str(path)]) == 1
        assert "Error: Not a pcap capture file" in capsys.readouterr().err

    def test_missing_file_exit_code(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.pcap")]) == 1
        assert "Error:" in capsys.readouterr().err
