import io
import json
import sys

from api_navigator import cli


class FakeTty(io.StringIO):
  def isatty(self):
    return True


def write_doc(tmp_path, doc):
  path = tmp_path / "doc.json"
  path.write_text(json.dumps(doc), encoding="utf-8")
  return str(path)


def test_dump_with_query(tmp_path, capsys, sample):
  code = cli.main(["--in", write_doc(tmp_path, sample), "--query", "an", "--dump", "--no-persist"])
  out = capsys.readouterr().out
  assert code == 0
  assert 'name: "Ana"' in out
  assert "Matches: 1/1" in out
  assert "[0]" not in out


def test_dump_collapse_all(tmp_path, capsys, sample):
  code = cli.main(["--in", write_doc(tmp_path, sample), "--collapse-all", "--dump", "--no-persist"])
  lines = capsys.readouterr().out.splitlines()
  assert code == 0
  assert lines == ["- root: { 2 properties }", "  + user: { 2 properties }", "  + tags: [ 2 items ]"]


def test_dump_reads_piped_stdin(monkeypatch, capsys):
  monkeypatch.setattr(sys, "stdin", io.StringIO('{"a": [1, 2]}'))
  assert cli.main(["--dump", "--no-persist", "--expand-all"]) == 0
  out = capsys.readouterr().out
  assert "a: [ 2 items ]" in out
  assert "[1]: 2" in out


def test_dump_without_input_exits_2(monkeypatch, capsys):
  monkeypatch.setattr(sys, "stdin", FakeTty())
  assert cli.main(["--dump", "--no-persist"]) == 2
  assert "no --in" in capsys.readouterr().err


def test_invalid_json_input_exits_2(tmp_path, capsys):
  path = tmp_path / "bad.json"
  path.write_text("{nope", encoding="utf-8")
  assert cli.main(["--in", str(path), "--dump", "--no-persist"]) == 2
  assert "could not read JSON" in capsys.readouterr().err


def test_invalid_url_exits_2(monkeypatch, capsys):
  monkeypatch.setattr(sys, "stdin", FakeTty())
  assert cli.main(["--url", "not a url", "--dump", "--no-persist"]) == 2
  assert "Invalid URL" in capsys.readouterr().err


def test_next_moves_active_match(tmp_path, capsys, nested):
  code = cli.main(["--in", write_doc(tmp_path, nested), "-q", "owner", "--next", "1", "--dump", "--no-persist"])
  assert code == 0
  assert "Matches: 2/2" in capsys.readouterr().out


def test_timeout_flag_overrides_environment(monkeypatch):
  monkeypatch.setenv("API_NAVIGATOR_TIMEOUT", "5")
  assert cli.load_settings(cli.build_parser().parse_args([])).timeout == 5.0
  assert cli.load_settings(cli.build_parser().parse_args(["--timeout", "2.5"])).timeout == 2.5


def test_non_positive_timeout_exits_2(capsys):
  assert cli.main(["--timeout", "0", "--dump", "--no-persist"]) == 2
  assert "--timeout" in capsys.readouterr().err
