import json
import os
import subprocess
import sys

import pytest

from textquery.cli import build_parser, options_from_args
from textquery.config import DEFAULT_QUERY, InputFormat

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.realpath(__file__)))

ps_text = """\
  PID TTY          TIME CMD
 1402 pts/0    00:00:00 bash
13371 pts/0    00:00:01 python3 -m http.server
   77 pts/1    00:00:00 ps
"""


def run(*args: str, input: str | bytes = '') -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, '-m', 'textquery', *args],
        input=input.encode() if isinstance(input, str) else input,
        capture_output=True,
        cwd=PROJECT_ROOT,
        env={**os.environ, 'PYTHONIOENCODING': 'utf-8'},
    )


# —— Argument parsing ——
def test_defaults():
    args = build_parser().parse_args([])
    options = options_from_args(args)
    assert args.query == DEFAULT_QUERY
    assert args.output_format == 'csv'
    assert options.input_format is InputFormat.ALIGNED
    assert not options.no_header


@pytest.mark.parametrize("argv, input_format", [
    (['-ic'], InputFormat.CSV),
    (['-it'], InputFormat.TSV),
    (['-il'], InputFormat.LTSV),
    (['-ip', ':+'], InputFormat.PATTERN),
    (['--input-csv'], InputFormat.CSV),
])
def test_input_formats(argv, input_format):
    assert options_from_args(build_parser().parse_args(argv)).input_format is input_format


def test_short_flags():
    args = build_parser().parse_args(['-nh', '-oh', '-or', '-e', 'latin-1', '-q', 'select 1', 'a.txt', '-'])
    options = options_from_args(args)
    assert options.no_header and options.out_header
    assert options.encoding == 'latin-1'
    assert args.output_format == 'raw'
    assert args.query == 'select 1'
    assert args.files == ['a.txt', '-']


# —— CLI tests ——
def test_piped_input():
    proc = run(input=ps_text)
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.decode().splitlines() == [
        '1402,pts/0,00:00:00,bash',
        '13371,pts/0,00:00:01,python3 -m http.server',
        '77,pts/1,00:00:00,ps',
    ]


def test_query_and_json_output():
    proc = run('-oh', '-oj', '-q', 'select TTY, count(*) as n from stdin group by TTY order by TTY', input=ps_text)
    assert proc.returncode == 0, proc.stderr
    assert json.loads(proc.stdout) == [["TTY", "n"], ["pts/0", "2"], ["pts/1", "1"]]


def test_given_filename(tmp_path):
    people = tmp_path / 'people.csv'
    people.write_text('name,age\nAlice,30\nBob,25\n')
    proc = run('-ic', '-or', '-q', 'select name from "people.csv" where age > 26', str(people))
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.decode() == 'Alice\n'


def test_join_stdin_with_file(tmp_path):
    users = tmp_path / 'users'
    users.write_text('TTY    OWNER\npts/0  alice\npts/1  bob\n')
    query = 'select s.PID, u.OWNER from stdin s join users u on s.TTY = u.TTY order by s.PID'
    proc = run('-q', query, '-', str(users), input=ps_text)
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.decode().splitlines() == ['77,bob', '1402,alice', '13371,alice']


def test_no_header():
    proc = run('-nh', '-q', 'select f2 from stdin where f1 = 2', input='1  one\n2  two\n')
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.decode() == 'two\n'


def test_long_numbers_are_kept_as_text():
    proc = run(input="NAME  ID\na     99999999999999999999\n")
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.decode() == "a,99999999999999999999\n"


def test_encoding():
    proc = run('-e', 'shift_jis', '-q', 'select 名前 from stdin', input='名前  年齢\n太郎    20\n'.encode('shift_jis'))
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.decode() == '太郎\n'


# —— Errors ——
def test_invalid_encoding():
    proc = run('-e', 'klingon', input=ps_text)
    assert proc.returncode == 1
    assert proc.stderr.decode().strip() == 'textquery: invalid encoding name: klingon'


def test_invalid_query():
    proc = run('-q', 'select * from nowhere', input=ps_text)
    assert proc.returncode == 1
    assert 'no such table: nowhere' in proc.stderr.decode()


def test_missing_file(tmp_path):
    proc = run(str(tmp_path / 'missing.txt'))
    assert proc.returncode == 1
    assert proc.stderr.decode().startswith('textquery: ')


def test_conflicting_input_formats():
    proc = run('-ic', '-it')
    assert proc.returncode == 2
