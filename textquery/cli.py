"""
Query command output and text tables with SQL.

    ps aux | textquery -q "select USER, count(*) from stdin group by USER"
    textquery -ic -oh -q "select * from people where age > 30" people.csv

Standard input becomes the table `stdin` and every FILE becomes a table named after its base name.
"""

import argparse
import logging
import os
import sys

from textquery.config import DEFAULT_QUERY, STDIN_TABLE, ConfigError, InputFormat, Options
from textquery.readers import InputError, open_text
from textquery.store import QueryError, TableStore
from textquery.writers import write_rows

logger = logging.getLogger(__name__)

PROG = 'textquery'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Load whitespace-aligned text, CSV, TSV or LTSV into SQLite and run a query over it."
    )
    parser.add_argument('files', nargs='*', metavar='FILE', help="input files; '-' for STDIN")
    parser.add_argument('-q', '--query', default=DEFAULT_QUERY, help=f"select query (default: {DEFAULT_QUERY!r})")
    parser.add_argument('-nh', '--no-header', action='store_true', help="don't treat first line as header")
    parser.add_argument('-oh', '--out-header', action='store_true', help="output header line")
    parser.add_argument('-e', '--encoding', help="encoding of input stream")
    parser.add_argument('--strip-ansi', action='store_true', help="remove color escape codes from the input")
    parser.add_argument('-v', '--verbose', action='store_true', help="log what's going on to STDERR")

    inputs = parser.add_mutually_exclusive_group()
    inputs.add_argument('-ic', '--input-csv', dest='input_format', action='store_const', const=InputFormat.CSV, help="input csv")
    inputs.add_argument('-it', '--input-tsv', dest='input_format', action='store_const', const=InputFormat.TSV, help="input tsv")
    inputs.add_argument('-il', '--input-ltsv', dest='input_format', action='store_const', const=InputFormat.LTSV, help="input ltsv")
    inputs.add_argument('-ip', '--input-pattern', metavar='PATTERN', help="input delimiter pattern as regexp")

    outputs = parser.add_mutually_exclusive_group()
    outputs.add_argument('-oj', '--output-json', dest='output_format', action='store_const', const='json', help="output json")
    outputs.add_argument('-or', '--output-raw', dest='output_format', action='store_const', const='raw', help="output raw")
    parser.set_defaults(input_format=InputFormat.ALIGNED, output_format='csv')
    return parser


def options_from_args(args: argparse.Namespace) -> Options:
    return Options(
        no_header=args.no_header,
        out_header=args.out_header,
        input_format=InputFormat.PATTERN if args.input_pattern else args.input_format,
        input_pattern=args.input_pattern,
        encoding=args.encoding,
        strip_ansi=args.strip_ansi,
    )


def fail(message) -> None:
    print(f"{PROG}: {message}", file=sys.stderr)
    sys.exit(1)


def import_sources(store: TableStore, files: list[str], options: Options) -> None:
    if '-' in files or not sys.stdin.isatty():
        store.import_stream(open_text(sys.stdin.buffer, options.text_encoding), STDIN_TABLE)

    for path in files:
        if path == '-':
            continue
        with open(path, 'rb') as file:
            store.import_stream(open_text(file, options.text_encoding), os.path.basename(path))


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    options = options_from_args(args)
    try:
        options.validate()
    except ConfigError as e:
        fail(e)

    with TableStore(options) as store:
        try:
            import_sources(store, args.files, options)
            rows = store.query(args.query)
        except (InputError, QueryError, OSError) as e:
            fail(e)

    logger.debug("Writing %d rows as %s", len(rows), args.output_format)
    write_rows(rows, sys.stdout, args.output_format)


if __name__ == "__main__":
    main()
